"""
模块接口契约 - 定义各模块的抽象接口

设计原则：
1. 模块间通过接口通信，不直接依赖具体实现
2. 每个接口定义清晰的输入输出类型
3. 便于单元测试和mock替换（渲染引擎可替换为假对象）

使用方式：
    from mdcarousel.interfaces import IAssetResolver

    class MyResolver(IAssetResolver):
        async def resolve(self, url: str) -> ResolvedAsset | None:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import RenderJob, ResolvedAsset


# ============================================================================
# 渲染模块接口
# ============================================================================

class ITranscoder(ABC):
    """Markdown 转换器接口 - Markdown → HTML"""

    @abstractmethod
    def render(self, markdown: str) -> str:
        """
        转换单页 Markdown 为 HTML 片段

        Args:
            markdown: 已替换占位符的页面源文本

        Returns:
            HTML 片段（不含 <html>/<body>）
        """
        ...

    def code_css(self) -> str:
        """代码高亮样式（无高亮时为空）"""
        return ""


class IAssetResolver(ABC):
    """图片资源解析接口 - 拦截渲染期间的图片请求"""

    @abstractmethod
    async def resolve(self, url: str) -> ResolvedAsset | None:
        """
        解析图片URL

        Args:
            url: 渲染引擎发出的请求地址

        Returns:
            解析出的字节与类型；None 表示不处理（交给引擎正常请求）

        Raises:
            AssetResolutionError: 识别为本地资源但读取/解码失败
        """
        ...


class IRasterRenderer(ABC):
    """光栅渲染器接口 - 单页 HTML → PNG"""

    @abstractmethod
    async def render(self, job: RenderJob) -> bytes:
        """
        渲染单页

        Args:
            job: 渲染任务（页面 + 画布 + 样式参数）

        Returns:
            PNG 字节

        Raises:
            RenderError: 引擎启动、加载或截图失败
        """
        ...


# ============================================================================
# 导出模块接口
# ============================================================================

class IArchiveExporter(ABC):
    """打包器接口"""

    @abstractmethod
    def export(self, images: list[bytes]) -> bytes:
        """
        按页序打包图片

        Args:
            images: 按页序排列的 PNG 字节

        Returns:
            zip 文件字节
        """
        ...

    @abstractmethod
    def write(self, images: list[bytes], output_path: Path) -> Path:
        """打包并写入磁盘"""
        ...


# ============================================================================
# 异常定义
# ============================================================================

class CarouselError(Exception):
    """基础异常"""
    status_code = 500


class ValidationError(CarouselError):
    """输入校验错误（缺失/为空/超限）"""
    status_code = 400


class UploadError(CarouselError):
    """上传错误（类型不符/超出大小）"""
    status_code = 400


class AssetResolutionError(CarouselError):
    """图片资源解析错误（不致命，仅该图片加载失败）"""
    pass


class RenderError(CarouselError):
    """单页渲染错误"""

    def __init__(self, page_index: int, message: str, stage: str = "render"):
        super().__init__(f"第{page_index + 1}页渲染失败[{stage}]: {message}")
        self.page_index = page_index
        self.stage = stage
        self.detail = message


class EngineError(CarouselError):
    """渲染引擎启动/关闭错误"""
    pass


class BatchError(CarouselError):
    """批量渲染失败（携带失败页序，0起）"""

    def __init__(self, message: str, failed: list[int] | None = None):
        super().__init__(message)
        self.failed = failed or []
