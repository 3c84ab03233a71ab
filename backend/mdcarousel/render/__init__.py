"""
渲染模块 - 单页 Markdown → PNG

子模块：
- splitter: 按分隔行拆分页面
- typography: 按可见字符数计算基础字号
- transcoder: Markdown → HTML（代码高亮/标题高亮）
- stylesheet: 按基础字号生成画布样式与 HTML 文档
- placeholders: 图片占位符生成与替换
- asset_resolver: 渲染时图片请求解析（data:/本地上传）
- engine: 共享无头浏览器引擎池
- rasterizer: 单页截图
"""

from .asset_resolver import AssetResolver
from .engine import EnginePool
from .placeholders import new_placeholder_key, substitute
from .rasterizer import RasterRenderer
from .splitter import PageSplitter
from .stylesheet import StyleSheetGenerator
from .transcoder import MarkdownTranscoder, highlight_headings
from .typography import TypographyScaler, font_scale, strip_markup

__all__ = [
    "PageSplitter",
    "TypographyScaler",
    "font_scale",
    "strip_markup",
    "MarkdownTranscoder",
    "highlight_headings",
    "StyleSheetGenerator",
    "AssetResolver",
    "EnginePool",
    "RasterRenderer",
    "new_placeholder_key",
    "substitute",
]
