"""
页面模型 - 单个逻辑页的源文本、渲染中间产物与状态

页面按文档顺序生成，index 为 0..N-1 连续编号；空页在拆分阶段已丢弃。
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class PageStatus(str, Enum):
    """页面状态枚举"""
    PENDING = "pending"
    RENDERING = "rendering"
    DONE = "done"
    FAILED = "failed"


class Page(BaseModel):
    """页面实体"""
    index: int = Field(..., ge=0, description="页序(0起)")
    source_text: str = Field(..., description="拆分后的原始 Markdown")
    resolved_text: str = Field("", description="替换占位符后的 Markdown")
    rendered_markup: str = Field("", description="转换后的 HTML 片段")
    font_scale: int = Field(0, description="基础字号(px)")

    status: PageStatus = PageStatus.PENDING
    error: str | None = None

    @property
    def number(self) -> int:
        """页码(1起)"""
        return self.index + 1

    def mark_rendering(self) -> None:
        """标记为渲染中"""
        self.status = PageStatus.RENDERING
        self.error = None

    def mark_done(self) -> None:
        """标记为完成"""
        self.status = PageStatus.DONE
        self.error = None

    def mark_failed(self, error: str) -> None:
        """标记为失败"""
        self.status = PageStatus.FAILED
        self.error = error
