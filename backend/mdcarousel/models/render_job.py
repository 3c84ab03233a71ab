"""
渲染任务模型 - 单页渲染输入

样式参数全部由基础字号按固定倍率派生，画布尺寸固定。
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from .page import Page


class StyleParams(BaseModel):
    """页面排版参数（均为 px）"""
    base: float

    h1_size: float
    h1_margin: float
    h1_padding: float
    h1_rule_width: float
    h2_size: float
    h2_margin: float
    h3_size: float
    h3_margin: float

    paragraph_margin: float
    list_indent: float
    list_item_margin: float
    image_margin: float
    blockquote_padding: float
    blockquote_size: float
    code_size: float
    cell_padding: float

    @classmethod
    def from_base(cls, base: float) -> StyleParams:
        """按基础字号派生全部排版参数（保留两位小数）"""
        def px(k: float) -> float:
            return round(base * k, 2)

        return cls(
            base=base,
            h1_size=px(2.2),
            h1_margin=px(1.2),
            h1_padding=px(0.5),
            h1_rule_width=px(2),
            h2_size=px(1.5),
            h2_margin=px(0.7),
            h3_size=px(1.3),
            h3_margin=px(0.6),
            paragraph_margin=px(1.2),
            list_indent=px(1.5),
            list_item_margin=px(0.8),
            image_margin=px(0.8),
            blockquote_padding=px(1),
            blockquote_size=px(0.95),
            code_size=px(0.9),
            cell_padding=px(0.8),
        )


class RenderJob(BaseModel):
    """渲染任务"""
    page: Page
    canvas_width: int = 1080
    canvas_height: int = 1440
    device_scale_factor: float = 1
    style: StyleParams
    html: str = Field("", description="完整 HTML 文档（含样式表）")

    @property
    def page_index(self) -> int:
        return self.page.index
