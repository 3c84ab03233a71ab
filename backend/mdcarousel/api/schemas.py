"""
接口请求/响应结构
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ConvertRequest(BaseModel):
    """单页转换请求"""
    markdown: str = ""


class BatchRequest(BaseModel):
    """整篇文档渲染请求"""
    markdown: str = ""
    images: dict[str, str] = Field(default_factory=dict, description="占位符 → 图片地址")


class GenerateRequest(BaseModel):
    """内容生成请求"""
    prompt: str = ""


class PageResult(BaseModel):
    """单页结果"""
    index: int
    status: str
    font_scale: int
    image: str | None = None
    error: str | None = None


class BatchResponse(BaseModel):
    """整篇文档渲染结果"""
    batch_id: str
    status: str
    completed: int
    total: int
    percent: int
    pages: list[PageResult]
