"""
图片资源模型 - 占位符与解析结果
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ImagePlaceholder(BaseModel):
    """图片占位符：文中以 key 引用，渲染前替换为 payload"""
    key: str = Field(..., description="占位符标识(image-<hex>)")
    payload: bytes | str = Field(..., description="图片字节或可访问的URL(data:/上传路径)")
    content_type: str = "image/png"


class ResolvedAsset(BaseModel):
    """解析后的图片资源，直接交给渲染引擎"""
    content_type: str
    body: bytes
