"""
图片占位符 - 生成唯一标识并在渲染前替换

占位符形如 ![说明](image-<32位hex>)，上传完成后由调用方维护 key → 图片 的映射。
替换必须完整：替换后仍残留的占位符视为输入错误，不进入渲染。
"""

from __future__ import annotations

import base64
import re
import uuid
from typing import Mapping, Union

from ..interfaces import ValidationError
from ..models import ImagePlaceholder

PLACEHOLDER_PREFIX = "image-"
_PLACEHOLDER_RE = re.compile(r"\bimage-[0-9a-f]{32}\b")

PlaceholderValue = Union[ImagePlaceholder, str, bytes]


def new_placeholder_key() -> str:
    """生成占位符标识（uuid4，避免并发上传冲突）"""
    return f"{PLACEHOLDER_PREFIX}{uuid.uuid4().hex}"


def to_data_uri(body: bytes, content_type: str = "image/png") -> str:
    return f"data:{content_type};base64,{base64.b64encode(body).decode('ascii')}"


def placeholder_url(value: PlaceholderValue) -> str:
    """占位符取值 → 可直接写入 Markdown 的图片地址"""
    if isinstance(value, ImagePlaceholder):
        if isinstance(value.payload, bytes):
            return to_data_uri(value.payload, value.content_type)
        return value.payload
    if isinstance(value, bytes):
        return to_data_uri(value)
    return value


def find_placeholders(text: str) -> list[str]:
    """查找文本中的占位符标识"""
    return _PLACEHOLDER_RE.findall(text)


def substitute(text: str, placeholders: Mapping[str, PlaceholderValue] | None) -> str:
    """替换文本中全部已知占位符（每个 key 的所有出现位置）"""
    result = text
    if placeholders:
        # 长 key 优先，避免前缀相同的 key 互相截断
        for key in sorted(placeholders, key=len, reverse=True):
            if key in result:
                result = result.replace(key, placeholder_url(placeholders[key]))

    unresolved = find_placeholders(result)
    if unresolved:
        raise ValidationError(f"存在未解析的图片占位符: {', '.join(sorted(set(unresolved)))}")
    return result
