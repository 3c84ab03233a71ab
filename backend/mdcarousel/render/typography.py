"""
字号计算 - 根据页面可见字符数确定基础字号

字符越少字号越大，其余排版尺寸均按基础字号的固定倍率派生。
"""

from __future__ import annotations

import re

# 标题/强调/行内代码/引用标记，以及 [链接文字] 与 (链接地址)
_MARKUP_RE = re.compile(r"[#*_`~>]|\[.*?\]|\(.*?\)")

# (字符数上限, 基础字号)，按上限升序
FONT_THRESHOLDS: tuple[tuple[int, int], ...] = (
    (10, 72),
    (30, 60),
    (50, 54),
    (100, 48),
)
MIN_FONT_SIZE = 42


def strip_markup(text: str) -> str:
    """去除 Markdown 标记，近似得到可见文本"""
    return _MARKUP_RE.sub("", text).strip()


def font_scale(text: str) -> int:
    """计算页面基础字号(px)"""
    count = len(strip_markup(text))
    for limit, size in FONT_THRESHOLDS:
        if count < limit:
            return size
    return MIN_FONT_SIZE


class TypographyScaler:
    """字号计算器（无状态，便于注入替换）"""

    def strip(self, text: str) -> str:
        return strip_markup(text)

    def scale(self, text: str) -> int:
        return font_scale(text)
