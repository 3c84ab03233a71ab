"""
分页器 - 按分隔行把文档拆分为有序页面

规则：
1. 独占一行的分隔符（默认 ---）为分页点，行首尾空白忽略
2. 围栏代码块（``` / ~~~）内的分隔行不分页
3. strict_marker=True 时只识别专用分页标记，--- 保留为 Markdown 分隔线
4. 每页去除首尾空白，空页丢弃，保持原始顺序

测试要点：
- test_split_basic: 基本拆分
- test_split_drops_empty: 空页丢弃
- test_split_ignores_fenced_code: 代码块内不分页
"""

from __future__ import annotations

import re

# 反引号围栏的信息串不能含反引号（```x``` 是行内代码，不是围栏）
_FENCE_OPEN_RE = re.compile(r"^ {0,3}(?:(`{3,})(?!.*`)|(~{3,}))")
_FENCE_CLOSE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})\s*$")


class PageSplitter:
    """分页器实现"""

    def __init__(
        self,
        delimiter: str = "---",
        page_break_marker: str = "<!-- pagebreak -->",
        strict_marker: bool = False,
    ):
        self.delimiter = delimiter
        self.page_break_marker = page_break_marker
        self.strict_marker = strict_marker

    def is_break(self, line: str) -> bool:
        """判断一行是否为分页点"""
        token = line.strip()
        if token == self.page_break_marker:
            return True
        return not self.strict_marker and token == self.delimiter

    def split(self, document: str) -> list[str]:
        """拆分文档，返回非空页面源文本列表"""
        if not document or not document.strip():
            return []

        segments: list[list[str]] = [[]]
        fence: str | None = None

        for line in document.splitlines():
            if fence is None:
                m = _FENCE_OPEN_RE.match(line)
                if m:
                    fence = m.group(1) or m.group(2)
                elif self.is_break(line):
                    segments.append([])
                    continue
            elif self._closes(line, fence):
                fence = None
            segments[-1].append(line)

        pages = ("\n".join(seg).strip() for seg in segments)
        return [p for p in pages if p]

    @staticmethod
    def _closes(line: str, fence: str) -> bool:
        """同字符、不短于开启标记、其后仅有空白的行才关闭围栏"""
        m = _FENCE_CLOSE_RE.match(line)
        if not m:
            return False
        marker = m.group(1)
        return marker[0] == fence[0] and len(marker) >= len(fence)
