"""
Markdown 转换器 - 单页 Markdown → HTML

职责：
1. 标准块/行内语法（标题/列表/强调/链接/图片/表格/引用/分隔线）
2. 围栏代码块按语言标签用 Pygments 高亮，未知语言转义输出
3. 一级标题中第一个括号分组包裹为高亮 span（每个一级标题都处理）

依赖：
- markdown-it-py: Markdown 解析（commonmark + table/strikethrough/linkify）
- pygments: 代码高亮（服务端完成，无需前端脚本）

测试要点：
- test_render_table: 表格渲染
- test_highlight_known_language: 已知语言高亮
- test_unknown_language_escaped: 未知语言转义
- test_heading_highlight_every_h1: 多个一级标题均高亮
"""

from __future__ import annotations

import logging
import re

from markdown_it import MarkdownIt
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from ..interfaces import ITranscoder

logger = logging.getLogger(__name__)

_H1_PAREN_RE = re.compile(r"<h1>(.*?)\((.*?)\)(.*?)</h1>")

HIGHLIGHT_CLASS = "highlight"


def highlight_headings(html: str) -> str:
    """一级标题 before(text)after → before<span class="highlight">text</span>after"""
    return _H1_PAREN_RE.sub(
        lambda m: (
            f'<h1>{m.group(1)}<span class="{HIGHLIGHT_CLASS}">{m.group(2)}</span>'
            f"{m.group(3)}</h1>"
        ),
        html,
    )


class MarkdownTranscoder(ITranscoder):
    """Markdown 转换器实现（每个实例持有独立的解析器）"""

    def __init__(self, pygments_style: str = "monokai"):
        self.pygments_style = pygments_style
        self.formatter = HtmlFormatter(nowrap=True, style=pygments_style)
        self.md = (
            MarkdownIt(
                "commonmark",
                {
                    "html": True,
                    "linkify": True,
                    "typographer": True,
                    "highlight": self._highlight,
                },
            )
            .enable(["table", "strikethrough", "linkify", "replacements", "smartquotes"])
        )

    def _highlight(self, code: str, lang: str, attrs: str) -> str:
        """代码高亮；返回空串时由 markdown-it 转义输出"""
        if not lang:
            return ""
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            logger.debug(f"未知代码语言，按纯文本输出: {lang}")
            return ""
        return highlight(code, lexer, self.formatter)

    def code_css(self, scope: str = ".content pre code") -> str:
        """Pygments 配色样式（限定在代码块内）"""
        return self.formatter.get_style_defs(scope)

    def render(self, markdown: str) -> str:
        """转换单页 Markdown"""
        return highlight_headings(self.md.render(markdown))
