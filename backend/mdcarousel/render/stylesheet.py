"""
样式表生成器 - 按基础字号生成画布样式与完整 HTML 文档

约束：
- 画布根元素固定 width×height，超出部分不滚动不溢出
- 内容区在画布内垂直居中，内容过长时仅内容区内部可滚动
- 所有字号/间距均为基础字号的固定倍率（见 StyleParams.from_base）

依赖：
- jinja2: 样式表与文档模板
"""

from __future__ import annotations

from jinja2 import Environment

from ..models import StyleParams
from .transcoder import HIGHLIGHT_CLASS

_FONT_STACK = (
    "-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'PingFang SC', "
    "'Noto Sans CJK SC', 'Helvetica Neue', Arial, sans-serif"
)
_MONO_STACK = "'SFMono-Regular', Consolas, 'Liberation Mono', Menlo, monospace"

_CSS_TEMPLATE = """
* { box-sizing: border-box; margin: 0; padding: 0; }
html, body {
  width: {{ width }}px;
  height: {{ height }}px;
  overflow: hidden;
  background: white;
}
body {
  font-family: {{ font_stack }};
  line-height: 1.6;
  color: #333;
  padding: 60px;
}
.content {
  width: 100%;
  max-width: {{ width - 240 }}px;
  height: 100%;
  margin: 0 auto;
  display: flex;
  flex-direction: column;
  overflow-y: auto;
  padding-right: 40px;
}
.content::-webkit-scrollbar { width: 0; }
.content > .inner { margin: auto 0; }
h1 {
  font-size: {{ p.h1_size }}px;
  margin-bottom: {{ p.h1_margin }}px;
  padding-bottom: {{ p.h1_padding }}px;
  line-height: 1.3;
  color: #1a1a1a;
  font-weight: 800;
  text-align: center;
  position: relative;
}
h1::after {
  content: '';
  position: absolute;
  bottom: 0;
  left: 50%;
  transform: translateX(-50%);
  width: {{ p.h1_rule_width }}px;
  height: 4px;
  background: linear-gradient(90deg, #FF2442, #FF6B6B);
  border-radius: 2px;
}
h1 span.{{ highlight_class }} {
  color: #1a1a1a;
  font-weight: 900;
  position: relative;
  display: inline-block;
  padding: 0 4px;
  z-index: 0;
}
h1 span.{{ highlight_class }}::after {
  content: '';
  position: absolute;
  bottom: -2px;
  left: 0;
  width: 100%;
  height: 12px;
  background: rgb(255, 166, 0);
  transform: skew(-10deg);
  z-index: -1;
}
h2 { font-size: {{ p.h2_size }}px; margin-bottom: {{ p.h2_margin }}px; line-height: 1.3; color: #1a1a1a; }
h3 { font-size: {{ p.h3_size }}px; margin-bottom: {{ p.h3_margin }}px; line-height: 1.3; color: #1a1a1a; }
p { margin-bottom: {{ p.paragraph_margin }}px; font-size: {{ p.base }}px; }
ul, ol { margin-bottom: {{ p.paragraph_margin }}px; padding-left: {{ p.list_indent }}px; }
li { margin-bottom: {{ p.list_item_margin }}px; font-size: {{ p.base }}px; }
img {
  max-width: 100%;
  height: auto;
  margin: {{ p.image_margin }}px 0;
  border-radius: 8px;
  box-shadow: 0 2px 4px rgba(0, 0, 0, 0.1);
}
blockquote {
  border-left: 4px solid #FF2442;
  padding-left: {{ p.blockquote_padding }}px;
  margin: {{ p.paragraph_margin }}px 0;
  color: #666;
  font-style: italic;
  font-size: {{ p.blockquote_size }}px;
}
blockquote p { font-size: inherit; }
code {
  background: #f5f5f5;
  padding: 2px 6px;
  border-radius: 4px;
  font-family: {{ mono_stack }};
  font-size: {{ p.code_size }}px;
}
pre {
  background: #272822;
  padding: {{ p.base }}px;
  border-radius: 8px;
  margin: {{ p.paragraph_margin }}px 0;
  overflow: hidden;
}
pre code {
  background: none;
  padding: 0;
  color: #f8f8f2;
  white-space: pre-wrap;
  word-wrap: break-word;
}
a { color: #FF2442; text-decoration: none; font-size: {{ p.base }}px; }
table { width: 100%; border-collapse: collapse; margin: {{ p.paragraph_margin }}px 0; }
th, td { padding: {{ p.cell_padding }}px; border: 1px solid #ddd; text-align: left; font-size: {{ p.base }}px; }
th { background: #f5f5f5; font-weight: 600; }
hr { border: none; border-top: 1px solid #eee; margin: {{ p.paragraph_margin }}px 0; }
{{ code_css }}
"""

_HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8"/>
  {% if base_href %}<base href="{{ base_href|e }}">{% endif %}
  <style>{{ css }}</style>
</head>
<body>
  <div class="content"><div class="inner">
{{ body }}
  </div></div>
</body>
</html>
"""


class StyleSheetGenerator:
    """样式表生成器"""

    def __init__(
        self,
        width: int = 1080,
        height: int = 1440,
        code_css: str = "",
        base_href: str | None = None,
    ):
        self.width = width
        self.height = height
        self.code_css = code_css
        self.base_href = base_href
        env = Environment(autoescape=False)
        self._css = env.from_string(_CSS_TEMPLATE)
        self._html = env.from_string(_HTML_TEMPLATE)

    def params(self, base_font_size: float) -> StyleParams:
        """基础字号 → 排版参数"""
        return StyleParams.from_base(base_font_size)

    def stylesheet(self, params: StyleParams) -> str:
        """生成画布样式表"""
        return self._css.render(
            width=self.width,
            height=self.height,
            p=params,
            font_stack=_FONT_STACK,
            mono_stack=_MONO_STACK,
            highlight_class=HIGHLIGHT_CLASS,
            code_css=self.code_css,
        )

    def document(self, markup: str, params: StyleParams) -> str:
        """生成完整 HTML 文档"""
        return self._html.render(
            css=self.stylesheet(params),
            body=markup,
            base_href=self.base_href,
        )
