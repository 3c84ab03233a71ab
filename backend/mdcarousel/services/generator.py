"""
内容生成 - 根据提示词生成示例 Markdown（占位实现，未接入模型服务）
"""

from __future__ import annotations

from ..interfaces import ValidationError

_TEMPLATE = """# {prompt}

这是一段示例内容，你可以根据需要修改。

## 主要特点

1. 清晰的结构
2. 简洁的表达
3. 重点突出

---

这是第二页的内容。

## 更多信息

- 项目一
- 项目二
- 项目三

> 重要提示：这是一个示例内容，你可以根据实际需求修改。"""


class ContentGenerator:
    """示例内容生成器"""

    def generate(self, prompt: str) -> str:
        if not prompt or not prompt.strip():
            raise ValidationError("提示词不能为空")
        return _TEMPLATE.format(prompt=prompt.strip())
