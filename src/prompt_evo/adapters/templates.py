"""模板存取与渲染

只做 {{name}} 占位符替换；完整的模板引擎不在本包范围内。
"""

import re
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml

from prompt_evo.adapters.base import TemplateManager
from prompt_evo.models.llm import ChatMessage, PromptTemplate

_PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z_][\w]*)\s*\}\}")


def render_text(text: str, context: dict[str, Any]) -> str:
    """替换 {{name}}；未提供的变量替换为空串，bool 渲染为 true/false"""
    def replace(match: re.Match) -> str:
        value = context.get(match.group(1))
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    return _PLACEHOLDER_RE.sub(replace, text)


def render_template(template: PromptTemplate, context: dict[str, Any]) -> list[ChatMessage]:
    """把模板渲染为消息列表"""
    if isinstance(template.content, str):
        return [ChatMessage(role="user", content=render_text(template.content, context))]
    return [
        ChatMessage(role=m.role, content=render_text(m.content, context))
        for m in template.content
    ]


class InMemoryTemplateManager(TemplateManager):
    """内存模板表"""

    def __init__(self, templates: Optional[Iterable[PromptTemplate]] = None):
        self.templates: dict[str, PromptTemplate] = {t.id: t for t in (templates or [])}

    def add(self, template: PromptTemplate) -> None:
        self.templates[template.id] = template

    async def get_template(self, template_id: str) -> Optional[PromptTemplate]:
        return self.templates.get(template_id)


def load_templates_from_yaml(file_path: str) -> list[PromptTemplate]:
    """从 YAML 文件加载模板列表（顶层 templates: [...]）"""
    path = Path(file_path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not data or "templates" not in data:
        return []

    return [PromptTemplate(**t) for t in data["templates"]]
