"""适配器模块 / Adapter modules"""

from prompt_evo.adapters.base import LLMTransport, ModelRegistry, TemplateManager, StreamHandlers
from prompt_evo.adapters.callable import CallableTransport
from prompt_evo.adapters.openai import OpenAITransport
from prompt_evo.adapters.registry import ConfigModelRegistry
from prompt_evo.adapters.templates import (
    InMemoryTemplateManager, render_template, render_text, load_templates_from_yaml,
)

__all__ = [
    "LLMTransport", "ModelRegistry", "TemplateManager", "StreamHandlers",
    "CallableTransport", "OpenAITransport", "ConfigModelRegistry",
    "InMemoryTemplateManager", "render_template", "render_text", "load_templates_from_yaml",
]
