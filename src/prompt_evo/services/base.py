"""服务公共逻辑：模型校验、模板获取、渲染、计时"""

import logging
import time
from typing import Any, Callable

from prompt_evo.adapters.base import LLMTransport, ModelRegistry, TemplateManager
from prompt_evo.adapters.templates import render_template
from prompt_evo.core.errors import (
    ExecutionError, ModelNotFoundError, PromptEvoError, TemplateNotFoundError,
)
from prompt_evo.models.llm import ChatMessage, PromptTemplate

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def _noop(*args: Any) -> None:
    pass


class ServiceStreamCallbacks:
    """服务层流式回调：on_complete 收到解析后的响应"""

    def __init__(
        self,
        on_token: Callable[[str], None] = _noop,
        on_complete: Callable[[Any], None] = _noop,
        on_error: Callable[[Exception], None] = _noop,
    ):
        self.on_token = on_token
        self.on_complete = on_complete
        self.on_error = on_error


class LLMService:
    """LLM 驱动服务的基类

    子类设置 DOMAIN，错误码形如 error.<DOMAIN>.<kind>。
    """

    DOMAIN = "core"

    def __init__(
        self,
        llm: LLMTransport,
        models: ModelRegistry,
        templates: TemplateManager,
        clock: Callable[[], int] = now_ms,
    ):
        self.llm = llm
        self.models = models
        self.templates = templates
        self.clock = clock

    async def _validate_model(self, model_key: str) -> None:
        model = await self.models.get_model(model_key)
        if model is None:
            raise ModelNotFoundError(model_key, self.DOMAIN)

    async def _get_template(self, template_id: str) -> PromptTemplate:
        try:
            template = await self.templates.get_template(template_id)
        except PromptEvoError:
            raise
        except Exception as e:
            logger.warning("Failed to get template %s: %s", template_id, e)
            raise TemplateNotFoundError(template_id, self.DOMAIN) from e

        if template is None or template.is_empty():
            raise TemplateNotFoundError(template_id, self.DOMAIN)
        return template

    async def _render(self, template_id: str, context: dict[str, Any]) -> list[ChatMessage]:
        template = await self._get_template(template_id)
        return render_template(template, context)

    async def _send(self, messages: list[ChatMessage], model_key: str) -> str:
        """调用 LLM；非 PromptEvoError 包装为 ExecutionError"""
        try:
            return await self.llm.send_message(messages, model_key)
        except PromptEvoError:
            raise
        except Exception as e:
            raise ExecutionError(str(e) or type(e).__name__, self.DOMAIN, cause=e) from e

    def _wrap(self, error: Exception) -> PromptEvoError:
        if isinstance(error, PromptEvoError):
            return error
        return ExecutionError(str(error) or type(error).__name__, self.DOMAIN, cause=error)
