"""评估服务 / Evaluation service

流程：校验请求 → 校验模型 → 获取模板 → 渲染 → 调用 LLM → 解析标准化。
"""

import json
import logging
from typing import Any, Optional

from prompt_evo.adapters.base import LLMTransport, ModelRegistry, StreamHandlers, TemplateManager
from prompt_evo.core.diagnostics import DiagnosticLog
from prompt_evo.core.errors import PromptEvoError, ValidationError
from prompt_evo.core.evaluation import DOMAIN, parse_evaluation_result
from prompt_evo.models import (
    EvaluationMetadata, EvaluationModeConfig, EvaluationRequest, EvaluationResponse,
    EvaluationType, ParsingConfig,
)
from prompt_evo.services.base import LLMService, ServiceStreamCallbacks, now_ms

logger = logging.getLogger(__name__)

# 各评估类型必填字段（字段名, 错误信息）
_REQUIRED_FIELDS: dict[EvaluationType, list[tuple[str, str]]] = {
    EvaluationType.ORIGINAL: [
        ("test_result", "Test result must not be empty."),
    ],
    EvaluationType.OPTIMIZED: [
        ("optimized_prompt", "Optimized prompt must not be empty."),
        ("test_result", "Test result must not be empty."),
    ],
    EvaluationType.COMPARE: [
        ("optimized_prompt", "Optimized prompt must not be empty."),
        ("original_test_result", "Original test result must not be empty."),
        ("optimized_test_result", "Optimized test result must not be empty."),
    ],
    EvaluationType.PROMPT_ONLY: [
        ("optimized_prompt", "Optimized prompt must not be empty."),
    ],
    EvaluationType.PROMPT_ITERATE: [
        ("optimized_prompt", "Optimized prompt must not be empty."),
        ("iterate_requirement", "Iteration requirement must not be empty."),
    ],
}

# 各评估类型额外注入模板的字段
_CONTEXT_FIELDS: dict[EvaluationType, tuple[str, ...]] = {
    EvaluationType.ORIGINAL: ("test_result",),
    EvaluationType.OPTIMIZED: ("optimized_prompt", "test_result"),
    EvaluationType.COMPARE: ("optimized_prompt", "original_test_result", "optimized_test_result"),
    EvaluationType.PROMPT_ONLY: ("optimized_prompt",),
    EvaluationType.PROMPT_ITERATE: ("optimized_prompt", "iterate_requirement"),
}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def template_id_for(evaluation_type: EvaluationType, mode: EvaluationModeConfig) -> str:
    """evaluation-{functionMode}-{subMode}-{type}"""
    return f"evaluation-{mode.function_mode}-{mode.sub_mode}-{evaluation_type.value}"


def build_evaluation_context(request: EvaluationRequest) -> dict[str, Any]:
    """构建模板上下文；键名与模板占位符一致（camelCase）"""
    context: dict[str, Any] = {"testContent": request.test_content or ""}
    context.update(request.variables)

    if request.original_prompt:
        context["originalPrompt"] = request.original_prompt
        context["hasOriginalPrompt"] = True
    else:
        context["hasOriginalPrompt"] = False

    if request.pro_context:
        context["proContext"] = json.dumps(request.pro_context, ensure_ascii=False, indent=2)

    for field in _CONTEXT_FIELDS[request.type]:
        context[_camel(field)] = getattr(request, field)

    return context


class EvaluationService(LLMService):
    """评估服务"""

    DOMAIN = DOMAIN

    def __init__(
        self,
        llm: LLMTransport,
        models: ModelRegistry,
        templates: TemplateManager,
        parsing: Optional[ParsingConfig] = None,
        **kwargs: Any,
    ):
        super().__init__(llm, models, templates, **kwargs)
        self.parsing = parsing or ParsingConfig()

    def validate_request(self, request: EvaluationRequest) -> None:
        if not request.evaluation_model_key.strip():
            raise ValidationError("Evaluation model key must not be empty.", DOMAIN)
        if not request.mode.sub_mode.strip():
            raise ValidationError("Sub mode must not be empty.", DOMAIN)

        for field, message in _REQUIRED_FIELDS[request.type]:
            value = getattr(request, field)
            if not value or not value.strip():
                raise ValidationError(message, DOMAIN)

    async def _prepare(self, request: EvaluationRequest):
        self.validate_request(request)
        await self._validate_model(request.evaluation_model_key)
        template_id = template_id_for(request.type, request.mode)
        return await self._render(template_id, build_evaluation_context(request))

    def _parse(self, content: str, request: EvaluationRequest, started: int) -> EvaluationResponse:
        finished = self.clock()
        metadata = EvaluationMetadata(
            model=request.evaluation_model_key,
            timestamp=finished,
            duration=max(finished - started, 0),
        )
        return parse_evaluation_result(
            content, request.type, metadata, self.parsing, DiagnosticLog(logger),
        )

    async def evaluate(self, request: EvaluationRequest) -> EvaluationResponse:
        """
        执行评估

        Raises:
            ValidationError / ModelNotFoundError / TemplateNotFoundError: 前置检查失败
            ExecutionError: LLM 调用失败
            ParseError: 输出无法解析
        """
        try:
            messages = await self._prepare(request)

            started = self.clock()
            content = await self._send(messages, request.evaluation_model_key)
            logger.debug("Evaluation %s finished, %d characters", request.type.value, len(content))
            return self._parse(content, request, started)
        except PromptEvoError:
            raise
        except Exception as e:
            raise self._wrap(e) from e

    async def evaluate_stream(self, request: EvaluationRequest, callbacks: ServiceStreamCallbacks) -> None:
        """
        流式评估

        token 原样转发；流结束后解析完整内容并调用 on_complete(response)。
        所有错误通过 on_error 报告，不会抛出。
        """
        try:
            messages = await self._prepare(request)
        except Exception as e:
            callbacks.on_error(self._wrap(e))
            return

        buffer: list[str] = []
        started = self.clock()

        def on_token(token: str) -> None:
            buffer.append(token)
            callbacks.on_token(token)

        def on_complete() -> None:
            try:
                response = self._parse("".join(buffer), request, started)
            except Exception as e:
                callbacks.on_error(self._wrap(e))
                return
            callbacks.on_complete(response)

        def on_error(error: Exception) -> None:
            buffer.clear()
            callbacks.on_error(self._wrap(error))

        try:
            await self.llm.send_message_stream(
                messages, request.evaluation_model_key,
                StreamHandlers(on_token=on_token, on_complete=on_complete, on_error=on_error),
            )
        except Exception as e:
            buffer.clear()
            callbacks.on_error(self._wrap(e))
