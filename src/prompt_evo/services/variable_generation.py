"""变量值生成服务"""

import logging
from typing import Any

from prompt_evo.core.diagnostics import DiagnosticLog
from prompt_evo.core.errors import PromptEvoError, ValidationError
from prompt_evo.core.variable_generation import DOMAIN, parse_generation_result
from prompt_evo.models import VariableValueGenerationRequest, VariableValueGenerationResponse
from prompt_evo.services.base import LLMService

logger = logging.getLogger(__name__)

TEMPLATE_ID = "variable-value-generation"


def format_variables_text(request: VariableValueGenerationRequest) -> str:
    """编号列表：'1. name (current: x) [source]'"""
    lines = []
    for index, variable in enumerate(request.variables, start=1):
        parts = [f"{index}. {variable.name}"]
        if variable.current_value:
            parts.append(f"(current: {variable.current_value})")
        if variable.source:
            parts.append(f"[{variable.source}]")
        lines.append(" ".join(parts))
    return "\n".join(lines)


def build_generation_context(request: VariableValueGenerationRequest) -> dict[str, Any]:
    return {
        "promptContent": request.prompt_content,
        "variablesText": format_variables_text(request),
        "variableCount": len(request.variables),
    }


class VariableValueGenerationService(LLMService):
    """为变量生成示例值，结果与请求一一对齐"""

    DOMAIN = DOMAIN

    def validate_request(self, request: VariableValueGenerationRequest) -> None:
        if not request.prompt_content.strip():
            raise ValidationError("Prompt content must not be empty.", DOMAIN)
        if not request.generation_model_key.strip():
            raise ValidationError("Generation model key must not be empty.", DOMAIN)
        if not request.variables:
            raise ValidationError("Variables list must not be empty.", DOMAIN)
        for index, variable in enumerate(request.variables):
            if not variable.name.strip():
                raise ValidationError(f"Variable at index {index} has empty name.", DOMAIN)

    async def generate(self, request: VariableValueGenerationRequest) -> VariableValueGenerationResponse:
        try:
            self.validate_request(request)
            await self._validate_model(request.generation_model_key)
            messages = await self._render(TEMPLATE_ID, build_generation_context(request))

            content = await self._send(messages, request.generation_model_key)
            return parse_generation_result(content, request.variables, DiagnosticLog(logger))
        except PromptEvoError:
            raise
        except Exception as e:
            raise self._wrap(e) from e
