"""变量提取服务"""

import logging
from typing import Any

from prompt_evo.core.diagnostics import DiagnosticLog
from prompt_evo.core.errors import PromptEvoError, ValidationError
from prompt_evo.core.variable_extraction import DOMAIN, parse_extraction_result
from prompt_evo.models import VariableExtractionRequest, VariableExtractionResponse
from prompt_evo.services.base import LLMService

logger = logging.getLogger(__name__)

TEMPLATE_ID = "variable-extraction"


def build_extraction_context(request: VariableExtractionRequest) -> dict[str, Any]:
    names = request.existing_variable_names
    return {
        "promptContent": request.prompt_content,
        "existingVariableNames": ", ".join(names) if names else "-",
        "hasExistingVariables": bool(names),
    }


class VariableExtractionService(LLMService):
    """从提示词中识别可参数化的片段"""

    DOMAIN = DOMAIN

    def validate_request(self, request: VariableExtractionRequest) -> None:
        if not request.prompt_content.strip():
            raise ValidationError("Prompt content must not be empty.", DOMAIN)
        if not request.extraction_model_key.strip():
            raise ValidationError("Extraction model key must not be empty.", DOMAIN)

    async def extract(self, request: VariableExtractionRequest) -> VariableExtractionResponse:
        try:
            self.validate_request(request)
            await self._validate_model(request.extraction_model_key)
            messages = await self._render(TEMPLATE_ID, build_extraction_context(request))

            content = await self._send(messages, request.extraction_model_key)
            return parse_extraction_result(
                content, request.existing_variable_names, DiagnosticLog(logger),
            )
        except PromptEvoError:
            raise
        except Exception as e:
            raise self._wrap(e) from e
