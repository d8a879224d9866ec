"""LLM 驱动服务 / LLM-backed services"""

from prompt_evo.services.base import LLMService, ServiceStreamCallbacks
from prompt_evo.services.evaluation import EvaluationService, build_evaluation_context, template_id_for
from prompt_evo.services.variable_extraction import VariableExtractionService
from prompt_evo.services.variable_generation import VariableValueGenerationService
from prompt_evo.services.factory import ServiceSet, create_services

__all__ = [
    "LLMService", "ServiceStreamCallbacks",
    "EvaluationService", "build_evaluation_context", "template_id_for",
    "VariableExtractionService", "VariableValueGenerationService",
    "ServiceSet", "create_services",
]
