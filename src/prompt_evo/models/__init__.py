"""数据模型 / Data models"""

from prompt_evo.models.config import (
    Config, LLMConfig, ParsingConfig, HistoryConfig, LoggingConfig,
)
from prompt_evo.models.diagnostics import Diagnostic, DiagnosticLevel
from prompt_evo.models.llm import ChatMessage, PromptTemplate
from prompt_evo.models.patch import (
    PatchOperation, PatchOperationType, PatchApplyStatus,
    PatchReportItem, PatchApplyResult, PatchBatchResult,
)
from prompt_evo.models.evaluation import (
    EvaluationType, EvaluationModeConfig, EvaluationRequest,
    EvaluationDimension, EvaluationScore, EvaluationMetadata, EvaluationResponse,
)
from prompt_evo.models.variables import (
    VariablePosition, ExtractedVariable,
    VariableExtractionRequest, VariableExtractionResponse,
    VariableToGenerate, GeneratedVariableValue,
    VariableValueGenerationRequest, VariableValueGenerationResponse,
)
from prompt_evo.models.history import (
    PromptRecord, PromptRecordType, PromptRecordChain, RecordDraft,
)

__all__ = [
    # 配置 / Configuration
    "Config", "LLMConfig", "ParsingConfig", "HistoryConfig", "LoggingConfig",
    # 诊断 / Diagnostics
    "Diagnostic", "DiagnosticLevel",
    # LLM / 模板
    "ChatMessage", "PromptTemplate",
    # 补丁 / Patches
    "PatchOperation", "PatchOperationType", "PatchApplyStatus",
    "PatchReportItem", "PatchApplyResult", "PatchBatchResult",
    # 评估 / Evaluation
    "EvaluationType", "EvaluationModeConfig", "EvaluationRequest",
    "EvaluationDimension", "EvaluationScore", "EvaluationMetadata", "EvaluationResponse",
    # 变量 / Variables
    "VariablePosition", "ExtractedVariable",
    "VariableExtractionRequest", "VariableExtractionResponse",
    "VariableToGenerate", "GeneratedVariableValue",
    "VariableValueGenerationRequest", "VariableValueGenerationResponse",
    # 历史 / History
    "PromptRecord", "PromptRecordType", "PromptRecordChain", "RecordDraft",
]
