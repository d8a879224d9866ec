"""核心模块 / Core modules"""

from prompt_evo.core.config import load_config
from prompt_evo.core.diagnostics import DiagnosticLog
from prompt_evo.core.errors import (
    ErrorKind, PromptEvoError, ValidationError, ModelNotFoundError,
    TemplateNotFoundError, ParseError, ExecutionError,
    HistoryError, ChainNotFoundError, RecordNotFoundError, HistoryChainError,
    RecordValidationError, HistoryStorageError,
)
from prompt_evo.core.extractor import ResultExtractor, ExtractionResult, extract_json_candidates
from prompt_evo.core.evaluation import parse_evaluation_result, normalize_evaluation, parse_text_evaluation
from prompt_evo.core.variable_extraction import (
    parse_extraction_result, normalize_extraction, filter_extracted_variables,
)
from prompt_evo.core.variable_generation import (
    parse_generation_result, normalize_generation, align_generated_values,
)
from prompt_evo.core.patch import apply_patch_operation, apply_patch_plan, order_by_anchor_position
from prompt_evo.core.storage import (
    HistoryStorage, InMemoryHistoryStorage, YamlHistoryStorage, create_storage,
)
from prompt_evo.core.history import HistoryManager
from prompt_evo.core.refiner import PromptRefiner, RefineResult

__all__ = [
    "load_config",
    "DiagnosticLog",
    "ErrorKind", "PromptEvoError", "ValidationError", "ModelNotFoundError",
    "TemplateNotFoundError", "ParseError", "ExecutionError",
    "HistoryError", "ChainNotFoundError", "RecordNotFoundError", "HistoryChainError",
    "RecordValidationError", "HistoryStorageError",
    "ResultExtractor", "ExtractionResult", "extract_json_candidates",
    "parse_evaluation_result", "normalize_evaluation", "parse_text_evaluation",
    "parse_extraction_result", "normalize_extraction", "filter_extracted_variables",
    "parse_generation_result", "normalize_generation", "align_generated_values",
    "apply_patch_operation", "apply_patch_plan", "order_by_anchor_position",
    "HistoryStorage", "InMemoryHistoryStorage", "YamlHistoryStorage", "create_storage",
    "HistoryManager",
    "PromptRefiner", "RefineResult",
]
