"""PromptEvo - 提示词评估、变量处理与版本迭代
PromptEvo - prompt evaluation, variable handling and revision chains"""

__version__ = "0.1.0"

from prompt_evo.core.config import load_config
from prompt_evo.core.history import HistoryManager
from prompt_evo.core.refiner import PromptRefiner
from prompt_evo.models import Config
from prompt_evo.services import (
    EvaluationService, VariableExtractionService, VariableValueGenerationService,
)

__all__ = [
    "load_config", "Config", "HistoryManager", "PromptRefiner",
    "EvaluationService", "VariableExtractionService", "VariableValueGenerationService",
    "__version__",
]
