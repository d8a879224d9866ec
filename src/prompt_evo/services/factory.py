"""从 Config 组装服务 / Build services from a Config"""

from typing import Optional

from prompt_evo.adapters.base import LLMTransport, TemplateManager
from prompt_evo.adapters.openai import OpenAITransport
from prompt_evo.adapters.registry import ConfigModelRegistry
from prompt_evo.core.history import HistoryManager
from prompt_evo.core.refiner import PromptRefiner
from prompt_evo.core.storage import create_storage
from prompt_evo.models import Config
from prompt_evo.services.evaluation import EvaluationService
from prompt_evo.services.variable_extraction import VariableExtractionService
from prompt_evo.services.variable_generation import VariableValueGenerationService


class ServiceSet:
    """一份配置对应的全部服务，共享同一个模型注册表与传输层"""

    def __init__(self, config: Config, templates: TemplateManager, llm: Optional[LLMTransport] = None):
        self.config = config
        self.registry = ConfigModelRegistry.from_config(config)
        self.llm = llm or OpenAITransport(self.registry)

        self.evaluation = EvaluationService(self.llm, self.registry, templates, parsing=config.parsing)
        self.variable_extraction = VariableExtractionService(self.llm, self.registry, templates)
        self.variable_generation = VariableValueGenerationService(self.llm, self.registry, templates)

        self.history = HistoryManager(create_storage(config.history))
        self.refiner = PromptRefiner(self.history, self.evaluation)


def create_services(
    config: Config,
    templates: TemplateManager,
    llm: Optional[LLMTransport] = None,
) -> ServiceSet:
    """
    按配置创建服务 / Create services from config

    Args:
        config: 已加载的配置
        templates: 模板来源
        llm: 传输层，默认使用 OpenAITransport

    Returns:
        ServiceSet
    """
    return ServiceSet(config, templates, llm)
