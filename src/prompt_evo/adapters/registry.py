"""基于配置的模型注册表"""

from typing import Optional

from prompt_evo.adapters.base import ModelRegistry
from prompt_evo.models.config import Config, LLMConfig


class ConfigModelRegistry(ModelRegistry):
    """从 Config.models 查询模型；enabled=False 视为不存在"""

    def __init__(self, models: dict[str, LLMConfig]):
        self.models = dict(models)

    @classmethod
    def from_config(cls, config: Config) -> "ConfigModelRegistry":
        return cls(config.models)

    async def get_model(self, model_key: str) -> Optional[LLMConfig]:
        model = self.models.get(model_key)
        if model is None or not model.enabled:
            return None
        return model
