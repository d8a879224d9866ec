"""配置模型"""

from typing import Literal, Optional
from pydantic import BaseModel, Field, model_validator


class LLMConfig(BaseModel):
    """LLM 配置（一个模型 key 对应一份）"""
    provider: str = Field(default="openai", description="LLM 提供商")
    model: str = Field(default="gpt-4o", description="模型名称")
    api_key: Optional[str] = Field(default=None, description="API Key，支持 ${ENV_VAR} 格式")
    base_url: Optional[str] = Field(default=None, description="API Base URL")
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=4096, ge=1)
    enabled: bool = Field(default=True, description="禁用后视为模型不存在")


class ParsingConfig(BaseModel):
    """结构化结果解析配置"""
    max_improvements: int = Field(default=3, ge=0, description="保留的改进建议条数上限")
    max_patch_operations: int = Field(default=3, ge=0, description="保留的补丁操作条数上限")
    text_fallback: bool = Field(default=True, description="JSON 解析失败时是否启用文本降级解析")


class HistoryConfig(BaseModel):
    """历史记录存储配置"""
    storage: Literal["memory", "yaml"] = Field(default="memory")
    path: Optional[str] = Field(default=None, description="yaml 存储文件路径")

    @model_validator(mode="after")
    def require_path_for_yaml(self) -> "HistoryConfig":
        if self.storage == "yaml" and not self.path:
            raise ValueError("history.path is required when history.storage is 'yaml'")
        return self


class LoggingConfig(BaseModel):
    """日志配置"""
    level: str = Field(default="INFO")
    rich: bool = Field(default=True, description="使用 rich 渲染日志")


class Config(BaseModel):
    """prompt-evo 完整配置"""
    version: str = "1"
    language: Literal["zh", "en"] = "en"
    llm: LLMConfig = Field(default_factory=LLMConfig)
    # 模型 key → 配置；未配置时以 llm 作为 "default"
    models: dict[str, LLMConfig] = Field(default_factory=dict)
    parsing: ParsingConfig = Field(default_factory=ParsingConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def ensure_default_model(self) -> "Config":
        if not self.models:
            self.models = {"default": self.llm}
        return self
