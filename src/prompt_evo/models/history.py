"""提示词历史记录模型（版本链）"""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PromptRecordType(str, Enum):
    """记录类型"""
    OPTIMIZE = "optimize"
    USER_OPTIMIZE = "userOptimize"
    ITERATE = "iterate"
    TEST = "test"
    CONTEXT_USER_OPTIMIZE = "contextUserOptimize"
    CONTEXT_ITERATE = "contextIterate"
    IMAGE_OPTIMIZE = "imageOptimize"
    IMAGE_ITERATE = "imageIterate"
    CONVERSATION_MESSAGE_OPTIMIZE = "conversationMessageOptimize"


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, protected_namespaces=())


class PromptRecord(_WireModel):
    """链中的一个版本，创建后不可变"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True, protected_namespaces=())

    id: str
    chain_id: str
    version: int = Field(ge=1)
    previous_id: Optional[str] = None
    original_prompt: str
    optimized_prompt: str
    type: PromptRecordType = PromptRecordType.OPTIMIZE
    timestamp: int                      # 毫秒
    model_key: str
    template_id: str
    iteration_note: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class RecordDraft(_WireModel):
    """新版本的输入数据；chain_id / version / previous_id 由 HistoryManager 分配"""
    original_prompt: str
    optimized_prompt: str
    model_key: str
    template_id: str
    type: Optional[PromptRecordType] = None
    iteration_note: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    id: Optional[str] = None
    timestamp: Optional[int] = None


class PromptRecordChain(_WireModel):
    """版本链：versions 按 version 升序"""
    chain_id: str
    root_record: PromptRecord
    current_record: PromptRecord
    versions: list[PromptRecord]
