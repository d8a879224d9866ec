"""诊断信息模型"""

from enum import Enum
from typing import Any
from pydantic import BaseModel, ConfigDict, Field


class DiagnosticLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"


class Diagnostic(BaseModel):
    """解析/对齐过程中的一条结构化诊断"""
    model_config = ConfigDict(frozen=True)

    code: str                                  # 如 unrequested_value / text_fallback
    message: str
    level: DiagnosticLevel = DiagnosticLevel.WARNING
    context: dict[str, Any] = Field(default_factory=dict)
