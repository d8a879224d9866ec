"""变量提取 / 变量值生成模型"""

from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from prompt_evo.models.diagnostics import Diagnostic


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ─── 变量提取 ────────────────────────────────────────────

class VariablePosition(_WireModel):
    """精准定位信息"""
    original_text: str                 # 原文片段（用于查找替换）
    occurrence: int = Field(ge=1)       # 第几次出现（1-based）


class ExtractedVariable(_WireModel):
    """提取的变量"""
    name: str
    value: str
    position: VariablePosition
    reason: str
    category: Optional[str] = None      # 由 LLM 自主决定的分类


class VariableExtractionRequest(_WireModel):
    prompt_content: str
    extraction_model_key: str
    existing_variable_names: list[str] = Field(default_factory=list)


class VariableExtractionResponse(_WireModel):
    variables: list[ExtractedVariable] = Field(default_factory=list)
    summary: str = ""
    diagnostics: list[Diagnostic] = Field(default_factory=list)


# ─── 变量值生成 ──────────────────────────────────────────

class VariableToGenerate(_WireModel):
    """需要生成值的变量"""
    name: str
    current_value: Optional[str] = None
    source: Optional[Literal["global", "predefined", "test", "empty"]] = None


class GeneratedVariableValue(_WireModel):
    name: str
    value: str
    reason: str
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class VariableValueGenerationRequest(_WireModel):
    prompt_content: str
    variables: list[VariableToGenerate]
    generation_model_key: str


class VariableValueGenerationResponse(_WireModel):
    """values 的长度与顺序始终与请求一致"""
    values: list[GeneratedVariableValue] = Field(default_factory=list)
    summary: str = ""
    diagnostics: list[Diagnostic] = Field(default_factory=list)
