"""评估模型

评估请求（五种类型）与统一结构的评估响应。
"""

from enum import Enum
from typing import Any, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from prompt_evo.models.diagnostics import Diagnostic
from prompt_evo.models.patch import PatchOperation


class EvaluationType(str, Enum):
    """评估类型"""
    ORIGINAL = "original"
    OPTIMIZED = "optimized"
    COMPARE = "compare"
    PROMPT_ONLY = "prompt-only"          # 仅提示词评估（无需测试结果）
    PROMPT_ITERATE = "prompt-iterate"    # 带迭代需求的提示词评估


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ─── 请求 ────────────────────────────────────────────────

class EvaluationModeConfig(_WireModel):
    """评估模式配置，决定模板 ID"""
    function_mode: Literal["basic", "pro", "image"] = "basic"
    sub_mode: str = "system"


class EvaluationRequest(_WireModel):
    """评估请求

    不同 type 需要的字段不同，由 EvaluationService 校验：
    - original: test_result
    - optimized: optimized_prompt + test_result
    - compare: optimized_prompt + original_test_result + optimized_test_result
    - prompt-only: optimized_prompt
    - prompt-iterate: optimized_prompt + iterate_requirement
    """
    type: EvaluationType
    evaluation_model_key: str
    mode: EvaluationModeConfig = Field(default_factory=EvaluationModeConfig)

    original_prompt: Optional[str] = None
    optimized_prompt: Optional[str] = None
    test_content: Optional[str] = None
    test_result: Optional[str] = None
    original_test_result: Optional[str] = None
    optimized_test_result: Optional[str] = None
    iterate_requirement: Optional[str] = None

    variables: dict[str, str] = Field(default_factory=dict)
    pro_context: Optional[dict[str, Any]] = None


# ─── 响应 ────────────────────────────────────────────────

class EvaluationDimension(_WireModel):
    """单个评估维度"""
    key: str
    label: str
    score: float = Field(ge=0, le=100)


class EvaluationScore(_WireModel):
    overall: float = Field(ge=0, le=100)
    dimensions: list[EvaluationDimension] = Field(min_length=1)


class EvaluationMetadata(_WireModel):
    """由调用方提供的元数据（唯一允许与时间相关的部分）"""
    model: Optional[str] = None
    timestamp: Optional[int] = None      # 毫秒
    duration: Optional[int] = None       # 毫秒


class EvaluationResponse(_WireModel):
    """评估响应（统一结构）"""
    type: EvaluationType
    score: EvaluationScore
    issues: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    summary: str = ""
    patch_plan: list[PatchOperation] = Field(default_factory=list)
    is_optimized_better: Optional[bool] = None
    metadata: Optional[EvaluationMetadata] = None

    # True 表示来自文本降级解析（单维度）
    degraded: bool = False
    diagnostics: list[Diagnostic] = Field(default_factory=list)
