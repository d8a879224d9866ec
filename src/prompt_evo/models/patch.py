"""补丁操作模型"""

from enum import Enum
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


PatchOperationType = Literal["insert", "replace", "delete"]


class PatchOperation(BaseModel):
    """补丁操作 - 精准修复指令

    三种操作都是同一个替换原语：
    - 插入：old_text 是锚点上下文，new_text = old_text + 插入内容
    - 删除：new_text = ""
    - 替换：直接 old_text → new_text
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    op: PatchOperationType = "replace"
    old_text: str = ""                   # 锚点文本，apply 时要求非空
    new_text: str = ""
    occurrence: Optional[int] = None     # 1-based，缺省为 1
    instruction: str = ""


class PatchApplyStatus(str, Enum):
    """补丁应用状态

    CONFLICT 为预留状态：当前没有任何代码路径会产生它，
    留给将来的重叠编辑检测使用。
    """
    APPLIED = "applied"
    SKIPPED = "skipped"
    CONFLICT = "conflict"


class PatchReportItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    op: PatchOperationType
    status: PatchApplyStatus
    reason: Optional[str] = None


class PatchApplyResult(BaseModel):
    """单个补丁的应用结果（不可变）"""
    model_config = ConfigDict(frozen=True)

    ok: bool
    text: str
    report: PatchReportItem


class PatchBatchResult(BaseModel):
    """按顺序应用多个补丁的汇总结果"""
    model_config = ConfigDict(frozen=True)

    ok: bool                                   # 全部 applied 时为 True
    text: str
    reports: list[PatchReportItem] = Field(default_factory=list)
    applied_count: int = 0
