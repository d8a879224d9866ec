"""补丁应用引擎

replace / insert / delete 是同一个替换原语：定位 old_text 的第 N 次出现，
用 new_text 替换。每次调用都是纯函数，失败只返回 skipped + reason，不抛异常。
"""

from typing import Iterable, Optional

from prompt_evo.models.patch import (
    PatchApplyResult, PatchApplyStatus, PatchBatchResult,
    PatchOperation, PatchReportItem,
)
from prompt_evo.utils.i18n import t


def count_occurrences(haystack: str, needle: str) -> int:
    """不重叠计数"""
    if not needle:
        return 0
    return haystack.count(needle)


def find_nth_occurrence(haystack: str, needle: str, occurrence: int) -> int:
    """第 occurrence 次（1-based）出现的起始下标；从上一次匹配的末尾继续找，找不到返回 -1"""
    if not needle or occurrence < 1:
        return -1

    index = -1
    start = 0
    for _ in range(occurrence):
        index = haystack.find(needle, start)
        if index == -1:
            return -1
        start = index + len(needle)
    return index


def _skipped(text: str, operation: PatchOperation, reason: str) -> PatchApplyResult:
    return PatchApplyResult(
        ok=False,
        text=text,
        report=PatchReportItem(op=operation.op, status=PatchApplyStatus.SKIPPED, reason=reason),
    )


def apply_patch_operation(text: str, operation: PatchOperation) -> PatchApplyResult:
    """
    应用单个补丁操作

    Args:
        text: 当前文本（不会被修改）
        operation: 补丁操作，occurrence 缺省为 1

    Returns:
        成功时 ok=True 且 text 为新文本；否则 ok=False、text 原样返回、report 说明原因
    """
    old_text = operation.old_text
    occurrence = operation.occurrence if operation.occurrence is not None else 1

    if not old_text:
        return _skipped(text, operation, t("patch_missing_old_text"))

    if occurrence < 1:
        return _skipped(text, operation, t("patch_invalid_occurrence").format(occurrence=occurrence))

    count = count_occurrences(text, old_text)
    if count == 0:
        return _skipped(text, operation, t("patch_not_found"))

    if occurrence > count:
        return _skipped(text, operation, t("patch_out_of_range").format(count=count, occurrence=occurrence))

    index = find_nth_occurrence(text, old_text, occurrence)
    new_text = text[:index] + operation.new_text + text[index + len(old_text):]

    return PatchApplyResult(
        ok=True,
        text=new_text,
        report=PatchReportItem(op=operation.op, status=PatchApplyStatus.APPLIED),
    )


def apply_patch_plan(text: str, operations: Iterable[PatchOperation]) -> PatchBatchResult:
    """
    按给定顺序依次应用多个补丁

    每个操作都在上一个操作的结果上重新查找 old_text，不追踪偏移量。
    调用方负责选择顺序，使每个锚点在前面的编辑之后仍然有效
    （例如锚点互不重叠，或用 order_by_anchor_position 从后往前应用）。
    单个操作失败不影响后续操作。
    """
    current = text
    reports: list[PatchReportItem] = []
    applied = 0

    for operation in operations:
        result = apply_patch_operation(current, operation)
        reports.append(result.report)
        if result.ok:
            current = result.text
            applied += 1

    return PatchBatchResult(
        ok=applied == len(reports),
        text=current,
        reports=reports,
        applied_count=applied,
    )


def locate_anchor(text: str, operation: PatchOperation) -> Optional[int]:
    """操作在 text 中的目标下标；无法定位时返回 None"""
    occurrence = operation.occurrence if operation.occurrence is not None else 1
    index = find_nth_occurrence(text, operation.old_text, occurrence)
    return index if index >= 0 else None


def order_by_anchor_position(text: str, operations: Iterable[PatchOperation]) -> list[PatchOperation]:
    """按锚点在原文中的位置从后往前排序，无法定位的放在最后（保持原相对顺序）"""
    indexed = list(enumerate(operations))
    located = []
    unlocated = []
    for order, operation in indexed:
        position = locate_anchor(text, operation)
        if position is None:
            unlocated.append(operation)
        else:
            located.append((position, order, operation))

    located.sort(key=lambda item: (-item[0], item[1]))
    return [op for _, _, op in located] + unlocated
