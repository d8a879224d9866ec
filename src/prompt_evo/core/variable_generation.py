"""变量值生成结果解析与对齐

对齐是这里的核心保证：输出长度与顺序永远和请求一致。
- 不在请求列表中的变量：丢弃（诊断）
- 同名重复：后者覆盖前者（诊断）
- 缺失的变量：补齐空值，confidence=0（诊断）
"""

import math
from typing import Any, Optional, Sequence, Union

from prompt_evo.core.diagnostics import DiagnosticLog
from prompt_evo.core.errors import ParseError
from prompt_evo.core.extractor import ResultExtractor
from prompt_evo.models.variables import (
    GeneratedVariableValue, VariableToGenerate, VariableValueGenerationResponse,
)
from prompt_evo.utils.i18n import t

DOMAIN = "variable_value_generation"

RequestedVariable = Union[VariableToGenerate, str]


def _requested_name(variable: RequestedVariable) -> str:
    return (variable if isinstance(variable, str) else variable.name).strip()


def _normalize_value(item: Any, index: int) -> GeneratedVariableValue:
    if not isinstance(item, dict):
        raise ParseError(f"values[{index}] is not a valid object.", DOMAIN)

    name = item.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ParseError(f'values[{index}] is missing a valid "name" field.', DOMAIN)

    if not isinstance(item.get("value"), str):
        raise ParseError(f'values[{index}] is missing a valid "value" field.', DOMAIN)

    if not isinstance(item.get("reason"), str):
        raise ParseError(f'values[{index}] is missing a valid "reason" field.', DOMAIN)

    confidence = item.get("confidence")
    if isinstance(confidence, (int, float)) and not isinstance(confidence, bool) and math.isfinite(confidence):
        confidence = float(max(0.0, min(1.0, confidence)))
    else:
        confidence = None

    return GeneratedVariableValue(
        name=name.strip(),
        value=item["value"],
        reason=item["reason"],
        confidence=confidence,
    )


def normalize_generation(data: Any) -> tuple[list[GeneratedVariableValue], str]:
    """结构校验，返回 (原始顺序的值列表, summary)"""
    if not isinstance(data, dict):
        raise ParseError("Generation result is not a valid object.", DOMAIN)

    if not isinstance(data.get("values"), list):
        raise ParseError('Generation result must have a "values" array.', DOMAIN)

    if not isinstance(data.get("summary"), str):
        raise ParseError('Generation result must have a "summary" string.', DOMAIN)

    values = [_normalize_value(item, i) for i, item in enumerate(data["values"])]
    return values, data["summary"].strip()


def align_generated_values(
    values: list[GeneratedVariableValue],
    requested: Sequence[RequestedVariable],
    diagnostics: Optional[DiagnosticLog] = None,
) -> list[GeneratedVariableValue]:
    """按请求列表对齐：长度与顺序与请求完全一致"""
    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
    requested_names = [_requested_name(v) for v in requested]
    requested_set = set(requested_names)

    value_map: dict[str, GeneratedVariableValue] = {}
    for value in values:
        if value.name not in requested_set:
            diagnostics.warning(
                "unrequested_value", t("diag_unrequested_value").format(name=value.name), name=value.name,
            )
            continue
        if value.name in value_map:
            diagnostics.warning(
                "duplicate_value", t("diag_duplicate_value").format(name=value.name), name=value.name,
            )
        value_map[value.name] = value

    seen: set[str] = set()
    for name in requested_names:
        if name in seen:
            diagnostics.warning("duplicate_request", t("diag_duplicate_request").format(name=name), name=name)
        seen.add(name)

    aligned: list[GeneratedVariableValue] = []
    for name in requested_names:
        generated = value_map.get(name)
        if generated is not None:
            aligned.append(generated)
            continue
        diagnostics.warning("value_backfilled", t("diag_backfilled_value").format(name=name), name=name)
        aligned.append(GeneratedVariableValue(
            name=name, value="", reason=t("missing_value_reason"), confidence=0.0,
        ))

    return aligned


def parse_generation_result(
    content: str,
    requested: Sequence[RequestedVariable],
    diagnostics: Optional[DiagnosticLog] = None,
) -> VariableValueGenerationResponse:
    """解析 LLM 变量值生成输出并与请求对齐"""
    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()

    extracted = ResultExtractor("values", diagnostics).extract(content)
    if extracted is None:
        raise ParseError(
            f"Failed to parse LLM response. Raw content length: {len(content)} characters.",
            DOMAIN,
            {"content_length": len(content)},
        )

    values, summary = normalize_generation(extracted.value)
    aligned = align_generated_values(values, requested, diagnostics)
    return VariableValueGenerationResponse(values=aligned, summary=summary, diagnostics=diagnostics.entries)
