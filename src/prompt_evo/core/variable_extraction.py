"""变量提取结果解析与过滤"""

import math
from typing import Any, Iterable, Optional

from prompt_evo.core.diagnostics import DiagnosticLog
from prompt_evo.core.errors import ParseError
from prompt_evo.core.extractor import ResultExtractor
from prompt_evo.models.variables import (
    ExtractedVariable, VariableExtractionResponse, VariablePosition,
)
from prompt_evo.utils.i18n import t

DOMAIN = "variable_extraction"


def normalize_name(name: str) -> str:
    """名称比较键：去首尾空白 + casefold"""
    return name.strip().casefold()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _normalize_variable(item: Any, index: int) -> ExtractedVariable:
    if not isinstance(item, dict):
        raise ParseError(f"variables[{index}] is not a valid object.", DOMAIN)

    name = item.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ParseError(f'variables[{index}] is missing a valid "name" field.', DOMAIN)

    if not isinstance(item.get("value"), str):
        raise ParseError(f'variables[{index}] is missing a valid "value" field.', DOMAIN)

    position = item.get("position")
    if not isinstance(position, dict):
        raise ParseError(f'variables[{index}] is missing a valid "position" object.', DOMAIN)

    if not isinstance(position.get("originalText"), str):
        raise ParseError(f'variables[{index}].position is missing a valid "originalText" field.', DOMAIN)

    occurrence = position.get("occurrence")
    if not _is_number(occurrence) or int(occurrence) < 1:
        raise ParseError(f'variables[{index}].position is missing a valid "occurrence" number.', DOMAIN)

    if not isinstance(item.get("reason"), str):
        raise ParseError(f'variables[{index}] is missing a valid "reason" field.', DOMAIN)

    category = item.get("category")
    return ExtractedVariable(
        name=name.strip(),
        value=item["value"],
        position=VariablePosition(original_text=position["originalText"], occurrence=int(occurrence)),
        reason=item["reason"],
        category=str(category) if category else None,
    )


def normalize_extraction(data: Any) -> VariableExtractionResponse:
    """结构校验：variables 数组 + summary 字符串，缺字段即抛 ParseError"""
    if not isinstance(data, dict):
        raise ParseError("Extraction result is not a valid object.", DOMAIN)

    if not isinstance(data.get("variables"), list):
        raise ParseError('Extraction result must have a "variables" array.', DOMAIN)

    if not isinstance(data.get("summary"), str):
        raise ParseError('Extraction result must have a "summary" string.', DOMAIN)

    return VariableExtractionResponse(
        variables=[_normalize_variable(item, i) for i, item in enumerate(data["variables"])],
        summary=data["summary"].strip(),
    )


def filter_extracted_variables(
    variables: list[ExtractedVariable],
    existing_variable_names: Optional[Iterable[str]] = None,
    diagnostics: Optional[DiagnosticLog] = None,
) -> list[ExtractedVariable]:
    """丢弃与已有变量重名、或在本次响应中重复的变量（首次出现胜出）"""
    existing = {normalize_name(n) for n in (existing_variable_names or []) if normalize_name(n)}
    seen: set[str] = set()
    kept: list[ExtractedVariable] = []

    for variable in variables:
        key = normalize_name(variable.name)
        if not key:
            continue
        if key in existing:
            if diagnostics is not None:
                diagnostics.warning(
                    "existing_variable_dropped",
                    t("diag_existing_variable").format(name=variable.name),
                    name=variable.name,
                )
            continue
        if key in seen:
            if diagnostics is not None:
                diagnostics.warning(
                    "duplicate_variable_dropped",
                    t("diag_duplicate_variable").format(name=variable.name),
                    name=variable.name,
                )
            continue
        seen.add(key)
        kept.append(variable)

    return kept


def parse_extraction_result(
    content: str,
    existing_variable_names: Optional[Iterable[str]] = None,
    diagnostics: Optional[DiagnosticLog] = None,
) -> VariableExtractionResponse:
    """解析 LLM 变量提取输出并完成过滤"""
    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()

    extracted = ResultExtractor("variables", diagnostics).extract(content)
    if extracted is None:
        raise ParseError(
            f"Failed to parse LLM response. Raw content length: {len(content)} characters.",
            DOMAIN,
            {"content_length": len(content)},
        )

    response = normalize_extraction(extracted.value)
    variables = filter_extracted_variables(response.variables, existing_variable_names, diagnostics)
    return response.model_copy(update={"variables": variables, "diagnostics": diagnostics.entries})
