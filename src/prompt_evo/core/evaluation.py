"""评估结果解析

降级链路：fenced JSON → 修复后的 JSON → 数组解包 → 文本正则。
一旦选中了带 score 的结构化对象，字段级校验失败直接抛 ParseError，
不再降级，避免编造分数。
"""

import html
import math
import re
from typing import Any, Optional

from prompt_evo.core.diagnostics import DiagnosticLog
from prompt_evo.core.errors import ParseError
from prompt_evo.core.extractor import ResultExtractor
from prompt_evo.models.config import ParsingConfig
from prompt_evo.models.evaluation import (
    EvaluationDimension, EvaluationMetadata, EvaluationResponse,
    EvaluationScore, EvaluationType,
)
from prompt_evo.models.patch import PatchOperation
from prompt_evo.utils.i18n import t

DOMAIN = "evaluation"

# 文本降级：按顺序尝试，首个 0-100 的整数胜出
SCORE_PATTERNS = [
    re.compile(r"总[分评][:：]\s*(\d{1,3})"),
    re.compile(r"overall[:：]\s*(\d{1,3})", re.IGNORECASE),
    re.compile(r"(\d{1,3})\s*[分点](?:\s*[（(]满分100[)）])?"),
    re.compile(r"评分[:：]\s*(\d{1,3})"),
]

OPTIMIZED_BETTER_PATTERNS = [
    re.compile(r"优化后[^。\n]{0,12}(?:更好|更优|更佳|胜出)"),
    re.compile(r"optimi[sz]ed\s+(?:version\s+|prompt\s+|result\s+|output\s+)?(?:is\s+)?better", re.IGNORECASE),
]

ORIGINAL_BETTER_PATTERNS = [
    re.compile(r"原始[^。\n]{0,12}(?:更好|更优|更佳|胜出)"),
    re.compile(r"original\s+(?:version\s+|prompt\s+|result\s+|output\s+)?(?:is\s+)?better", re.IGNORECASE),
]

_TRUE_WORDS = {"true", "yes"}
_FALSE_WORDS = {"false", "no"}
_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")
_VALID_OPS = ("insert", "replace", "delete")


def clamp_score(value: float) -> float:
    return float(max(0, min(100, value)))


def parse_score(value: Any, field_name: str) -> float:
    """数值或以整数开头的字符串（"85"、"85分"），结果夹到 [0, 100]"""
    if value is None:
        raise ParseError(f'Evaluation result is missing score for "{field_name}".', DOMAIN)

    if isinstance(value, bool):
        raise ParseError(f'Invalid numeric score for "{field_name}": {value}', DOMAIN)

    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ParseError(f'Invalid numeric score for "{field_name}": {value}', DOMAIN)
        return clamp_score(value)

    match = _LEADING_INT_RE.match(str(value))
    if not match:
        raise ParseError(f'Invalid numeric score for "{field_name}": {value}', DOMAIN)
    return clamp_score(int(match.group(1)))


def normalize_is_optimized_better(value: Any) -> Optional[bool]:
    """bool 原样保留；"true"/"yes"/"false"/"no"（忽略大小写与首尾空白）转换；其他一律不设置"""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return None


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def normalize_patch_plan(
    raw: Any,
    limit: Optional[int] = None,
    diagnostics: Optional[DiagnosticLog] = None,
) -> list[PatchOperation]:
    """标准化 patchPlan：丢弃无 oldText 的条目，未知 op 视为 replace，反转义 HTML 实体"""
    if not isinstance(raw, list):
        return []

    operations: list[PatchOperation] = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            continue

        old_text = html.unescape(str(item.get("oldText") or ""))
        if not old_text:
            if diagnostics is not None:
                diagnostics.warning("patch_dropped", t("diag_patch_dropped").format(index=index), index=index)
            continue

        new_text = item.get("newText")
        occurrence = None
        raw_occurrence = item.get("occurrence")
        if (
            isinstance(raw_occurrence, (int, float))
            and not isinstance(raw_occurrence, bool)
            and math.isfinite(raw_occurrence)
            and int(raw_occurrence) > 0
        ):
            occurrence = int(raw_occurrence)

        operations.append(PatchOperation(
            op=item.get("op") if item.get("op") in _VALID_OPS else "replace",
            old_text=old_text,
            new_text=html.unescape(str(new_text)) if new_text is not None else "",
            occurrence=occurrence,
            instruction=str(item.get("instruction") or ""),
        ))

    return operations[:limit] if limit is not None else operations


def normalize_evaluation(
    data: Any,
    evaluation_type: EvaluationType,
    metadata: Optional[EvaluationMetadata] = None,
    parsing: Optional[ParsingConfig] = None,
    diagnostics: Optional[DiagnosticLog] = None,
) -> EvaluationResponse:
    """校验并标准化已选中的评估对象"""
    parsing = parsing or ParsingConfig()

    if not isinstance(data, dict):
        raise ParseError("Evaluation result is not a valid object.", DOMAIN)

    score_data = data.get("score")
    if not isinstance(score_data, dict):
        raise ParseError('Evaluation result is missing the "score" field.', DOMAIN)

    dimensions_data = score_data.get("dimensions")
    if not isinstance(dimensions_data, list):
        raise ParseError('Evaluation result "dimensions" must be an array.', DOMAIN)
    if not dimensions_data:
        raise ParseError('Evaluation result "dimensions" array must not be empty.', DOMAIN)

    dimensions: list[EvaluationDimension] = []
    for index, dim in enumerate(dimensions_data):
        if not isinstance(dim, dict):
            raise ParseError(f"dimensions[{index}] is not a valid object.", DOMAIN)
        if not isinstance(dim.get("key"), str) or not dim["key"]:
            raise ParseError(f'dimensions[{index}] is missing a valid "key" field.', DOMAIN)
        if not isinstance(dim.get("label"), str) or not dim["label"]:
            raise ParseError(f'dimensions[{index}] is missing a valid "label" field.', DOMAIN)
        dimensions.append(EvaluationDimension(
            key=dim["key"],
            label=dim["label"],
            score=parse_score(dim.get("score"), f"dimensions[{index}].score"),
        ))

    score = EvaluationScore(
        overall=parse_score(score_data.get("overall"), "overall"),
        dimensions=dimensions,
    )

    is_optimized_better = None
    if evaluation_type == EvaluationType.COMPARE:
        is_optimized_better = normalize_is_optimized_better(data.get("isOptimizedBetter"))

    summary = data.get("summary")

    return EvaluationResponse(
        type=evaluation_type,
        score=score,
        issues=_string_list(data.get("issues")),
        improvements=_string_list(data.get("improvements"))[:parsing.max_improvements],
        summary=summary if isinstance(summary, str) else "",
        patch_plan=normalize_patch_plan(data.get("patchPlan"), parsing.max_patch_operations, diagnostics),
        is_optimized_better=is_optimized_better,
        metadata=metadata,
        diagnostics=diagnostics.entries if diagnostics is not None else [],
    )


def infer_optimized_better(content: str) -> Optional[bool]:
    """关键词推断；两类关键词同时出现或都没出现时返回 None"""
    optimized = any(p.search(content) for p in OPTIMIZED_BETTER_PATTERNS)
    original = any(p.search(content) for p in ORIGINAL_BETTER_PATTERNS)
    if optimized == original:
        return None
    return optimized


def parse_text_evaluation(
    content: str,
    evaluation_type: EvaluationType,
    metadata: Optional[EvaluationMetadata] = None,
    diagnostics: Optional[DiagnosticLog] = None,
) -> Optional[EvaluationResponse]:
    """文本降级解析：只取总分，生成单维度结果"""
    overall: Optional[int] = None
    for pattern in SCORE_PATTERNS:
        match = pattern.search(content)
        if match:
            num = int(match.group(1))
            if 0 <= num <= 100:
                overall = num
                break

    if overall is None:
        return None

    if diagnostics is not None:
        diagnostics.warning("text_fallback", t("diag_text_fallback").format(score=overall), score=overall)

    return EvaluationResponse(
        type=evaluation_type,
        score=EvaluationScore(
            overall=overall,
            dimensions=[EvaluationDimension(key="overall", label=t("overall_label"), score=overall)],
        ),
        summary=t("fallback_summary"),
        is_optimized_better=(
            infer_optimized_better(content) if evaluation_type == EvaluationType.COMPARE else None
        ),
        metadata=metadata,
        degraded=True,
        diagnostics=diagnostics.entries if diagnostics is not None else [],
    )


def parse_evaluation_result(
    content: str,
    evaluation_type: EvaluationType,
    metadata: Optional[EvaluationMetadata] = None,
    parsing: Optional[ParsingConfig] = None,
    diagnostics: Optional[DiagnosticLog] = None,
) -> EvaluationResponse:
    """
    解析 LLM 评估输出

    Args:
        content: LLM 完整回复
        evaluation_type: 评估类型
        metadata: 调用方提供的元数据
        parsing: 解析配置
        diagnostics: 诊断收集器

    Returns:
        标准化的评估响应

    Raises:
        ParseError: 结构化对象字段不合法，或所有降级阶段都失败
    """
    parsing = parsing or ParsingConfig()
    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()

    extracted = ResultExtractor("score", diagnostics).extract(content)
    if extracted is not None and extracted.matched:
        return normalize_evaluation(extracted.value, evaluation_type, metadata, parsing, diagnostics)

    if parsing.text_fallback:
        fallback = parse_text_evaluation(content, evaluation_type, metadata, diagnostics)
        if fallback is not None:
            return fallback

    raise ParseError(
        f"Failed to parse evaluation result. Raw content length: {len(content)} characters.",
        DOMAIN,
        {"content_length": len(content)},
    )
