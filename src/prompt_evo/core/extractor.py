"""结构化结果提取器

从 LLM 原始文本中取出 JSON 候选并解码为通用值树，不涉及任何领域语义：
1. ```json 代码块内容（如有），其次是整段文本
2. json_repair 宽松修复（缺引号/逗号、尾逗号、截断）后 json.loads
3. 修复路径失败时，对原始候选做一次严格 json.loads
4. 根节点是数组时，选取第一个带有领域判别键（如 score）的对象

每个阶段失败都只记录诊断并返回 None，由调用方决定是否继续降级。
"""

import json
import re
from enum import Enum
from typing import Any, Optional

from json_repair import repair_json
from pydantic import BaseModel

from prompt_evo.core.diagnostics import DiagnosticLog
from prompt_evo.utils.i18n import t

FENCED_JSON_RE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)

_MISSING = object()


class CandidateSource(str, Enum):
    FENCED = "fenced"
    RAW = "raw"


class ExtractionResult(BaseModel):
    """提取结果

    matched=False 表示解析成功但根对象没有判别键（宽松候选），
    变量类解析器用它报告精确的缺失字段。
    """
    value: Any
    source: CandidateSource
    repaired: bool = True
    matched: bool = True
    index: Optional[int] = None          # 从数组中选出时的下标


def extract_json_candidates(content: str) -> list[tuple[CandidateSource, str]]:
    """按优先级返回 JSON 候选文本（去重、去空）"""
    candidates: list[tuple[CandidateSource, str]] = []
    match = FENCED_JSON_RE.search(content)
    if match and match.group(1).strip():
        candidates.append((CandidateSource.FENCED, match.group(1)))
    if content.strip() and all(text != content for _, text in candidates):
        candidates.append((CandidateSource.RAW, content))
    return candidates


def decode_json(text: str, repair: bool = True) -> Any:
    """解码单个候选；失败时抛 ValueError"""
    if repair:
        return json.loads(repair_json(text))
    return json.loads(text)


class ResultExtractor:
    """按判别键提取结构化结果"""

    def __init__(self, discriminator: str, diagnostics: Optional[DiagnosticLog] = None):
        self.discriminator = discriminator
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()

    def extract(self, content: str) -> Optional[ExtractionResult]:
        loose: Optional[ExtractionResult] = None

        for source, text in extract_json_candidates(content):
            parsed, repaired = self._decode(source, text)
            if parsed is _MISSING:
                continue

            selected = self.select(parsed)
            if selected is not None:
                index, value = selected
                return ExtractionResult(value=value, source=source, repaired=repaired, index=index)

            if loose is None and isinstance(parsed, dict):
                loose = ExtractionResult(value=parsed, source=source, repaired=repaired, matched=False)

        self.diagnostics.debug(
            "no_candidate", t("diag_no_candidate").format(key=self.discriminator),
            key=self.discriminator, content_length=len(content),
        )
        return loose

    def select(self, parsed: Any) -> Optional[tuple[Optional[int], dict]]:
        """根对象或数组元素中第一个带判别键的对象"""
        if isinstance(parsed, dict):
            return (None, parsed) if self.discriminator in parsed else None

        if isinstance(parsed, list):
            for i, item in enumerate(parsed):
                if isinstance(item, dict) and self.discriminator in item:
                    self.diagnostics.debug(
                        "array_unwrapped", t("diag_array_unwrapped").format(index=i), index=i,
                    )
                    return i, item
        return None

    def _decode(self, source: CandidateSource, text: str) -> tuple[Any, bool]:
        try:
            return decode_json(text, repair=True), True
        except Exception as e:  # json_repair 可能抛出任意异常
            self.diagnostics.warning(
                "json_repair_failed",
                t("diag_repair_failed").format(source=source.value, err=e),
                source=source.value,
            )

        try:
            return decode_json(text, repair=False), False
        except ValueError as e:
            self.diagnostics.debug(
                "json_strict_failed",
                t("diag_strict_failed").format(source=source.value, err=e),
                source=source.value,
            )
        return _MISSING, False
