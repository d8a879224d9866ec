"""国际化支持 / Internationalization support

提供中英文文案切换能力（降级评估标签、补齐理由、诊断信息）。
Provides Chinese/English text switching (fallback labels, backfill reasons, diagnostics).
"""

from typing import Literal

# 当前语言（默认英文）/ Current language (default English)
_current_lang: Literal["zh", "en"] = "en"


def set_language(lang: Literal["zh", "en"]) -> None:
    """设置当前语言 / Set current language"""
    global _current_lang
    _current_lang = lang


def get_language() -> Literal["zh", "en"]:
    """获取当前语言 / Get current language"""
    return _current_lang


def t(key: str) -> str:
    """根据 key 返回当前语言的文案 / Return text for current language by key"""
    entry = _TEXTS.get(key)
    if entry is None:
        return key
    return entry.get(_current_lang, entry.get("en", key))


# ── 文案映射表 / Text mapping table ──────────────────────────

_TEXTS: dict[str, dict[str, str]] = {
    # ── 评估降级 / Evaluation fallback ──
    "overall_label": {"zh": "综合评分", "en": "Overall"},
    "fallback_summary": {"zh": "评估完成", "en": "Evaluation completed"},

    # ── 变量值生成 / Variable value generation ──
    "missing_value_reason": {
        "zh": "（LLM未生成此变量的值）",
        "en": "(model did not generate a value for this variable)",
    },

    # ── 诊断 / Diagnostics ──
    "diag_repair_failed": {
        "zh": "{source} 候选 JSON 修复失败: {err}",
        "en": "JSON repair failed for {source} candidate: {err}",
    },
    "diag_strict_failed": {
        "zh": "{source} 候选严格解析失败: {err}",
        "en": "Strict JSON parse failed for {source} candidate: {err}",
    },
    "diag_array_unwrapped": {
        "zh": "根节点为数组，已选取第 {index} 个元素",
        "en": "Root was an array, selected element {index}",
    },
    "diag_no_candidate": {
        "zh": "未找到包含 \"{key}\" 的结构化结果",
        "en": "No structured result containing \"{key}\" was found",
    },
    "diag_text_fallback": {
        "zh": "使用文本降级解析，总分 {score}",
        "en": "Using text fallback parsing, overall score {score}",
    },
    "diag_existing_variable": {
        "zh": "变量 \"{name}\" 与已有变量重名，已忽略",
        "en": "Variable \"{name}\" matches an existing variable, dropped",
    },
    "diag_duplicate_variable": {
        "zh": "变量 \"{name}\" 重复，保留首次出现",
        "en": "Variable \"{name}\" is duplicated, first occurrence kept",
    },
    "diag_unrequested_value": {
        "zh": "LLM返回了未请求的变量: {name}",
        "en": "Model returned an unrequested variable: {name}",
    },
    "diag_duplicate_value": {
        "zh": "LLM返回了重复的变量名: {name}，后者将覆盖前者",
        "en": "Model returned duplicate variable name: {name}, the last one wins",
    },
    "diag_duplicate_request": {
        "zh": "请求列表中存在重复的变量名: {name}，将返回相同的生成结果",
        "en": "Request list contains duplicate name: {name}, the same value is returned",
    },
    "diag_backfilled_value": {
        "zh": "LLM未返回变量 \"{name}\"，已补齐空值",
        "en": "Model did not return variable \"{name}\", backfilled with an empty value",
    },
    "diag_patch_dropped": {
        "zh": "patchPlan[{index}] 缺少有效的 oldText，已忽略",
        "en": "patchPlan[{index}] has no usable oldText, dropped",
    },

    # ── 补丁 / Patch ──
    "patch_missing_old_text": {"zh": "Missing oldText", "en": "Missing oldText"},
    "patch_not_found": {
        "zh": "oldText not found in current text",
        "en": "oldText not found in current text",
    },
    "patch_out_of_range": {
        "zh": "oldText appears {count} times, but occurrence={occurrence} is out of range",
        "en": "oldText appears {count} times, but occurrence={occurrence} is out of range",
    },
    "patch_invalid_occurrence": {
        "zh": "occurrence={occurrence} must be >= 1",
        "en": "occurrence={occurrence} must be >= 1",
    },
}
