"""诊断收集器

解析与对齐过程中的异常情况（降级、丢弃、补齐）不抛异常，而是记录为
结构化 Diagnostic：随响应返回，同时写入 logging。
"""

import logging
from typing import Any, Optional

from prompt_evo.models.diagnostics import Diagnostic, DiagnosticLevel

_LEVELS = {
    DiagnosticLevel.DEBUG: logging.DEBUG,
    DiagnosticLevel.INFO: logging.INFO,
    DiagnosticLevel.WARNING: logging.WARNING,
}


class DiagnosticLog:
    """按顺序收集 Diagnostic，并转发给 logger"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("prompt_evo.diagnostics")
        self._entries: list[Diagnostic] = []

    def add(
        self,
        code: str,
        message: str,
        level: DiagnosticLevel = DiagnosticLevel.WARNING,
        **context: Any,
    ) -> Diagnostic:
        entry = Diagnostic(code=code, message=message, level=level, context=context)
        self._entries.append(entry)
        self.logger.log(_LEVELS[level], "[%s] %s", code, message)
        return entry

    def warning(self, code: str, message: str, **context: Any) -> Diagnostic:
        return self.add(code, message, DiagnosticLevel.WARNING, **context)

    def debug(self, code: str, message: str, **context: Any) -> Diagnostic:
        return self.add(code, message, DiagnosticLevel.DEBUG, **context)

    @property
    def entries(self) -> list[Diagnostic]:
        return list(self._entries)

    def codes(self) -> list[str]:
        return [e.code for e in self._entries]

    def __len__(self) -> int:
        return len(self._entries)
