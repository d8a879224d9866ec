"""错误类型 / Error types

所有服务错误都带 ErrorKind 标签，调用方可以按 kind 分支而不依赖具体子类：
- VALIDATION: 调用方输入不合法（空提示词、空模型 key、空变量列表）
- MODEL: 引用的模型配置不存在
- TEMPLATE: 模板不存在或为空
- PARSE: 所有降级阶段之后仍无法解释 LLM 输出
- EXECUTION: 上游 LLM 调用本身失败
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    MODEL = "model_not_found"
    TEMPLATE = "template_not_found"
    PARSE = "parse"
    EXECUTION = "execution"


class PromptEvoError(Exception):
    """服务错误基类，消息格式为 "[code] details" """

    kind: ErrorKind = ErrorKind.EXECUTION

    def __init__(
        self,
        details: Optional[str] = None,
        domain: str = "core",
        params: Optional[dict[str, Any]] = None,
    ):
        self.domain = domain
        self.details = details
        self.params = params if params is not None else ({"details": details} if details else {})
        super().__init__(f"[{self.code}] {details}" if details else f"[{self.code}]")

    @property
    def code(self) -> str:
        return f"error.{self.domain}.{self.kind.value}"


class ValidationError(PromptEvoError):
    kind = ErrorKind.VALIDATION


class ModelNotFoundError(PromptEvoError):
    kind = ErrorKind.MODEL

    def __init__(self, model_key: str, domain: str = "core"):
        self.model_key = model_key
        super().__init__(f"Model '{model_key}' not found or disabled.", domain, {"context": model_key})


class TemplateNotFoundError(PromptEvoError):
    kind = ErrorKind.TEMPLATE

    def __init__(self, template_id: str, domain: str = "core"):
        self.template_id = template_id
        super().__init__(f"Template '{template_id}' not found or empty.", domain, {"context": template_id})


class ParseError(PromptEvoError):
    kind = ErrorKind.PARSE


class ExecutionError(PromptEvoError):
    kind = ErrorKind.EXECUTION

    def __init__(self, details: str, domain: str = "core", cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(details, domain)


# ─── 历史记录 ────────────────────────────────────────────

class HistoryError(Exception):
    """历史记录错误基类"""

    code = "error.history"

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"[{self.code}] {message}")


class ChainNotFoundError(HistoryError):
    code = "error.history.not_found"

    def __init__(self, chain_id: str):
        self.chain_id = chain_id
        super().__init__(f"Chain '{chain_id}' not found.")


class RecordNotFoundError(HistoryError):
    code = "error.history.record_not_found"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Record '{record_id}' not found.")


class HistoryChainError(HistoryError):
    code = "error.history.chain"


class RecordValidationError(HistoryError):
    code = "error.history.validation"

    def __init__(self, message: str, errors: list[str]):
        self.errors = errors
        super().__init__(f"{message}: {'; '.join(errors)}")


class HistoryStorageError(HistoryError):
    code = "error.history.storage"

    def __init__(self, message: str, operation: str):
        self.operation = operation
        super().__init__(f"{operation}: {message}")
