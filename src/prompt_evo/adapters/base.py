"""协作方接口

服务层只通过这里的接口访问外部能力：LLM 调用、模型配置查询、模板获取。
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from prompt_evo.models.config import LLMConfig
from prompt_evo.models.llm import ChatMessage, PromptTemplate


def _noop_token(token: str) -> None:
    pass


def _noop_complete() -> None:
    pass


def _raise_error(error: Exception) -> None:
    raise error


class StreamHandlers:
    """流式回调

    on_token 每收到一段内容调用一次；on_complete 在流正常结束后调用一次；
    on_error 在流中途出错时调用（此后不会再调用 on_complete）。
    """

    def __init__(
        self,
        on_token: Callable[[str], None] = _noop_token,
        on_complete: Callable[[], None] = _noop_complete,
        on_error: Callable[[Exception], None] = _raise_error,
    ):
        self.on_token = on_token
        self.on_complete = on_complete
        self.on_error = on_error


class LLMTransport(ABC):
    """LLM 调用接口"""

    @abstractmethod
    async def send_message(self, messages: list[ChatMessage], model_key: str) -> str:
        """
        发送消息并返回完整文本

        Args:
            messages: 消息列表
            model_key: 模型 key

        Returns:
            完整响应文本
        """

    @abstractmethod
    async def send_message_stream(
        self,
        messages: list[ChatMessage],
        model_key: str,
        handlers: StreamHandlers,
    ) -> None:
        """流式发送，通过 handlers 回调 token / 完成 / 错误"""


class ModelRegistry(ABC):
    """模型配置查询接口"""

    @abstractmethod
    async def get_model(self, model_key: str) -> Optional[LLMConfig]:
        """返回模型配置，不存在或已禁用时返回 None"""


class TemplateManager(ABC):
    """模板获取接口"""

    @abstractmethod
    async def get_template(self, template_id: str) -> Optional[PromptTemplate]:
        """返回模板，不存在时返回 None"""
