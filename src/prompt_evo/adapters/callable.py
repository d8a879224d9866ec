"""Callable 适配器"""

import asyncio
import inspect
from typing import Any, Callable, Iterable, Optional

from prompt_evo.adapters.base import LLMTransport, StreamHandlers
from prompt_evo.models.llm import ChatMessage


class CallableTransport(LLMTransport):
    """
    通用 Callable 传输层

    支持同步和异步函数；签名为 (messages, model_key) -> str。
    流式调用时可选 stream_func 返回 token 的（异步）可迭代对象，
    未提供时把完整结果当作一个 token 回调。
    """

    def __init__(self, func: Callable, stream_func: Optional[Callable] = None):
        """
        Args:
            func: 完整调用，返回字符串
            stream_func: 流式调用，返回 token 的可迭代或异步可迭代对象
        """
        self.func = func
        self.stream_func = stream_func

    async def send_message(self, messages: list[ChatMessage], model_key: str) -> str:
        if inspect.iscoroutinefunction(self.func):
            result = await self.func(messages, model_key)
        else:
            # 在线程池中运行同步函数
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(None, lambda: self.func(messages, model_key))

        return str(result) if result is not None else ""

    async def send_message_stream(
        self,
        messages: list[ChatMessage],
        model_key: str,
        handlers: StreamHandlers,
    ) -> None:
        try:
            if self.stream_func is None:
                handlers.on_token(await self.send_message(messages, model_key))
            else:
                tokens: Any = self.stream_func(messages, model_key)
                if hasattr(tokens, "__aiter__"):
                    async for token in tokens:
                        handlers.on_token(token)
                else:
                    for token in _as_iterable(tokens):
                        handlers.on_token(token)
        except Exception as e:
            handlers.on_error(e)
            return

        handlers.on_complete()


def _as_iterable(tokens: Any) -> Iterable[str]:
    if isinstance(tokens, str):
        return [tokens]
    return tokens
