"""OpenAI 兼容的 LLM 调用 / OpenAI-compatible LLM transport"""

import os
from typing import Any, Optional

from prompt_evo.adapters.base import LLMTransport, ModelRegistry, StreamHandlers
from prompt_evo.models.config import LLMConfig
from prompt_evo.models.llm import ChatMessage


class OpenAITransport(LLMTransport):
    """
    基于 openai SDK 的 LLMTransport

    每个模型 key 通过 ModelRegistry 解析为 LLMConfig，客户端按
    (api_key, base_url) 延迟创建并缓存。
    """

    def __init__(self, registry: ModelRegistry):
        self.registry = registry
        self._clients: dict[tuple[Optional[str], Optional[str]], Any] = {}

    def _get_client(self, config: LLMConfig):
        """延迟初始化客户端 / Lazy-initialize the client"""
        if config.provider != "openai":
            raise ValueError(f"Unsupported LLM provider: {config.provider}")

        api_key = config.api_key or os.environ.get("OPENAI_API_KEY")
        cache_key = (api_key, config.base_url)
        if cache_key not in self._clients:
            from openai import AsyncOpenAI

            self._clients[cache_key] = AsyncOpenAI(api_key=api_key, base_url=config.base_url)
        return self._clients[cache_key]

    async def _resolve(self, model_key: str) -> LLMConfig:
        config = await self.registry.get_model(model_key)
        if config is None:
            raise ValueError(f"Model '{model_key}' is not configured")
        return config

    @staticmethod
    def _request_kwargs(config: LLMConfig, messages: list[ChatMessage]) -> dict[str, Any]:
        return {
            "model": config.model,
            "messages": [m.model_dump() for m in messages],
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
        }

    async def send_message(self, messages: list[ChatMessage], model_key: str) -> str:
        config = await self._resolve(model_key)
        client = self._get_client(config)

        response = await client.chat.completions.create(**self._request_kwargs(config, messages))
        return response.choices[0].message.content or ""

    async def send_message_stream(
        self,
        messages: list[ChatMessage],
        model_key: str,
        handlers: StreamHandlers,
    ) -> None:
        try:
            config = await self._resolve(model_key)
            client = self._get_client(config)
            stream = await client.chat.completions.create(
                **self._request_kwargs(config, messages), stream=True,
            )
            async for chunk in stream:
                if not chunk.choices:
                    continue
                token = chunk.choices[0].delta.content
                if token:
                    handlers.on_token(token)
        except Exception as e:
            handlers.on_error(e)
            return

        handlers.on_complete()
