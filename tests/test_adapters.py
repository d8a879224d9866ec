"""
Tests for the reference adapters.

Covers:
  - OpenAITransport full-text and streaming paths over a fake client
  - CallableTransport with async callables and async token streams
  - ConfigModelRegistry lookups
  - template rendering and YAML template loading
"""

from types import SimpleNamespace

import pytest

from prompt_evo.adapters import (
    CallableTransport,
    ConfigModelRegistry,
    OpenAITransport,
    StreamHandlers,
    load_templates_from_yaml,
    render_template,
    render_text,
)
from prompt_evo.models import ChatMessage, Config, LLMConfig, PromptTemplate


MESSAGES = [ChatMessage(role="user", content="hi")]


def chunk(content):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


class FakeStream:
    def __init__(self, chunks, error=None):
        self.chunks = list(chunks)
        self.error = error

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.chunks:
            return self.chunks.pop(0)
        if self.error is not None:
            raise self.error
        raise StopAsyncIteration


class FakeCompletions:
    def __init__(self, reply="", stream=None):
        self.reply = reply
        self.stream = stream
        self.kwargs = []

    async def create(self, **kwargs):
        self.kwargs.append(kwargs)
        if kwargs.get("stream"):
            return self.stream
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.reply))])


def openai_transport(completions):
    registry = ConfigModelRegistry({"judge": LLMConfig(model="gpt-4o-mini", api_key="sk-test", temperature=0.1)})
    transport = OpenAITransport(registry)
    transport._clients[("sk-test", None)] = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return transport


def recorder():
    events = {"tokens": [], "complete": 0, "errors": []}

    def on_complete():
        events["complete"] += 1

    handlers = StreamHandlers(
        on_token=events["tokens"].append, on_complete=on_complete, on_error=events["errors"].append,
    )
    return events, handlers


class TestOpenAITransport:

    @pytest.mark.asyncio
    async def test_send_message(self):
        completions = FakeCompletions(reply="hello")
        transport = openai_transport(completions)

        assert await transport.send_message(MESSAGES, "judge") == "hello"
        sent = completions.kwargs[0]
        assert sent["model"] == "gpt-4o-mini"
        assert sent["temperature"] == 0.1
        assert sent["messages"] == [{"role": "user", "content": "hi"}]

    @pytest.mark.asyncio
    async def test_unknown_model(self):
        transport = openai_transport(FakeCompletions())
        with pytest.raises(ValueError, match="ghost"):
            await transport.send_message(MESSAGES, "ghost")

    @pytest.mark.asyncio
    async def test_stream_tokens_then_complete(self):
        stream = FakeStream([chunk("he"), SimpleNamespace(choices=[]), chunk(None), chunk("llo")])
        transport = openai_transport(FakeCompletions(stream=stream))
        events, handlers = recorder()

        await transport.send_message_stream(MESSAGES, "judge", handlers)

        assert events["tokens"] == ["he", "llo"]
        assert events["complete"] == 1
        assert events["errors"] == []

    @pytest.mark.asyncio
    async def test_stream_error_skips_complete(self):
        stream = FakeStream([chunk("par")], error=ConnectionError("reset"))
        transport = openai_transport(FakeCompletions(stream=stream))
        events, handlers = recorder()

        await transport.send_message_stream(MESSAGES, "judge", handlers)

        assert events["tokens"] == ["par"]
        assert events["complete"] == 0
        assert isinstance(events["errors"][0], ConnectionError)

    def test_unsupported_provider(self):
        transport = OpenAITransport(ConfigModelRegistry({}))
        with pytest.raises(ValueError, match="Unsupported"):
            transport._get_client(LLMConfig(provider="anthropic"))


class TestCallableTransport:

    @pytest.mark.asyncio
    async def test_async_callable(self):
        async def reply(messages, model_key):
            return f"{model_key}:{messages[0].content}"

        assert await CallableTransport(reply).send_message(MESSAGES, "m") == "m:hi"

    @pytest.mark.asyncio
    async def test_async_token_stream(self):
        async def tokens(messages, model_key):
            for token in ("a", "b"):
                yield token

        events, handlers = recorder()
        await CallableTransport(lambda m, k: "", stream_func=tokens).send_message_stream(MESSAGES, "m", handlers)
        assert events["tokens"] == ["a", "b"]
        assert events["complete"] == 1


class TestRegistry:

    @pytest.mark.asyncio
    async def test_from_config(self):
        registry = ConfigModelRegistry.from_config(Config())
        assert (await registry.get_model("default")).model == "gpt-4o"
        assert await registry.get_model("missing") is None


class TestTemplates:

    def test_render_text(self):
        text = render_text("{{ name }} / {{flag}} / {{missing}}", {"name": "Ada", "flag": True})
        assert text == "Ada / true / "

    def test_render_message_list(self):
        template = PromptTemplate(id="t", content=[
            {"role": "system", "content": "Judge {{subject}}"},
            {"role": "user", "content": "{{body}}"},
        ])
        messages = render_template(template, {"subject": "prompts", "body": "text"})
        assert [(m.role, m.content) for m in messages] == [("system", "Judge prompts"), ("user", "text")]

    def test_load_templates_from_yaml(self, tmp_path):
        path = tmp_path / "templates.yaml"
        path.write_text(
            "templates:\n"
            "  - id: variable-extraction\n"
            "    name: 变量提取\n"
            "    content: \"Extract from {{promptContent}}\"\n"
            "  - id: evaluation-basic-system-original\n"
            "    content:\n"
            "      - role: system\n"
            "        content: You are a reviewer.\n"
            "      - role: user\n"
            "        content: \"{{testResult}}\"\n",
            encoding="utf-8",
        )

        templates = load_templates_from_yaml(str(path))

        assert [t.id for t in templates] == ["variable-extraction", "evaluation-basic-system-original"]
        assert templates[0].name == "变量提取"
        assert templates[0].content == "Extract from {{promptContent}}"
        assert templates[1].content[0].role == "system"

    def test_yaml_without_templates_key(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("other: 1\n", encoding="utf-8")
        assert load_templates_from_yaml(str(path)) == []
