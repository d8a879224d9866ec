"""Shared fixtures: scripted LLM transport, model registry and templates."""

from __future__ import annotations

import itertools

import pytest

from prompt_evo.adapters import CallableTransport, ConfigModelRegistry, InMemoryTemplateManager
from prompt_evo.core.history import HistoryManager
from prompt_evo.models import EvaluationType, LLMConfig, PromptTemplate
from prompt_evo.utils.i18n import set_language


@pytest.fixture(autouse=True)
def english():
    set_language("en")
    yield
    set_language("en")


class ScriptedLLM:
    """Returns queued replies and records every call."""

    def __init__(self, *replies: str):
        self.replies = list(replies)
        self.calls: list[tuple[list, str]] = []

    def __call__(self, messages, model_key):
        self.calls.append((messages, model_key))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def scripted():
    def make(*replies):
        llm = ScriptedLLM(*replies)
        return llm, CallableTransport(llm)
    return make


@pytest.fixture
def registry():
    return ConfigModelRegistry({
        "judge": LLMConfig(model="gpt-4o"),
        "disabled": LLMConfig(model="gpt-4o-mini", enabled=False),
    })


@pytest.fixture
def templates():
    manager = InMemoryTemplateManager()
    for evaluation_type in EvaluationType:
        manager.add(PromptTemplate(
            id=f"evaluation-basic-system-{evaluation_type.value}",
            content=[
                {"role": "system", "content": "You are a strict prompt reviewer."},
                {"role": "user", "content": "Prompt: {{optimizedPrompt}}\nResult: {{testResult}}"},
            ],
        ))
    manager.add(PromptTemplate(id="variable-extraction", content="Extract from: {{promptContent}}"))
    manager.add(PromptTemplate(
        id="variable-value-generation",
        content="Prompt: {{promptContent}}\nVariables ({{variableCount}}):\n{{variablesText}}",
    ))
    return manager


@pytest.fixture
def history():
    counter = itertools.count(1)
    clock = itertools.count(1_700_000_000_000, 1000)
    return HistoryManager(
        clock=lambda: next(clock),
        id_factory=lambda: f"id-{next(counter)}",
    )
