"""
Tests for the async services over a scripted transport.

Covers:
  - request validation per evaluation type
  - model / template lookups and error kinds
  - template context and message rendering
  - execution error wrapping and the streaming path
"""

import json

import pytest

from prompt_evo.adapters import CallableTransport, InMemoryTemplateManager, ModelRegistry
from prompt_evo.core.errors import (
    ErrorKind,
    ExecutionError,
    ModelNotFoundError,
    ParseError,
    TemplateNotFoundError,
    ValidationError,
)
from prompt_evo.models import (
    EvaluationModeConfig,
    EvaluationRequest,
    EvaluationType,
    PromptTemplate,
    VariableExtractionRequest,
    VariableToGenerate,
    VariableValueGenerationRequest,
)
from prompt_evo.services import (
    EvaluationService,
    ServiceStreamCallbacks,
    VariableExtractionService,
    VariableValueGenerationService,
    build_evaluation_context,
    template_id_for,
)
from prompt_evo.services.variable_generation import format_variables_text


EVALUATION_REPLY = "```json\n" + json.dumps({
    "score": {"overall": 82, "dimensions": [{"key": "clarity", "label": "Clarity", "score": 82}]},
    "issues": [],
    "improvements": ["state the audience"],
    "summary": "Clear enough",
    "patchPlan": [{"op": "replace", "oldText": "helpful", "newText": "precise"}],
}) + "\n```"


def clock_from(*ticks):
    values = list(ticks)
    return lambda: values.pop(0)


def optimized_request(**extra):
    fields = {
        "type": EvaluationType.OPTIMIZED,
        "evaluation_model_key": "judge",
        "optimized_prompt": "You are a helpful assistant.",
        "test_result": "Sure, here you go.",
    }
    fields.update(extra)
    return EvaluationRequest(**fields)


class TestEvaluationService:

    @pytest.mark.asyncio
    async def test_evaluate(self, scripted, registry, templates):
        llm, transport = scripted(EVALUATION_REPLY)
        service = EvaluationService(transport, registry, templates, clock=clock_from(1000, 1250))

        response = await service.evaluate(optimized_request())

        assert response.score.overall == 82
        assert response.patch_plan[0].new_text == "precise"
        assert response.metadata.model == "judge"
        assert response.metadata.timestamp == 1250
        assert response.metadata.duration == 250

        messages, model_key = llm.calls[0]
        assert model_key == "judge"
        assert messages[0].role == "system"
        assert "You are a helpful assistant." in messages[1].content
        assert "Sure, here you go." in messages[1].content

    @pytest.mark.parametrize("evaluation_type,missing,message", [
        (EvaluationType.ORIGINAL, "test_result", "Test result"),
        (EvaluationType.OPTIMIZED, "optimized_prompt", "Optimized prompt"),
        (EvaluationType.COMPARE, "original_test_result", "Original test result"),
        (EvaluationType.PROMPT_ITERATE, "iterate_requirement", "Iteration requirement"),
    ])
    @pytest.mark.asyncio
    async def test_validation(self, scripted, registry, templates, evaluation_type, missing, message):
        _, transport = scripted()
        service = EvaluationService(transport, registry, templates)
        fields = {
            "type": evaluation_type,
            "original_test_result": "a",
            "optimized_test_result": "b",
            "iterate_requirement": "shorter",
        }
        fields[missing] = "   "
        request = optimized_request(**fields)
        with pytest.raises(ValidationError, match=message) as exc_info:
            await service.evaluate(request)
        assert exc_info.value.code == "error.evaluation.validation"

    @pytest.mark.asyncio
    async def test_unknown_or_disabled_model(self, scripted, registry, templates):
        _, transport = scripted()
        service = EvaluationService(transport, registry, templates)
        for key in ("ghost", "disabled"):
            with pytest.raises(ModelNotFoundError) as exc_info:
                await service.evaluate(optimized_request(evaluation_model_key=key))
            assert exc_info.value.kind is ErrorKind.MODEL

    @pytest.mark.asyncio
    async def test_missing_template(self, scripted, registry, templates):
        _, transport = scripted()
        service = EvaluationService(transport, registry, templates)
        request = optimized_request(mode=EvaluationModeConfig(function_mode="pro", sub_mode="user"))
        with pytest.raises(TemplateNotFoundError) as exc_info:
            await service.evaluate(request)
        assert exc_info.value.template_id == "evaluation-pro-user-optimized"

    @pytest.mark.asyncio
    async def test_empty_template(self, scripted, registry):
        _, transport = scripted()
        templates = InMemoryTemplateManager([PromptTemplate(id="evaluation-basic-system-optimized", content=" ")])
        service = EvaluationService(transport, registry, templates)
        with pytest.raises(TemplateNotFoundError):
            await service.evaluate(optimized_request())

    @pytest.mark.asyncio
    async def test_transport_failure_is_wrapped(self, scripted, registry, templates):
        _, transport = scripted(ConnectionError("upstream down"))
        service = EvaluationService(transport, registry, templates)
        with pytest.raises(ExecutionError, match="upstream down") as exc_info:
            await service.evaluate(optimized_request())
        assert isinstance(exc_info.value.cause, ConnectionError)

    @pytest.mark.asyncio
    async def test_parse_error_is_not_wrapped(self, scripted, registry, templates):
        _, transport = scripted("I refuse.")
        service = EvaluationService(transport, registry, templates)
        with pytest.raises(ParseError):
            await service.evaluate(optimized_request())

    def test_template_id_and_context(self):
        request = EvaluationRequest(
            type=EvaluationType.COMPARE,
            evaluation_model_key="judge",
            optimized_prompt="new",
            original_test_result="old out",
            optimized_test_result="new out",
            variables={"topic": "tea"},
            pro_context={"turns": 2},
        )
        assert template_id_for(request.type, request.mode) == "evaluation-basic-system-compare"

        context = build_evaluation_context(request)
        assert context["optimizedPrompt"] == "new"
        assert context["originalTestResult"] == "old out"
        assert context["optimizedTestResult"] == "new out"
        assert context["hasOriginalPrompt"] is False
        assert context["topic"] == "tea"
        assert context["testContent"] == ""
        assert json.loads(context["proContext"]) == {"turns": 2}


class TestEvaluationStream:

    def collector(self):
        events = {"tokens": [], "complete": [], "errors": []}
        callbacks = ServiceStreamCallbacks(
            on_token=events["tokens"].append,
            on_complete=events["complete"].append,
            on_error=events["errors"].append,
        )
        return events, callbacks

    @pytest.mark.asyncio
    async def test_stream_parses_on_complete(self, registry, templates):
        half = len(EVALUATION_REPLY) // 2
        chunks = [EVALUATION_REPLY[:half], EVALUATION_REPLY[half:]]
        transport = CallableTransport(lambda m, k: EVALUATION_REPLY, stream_func=lambda m, k: iter(chunks))
        service = EvaluationService(transport, registry, templates)
        events, callbacks = self.collector()

        await service.evaluate_stream(optimized_request(), callbacks)

        assert events["tokens"] == chunks
        assert events["errors"] == []
        assert events["complete"][0].score.overall == 82

    @pytest.mark.asyncio
    async def test_stream_error_is_reported(self, registry, templates):
        def broken(messages, model_key):
            yield "```json\n{"
            raise TimeoutError("stream stalled")

        transport = CallableTransport(lambda m, k: "", stream_func=broken)
        service = EvaluationService(transport, registry, templates)
        events, callbacks = self.collector()

        await service.evaluate_stream(optimized_request(), callbacks)

        assert events["complete"] == []
        assert len(events["errors"]) == 1
        assert isinstance(events["errors"][0], ExecutionError)

    @pytest.mark.asyncio
    async def test_stream_validation_error(self, scripted, registry, templates):
        _, transport = scripted()
        service = EvaluationService(transport, registry, templates)
        events, callbacks = self.collector()

        await service.evaluate_stream(optimized_request(test_result=""), callbacks)

        assert isinstance(events["errors"][0], ValidationError)
        assert events["tokens"] == []

    @pytest.mark.asyncio
    async def test_stream_parse_error(self, registry, templates):
        transport = CallableTransport(lambda m, k: "no score here")
        service = EvaluationService(transport, registry, templates)
        events, callbacks = self.collector()

        await service.evaluate_stream(optimized_request(), callbacks)

        assert events["tokens"] == ["no score here"]
        assert isinstance(events["errors"][0], ParseError)


class TestVariableServices:

    @pytest.mark.asyncio
    async def test_extract(self, scripted, registry, templates):
        reply = json.dumps({
            "variables": [
                {"name": "Season", "value": "spring", "reason": "r",
                 "position": {"originalText": "spring", "occurrence": 1}},
                {"name": "city", "value": "Paris", "reason": "r",
                 "position": {"originalText": "Paris", "occurrence": 1}},
            ],
            "summary": "two found",
        })
        llm, transport = scripted(reply)
        service = VariableExtractionService(transport, registry, templates)

        response = await service.extract(VariableExtractionRequest(
            prompt_content="Plan a spring trip to Paris.",
            extraction_model_key="judge",
            existing_variable_names=["season"],
        ))

        assert [v.name for v in response.variables] == ["city"]
        assert llm.calls[0][0][0].content == "Extract from: Plan a spring trip to Paris."

    @pytest.mark.asyncio
    async def test_extract_requires_prompt(self, scripted, registry, templates):
        _, transport = scripted()
        service = VariableExtractionService(transport, registry, templates)
        with pytest.raises(ValidationError) as exc_info:
            await service.extract(VariableExtractionRequest(prompt_content=" ", extraction_model_key="judge"))
        assert exc_info.value.code == "error.variable_extraction.validation"

    @pytest.mark.asyncio
    async def test_generate(self, scripted, registry, templates):
        reply = json.dumps({
            "values": [{"name": "city", "value": "Lyon", "reason": "r", "confidence": 0.8}],
            "summary": "done",
        })
        llm, transport = scripted(reply)
        service = VariableValueGenerationService(transport, registry, templates)
        request = VariableValueGenerationRequest(
            prompt_content="Visit {{city}} in {{season}}",
            generation_model_key="judge",
            variables=[
                VariableToGenerate(name="city", current_value="Paris", source="global"),
                VariableToGenerate(name="season"),
            ],
        )

        response = await service.generate(request)

        assert [v.name for v in response.values] == ["city", "season"]
        assert response.values[1].confidence == 0
        rendered = llm.calls[0][0][0].content
        assert "Variables (2):" in rendered
        assert "1. city (current: Paris) [global]" in rendered
        assert "2. season" in rendered

    @pytest.mark.asyncio
    async def test_generate_requires_variables(self, scripted, registry, templates):
        _, transport = scripted()
        service = VariableValueGenerationService(transport, registry, templates)
        request = VariableValueGenerationRequest(prompt_content="x", generation_model_key="judge", variables=[])
        with pytest.raises(ValidationError, match="Variables list"):
            await service.generate(request)

    def test_variables_text(self):
        request = VariableValueGenerationRequest(
            prompt_content="x",
            generation_model_key="judge",
            variables=[VariableToGenerate(name="a"), VariableToGenerate(name="b", source="test")],
        )
        assert format_variables_text(request) == "1. a\n2. b [test]"


class OfflineRegistry(ModelRegistry):
    async def get_model(self, model_key):
        raise ConnectionError("model store offline")


class TestCollaboratorFailures:

    @pytest.mark.asyncio
    async def test_registry_failure_is_wrapped_for_every_service(self, scripted, templates):
        _, transport = scripted()
        registry = OfflineRegistry()
        calls = [
            (EvaluationService(transport, registry, templates).evaluate(optimized_request()),
             "error.evaluation.execution"),
            (VariableExtractionService(transport, registry, templates).extract(
                VariableExtractionRequest(prompt_content="Plan a trip.", extraction_model_key="judge")),
             "error.variable_extraction.execution"),
            (VariableValueGenerationService(transport, registry, templates).generate(
                VariableValueGenerationRequest(
                    prompt_content="x", generation_model_key="judge",
                    variables=[VariableToGenerate(name="a")])),
             "error.variable_value_generation.execution"),
        ]
        for call, code in calls:
            with pytest.raises(ExecutionError, match="model store offline") as exc_info:
                await call
            assert exc_info.value.code == code
            assert isinstance(exc_info.value.cause, ConnectionError)

    @pytest.mark.asyncio
    async def test_registry_failure_reaches_stream_on_error(self, scripted, templates):
        _, transport = scripted()
        errors = []
        service = EvaluationService(transport, OfflineRegistry(), templates)

        await service.evaluate_stream(optimized_request(), ServiceStreamCallbacks(on_error=errors.append))

        assert len(errors) == 1
        assert isinstance(errors[0], ExecutionError)

    def test_default_callbacks_are_noops(self):
        callbacks = ServiceStreamCallbacks()
        callbacks.on_token("x")
        callbacks.on_complete(None)
        callbacks.on_error(RuntimeError("ignored"))
