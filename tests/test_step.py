"""Tests for Step: input gate, execute wrapping, output gate."""

import asyncio

import pytest
from pydantic import BaseModel

from stepflow.core.context import CollaboratorContext
from stepflow.core.metrics import MetricsCollector
from stepflow.core.types import (
    ExecutionFailure,
    FailureKind,
    InputContractViolation,
    OutputContractViolation,
    StepStatus,
)
from stepflow.workflows import Step, create_step


class WordsIn(BaseModel):
    text: str


class WordsOut(BaseModel):
    word_count: int


def make_counter_step(execute=None, calls=None):
    calls = calls if calls is not None else []

    def count(data, context):
        calls.append(data.text)
        return {"word_count": len(data.text.split())}

    return create_step(
        id="count-words",
        description="Counts words",
        input_schema=WordsIn,
        output_schema=WordsOut,
        execute=execute or count,
    )


class TestStepRun:
    """Tests for Step.run()."""

    @pytest.mark.asyncio
    async def test_sync_execute(self):
        step = make_counter_step()
        assert await step.run({"text": "a b c"}) == {"word_count": 3}

    @pytest.mark.asyncio
    async def test_async_execute(self):
        async def count(data, context):
            await asyncio.sleep(0)
            return {"word_count": len(data.text.split())}

        step = make_counter_step(execute=count)
        assert await step.run({"text": "a b"}) == {"word_count": 2}

    @pytest.mark.asyncio
    async def test_execute_may_return_model(self):
        step = make_counter_step(execute=lambda data, context: WordsOut(word_count=1))
        assert await step.run({"text": "a"}) == {"word_count": 1}

    @pytest.mark.asyncio
    async def test_execute_receives_validated_model_and_context(self):
        seen = {}

        def capture(data, context):
            seen["data"] = data
            seen["context"] = context
            return {"word_count": 0}

        context = CollaboratorContext(services={"x": 1})
        await make_counter_step(execute=capture).run({"text": "hi"}, context)
        assert isinstance(seen["data"], WordsIn)
        assert seen["context"] is context

    @pytest.mark.asyncio
    async def test_input_violation_skips_execute(self):
        calls = []
        metrics = MetricsCollector("test")
        step = make_counter_step(calls=calls)

        with pytest.raises(InputContractViolation) as exc_info:
            await step.run({"text": 42}, metrics=metrics)

        assert calls == []
        assert exc_info.value.kind == FailureKind.INPUT_CONTRACT_VIOLATION
        assert exc_info.value.violations[0].path == ("text",)
        assert metrics.steps["count-words"].status == StepStatus.REJECTED
        assert not metrics.executed("count-words")
        assert metrics.get_summary()["overall_status"] == "failed"

    @pytest.mark.asyncio
    async def test_execute_exception_is_wrapped(self):
        def boom(data, context):
            raise RuntimeError("disk on fire")

        with pytest.raises(ExecutionFailure) as exc_info:
            await make_counter_step(execute=boom).run({"text": "a"})

        error = exc_info.value
        assert error.step_id == "count-words"
        assert isinstance(error.cause, RuntimeError)
        assert "disk on fire" in str(error)

    @pytest.mark.asyncio
    async def test_output_violation(self):
        step = make_counter_step(execute=lambda data, context: {"words": 3})
        with pytest.raises(OutputContractViolation) as exc_info:
            await step.run({"text": "a b c"})
        assert exc_info.value.kind == FailureKind.OUTPUT_CONTRACT_VIOLATION

    @pytest.mark.asyncio
    async def test_success_recorded_in_metrics(self):
        metrics = MetricsCollector("test")
        await make_counter_step().run({"text": "a"}, metrics=metrics)
        recorded = metrics.steps["count-words"]
        assert recorded.status == StepStatus.SUCCESS
        assert recorded.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_cancellation_is_not_wrapped(self):
        started = asyncio.Event()

        async def slow(data, context):
            started.set()
            await asyncio.sleep(10)
            return {"word_count": 0}

        metrics = MetricsCollector("test")
        task = asyncio.create_task(make_counter_step(execute=slow).run({"text": "a"}, metrics=metrics))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert metrics.steps["count-words"].status == StepStatus.CANCELLED


class TestStepDefinition:
    """Tests for Step construction."""

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError):
            make_counter_step().__class__(
                id="",
                description="",
                input_contract=make_counter_step().input_contract,
                output_contract=make_counter_step().output_contract,
                execute=lambda d, c: {},
            )

    def test_non_callable_execute_rejected(self):
        with pytest.raises(TypeError):
            create_step("s", WordsIn, WordsOut, execute="not callable")

    def test_step_is_frozen(self):
        step = make_counter_step()
        with pytest.raises(AttributeError):
            step.id = "other"

    def test_default_description(self):
        step = create_step("s", WordsIn, WordsOut, execute=lambda d, c: {"word_count": 0})
        assert isinstance(step, Step)
        assert step.description == "s step"
