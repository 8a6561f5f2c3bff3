"""
Step - the unit of work

A step is a named function with a validated input and output contract.
Running a step always goes through the same three gates:

  1. input is validated; a violation fails before execute() is touched
  2. execute() runs; any exception it raises is wrapped as ExecutionFailure.
     A plain function runs in the default executor so it does not block
     its siblings in a parallel or branch stage
  3. the returned value is validated against the step's own output
     contract; a mismatch is a defect and fails the step

Example:
    class WordsIn(BaseModel):
        text: str

    class WordsOut(BaseModel):
        word_count: int

    count_words = create_step(
        id="count-words",
        description="Counts words",
        input_schema=WordsIn,
        output_schema=WordsOut,
        execute=lambda data, context: {"word_count": len(data.text.split())},
    )

    output = await count_words.run({"text": "a b c"}, context)
"""

import asyncio
import functools
import inspect
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel

from ..core.context import EMPTY_CONTEXT, CollaboratorContext
from ..core.contracts import Contract, as_contract
from ..core.metrics import MetricsCollector
from ..core.types import (
    ExecutionFailure,
    InputContractViolation,
    OutputContractViolation,
    StepStatus,
    format_violations,
)

logger = logging.getLogger(__name__)

# execute(validated_input_model, context) -> output value (dict or model), sync or async
StepFunc = Callable[[BaseModel, CollaboratorContext], Union[Any, Awaitable[Any]]]


@runtime_checkable
class Runnable(Protocol):
    """Anything a stage can hold: a Step or a committed WorkflowDefinition."""

    id: str
    description: str
    input_contract: Contract
    output_contract: Contract

    async def run(
        self,
        raw_input: Any,
        context: Optional[CollaboratorContext] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class Step:
    """
    Immutable step definition.

    Attributes:
        id: Identifier, unique within a workflow
        description: Human-readable purpose
        input_contract: Contract the input must satisfy
        output_contract: Contract execute() must satisfy
        execute: The step logic
    """

    id: str
    description: str
    input_contract: Contract
    output_contract: Contract
    execute: StepFunc = field(repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValueError(f"Step id must be a non-empty string, got {self.id!r}")
        if not callable(self.execute):
            raise TypeError(f"[{self.id}] execute must be callable")

    async def run(
        self,
        raw_input: Any,
        context: Optional[CollaboratorContext] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> Dict[str, Any]:
        """
        Validate, execute and validate again.

        Args:
            raw_input: Upstream value
            context: Collaborator context shared by the run
            metrics: Per-run collector to record into

        Returns:
            Normalized output dict

        Raises:
            InputContractViolation: raw_input rejected; execute() not invoked
            ExecutionFailure: execute() raised
            OutputContractViolation: execute() returned a non-conforming value
        """
        context = context if context is not None else EMPTY_CONTEXT

        checked = self.input_contract.validate(raw_input)
        if not checked.ok:
            logger.warning(f"[{self.id}] Input rejected: {format_violations(checked.violations)}")
            self._record(metrics, 0.0, StepStatus.REJECTED, "input contract violated")
            raise InputContractViolation(self.id, self.input_contract.name, checked.violations)

        logger.info(f"[{self.id}] Starting")
        start = time.perf_counter()
        try:
            if inspect.iscoroutinefunction(self.execute):
                result = self.execute(checked.model, context)
            else:
                loop = asyncio.get_running_loop()
                result = await loop.run_in_executor(
                    None, functools.partial(self.execute, checked.model, context)
                )
            if inspect.isawaitable(result):
                result = await result
        except asyncio.CancelledError:
            self._record(metrics, _elapsed(start), StepStatus.CANCELLED, "cancelled")
            logger.info(f"[{self.id}] Cancelled")
            raise
        except Exception as e:
            self._record(metrics, _elapsed(start), StepStatus.FAILED, str(e))
            logger.error(f"[{self.id}] Error: {e}")
            raise ExecutionFailure(self.id, e) from e

        produced = self.output_contract.validate(result)
        duration = _elapsed(start)
        if not produced.ok:
            self._record(metrics, duration, StepStatus.FAILED, "output contract violated")
            logger.error(
                f"[{self.id}] Output violates {self.output_contract.name}: "
                f"{format_violations(produced.violations)}"
            )
            raise OutputContractViolation(self.id, self.output_contract.name, produced.violations)

        self._record(metrics, duration, StepStatus.SUCCESS)
        logger.info(f"[{self.id}] Complete ({duration:.1f}ms)")
        return produced.value

    def _record(
        self,
        metrics: Optional[MetricsCollector],
        duration_ms: float,
        status: StepStatus,
        error: Optional[str] = None,
    ) -> None:
        if metrics is not None:
            metrics.record_step(self.id, duration_ms, status, error)


def _elapsed(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def create_step(
    id: str,
    input_schema: Any,
    output_schema: Any,
    execute: StepFunc,
    description: str = "",
) -> Step:
    """
    Create a step from schemas (Contract or Pydantic model classes).

    Args:
        id: Step identifier
        input_schema: Input Contract or model class
        output_schema: Output Contract or model class
        execute: (validated_input, context) -> output; may be async
        description: Human-readable description

    Returns:
        Step
    """
    return Step(
        id=id,
        description=description or f"{id} step",
        input_contract=as_contract(input_schema),
        output_contract=as_contract(output_schema),
        execute=execute,
    )
