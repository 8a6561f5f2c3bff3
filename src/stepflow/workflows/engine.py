"""
Execution Engine

Runs a committed WorkflowDefinition against an input value:

  1. validate the input against the workflow input contract
  2. run the stages in order, each stage's output feeding the next
  3. validate the final value against the workflow output contract

execute() never raises for workflow failures; it returns a Success or a
Failure describing the kind of failure and the path to the failing stage.
run() is the raising variant, used when a workflow is nested as a step.

The engine keeps no state between runs. Concurrent runs of the same
definition share nothing but the read-only collaborator context.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from ..core.context import EMPTY_CONTEXT, CollaboratorContext
from ..core.metrics import MetricsCollector
from ..core.types import (
    ExecutionFailure,
    FailureKind,
    InputContractViolation,
    OutputContractViolation,
    WorkflowError,
    format_violations,
)
from .builder import WorkflowDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Success:
    """A run that produced a value conforming to the workflow output contract."""

    value: Dict[str, Any]
    metrics: Optional[MetricsCollector] = field(default=None, repr=False, compare=False)

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> Dict[str, Any]:
        return self.value


@dataclass(frozen=True)
class Failure:
    """
    A failed run.

    Attributes:
        kind: What went wrong
        path: Stage path to the failure, e.g. ("stage[1]", "fetch-weather");
            empty for workflow-level input or output violations
        cause: The WorkflowError carrying violations or the original exception
    """

    kind: FailureKind
    path: Tuple[str, ...]
    cause: WorkflowError
    metrics: Optional[MetricsCollector] = field(default=None, repr=False, compare=False)

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return str(self.cause)

    def unwrap(self) -> Dict[str, Any]:
        raise self.cause


ExecutionResult = Union[Success, Failure]


class ExecutionEngine:
    """
    Stateless runner for committed workflows.

    Example:
        engine = ExecutionEngine()
        result = await engine.execute(workflow, {"content": "..."}, context)
        if result.ok:
            print(result.value)
        else:
            print(result.kind, result.path, result.message)
    """

    async def execute(
        self,
        definition: WorkflowDefinition,
        input_data: Any,
        context: Optional[CollaboratorContext] = None,
    ) -> ExecutionResult:
        """
        Run a workflow and report the outcome as a value.

        Args:
            definition: Committed workflow
            input_data: Raw input value
            context: Collaborators for the steps (empty context if omitted)

        Returns:
            Success or Failure
        """
        metrics = MetricsCollector(definition.id)
        try:
            value = await self.run(definition, input_data, context, metrics)
        except WorkflowError as e:
            return Failure(kind=e.kind, path=e.path, cause=e, metrics=metrics)
        return Success(value=value, metrics=metrics)

    async def run(
        self,
        definition: WorkflowDefinition,
        input_data: Any,
        context: Optional[CollaboratorContext] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> Dict[str, Any]:
        """
        Run a workflow, raising on failure.

        Args:
            definition: Committed workflow
            input_data: Raw input value
            context: Collaborators for the steps
            metrics: Collector to record step metrics into

        Returns:
            Output value conforming to the workflow output contract

        Raises:
            InputContractViolation: Workflow input rejected (path is empty)
            WorkflowError: A stage failed (path starts with "stage[i]")
            OutputContractViolation: Final value rejected (path is empty)
        """
        context = context if context is not None else EMPTY_CONTEXT
        wf = definition.id
        if metrics is None:
            metrics = MetricsCollector(wf)
        started_here = metrics.start_time is None
        if started_here:
            metrics.start()

        start = time.perf_counter()
        logger.info(f"[{wf}] Starting ({len(definition.stages)} stages)")
        try:
            checked = definition.input_contract.validate(input_data)
            if not checked.ok:
                logger.warning(f"[{wf}] Input rejected: {format_violations(checked.violations)}")
                raise InputContractViolation(wf, definition.input_contract.name, checked.violations)

            value: Any = checked.value
            for index, stage in enumerate(definition.stages):
                logger.debug(f"[{wf}] stage[{index}] {stage.label}")
                try:
                    value = await stage.run(value, context, metrics)
                except WorkflowError as e:
                    raise e.with_prefix(f"stage[{index}]")
                except Exception as e:
                    raise ExecutionFailure(stage.label, e, path=(f"stage[{index}]",)) from e

            produced = definition.output_contract.validate(value)
            if not produced.ok:
                logger.error(
                    f"[{wf}] Output violates {definition.output_contract.name}: "
                    f"{format_violations(produced.violations)}"
                )
                raise OutputContractViolation(wf, definition.output_contract.name, produced.violations)
        except WorkflowError as e:
            logger.error(f"[{wf}] Failed ({e.kind.value}): {e}")
            raise
        finally:
            if started_here:
                metrics.stop()

        logger.info(f"[{wf}] Complete ({(time.perf_counter() - start) * 1000:.1f}ms)")
        return produced.value


def unwrap(result: ExecutionResult) -> Dict[str, Any]:
    """Return the value of a Success or raise the cause of a Failure."""
    return result.unwrap()
