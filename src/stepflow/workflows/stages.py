"""
Stages - composition strategies

A workflow is an ordered list of stages. Three kinds exist:

  SequentialStage  one child; its output is the next stage's input, verbatim
  ParallelStage    two or more children run concurrently on the same input;
                   fan-in is {child_id: output}
  BranchStage      (predicate, child) arms; predicates are evaluated on the
                   same input and every matching arm runs concurrently;
                   fan-in is {arm_id: output} for matching arms only

Concurrent children are asyncio tasks joined with fail-fast semantics: the
first failure cancels the siblings still running, waits for them to unwind,
discards their results and raises that failure. Side effects of cancelled
siblings are not rolled back.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, ClassVar, Dict, List, Optional, Sequence, Tuple, Union

from ..core.context import CollaboratorContext
from ..core.contracts import Contract
from ..core.metrics import MetricsCollector
from ..core.types import ExecutionFailure, WorkflowError
from .step import Runnable

logger = logging.getLogger(__name__)

# predicate(upstream_value, context) -> bool; must not mutate either argument
Predicate = Callable[[Dict[str, Any], CollaboratorContext], bool]


async def fan_out(
    children: Sequence[Runnable],
    value: Any,
    context: CollaboratorContext,
    metrics: Optional[MetricsCollector] = None,
) -> Dict[str, Any]:
    """
    Run children concurrently on the same input and collect {child_id: output}.

    Args:
        children: Steps or workflows to start
        value: Input handed to every child
        context: Shared read-only collaborator context
        metrics: Per-run collector

    Returns:
        Mapping from child id to child output

    Raises:
        WorkflowError: The first child failure, with the child id prepended
            to its path
    """
    if not children:
        return {}

    tasks = {
        asyncio.create_task(child.run(value, context, metrics), name=child.id): child
        for child in children
    }
    pending = set(tasks)
    try:
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
            for task, child in tasks.items():
                if task not in done:
                    continue
                if task.cancelled():
                    raise asyncio.CancelledError(f"{child.id} was cancelled")
                error = task.exception()
                if error is None:
                    continue
                if pending:
                    logger.warning(
                        f"[{child.id}] Failed; cancelling {len(pending)} running sibling(s)"
                    )
                if isinstance(error, WorkflowError):
                    raise error.with_prefix(child.id)
                raise ExecutionFailure(child.id, error, path=(child.id,)) from error
    finally:
        if pending:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
        for task in tasks:
            if task.done() and not task.cancelled():
                task.exception()

    return {child.id: task.result() for task, child in tasks.items()}


@dataclass(frozen=True)
class SequentialStage:
    """Exactly one child consuming the previous stage's output."""

    kind: ClassVar[str] = "sequential"

    child: Runnable

    @property
    def children(self) -> Tuple[Runnable, ...]:
        return (self.child,)

    @property
    def output_contract(self) -> Contract:
        return self.child.output_contract

    @property
    def label(self) -> str:
        return self.child.id

    async def run(
        self,
        value: Any,
        context: CollaboratorContext,
        metrics: Optional[MetricsCollector] = None,
    ) -> Dict[str, Any]:
        try:
            return await self.child.run(value, context, metrics)
        except WorkflowError as e:
            raise e.with_prefix(self.child.id)


@dataclass(frozen=True)
class ParallelStage:
    """Fan-out to every child, fan-in keyed by child id."""

    kind: ClassVar[str] = "parallel"

    branches: Tuple[Runnable, ...]
    _output: Contract = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "branches", tuple(self.branches))
        outputs = {child.id: child.output_contract for child in self.branches}
        name = "ParallelOutput[" + ",".join(outputs) + "]"
        object.__setattr__(self, "_output", Contract.fan_in(name, outputs, required=True))

    @property
    def children(self) -> Tuple[Runnable, ...]:
        return self.branches

    @property
    def output_contract(self) -> Contract:
        return self._output

    @property
    def label(self) -> str:
        return "parallel(" + ", ".join(child.id for child in self.branches) + ")"

    async def run(
        self,
        value: Any,
        context: CollaboratorContext,
        metrics: Optional[MetricsCollector] = None,
    ) -> Dict[str, Any]:
        logger.info(f"[{self.label}] Fanning out to {len(self.branches)} children")
        return await fan_out(self.branches, value, context, metrics)


@dataclass(frozen=True)
class BranchArm:
    predicate: Predicate = field(compare=False)
    child: Runnable

    @property
    def id(self) -> str:
        return self.child.id


@dataclass(frozen=True)
class BranchStage:
    """
    Predicate-gated fan-out.

    Arms are not mutually exclusive: every arm whose predicate is true runs.
    When no arm matches the stage produces {}, which the next stage's input
    contract will reject if it requires any arm's key.
    """

    kind: ClassVar[str] = "branch"

    arms: Tuple[BranchArm, ...]
    _output: Contract = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "arms", tuple(self.arms))
        outputs = {arm.id: arm.child.output_contract for arm in self.arms}
        name = "BranchOutput[" + ",".join(outputs) + "]"
        object.__setattr__(self, "_output", Contract.fan_in(name, outputs, required=False))

    @property
    def children(self) -> Tuple[Runnable, ...]:
        return tuple(arm.child for arm in self.arms)

    @property
    def output_contract(self) -> Contract:
        return self._output

    @property
    def label(self) -> str:
        return "branch(" + ", ".join(f"{arm.id}?" for arm in self.arms) + ")"

    def select(self, value: Any, context: CollaboratorContext) -> List[BranchArm]:
        """
        Evaluate every predicate against the same upstream value.

        Raises:
            ExecutionFailure: A predicate raised
        """
        view = MappingProxyType(value) if isinstance(value, dict) else value
        selected = []
        for arm in self.arms:
            try:
                matched = bool(arm.predicate(view, context))
            except Exception as e:
                logger.error(f"[{arm.id}] Predicate raised: {e}")
                raise ExecutionFailure(arm.id, e, path=(arm.id,)) from e
            if matched:
                selected.append(arm)
        return selected

    async def run(
        self,
        value: Any,
        context: CollaboratorContext,
        metrics: Optional[MetricsCollector] = None,
    ) -> Dict[str, Any]:
        selected = self.select(value, context)
        if not selected:
            logger.warning(f"[{self.label}] No arm matched")
        else:
            logger.info(f"[{self.label}] Matched {[arm.id for arm in selected]}")
        return await fan_out([arm.child for arm in selected], value, context, metrics)


Stage = Union[SequentialStage, ParallelStage, BranchStage]
