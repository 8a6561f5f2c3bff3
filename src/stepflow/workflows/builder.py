"""
Workflow Builder

Fluent accumulation of stages, then a one-way commit into an immutable
WorkflowDefinition.

Example:
    reading_time = (
        create_workflow(
            id="reading-time-workflow",
            input_schema=ContentInput,
            output_schema=ClassifiedContent,
        )
        .then(validate_content)
        .then(compute_reading_time)
        .then(classify_difficulty)
        .commit()
    )

    result = await ExecutionEngine().execute(reading_time, {"content": "..."}, context)

commit() checks everything it can without running anything: stage shapes,
id uniqueness and contract compatibility between the workflow input, every
adjacent stage pair and the workflow output. All problems are reported
together in one BuildTimeIncompatibility.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..core.context import CollaboratorContext
from ..core.contracts import Contract, as_contract, check_compatibility
from ..core.metrics import MetricsCollector
from ..core.types import BuildTimeIncompatibility
from .stages import BranchArm, BranchStage, ParallelStage, SequentialStage, Stage
from .step import Runnable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkflowDefinition:
    """
    Committed, immutable workflow.

    A definition is itself Runnable, so it can be a child of another
    workflow's stages; its internal stages are opaque to the parent.
    """

    id: str
    description: str
    input_contract: Contract
    output_contract: Contract
    stages: Tuple[Stage, ...]

    async def run(
        self,
        raw_input: Any,
        context: Optional[CollaboratorContext] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> Dict[str, Any]:
        """
        Run as a composite step (raising variant of ExecutionEngine.execute).

        Raises:
            WorkflowError: Any contract violation or step failure
        """
        from .engine import ExecutionEngine

        return await ExecutionEngine().run(self, raw_input, context, metrics)

    @property
    def step_ids(self) -> List[str]:
        return [child.id for stage in self.stages for child in stage.children]

    def describe(self) -> str:
        """
        ASCII rendering of the stage sequence.

        Returns:
            Multi-line string
        """
        lines = [
            f"Workflow: {self.id}",
            f"Input: {self.input_contract.name}",
            f"Output: {self.output_contract.name}",
            f"Stages: {len(self.stages)}",
            "",
            "  START",
        ]
        for index, stage in enumerate(self.stages):
            lines.append("    |")
            lines.append("    v")
            lines.append(f"  [{index}] {stage.label}")
        lines.append("    |")
        lines.append("    v")
        lines.append("  END")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"WorkflowDefinition(id={self.id!r}, stages={len(self.stages)})"

    def __str__(self) -> str:
        return self.describe()


class WorkflowBuilder:
    """
    Mutable accumulator of stages.

    Args:
        id: Workflow identifier
        input_contract: Contract the workflow input must satisfy
        output_contract: Contract the final stage output must satisfy
        description: Human-readable description
    """

    def __init__(
        self,
        id: str,
        input_contract: Contract,
        output_contract: Contract,
        description: str = "",
    ):
        if not isinstance(id, str) or not id.strip():
            raise ValueError(f"Workflow id must be a non-empty string, got {id!r}")
        self.id = id
        self.description = description or f"{id} workflow"
        self.input_contract = input_contract
        self.output_contract = output_contract
        self._stages: List[Stage] = []
        self._committed: Optional[WorkflowDefinition] = None

    @property
    def committed(self) -> bool:
        return self._committed is not None

    def then(self, child: Runnable) -> "WorkflowBuilder":
        """Append a sequential stage."""
        self._ensure_open()
        self._stages.append(SequentialStage(_require_runnable(child)))
        return self

    def parallel(self, children: Iterable[Runnable]) -> "WorkflowBuilder":
        """Append a parallel fan-out/fan-in stage (at least two children)."""
        self._ensure_open()
        self._stages.append(ParallelStage(tuple(_require_runnable(c) for c in children)))
        return self

    def branch(self, arms: Iterable[Sequence[Any]]) -> "WorkflowBuilder":
        """
        Append a branch stage.

        Args:
            arms: (predicate, child) pairs; predicate(value, context) -> bool
        """
        self._ensure_open()
        built = []
        for arm in arms:
            predicate, child = arm
            if not callable(predicate):
                raise TypeError(f"Branch predicate for {getattr(child, 'id', child)!r} is not callable")
            built.append(BranchArm(predicate=predicate, child=_require_runnable(child)))
        self._stages.append(BranchStage(tuple(built)))
        return self

    def commit(self) -> WorkflowDefinition:
        """
        Validate and freeze the workflow.

        Calling commit() again returns the same definition.

        Returns:
            WorkflowDefinition

        Raises:
            BuildTimeIncompatibility: With every problem found
        """
        if self._committed is not None:
            return self._committed

        problems = self._check()
        if problems:
            logger.error(f"[{self.id}] Commit rejected ({len(problems)} problem(s))")
            raise BuildTimeIncompatibility(self.id, problems)

        self._committed = WorkflowDefinition(
            id=self.id,
            description=self.description,
            input_contract=self.input_contract,
            output_contract=self.output_contract,
            stages=tuple(self._stages),
        )
        logger.info(f"[{self.id}] Committed ({len(self._stages)} stages)")
        return self._committed

    def _ensure_open(self) -> None:
        if self._committed is not None:
            raise RuntimeError(f"Workflow {self.id} is already committed")

    def _check(self) -> List[str]:
        problems: List[str] = []
        if not self._stages:
            return ["workflow has no stages"]

        for index, stage in enumerate(self._stages):
            where = f"stage[{index}] {stage.label}"
            if isinstance(stage, ParallelStage) and len(stage.branches) < 2:
                problems.append(f"{where}: parallel needs at least two children, got {len(stage.branches)}")
            if isinstance(stage, BranchStage) and not stage.arms:
                problems.append(f"{where}: branch needs at least one arm")
            sibling_ids = Counter(child.id for child in stage.children)
            duplicates = sorted(i for i, n in sibling_ids.items() if n > 1)
            if duplicates:
                problems.append(f"{where}: duplicate sibling ids {duplicates}")

        all_ids = Counter(
            child_id for stage in self._stages for child_id in {child.id for child in stage.children}
        )
        repeated = sorted(i for i, n in all_ids.items() if n > 1)
        if repeated:
            problems.append(f"step ids used in more than one stage: {repeated}")

        producer, producer_name = self.input_contract, "workflow input"
        for index, stage in enumerate(self._stages):
            for child in stage.children:
                for problem in check_compatibility(producer, child.input_contract):
                    problems.append(
                        f"{producer_name} -> stage[{index}] {child.id}: {problem}"
                    )
            producer, producer_name = stage.output_contract, f"stage[{index}] {stage.label}"

        for problem in check_compatibility(producer, self.output_contract):
            problems.append(f"{producer_name} -> workflow output: {problem}")
        return problems


def _require_runnable(child: Any) -> Runnable:
    if isinstance(child, WorkflowBuilder):
        raise TypeError(f"Workflow {child.id} must be committed before it can be nested")
    if not isinstance(child, Runnable):
        raise TypeError(f"Expected a Step or WorkflowDefinition, got {child!r}")
    return child


def create_workflow(
    id: str,
    input_schema: Union[Contract, Any],
    output_schema: Union[Contract, Any],
    description: str = "",
) -> WorkflowBuilder:
    """
    Start an empty workflow builder.

    Args:
        id: Workflow identifier
        input_schema: Contract or Pydantic model class for the workflow input
        output_schema: Contract or Pydantic model class for the workflow output
        description: Human-readable description

    Returns:
        WorkflowBuilder
    """
    return WorkflowBuilder(
        id=id,
        input_contract=as_contract(input_schema),
        output_contract=as_contract(output_schema),
        description=description,
    )
