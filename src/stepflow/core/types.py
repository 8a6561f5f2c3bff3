"""Shared type definitions and the workflow error taxonomy."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple


class StepStatus(str, Enum):
    """Status of a step execution."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    REJECTED = "rejected"  # input contract violated, execute never invoked
    CANCELLED = "cancelled"


class FailureKind(str, Enum):
    """Classification of a failed run."""

    INPUT_CONTRACT_VIOLATION = "input_contract_violation"
    OUTPUT_CONTRACT_VIOLATION = "output_contract_violation"
    EXECUTION_FAILURE = "execution_failure"
    BUILD_TIME_INCOMPATIBILITY = "build_time_incompatibility"


@dataclass(frozen=True)
class Violation:
    """A single contract violation: where it happened and why."""

    path: Tuple[Any, ...]
    reason: str

    def __str__(self) -> str:
        location = ".".join(str(part) for part in self.path) or "<root>"
        return f"{location}: {self.reason}"


@dataclass
class StepMetrics:
    """Metrics collected during a single step execution."""

    name: str
    status: StepStatus = StepStatus.PENDING
    duration_ms: float = 0.0
    error_message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "duration_ms": self.duration_ms,
            "error_message": self.error_message,
            "warnings": list(self.warnings),
        }


def format_violations(violations: Sequence[Violation]) -> str:
    return "; ".join(str(v) for v in violations)


class WorkflowError(Exception):
    """
    Base class for every failure the engine reports.

    Attributes:
        kind: FailureKind of this error
        path: Location of the failing stage, outermost segment first
    """

    kind: FailureKind = FailureKind.EXECUTION_FAILURE

    def __init__(self, message: str, path: Tuple[str, ...] = ()):
        self.message = message
        self.path = tuple(path)
        super().__init__(message)

    def with_prefix(self, *segments: str) -> "WorkflowError":
        """Prepend path segments as the error travels outwards."""
        self.path = tuple(segments) + self.path
        return self

    def __str__(self) -> str:
        if self.path:
            return f"[{'/'.join(self.path)}] {self.message}"
        return self.message


class ContractViolationError(WorkflowError):
    """Raised when a value does not satisfy a contract."""

    _direction = "input"

    def __init__(
        self,
        owner: str,
        contract_name: str,
        violations: Sequence[Violation],
        path: Tuple[str, ...] = (),
    ):
        self.owner = owner
        self.contract_name = contract_name
        self.violations = list(violations)
        super().__init__(
            f"{owner} {self._direction} contract {contract_name} violated: "
            f"{format_violations(self.violations)}",
            path,
        )


class InputContractViolation(ContractViolationError):
    """Input value rejected before any execution happened."""

    kind = FailureKind.INPUT_CONTRACT_VIOLATION
    _direction = "input"


class OutputContractViolation(ContractViolationError):
    """A produced value does not satisfy its declared output contract."""

    kind = FailureKind.OUTPUT_CONTRACT_VIOLATION
    _direction = "output"


class ExecutionFailure(WorkflowError):
    """
    A step's own logic failed.

    Attributes:
        step_id: Id of the step (or branch arm) that failed
        cause: The original exception
    """

    kind = FailureKind.EXECUTION_FAILURE

    def __init__(self, step_id: str, cause: BaseException, path: Tuple[str, ...] = ()):
        self.step_id = step_id
        self.cause = cause
        super().__init__(f"{step_id} failed: {cause}", path)


class BuildTimeIncompatibility(WorkflowError, ValueError):
    """
    Raised by WorkflowBuilder.commit() when the declared stages cannot fit.

    Attributes:
        workflow_id: Workflow being committed
        problems: Every problem found, in declaration order
    """

    kind = FailureKind.BUILD_TIME_INCOMPATIBILITY

    def __init__(self, workflow_id: str, problems: Sequence[str]):
        self.workflow_id = workflow_id
        self.problems = list(problems)
        details = "\n  - ".join(self.problems)
        super().__init__(f"Workflow {workflow_id} cannot be committed:\n  - {details}")


class CollaboratorNotFound(LookupError):
    """Raised when a step looks up a collaborator that was never registered."""

    def __init__(self, kind: str, name: str, available: Sequence[str]):
        self.collaborator_kind = kind
        self.name = name
        self.available = sorted(available)
        super().__init__(
            f"No {kind} named {name!r} registered. Available: {self.available}"
        )
