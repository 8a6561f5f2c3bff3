"""stepflow - typed workflow composition and execution."""

from .core import (
    BuildTimeIncompatibility,
    CollaboratorContext,
    CollaboratorNotFound,
    Contract,
    ExecutionFailure,
    FailureKind,
    InputContractViolation,
    OutputContractViolation,
    Settings,
    Violation,
    WorkflowError,
    get_logger,
    load_settings,
)
from .workflows import (
    ExecutionEngine,
    ExecutionResult,
    Failure,
    Step,
    Success,
    WorkflowBuilder,
    WorkflowDefinition,
    create_step,
    create_workflow,
)
from .tools import Tool, create_tool
from .host import WorkflowHost, build_default_host

__version__ = "0.1.0"

__all__ = [
    "BuildTimeIncompatibility",
    "CollaboratorContext",
    "CollaboratorNotFound",
    "Contract",
    "ExecutionFailure",
    "FailureKind",
    "InputContractViolation",
    "OutputContractViolation",
    "Settings",
    "Violation",
    "WorkflowError",
    "get_logger",
    "load_settings",
    "ExecutionEngine",
    "ExecutionResult",
    "Failure",
    "Step",
    "Success",
    "WorkflowBuilder",
    "WorkflowDefinition",
    "create_step",
    "create_workflow",
    "Tool",
    "create_tool",
    "WorkflowHost",
    "build_default_host",
]
