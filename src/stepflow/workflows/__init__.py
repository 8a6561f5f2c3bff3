"""Workflow composition: steps, stages, builder and execution engine."""

from .step import Runnable, Step, StepFunc, create_step
from .stages import (
    BranchArm,
    BranchStage,
    ParallelStage,
    Predicate,
    SequentialStage,
    Stage,
    fan_out,
)
from .builder import WorkflowBuilder, WorkflowDefinition, create_workflow
from .engine import ExecutionEngine, ExecutionResult, Failure, Success, unwrap

__all__ = [
    # Steps
    "Runnable",
    "Step",
    "StepFunc",
    "create_step",
    # Stages
    "BranchArm",
    "BranchStage",
    "ParallelStage",
    "Predicate",
    "SequentialStage",
    "Stage",
    "fan_out",
    # Building
    "WorkflowBuilder",
    "WorkflowDefinition",
    "create_workflow",
    # Running
    "ExecutionEngine",
    "ExecutionResult",
    "Failure",
    "Success",
    "unwrap",
]
