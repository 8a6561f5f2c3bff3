"""
Metrics Collection Utilities

Per-run metrics for step executions. The engine creates one collector per
run, so concurrent runs of the same workflow never share one.
"""

import threading
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from .types import StepMetrics, StepStatus


class MetricsCollector:
    """
    Collect step metrics for one workflow run.

    Args:
        name: Workflow id this collector reports on
    """

    def __init__(self, name: str = "workflow"):
        self.name = name
        self.steps: Dict[str, StepMetrics] = {}
        self.order: List[str] = []
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self._started_at: Optional[float] = None
        self._elapsed_ms: float = 0.0
        self._lock = threading.Lock()

    def start(self) -> None:
        """Mark start of execution."""
        self.start_time = datetime.now()
        self._started_at = time.perf_counter()

    def stop(self) -> None:
        """Mark end of execution."""
        self.end_time = datetime.now()
        if self._started_at is not None:
            self._elapsed_ms = (time.perf_counter() - self._started_at) * 1000

    def record_step(
        self,
        step_id: str,
        duration_ms: float,
        status: StepStatus,
        error: Optional[str] = None,
        warnings: Optional[List[str]] = None,
    ) -> None:
        """
        Record a step execution.

        Args:
            step_id: Step identifier
            duration_ms: Execution time in milliseconds
            status: Final StepStatus
            error: Error message if failed
            warnings: Warnings raised by the step
        """
        with self._lock:
            if step_id not in self.steps:
                self.order.append(step_id)
            self.steps[step_id] = StepMetrics(
                name=step_id,
                status=status,
                duration_ms=duration_ms,
                error_message=error,
                warnings=list(warnings or []),
            )

    def executed(self, step_id: str) -> bool:
        """
        True if the step's execute() was invoked during this run, whatever
        its outcome. Steps whose input was rejected are recorded with
        StepStatus.REJECTED and do not count.
        """
        with self._lock:
            recorded = self.steps.get(step_id)
        return recorded is not None and recorded.status != StepStatus.REJECTED

    def get_summary(self) -> Dict[str, Any]:
        """
        Get workflow-level summary.

        Returns:
            Dict with overall status, timing and per-step details
        """
        with self._lock:
            steps = {step_id: self.steps[step_id].to_dict() for step_id in self.order}

        statuses = [s["status"] for s in steps.values()]
        if StepStatus.FAILED.value in statuses or StepStatus.REJECTED.value in statuses:
            overall_status = "failed"
        elif statuses:
            overall_status = "success"
        else:
            overall_status = "unknown"

        warnings = [w for s in steps.values() for w in s["warnings"]]
        return {
            "workflow_name": self.name,
            "overall_status": overall_status,
            "total_duration_ms": self._elapsed_ms,
            "steps_executed": len(steps),
            "total_warnings": len(warnings),
            "steps": steps,
            "warnings": warnings,
        }
