"""Ready-made workflows built from the stepflow primitives."""

from typing import Dict

from ..workflows import WorkflowDefinition
from .city_info import CITY_DATA_SERVICE, SimulatedCityData, build_city_info_workflow
from .content import (
    build_content_workflow,
    build_reading_time_workflow,
    classify_difficulty,
    parse_analysis,
    reading_time_minutes,
)
from .routing import build_request_routing_workflow, build_word_count_routing_workflow
from .simple import build_simple_workflow


def build_pattern_workflows() -> Dict[str, WorkflowDefinition]:
    """Commit every pattern workflow, keyed by workflow id."""
    workflows = [
        build_reading_time_workflow(),
        build_content_workflow(),
        build_simple_workflow(),
        build_city_info_workflow(),
        build_request_routing_workflow(),
        build_word_count_routing_workflow(),
    ]
    return {workflow.id: workflow for workflow in workflows}


__all__ = [
    "CITY_DATA_SERVICE",
    "SimulatedCityData",
    "build_city_info_workflow",
    "build_content_workflow",
    "build_reading_time_workflow",
    "build_request_routing_workflow",
    "build_simple_workflow",
    "build_word_count_routing_workflow",
    "build_pattern_workflows",
    "classify_difficulty",
    "parse_analysis",
    "reading_time_minutes",
]
