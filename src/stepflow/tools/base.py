"""
Tools

A tool is a step that a host registers as a collaborator instead of (or as
well as) placing it in a workflow. Steps reach tools by name through the
context and call them with plain keyword arguments:

    calculator = context.get_tool("calculator")
    output = await calculator.call(context, expression="2 + 3")

Contracts, error wrapping and metrics are exactly those of Step.run().
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..core.context import CollaboratorContext
from ..core.contracts import as_contract
from ..core.metrics import MetricsCollector
from ..workflows.step import Step, StepFunc


@dataclass(frozen=True)
class Tool(Step):
    """Step invocable with keyword arguments."""

    async def call(
        self,
        context: Optional[CollaboratorContext] = None,
        metrics: Optional[MetricsCollector] = None,
        **arguments: Any,
    ) -> Dict[str, Any]:
        return await self.run(arguments, context, metrics)

    def describe(self) -> Dict[str, Any]:
        """Name, description and input JSON schema, for listing to a model."""
        return {
            "name": self.id,
            "description": self.description,
            "parameters": self.input_contract.json_schema(),
        }


def create_tool(
    id: str,
    input_schema: Any,
    output_schema: Any,
    execute: StepFunc,
    description: str = "",
) -> Tool:
    """
    Create a tool from schemas (Contract or Pydantic model classes).

    Args:
        id: Tool name
        input_schema: Input Contract or model class
        output_schema: Output Contract or model class
        execute: (validated_input, context) -> output; may be async
        description: What the tool does

    Returns:
        Tool
    """
    return Tool(
        id=id,
        description=description or f"{id} tool",
        input_contract=as_contract(input_schema),
        output_contract=as_contract(output_schema),
        execute=execute,
    )
