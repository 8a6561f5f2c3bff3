"""Tools: steps registered as named collaborators."""

from .base import Tool, create_tool
from .calculator import (
    CalculatorInput,
    CalculatorOutput,
    calculator_tool,
    evaluate_expression,
    sanitize_expression,
)
from .mcp import MCPToolkit, RemoteToolOutput, ToolCall

__all__ = [
    "Tool",
    "create_tool",
    "CalculatorInput",
    "CalculatorOutput",
    "calculator_tool",
    "evaluate_expression",
    "sanitize_expression",
    "MCPToolkit",
    "RemoteToolOutput",
    "ToolCall",
]
