"""
Calculator Tool

Evaluates basic arithmetic (+ - * / and parentheses) without eval(): the
expression is parsed into a Python AST and only numeric literals, unary
signs and the four binary operators are walked.
"""

import ast
import logging
import math
import operator
import re
from typing import Any

from pydantic import BaseModel, Field

from .base import create_tool

logger = logging.getLogger(__name__)

_DISALLOWED = re.compile(r"[^0-9+\-*/().\s]")

_BINARY = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}
_UNARY = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


class CalculatorInput(BaseModel):
    expression: str = Field(..., description='Mathematical expression to evaluate (e.g., "2 + 3 * 4")')


class CalculatorOutput(BaseModel):
    result: float
    expression: str


def sanitize_expression(expression: str) -> str:
    """Drop every character that is not a digit, operator, parenthesis, dot or space."""
    return _DISALLOWED.sub("", expression).strip()


def evaluate_expression(expression: str) -> float:
    """
    Evaluate an arithmetic expression.

    Args:
        expression: Sanitized expression

    Returns:
        Finite result

    Raises:
        ValueError: Empty, malformed, unsupported or non-finite expression
        ZeroDivisionError: Division by zero
    """
    if not expression:
        raise ValueError("Empty expression")
    try:
        tree = ast.parse(expression, mode="eval")
    except SyntaxError as e:
        raise ValueError(f"Malformed expression: {expression!r}") from e

    result = _walk(tree.body)
    if not math.isfinite(result):
        raise ValueError("Invalid calculation result")
    return result


def _walk(node: ast.AST) -> float:
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
        return float(node.value)
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY:
        return _BINARY[type(node.op)](_walk(node.left), _walk(node.right))
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY:
        return _UNARY[type(node.op)](_walk(node.operand))
    raise ValueError(f"Unsupported expression element: {type(node).__name__}")


def _calculate(data: CalculatorInput, context: Any) -> dict:
    expression = sanitize_expression(data.expression)
    try:
        result = evaluate_expression(expression)
    except (ValueError, ZeroDivisionError) as e:
        raise ValueError(f"Calculation failed: {e}") from e
    logger.debug(f"[calculator] {expression} = {result}")
    return {"result": result, "expression": expression}


calculator_tool = create_tool(
    id="calculator",
    description="Perform basic mathematical calculations",
    input_schema=CalculatorInput,
    output_schema=CalculatorOutput,
    execute=_calculate,
)
