"""
JSON Repair Utilities

Model responses are often almost-JSON: wrapped in prose or code fences,
single-quoted, with unquoted keys or trailing commas. These helpers recover
a JSON object when one is reasonably present and report None otherwise;
deciding what to do on None is left to the calling step.
"""

import json
import re
from typing import Any, Dict, Optional

_CODE_BLOCK = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)
_UNQUOTED_KEY = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)(\s*:)")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")


def extract_json_object(text: str) -> Optional[str]:
    """
    Extract the outermost {...} block from text.

    Code-fenced blocks (```json ... ```) win over bare braces.

    Args:
        text: Text that may contain JSON

    Returns:
        JSON-looking substring, or None if there are no braces
    """
    fenced = _CODE_BLOCK.search(text)
    if fenced:
        return fenced.group(1)

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or start >= end:
        return None
    return text[start : end + 1]


def repair_unquoted_keys(json_str: str) -> str:
    """{score: 7} -> {"score": 7}"""
    return _UNQUOTED_KEY.sub(r'\1"\2"\3', json_str)


def repair_single_quotes(json_str: str) -> str:
    """Swap single quotes for double quotes when no double quotes are present."""
    if '"' in json_str:
        return json_str
    return json_str.replace("'", '"')


def repair_trailing_commas(json_str: str) -> str:
    return _TRAILING_COMMA.sub(r"\1", json_str)


def repair_json(json_str: str) -> Optional[Dict[str, Any]]:
    """
    Parse a JSON object, repairing common defects if the direct parse fails.

    Args:
        json_str: Potentially malformed JSON string

    Returns:
        Parsed dict, or None if it could not be repaired into an object
    """
    for candidate in (json_str, _repair(json_str)):
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed
    return None


def _repair(json_str: str) -> str:
    repaired = repair_single_quotes(json_str)
    repaired = repair_unquoted_keys(repaired)
    return repair_trailing_commas(repaired)


def parse_json_response(text: str) -> Optional[Dict[str, Any]]:
    """
    Extract and repair a JSON object from a model response in one step.

    Args:
        text: Raw model response

    Returns:
        Parsed dict or None
    """
    candidate = extract_json_object(text)
    if candidate is None:
        return None
    return repair_json(candidate)
