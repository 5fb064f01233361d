"""Best-effort JSON extraction from agent responses."""

from __future__ import annotations

import ast
import json
import re
from typing import Any


_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\n?(.*?)```", re.DOTALL | re.IGNORECASE)


class JsonRepairError(ValueError):
    """Raised when no JSON value can be recovered from text."""


def extract_fenced_block(text: str) -> str | None:
    """Return the contents of the first ``` or ```json block, if any."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return None


def _extract_json_object(text: str) -> str:
    start_index = text.find("{")
    if start_index < 0:
        raise JsonRepairError("No JSON object found")
    depth = 0
    in_string = False
    escape = False
    for idx in range(start_index, len(text)):
        char = text[idx]
        if in_string:
            if escape:
                escape = False
            elif char == "\\":
                escape = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start_index : idx + 1]
    raise JsonRepairError("Unbalanced JSON braces")


def _remove_trailing_commas(text: str) -> str:
    return re.sub(r",\s*([}\]])", r"\1", text)


def _replace_single_quotes(text: str) -> str:
    return re.sub(r"(?<!\\)'([^'\\]*(?:\\.[^'\\]*)*)'", r'"\1"', text)


def _attempt(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        pass
    try:
        return ast.literal_eval(text)
    except (ValueError, SyntaxError, TypeError, MemoryError, RecursionError):
        return None


def repair_json(text: str) -> Any:
    """Find the first JSON object in text and parse it with best-effort repairs.

    Handles code fences, surrounding prose, trailing commas, single-quoted
    strings and Python-style literals. Raises JsonRepairError when nothing parses.
    """
    fenced = extract_fenced_block(text)
    block = _extract_json_object(fenced if fenced is not None else text)
    cleaned = _remove_trailing_commas(block)
    parsed = _attempt(cleaned)
    if parsed is not None:
        return parsed
    cleaned = _remove_trailing_commas(_replace_single_quotes(cleaned))
    parsed = _attempt(cleaned)
    if parsed is not None:
        return parsed
    raise JsonRepairError("Failed to repair JSON object")
