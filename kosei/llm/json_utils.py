"""Shared JSON extraction and repair utilities for model responses.

Models often wrap their answer in commentary or code fences, and small
models emit slightly malformed JSON. These helpers locate the fragment and
repair it before parsing.
"""

from __future__ import annotations

import json
from typing import Any

from json_repair import repair_json


def parse_json_response(text: str) -> Any:
    """Extract and repair JSON content from LLM response text.

    This function:
    1. Locates the first JSON object or array delimiter
    2. Extracts up to the last matching closing delimiter
    3. Repairs common JSON formatting issues
    4. Parses and returns the result

    Raises:
        ValueError: If JSON delimiters are not found or text is invalid
        json.JSONDecodeError: If the repaired text still cannot be parsed

    Example:
        >>> parse_json_response('Sure: {"valid": false} hope that helps')
        {'valid': False}
    """
    if not isinstance(text, str):
        raise ValueError(f"Expected string input, got {type(text)}")

    start_obj = text.find("{")
    start_arr = text.find("[")

    if start_obj == -1 and start_arr == -1:
        raise ValueError("Response text does not contain JSON object or array delimiters.")

    # Prefer whichever delimiter appears first
    if start_obj == -1 or (start_arr != -1 and start_arr < start_obj):
        start, end_char = start_arr, "]"
    else:
        start, end_char = start_obj, "}"

    end = text.rfind(end_char)
    if end == -1 or end <= start:
        raise ValueError("Response text does not contain matching JSON delimiters.")

    repaired = repair_json(text[start : end + 1])
    return json.loads(repaired)


def parse_json_array(text: str) -> list[Any]:
    """Like :func:`parse_json_response` but always returns a list.

    A lone object is wrapped; anything else raises ``ValueError``.
    """

    value = parse_json_response(text)
    if isinstance(value, dict):
        return [value]
    if not isinstance(value, list):
        raise ValueError(f"Expected a JSON array, got {type(value).__name__}")
    return value
