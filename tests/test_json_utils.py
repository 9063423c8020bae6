from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kosei.llm.json_utils import parse_json_array, parse_json_response


def test_parse_json_object_in_text():
    text = "判定結果: {\"valid\": false}。以上です"
    result = parse_json_response(text)
    assert isinstance(result, dict)
    assert result["valid"] is False


def test_parse_json_array_in_text():
    text = "Some preamble text [ {\"sentenceIndex\": 1, \"word\": \"意思\", \"suggestion\": \"意志\"} ] end"
    result = parse_json_response(text)
    assert isinstance(result, list)
    assert result[0]["sentenceIndex"] == 1
    assert result[0]["suggestion"] == "意志"


def test_parse_json_inside_code_fence_with_trailing_comma():
    text = "```json\n{\"valid\": true,}\n```"
    assert parse_json_response(text) == {"valid": True}


def test_first_delimiter_wins():
    text = "[{\"word\": \"a\"}] and later {\"ignored\": 1}"
    result = parse_json_response(text)
    assert isinstance(result, list)


def test_missing_delimiters_raise():
    with pytest.raises(ValueError):
        parse_json_response("no json here")


def test_non_string_input_raises():
    with pytest.raises(ValueError):
        parse_json_response(None)  # type: ignore[arg-type]


def test_parse_json_array_wraps_single_object():
    assert parse_json_array("{\"word\": \"以上\"}") == [{"word": "以上"}]


def test_parse_json_array_passes_lists_through():
    assert parse_json_array("[]") == []
    assert parse_json_array("結果: [1, 2]") == [1, 2]
