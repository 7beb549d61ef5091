from __future__ import annotations

import json

import pytest

from mockforge.core.errors import (
    GenerationConformanceError,
    GenerationEmptyError,
    GenerationFormatError,
)
from mockforge.generation.parsing import (
    check_conformance,
    parse_generated_records,
    strip_code_fences,
    value_matches_type,
)


ROWS = [{"username": "ana", "age": 30}, {"username": "bo", "age": 41}]


@pytest.mark.parametrize(
    "wrapped",
    [
        "```json\n{body}\n```",
        "```\n{body}\n```",
        "```JSON\n{body}```",
        "  ```json\n{body}\n```\n\n",
        "{body}",
    ],
)
def test_fenced_output_parses_like_unwrapped(wrapped: str) -> None:
    body = json.dumps(ROWS, indent=2)
    text = wrapped.replace("{body}", body)
    assert strip_code_fences(text) == body
    assert parse_generated_records(text) == parse_generated_records(body)


@pytest.mark.parametrize(
    "rows",
    [
        [{"note": "```json"}],
        [{"command": "run ```bash ls```"}],
        [{"snippet": "```\nprint(1)\n```"}],
    ],
)
def test_backticks_inside_values_survive_fence_stripping(rows: list) -> None:
    body = json.dumps(rows)
    assert parse_generated_records("```json\n" + body + "\n```") == rows
    assert parse_generated_records(body) == rows


def test_prose_raises_format_error_with_raw_text() -> None:
    raw = "Sure! Here are ten users you might like."
    with pytest.raises(GenerationFormatError) as exc_info:
        parse_generated_records(raw)
    assert exc_info.value.raw_text == raw
    assert str(exc_info.value) == "Model returned invalid JSON format"


@pytest.mark.parametrize("raw", ["[]", "{\"username\": \"ana\"}", "42", "```json\n[]\n```"])
def test_non_array_or_empty_raises_empty_error(raw: str) -> None:
    with pytest.raises(GenerationEmptyError):
        parse_generated_records(raw)


def test_array_elements_are_returned_unchanged() -> None:
    # Shape is opaque unless strict conformance is requested.
    data = parse_generated_records('[{"a": 1}, "loose", 3]')
    assert data == [{"a": 1}, "loose", 3]


@pytest.mark.parametrize(
    ("value", "type_tag", "expected"),
    [
        ("ana", "string", True),
        (3, "string", False),
        (30, "number", True),
        (2.5, "number", True),
        (True, "number", False),
        (False, "boolean", True),
        ("true", "boolean", False),
        ("ana@example.com", "email", True),
        ("ana-at-example", "email", False),
        ("https://example.com/a", "url", True),
        ("example.com", "url", False),
        ("2024-03-01", "date", True),
        ("2024-03-01T10:00:00Z", "date", True),
        ("yesterday", "date", False),
        ("+1 (555) 010-2233", "phone", True),
        ("call me", "phone", False),
        ("1 Main St", "address", True),
        ({"street": "1 Main St", "city": "Oslo"}, "address", True),
        (12, "address", False),
    ],
)
def test_value_matches_type(value, type_tag: str, expected: bool) -> None:
    assert value_matches_type(value, type_tag) is expected


def test_check_conformance_accepts_matching_rows() -> None:
    check_conformance(ROWS, {"username": "string", "age": "number"})


def test_check_conformance_reports_missing_extra_and_type_errors() -> None:
    fields = {"username": "string", "age": "number"}
    with pytest.raises(GenerationConformanceError, match="missing fields"):
        check_conformance([{"username": "ana"}], fields)
    with pytest.raises(GenerationConformanceError, match="unexpected fields"):
        check_conformance([{"username": "ana", "age": 1, "email": "x"}], fields)
    with pytest.raises(GenerationConformanceError, match="'age' is not a valid number"):
        check_conformance([{"username": "ana", "age": "thirty"}], fields)
    with pytest.raises(GenerationConformanceError, match="Record 1 is not a JSON object"):
        check_conformance([ROWS[0], "ana"], fields)


def test_conformance_error_is_a_format_error() -> None:
    with pytest.raises(GenerationFormatError) as exc_info:
        check_conformance(["x"], {"a": "string"}, raw_text='["x"]')
    assert exc_info.value.raw_text == '["x"]'
