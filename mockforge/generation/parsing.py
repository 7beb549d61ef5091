"""Decode model completions into generated records.

The model is asked for a bare JSON array but often wraps it in Markdown
fences anyway, so fences are stripped before decoding. Decoding is strict
about shape (a non-empty array); checking each element against the declared
field types is optional and governed by ``generation_strict_conformance``.
"""
from __future__ import annotations

import json
import logging
import re
from datetime import date, datetime
from typing import Any

from mockforge.core.errors import (
    GenerationConformanceError,
    GenerationEmptyError,
    GenerationFormatError,
)

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"\A```[\w-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?```\s*\Z")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_URL = re.compile(r"^https?://\S+$", re.IGNORECASE)
_PHONE = re.compile(r"^\+?[0-9()\-.\s]{7,}$")
_PREVIEW_CHARS = 200


def strip_code_fences(text: str) -> str:
    """Remove a wrapping Markdown fence, keeping the fenced content.

    Only an opening fence at the very start and a closing fence at the very end
    are removed; backticks inside the payload are left alone.
    """
    cleaned = _LEADING_FENCE.sub("", text.strip(), count=1)
    return _TRAILING_FENCE.sub("", cleaned, count=1).strip()


def parse_generated_records(raw_text: str) -> list[Any]:
    """Parse a completion into a non-empty list of generated elements.

    Raises GenerationFormatError when the text is not JSON and
    GenerationEmptyError when it is JSON but not a non-empty array.
    """
    cleaned = strip_code_fences(raw_text)
    try:
        data = json.loads(cleaned)
    except ValueError as exc:
        logger.warning("generation_invalid_json preview=%r", raw_text[:_PREVIEW_CHARS])
        raise GenerationFormatError("Model returned invalid JSON format", raw_text=raw_text) from exc
    if not isinstance(data, list) or not data:
        raise GenerationEmptyError("AI did not generate valid data array")
    return data


def _is_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
        return True
    except ValueError:
        pass
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
        return True
    except ValueError:
        return False


def value_matches_type(value: Any, type_tag: str) -> bool:
    if type_tag == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if type_tag == "boolean":
        return isinstance(value, bool)
    if type_tag == "address":
        return isinstance(value, (str, dict))
    if not isinstance(value, str):
        return False
    if type_tag == "email":
        return bool(_EMAIL.match(value))
    if type_tag == "url":
        return bool(_URL.match(value))
    if type_tag == "date":
        return _is_date(value)
    if type_tag == "phone":
        return bool(_PHONE.match(value))
    return True


def check_conformance(records: list[Any], field_definition: dict[str, str], raw_text: str = "") -> None:
    """Require every record to carry exactly the declared fields with matching types."""
    expected = set(field_definition)
    for idx, record in enumerate(records):
        if not isinstance(record, dict):
            raise GenerationConformanceError(f"Record {idx} is not a JSON object", raw_text=raw_text)
        keys = set(record)
        missing = sorted(expected - keys)
        extra = sorted(keys - expected)
        if missing:
            raise GenerationConformanceError(f"Record {idx} is missing fields: {missing}", raw_text=raw_text)
        if extra:
            raise GenerationConformanceError(f"Record {idx} has unexpected fields: {extra}", raw_text=raw_text)
        for field_name, type_tag in field_definition.items():
            if not value_matches_type(record[field_name], type_tag):
                raise GenerationConformanceError(
                    f"Record {idx} field {field_name!r} is not a valid {type_tag}",
                    raw_text=raw_text,
                )
