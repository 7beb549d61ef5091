from __future__ import annotations

import pytest

from mockforge.core.errors import InvalidInputError
from mockforge.services.schemas import (
    derive_api_slug,
    normalize_field_definition,
    normalize_name,
)


def test_derive_api_slug_lowercases_and_hyphenates() -> None:
    assert derive_api_slug("My  Cool\tUsers", now_ms=1700000000000) == "my-cool-users-1700000000000"


def test_derive_api_slug_suffix_separates_same_names() -> None:
    assert derive_api_slug("Users", now_ms=1) != derive_api_slug("Users", now_ms=2)


def test_derive_api_slug_uses_clock_by_default() -> None:
    slug = derive_api_slug("Users")
    prefix, _, suffix = slug.rpartition("-")
    assert prefix == "users"
    assert suffix.isdigit()


@pytest.mark.parametrize("name", [None, "", "   ", 7])
def test_normalize_name_rejects_blank(name) -> None:
    with pytest.raises(InvalidInputError):
        normalize_name(name)


def test_normalize_name_trims() -> None:
    assert normalize_name("  Users ") == "Users"


def test_normalize_field_definition_keeps_order_and_lowercases_types() -> None:
    fields = normalize_field_definition({"username": "String", "age": "number", " city ": "address"})
    assert list(fields.items()) == [("username", "string"), ("age", "number"), ("city", "address")]


def test_normalize_field_definition_is_case_sensitive_on_names() -> None:
    fields = normalize_field_definition({"Name": "string", "name": "string"})
    assert list(fields) == ["Name", "name"]


def test_normalize_field_definition_drops_blank_names() -> None:
    assert normalize_field_definition({"": "string", "age": "number"}) == {"age": "number"}


@pytest.mark.parametrize(
    "raw",
    [None, [], {}, {"": "string"}, {"   ": "number"}, "username:string"],
)
def test_normalize_field_definition_requires_a_named_field(raw) -> None:
    with pytest.raises(InvalidInputError):
        normalize_field_definition(raw)


def test_normalize_field_definition_rejects_unknown_types() -> None:
    with pytest.raises(InvalidInputError, match="Unsupported type"):
        normalize_field_definition({"age": "integer"})


def test_normalize_field_definition_rejects_duplicates_after_trim() -> None:
    with pytest.raises(InvalidInputError, match="Duplicate"):
        normalize_field_definition({"age": "number", "age ": "number"})
