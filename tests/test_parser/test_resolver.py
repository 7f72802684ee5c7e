"""Tests for specforge.parser.resolver."""

from __future__ import annotations

from typing import Any

import pytest

from specforge.exceptions import SpecParseError, UnresolvableReferenceError
from specforge.parser.resolver import (
    is_ref,
    ref_schema_name,
    resolve_if_ref,
    resolve_ref,
    schema_ref,
    split_ref,
)


def _document() -> dict[str, Any]:
    return {
        "components": {
            "schemas": {
                "Pet": {"type": "object", "properties": {"name": {"type": "string"}}},
                "a/b": {"type": "string"},
                "Alias": {"$ref": "#/components/schemas/Pet"},
            },
            "parameters": {"list": [{"name": "first"}, {"name": "second"}]},
        }
    }


# ---------------------------------------------------------------------------
# Pointer helpers
# ---------------------------------------------------------------------------


class TestPointers:
    """Test JSON pointer helpers."""

    def test_is_ref(self) -> None:
        assert is_ref({"$ref": "#/x"})
        assert not is_ref({"type": "string"})
        assert not is_ref("#/x")

    def test_split_unescapes_segments(self) -> None:
        assert split_ref("#/components/schemas/a~1b~0c") == ["components", "schemas", "a/b~c"]

    def test_external_reference_rejected(self) -> None:
        with pytest.raises(UnresolvableReferenceError, match="only internal"):
            split_ref("other.yaml#/components/schemas/Pet")

    def test_schema_ref_escapes_name(self) -> None:
        assert schema_ref("a/b") == {"$ref": "#/components/schemas/a~1b"}
        assert ref_schema_name(schema_ref("a/b")["$ref"]) == "a/b"

    def test_ref_schema_name_outside_schemas(self) -> None:
        assert ref_schema_name("#/components/parameters/limit") is None


# ---------------------------------------------------------------------------
# resolve_ref / resolve_if_ref
# ---------------------------------------------------------------------------


class TestResolveRef:
    """Test single  resolution."""

    def test_resolves_schema(self) -> None:
        doc = _document()
        assert resolve_ref(doc, "#/components/schemas/Pet") is doc["components"]["schemas"]["Pet"]

    def test_resolves_escaped_name(self) -> None:
        assert resolve_ref(_document(), "#/components/schemas/a~1b") == {"type": "string"}

    def test_resolves_array_index(self) -> None:
        result = resolve_ref(_document(), "#/components/parameters/list/1")
        assert result == {"name": "second"}

    def test_missing_key(self) -> None:
        with pytest.raises(UnresolvableReferenceError, match="key 'Missing' not found"):
            resolve_ref(_document(), "#/components/schemas/Missing")

    def test_invalid_array_index(self) -> None:
        with pytest.raises(UnresolvableReferenceError, match="invalid array index"):
            resolve_ref(_document(), "#/components/parameters/list/7")

    def test_is_a_parse_error(self) -> None:
        with pytest.raises(SpecParseError):
            resolve_ref(_document(), "#/nothing")

    def test_resolve_if_ref_passes_through(self) -> None:
        node = {"type": "integer"}
        assert resolve_if_ref(_document(), node) is node

    def test_resolution_is_idempotent(self) -> None:
        doc = _document()
        once = resolve_if_ref(doc, {"$ref": "#/components/schemas/Pet"})
        assert resolve_if_ref(doc, once) is once

