"""Tests for specforge.parser.extractor."""

from __future__ import annotations

from typing import Any

import pytest

from specforge.graph import ModelGraph
from specforge.models import Model, ModelKind, ParameterLocation, ParsedApi
from specforge.parser.extractor import (
    ModelExtractor,
    extract_api,
    mapped_type,
    merge_parameters,
    operation_name,
    parameter_name,
    preferred_media_type,
    response_code,
    schema_type,
    service_name,
    sort_by_required,
    type_name,
)
from specforge.parser.hoister import hoist_document


def _extract(document: dict[str, Any]) -> ParsedApi:
    return extract_api(hoist_document(document))


def _operation(parsed: ParsedApi, name: str):
    for service in parsed.services:
        for operation in service.operations:
            if operation.name == name:
                return operation
    raise AssertionError(f"operation {name} not found")


def _extract_schema(schema: dict[str, Any]) -> Model:
    extractor = ModelExtractor({"components": {"schemas": {}}}, ModelGraph())
    return extractor.new_model(schema)


# ---------------------------------------------------------------------------
# Naming helpers
# ---------------------------------------------------------------------------


class TestNamingHelpers:
    """Test type, service and operation name helpers."""

    def test_type_name_from_ref(self) -> None:
        assert type_name("#/components/schemas/Pet") == "Pet"
        assert type_name("pet.v1-model") == "pet_v1_model"

    def test_service_name(self) -> None:
        assert service_name("pet store") == "PetStore"
        assert service_name("2fa-codes") == "FaCodes"

    def test_operation_name(self) -> None:
        assert operation_name("get_widget-by.id") == "getWidgetById"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("with", "_with"), ("if", "_if"), ("class", "_class"), ("page-size", "pageSize")],
    )
    def test_parameter_name(self, raw: str, expected: str) -> None:
        assert parameter_name(raw) == expected


class TestTypeHelpers:
    """Test raw type and media type helpers."""

    def test_schema_type_unwraps_31_arrays(self) -> None:
        assert schema_type({"type": ["string", "null"]}) == ("string", True)
        assert schema_type({"type": "integer", "nullable": True}) == ("integer", True)

    def test_mapped_type(self) -> None:
        assert mapped_type("integer") == "number"
        assert mapped_type("string", "binary") == "binary"
        assert mapped_type("file") == "binary"
        assert mapped_type(None) is None

    def test_preferred_media_type(self) -> None:
        assert preferred_media_type({"text/plain": {}, "application/json": {}}) == "application/json"
        assert preferred_media_type({"application/xml": {}}) == "application/xml"
        assert preferred_media_type({}) is None

    def test_response_code(self) -> None:
        assert response_code("default") == 200
        assert response_code("404") == 404
        assert response_code("4XX") is None


# ---------------------------------------------------------------------------
# Schema extraction
# ---------------------------------------------------------------------------


class TestSchemaExtraction:
    """Test model kinds extracted from schemas."""

    def test_generic_integer_reads_as_number(self) -> None:
        model = _extract_schema({"type": "integer", "format": "int64"})
        assert model.kind == ModelKind.GENERIC
        assert model.type == "number"

    def test_reference(self) -> None:
        model = _extract_schema({"$ref": "#/components/schemas/Pet"})
        assert model.kind == ModelKind.REFERENCE
        assert model.type == "Pet"
        assert model.imports == ["Pet"]

    def test_enum(self) -> None:
        model = _extract_schema({"type": "string", "enum": ["a-b", "cD", None]})
        assert model.kind == ModelKind.ENUM
        assert [e.name for e in model.enum] == ["A_B", "C_D"]
        assert [e.value for e in model.enum] == ["a-b", "cD"]

    def test_numeric_enum_names(self) -> None:
        model = _extract_schema({"type": "integer", "enum": [1, -2]})
        assert [e.name for e in model.enum] == ["_1", "_MINUS_2"]
        assert {e.type for e in model.enum} == {"number"}

    def test_enum_varnames_extension(self) -> None:
        model = _extract_schema({"type": "integer", "enum": [1, 2], "x-enum-varnames": ["ONE", "TWO"]})
        assert [e.name for e in model.enum] == ["ONE", "TWO"]

    def test_array_of_inline_primitive(self) -> None:
        model = _extract_schema({"type": "array", "items": {"type": "string"}})
        assert model.kind == ModelKind.ARRAY
        assert model.type == "string"
        assert model.link is not None and model.link.kind == ModelKind.GENERIC

    def test_array_of_reference_has_no_link_yet(self) -> None:
        model = _extract_schema({"type": "array", "items": {"$ref": "#/components/schemas/Pet"}})
        assert model.kind == ModelKind.ARRAY
        assert model.type == "Pet"
        assert model.link is None

    def test_dictionary(self) -> None:
        model = _extract_schema({"type": "object", "additionalProperties": {"type": "boolean"}})
        assert model.kind == ModelKind.DICTIONARY
        assert model.type == "boolean"

    def test_object_with_properties_and_additional_properties(self) -> None:
        model = _extract_schema(
            {
                "type": "object",
                "required": ["known"],
                "properties": {"known": {"type": "string"}},
                "additionalProperties": {"type": "integer"},
            }
        )
        assert model.kind == ModelKind.INTERFACE
        known, extra = model.properties
        assert known.name == "known" and known.is_required
        assert extra.name == "" and extra.kind == ModelKind.DICTIONARY

    def test_composite_with_own_properties(self) -> None:
        model = _extract_schema(
            {
                "allOf": [{"$ref": "#/components/schemas/Base"}],
                "properties": {"extra": {"type": "string"}},
            }
        )
        assert model.kind == ModelKind.ALL_OF
        branch, own = model.properties
        assert branch.name == "" and branch.kind == ModelKind.REFERENCE
        assert own.name == "properties" and own.kind == ModelKind.INTERFACE
        assert model.imports == ["Base"]

    def test_nullable_31(self) -> None:
        model = _extract_schema({"type": ["string", "null"]})
        assert model.is_nullable
        assert model.type == "string"


class TestDefinitions:
    """Test named definitions and node ids."""

    def test_one_model_per_schema(self, composition_doc: dict[str, Any]) -> None:
        parsed = _extract(composition_doc)
        names = {m.name for m in parsed.models}
        assert names == {"Base", "Extra", "Named", "NamedAllOf", "Full", "Choice", "Either"}
        assert all(m.is_definition for m in parsed.models)

    def test_imports_exclude_self(self, cycles_doc: dict[str, Any]) -> None:
        parsed = _extract(cycles_doc)
        node = parsed.models_by_name()["SelfReferencing"]
        assert node.imports == []

    def test_node_ids_are_unique(self, edge_cases_doc: dict[str, Any]) -> None:
        parsed = _extract(edge_cases_doc)
        ids = [m.node_id for m in parsed.graph]
        assert ids == list(range(len(parsed.graph)))


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


class TestOperations:
    """Test services and operations extracted from paths."""

    def test_services_grouped_by_first_tag(self, edge_cases_doc: dict[str, Any]) -> None:
        parsed = _extract(edge_cases_doc)
        assert {s.name for s in parsed.services} == {"Keywords", "Default"}

    def test_reserved_parameter_names(self, edge_cases_doc: dict[str, Any]) -> None:
        operation = _operation(_extract(edge_cases_doc), "reservedKeywords")
        assert [(p.name, p.prop) for p in operation.parameters] == [
            ("_with", "with"),
            ("_if", "if"),
            ("_class", "class"),
        ]

    def test_path_parameter_inherited_and_required(self, edge_cases_doc: dict[str, Any]) -> None:
        operation = _operation(_extract(edge_cases_doc), "updatePet")
        path_param = operation.parameters_path[0]
        assert path_param.name == "petId"
        assert path_param.is_required

    def test_request_body(self, edge_cases_doc: dict[str, Any]) -> None:
        operation = _operation(_extract(edge_cases_doc), "updatePet")
        body = operation.parameters_body
        assert body is not None
        assert body.name == "requestBody"
        assert body.location == ParameterLocation.BODY
        assert body.kind == ModelKind.REFERENCE and body.type == "Pet"
        assert body.media_type == "application/json"
        assert body.is_required

    def test_default_response_coded_200(self, widgets_doc: dict[str, Any]) -> None:
        extractor = ModelExtractor(hoist_document(widgets_doc), ModelGraph())
        responses = extractor.responses({"default": {"description": "err"}, "404": {"description": "nf"}})
        assert [r.code for r in responses] == [200, 404]

    def test_results_default_to_void(self) -> None:
        parsed = extract_api(
            {"paths": {"/ping": {"get": {"operationId": "ping", "responses": {"404": {}}}}}}
        )
        (result,) = _operation(parsed, "ping").results
        assert result.type == "void"
        assert result.code == 200

    def test_operation_imports(self, widgets_doc: dict[str, Any]) -> None:
        operation = _operation(_extract(widgets_doc), "getWidget")
        assert operation.imports == ["GetWidget200Response"]
        assert operation.method == "GET"


class TestMergeParameters:
    """Test path-level and operation-level parameter merging."""

    def test_operation_overrides_path_level(self) -> None:
        merged = merge_parameters(
            [{"name": "id", "in": "path", "description": "path"}, {"name": "q", "in": "query"}],
            [{"name": "id", "in": "path", "description": "op"}],
        )
        assert [p["name"] for p in merged] == ["q", "id"]
        assert merged[1]["description"] == "op"

    def test_same_name_other_location_kept(self) -> None:
        merged = merge_parameters([{"name": "id", "in": "header"}], [{"name": "id", "in": "query"}])
        assert len(merged) == 2

    def test_sort_by_required_is_stable(self) -> None:
        graph = ModelGraph()
        optional = graph.new_model(name="a")
        required = graph.new_model(name="b", is_required=True)
        defaulted = graph.new_model(name="c", is_required=True, default=1)
        assert [p.name for p in sort_by_required([optional, required, defaulted])] == ["b", "a", "c"]
