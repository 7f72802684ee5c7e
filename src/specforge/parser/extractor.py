"""Extract the initial model and service graph from a hoisted document.

This is the base parser adapter of the pipeline. It walks the document
produced by :func:`~specforge.parser.hoister.hoist_document` and builds:

* one :class:`~specforge.models.Model` per entry of ``components/schemas``,
  with child nodes for properties, array items, dictionary values and
  composite branches;
* one :class:`~specforge.models.Service` per (first) operation tag, holding
  an :class:`~specforge.models.Operation` per path + method pair with its
  parameters, request body, responses and success results.

The graph matches the intermediate representation that templates were
written against: integers are typed ``number`` (the original ``integer`` is
restored later as ``openapi_type``), ``default`` responses are coded ``200``,
parameter names are camelCased with TypeScript reserved words prefixed by
``_``, and references are typed by the referenced schema's name. The result
is authoritative for kind, raw type and properties only; links to named
models, composite members and schema metadata are filled in by
:mod:`specforge.enrichment`.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they share
the same ``name`` and ``in`` values.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from specforge.graph import ModelGraph
from specforge.models import (
    EnumValue,
    HTTPMethod,
    Model,
    ModelKind,
    Operation,
    ParameterLocation,
    ParsedApi,
    Service,
)
from specforge.generator.naming import camel_case, escape_typescript_name, pascal_case
from specforge.parser.resolver import is_ref, resolve_if_ref, split_ref

logger = logging.getLogger(__name__)

_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)

DEFAULT_SERVICE_NAME = "Default"

_MAPPED_TYPES = {
    "file": "binary",
    "any": "any",
    "object": "any",
    "array": "any",
    "boolean": "boolean",
    "byte": "number",
    "int": "number",
    "integer": "number",
    "float": "number",
    "double": "number",
    "short": "number",
    "long": "number",
    "number": "number",
    "char": "string",
    "date": "string",
    "date-time": "string",
    "password": "string",
    "string": "string",
    "void": "void",
    "null": "null",
}

# Preferred media types, in order, when a body declares several
_PREFERRED_MEDIA_TYPES = (
    "application/json-patch+json",
    "application/json",
    "text/json",
    "text/plain",
    "multipart/form-data",
    "multipart/mixed",
    "multipart/related",
    "multipart/batch",
)


def extract_api(document: dict[str, Any]) -> ParsedApi:
    """Build the initial :class:`~specforge.models.ParsedApi` for *document*."""
    graph = ModelGraph()
    extractor = ModelExtractor(document, graph)
    parsed = ParsedApi(
        graph=graph,
        models=extractor.definitions(),
        services=extractor.services(),
        info=dict(document.get("info") or {}),
    )
    logger.debug(
        "Extracted %d models and %d services (%d nodes)",
        len(parsed.models),
        len(parsed.services),
        len(graph),
    )
    return parsed


# --- Naming helpers ---


def type_name(value: str) -> str:
    """Turn a schema name or reference into an identifier-safe type name."""
    if value.startswith("#/"):
        value = split_ref(value)[-1]
    return re.sub(r"[^\w]", "_", value)


def _clean_identifier(value: str) -> str:
    value = re.sub(r"^[^a-zA-Z]+", "", value)
    return re.sub(r"[^\w\-]+", "-", value).strip()


def service_name(tag: str) -> str:
    return pascal_case(_clean_identifier(tag))


def operation_name(operation_id: str) -> str:
    return camel_case(_clean_identifier(operation_id))


def parameter_name(name: str) -> str:
    return escape_typescript_name(camel_case(_clean_identifier(name)))


def schema_type(schema: dict[str, Any]) -> tuple[Optional[str], bool]:
    """Return ``(type, nullable)``, unwrapping OpenAPI 3.1 type arrays."""
    raw = schema.get("type")
    nullable = bool(schema.get("nullable"))
    if isinstance(raw, list):
        non_null = [t for t in raw if t != "null"]
        nullable = nullable or len(non_null) != len(raw)
        raw = non_null[0] if non_null else None
    return raw, nullable


def mapped_type(raw_type: Optional[str], format: Optional[str] = None) -> Optional[str]:
    if format == "binary":
        return "binary"
    if raw_type is None:
        return None
    return _MAPPED_TYPES.get(raw_type)


def _enum_member_name(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"_{value}".replace("-", "MINUS_").replace(".", "_")
    name = re.sub(r"\W+", "_", str(value))
    name = re.sub(r"^(\d+)", r"_\1", name)
    name = re.sub(r"([a-z])([A-Z]+)", r"\1_\2", name)
    return name.upper()


def _enum_values(schema: dict[str, Any]) -> list[EnumValue]:
    names = schema.get("x-enum-varnames") or schema.get("x-enumNames") or []
    descriptions = schema.get("x-enum-descriptions") or []
    values = []
    for i, value in enumerate(v for v in schema["enum"] if v is not None):
        values.append(
            EnumValue(
                name=names[i] if i < len(names) else _enum_member_name(value),
                value=value,
                type="number" if isinstance(value, (int, float)) and not isinstance(value, bool) else "string",
                description=descriptions[i] if i < len(descriptions) else None,
            )
        )
    return values


def _unique_sorted(values: list[str]) -> list[str]:
    return sorted(set(values))


def preferred_media_type(content: dict[str, Any]) -> Optional[str]:
    for media_type in _PREFERRED_MEDIA_TYPES:
        if media_type in content:
            return media_type
    return next(iter(content), None)


def response_code(key: Any) -> Optional[int]:
    """Map a ``responses`` key to a numeric code; ``default`` reads as ``200``."""
    if str(key) == "default":
        return 200
    try:
        return int(key)
    except (TypeError, ValueError):
        return None


class ModelExtractor:
    """Builds graph nodes from schema objects of one document.

    Args:
        document: The hoisted document. Nothing is written to it.
        graph: Arena that owns every node created.
    """

    def __init__(self, document: dict[str, Any], graph: ModelGraph) -> None:
        self.document = document
        self.graph = graph

    # ------------------------------------------------------------------ #
    # Schemas
    # ------------------------------------------------------------------ #

    def definitions(self) -> list[Model]:
        schemas = (self.document.get("components") or {}).get("schemas") or {}
        models = []
        for name, schema in schemas.items():
            model = self.graph.new_model(name=type_name(name), is_definition=True)
            self.fill_model(model, schema)
            model.imports = [i for i in _unique_sorted(model.imports) if i != model.name]
            models.append(model)
        return models

    def new_model(self, schema: Any, name: str = "") -> Model:
        model = self.graph.new_model(name=name)
        self.fill_model(model, schema)
        return model

    def fill_model(self, model: Model, schema: Any) -> None:
        """Populate *model* from *schema* in place."""
        if not isinstance(schema, dict):
            return

        if is_ref(schema):
            ref_type = type_name(schema["$ref"])
            model.kind = ModelKind.REFERENCE
            model.type = model.base = ref_type
            model.imports.append(ref_type)
            return

        raw_type, nullable = schema_type(schema)
        model.description = schema.get("description")
        model.is_nullable = nullable
        model.is_read_only = bool(schema.get("readOnly"))
        model.unique_items = bool(schema.get("uniqueItems"))
        model.default = schema.get("default")

        if schema.get("enum") and raw_type != "boolean":
            model.kind = ModelKind.ENUM
            model.type = model.base = "string"
            model.enum = _enum_values(schema)
            return

        if raw_type == "array" and isinstance(schema.get("items"), dict):
            self._fill_collection(model, ModelKind.ARRAY, schema["items"])
            return

        additional = schema.get("additionalProperties")
        if raw_type == "object" and isinstance(additional, dict) and not schema.get("properties"):
            self._fill_collection(model, ModelKind.DICTIONARY, additional)
            return

        for keyword, kind in (
            ("oneOf", ModelKind.ONE_OF),
            ("anyOf", ModelKind.ANY_OF),
            ("allOf", ModelKind.ALL_OF),
        ):
            if schema.get(keyword):
                self._fill_composition(model, kind, schema, schema[keyword])
                return

        if raw_type == "object" or schema.get("properties"):
            model.kind = ModelKind.INTERFACE
            model.type = model.base = "any"
            model.properties = self._properties(schema)
            for prop in model.properties:
                model.imports.extend(prop.imports)
            return

        mapped = mapped_type(raw_type, schema.get("format"))
        if mapped is not None:
            model.kind = ModelKind.GENERIC
            model.type = model.base = mapped

    def _fill_collection(self, model: Model, kind: ModelKind, element: dict[str, Any]) -> None:
        model.kind = kind
        if is_ref(element):
            ref_type = type_name(element["$ref"])
            model.type = model.base = ref_type
            model.imports.append(ref_type)
            return
        link = self.new_model(element)
        model.type = link.type
        model.base = link.base
        model.link = link
        model.imports.extend(link.imports)

    def _fill_composition(
        self,
        model: Model,
        kind: ModelKind,
        schema: dict[str, Any],
        branches: list[Any],
    ) -> None:
        model.kind = kind
        model.type = model.base = "any"
        for branch in branches:
            member = self.new_model(branch)
            model.imports.extend(member.imports)
            model.properties.append(member)
        if schema.get("properties"):
            own = self.graph.new_model(name="properties", kind=ModelKind.INTERFACE)
            own.properties = self._properties(schema)
            for prop in own.properties:
                own.imports.extend(prop.imports)
            model.imports.extend(own.imports)
            model.properties.append(own)

    def _properties(self, schema: dict[str, Any]) -> list[Model]:
        required = set(schema.get("required") or [])
        properties = []
        for name, property_schema in (schema.get("properties") or {}).items():
            prop = self.new_model(property_schema, name=name)
            prop.is_required = name in required
            properties.append(prop)

        additional = schema.get("additionalProperties")
        if additional is True or isinstance(additional, dict):
            dictionary = self.graph.new_model(kind=ModelKind.DICTIONARY)
            self._fill_collection(dictionary, ModelKind.DICTIONARY, additional if isinstance(additional, dict) else {})
            if additional is True:
                dictionary.link.kind = ModelKind.GENERIC
            properties.append(dictionary)
        return properties

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    def services(self) -> list[Service]:
        services: dict[str, Service] = {}
        for path, raw_path_item in (self.document.get("paths") or {}).items():
            path_item = resolve_if_ref(self.document, raw_path_item)
            if not isinstance(path_item, dict):
                continue
            path_parameters = path_item.get("parameters") or []

            for method, raw_operation in path_item.items():
                if method not in _HTTP_METHODS:
                    continue
                spec_operation = resolve_if_ref(self.document, raw_operation)
                if not isinstance(spec_operation, dict):
                    continue

                tags = spec_operation.get("tags") or [DEFAULT_SERVICE_NAME]
                for tag in tags:
                    name = service_name(str(tag)) or DEFAULT_SERVICE_NAME
                    service = services.setdefault(name, Service(name=name))
                    operation = self.operation(name, path, method, spec_operation, path_parameters)
                    service.operations.append(operation)
                    service.imports.extend(operation.imports)

        for service in services.values():
            service.imports = _unique_sorted(service.imports)
        return list(services.values())

    def operation(
        self,
        service: str,
        path: str,
        method: str,
        spec_operation: dict[str, Any],
        path_parameters: list[Any],
    ) -> Operation:
        operation_id = spec_operation.get("operationId")
        operation = Operation(
            service=service,
            name=operation_name(operation_id) if operation_id else camel_case(f"{method}{path}"),
            method=method.upper(),
            path=path,
            operation_id=operation_id,
            summary=spec_operation.get("summary"),
            description=spec_operation.get("description"),
            deprecated=bool(spec_operation.get("deprecated")),
        )

        parameters = [
            self.parameter(raw)
            for raw in merge_parameters(
                [resolve_if_ref(self.document, p) for p in path_parameters],
                [resolve_if_ref(self.document, p) for p in spec_operation.get("parameters") or []],
            )
        ]
        parameters = [p for p in parameters if p is not None]
        if spec_operation.get("requestBody") is not None:
            parameters.append(self.request_body(spec_operation["requestBody"]))
        operation.parameters = sort_by_required(parameters)

        operation.responses = self.responses(spec_operation.get("responses") or {})
        operation.results = operation_results(operation.responses, self.graph)

        for model in [*operation.parameters, *operation.results]:
            operation.imports.extend(model.imports)
        operation.imports = _unique_sorted(operation.imports)
        return operation

    def parameter(self, spec_parameter: dict[str, Any]) -> Optional[Model]:
        try:
            location = ParameterLocation(spec_parameter.get("in"))
        except ValueError:
            logger.debug("Skipping parameter %r in %r", spec_parameter.get("name"), spec_parameter.get("in"))
            return None

        raw_name = str(spec_parameter.get("name", ""))
        model = self.new_model(spec_parameter.get("schema") or {}, name=parameter_name(raw_name))
        model.location = location
        model.prop = raw_name
        model.description = spec_parameter.get("description") or model.description
        model.is_required = bool(spec_parameter.get("required")) or location == ParameterLocation.PATH
        return model

    def request_body(self, raw_body: Any) -> Model:
        body = resolve_if_ref(self.document, raw_body)
        model = self.graph.new_model(name="requestBody", location=ParameterLocation.BODY, prop="requestBody")
        content = body.get("content") or {}
        media_type = preferred_media_type(content)
        if media_type is not None:
            model.media_type = media_type
            self.fill_model(model, (content[media_type] or {}).get("schema") or {})
        model.description = body.get("description") or model.description
        model.is_required = bool(body.get("required"))
        return model

    def responses(self, raw_responses: dict[Any, Any]) -> list[Model]:
        """Build a response node per declared status code, ordered by code."""
        responses = []
        for key, raw in raw_responses.items():
            code = response_code(key)
            if code is None:
                continue
            responses.append(self.response(raw, code))
        return sorted(responses, key=lambda r: r.code)

    def response(self, raw_response: Any, code: int) -> Model:
        spec_response = resolve_if_ref(self.document, raw_response) or {}
        model = self.graph.new_model(kind=ModelKind.GENERIC, code=code)
        content = spec_response.get("content") or {}
        media_type = preferred_media_type(content)
        if media_type is not None:
            self.fill_model(model, (content[media_type] or {}).get("schema") or {})
        model.description = spec_response.get("description")
        return model


def merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field).
    """
    overridden = {(p.get("name", ""), p.get("in", "")) for p in op_params}
    merged = [p for p in path_params if (p.get("name", ""), p.get("in", "")) not in overridden]
    merged.extend(op_params)
    return merged


def sort_by_required(parameters: list[Model]) -> list[Model]:
    """Stable sort putting parameters that need a value (required, no default) first."""
    return sorted(parameters, key=lambda p: 0 if p.is_required and p.default is None else 1)


def operation_results(responses: list[Model], graph: ModelGraph) -> list[Model]:
    """Return the success responses, or a single ``void`` result when there are none."""
    results = [r for r in responses if r.code is not None and (r.code == 0 or 200 <= r.code < 300)]
    if not results:
        results = [graph.new_model(kind=ModelKind.GENERIC, type="void", base="void", code=200)]
    return results
