"""Compile an OpenAPI document into the render data handed to templates.

:func:`compile_document` is the whole pipeline. Each stage takes ownership
of what the previous one produced:

1. hoist anonymous schemas (a rewritten copy; the input is never touched);
2. set up mock data generation over the hoisted document;
3. extract the model and service graph;
4. resolve composite members, complete links;
5. normalize operations and enrich every node with schema metadata;
6. project names and types for every target;
7. assemble models, services and operations in a stable order.

Any failure aborts the run; nothing partial is returned.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specforge.enrichment.composites import ensure_composite_models
from specforge.enrichment.links import ensure_model_links, schemas_by_type_name
from specforge.enrichment.metadata import MetadataPass, apply_model_metadata, vendor_extensions
from specforge.enrichment.mock_data import MockDataGenerator
from specforge.generator.naming import to_python_name
from specforge.generator.operations import normalize_operations
from specforge.generator.projection import project_graph
from specforge.models import (
    APIInfo,
    EnumValue,
    GeneratorConfig,
    Model,
    ModelKind,
    Operation,
    ParsedApi,
    RenderData,
    Service,
)
from specforge.parser.extractor import DEFAULT_SERVICE_NAME, extract_api
from specforge.parser.hoister import hoist_document
from specforge.parser.resolver import resolve_if_ref

logger = logging.getLogger(__name__)


def compile_document(
    document: dict[str, Any], config: Optional[GeneratorConfig] = None
) -> RenderData:
    """Run every compilation stage over *document*.

    Args:
        document: A parsed OpenAPI 3.x document. It is not modified.
        config: Supplies template ``metadata`` and mock data settings.

    Returns:
        The finished :class:`~specforge.models.RenderData`.

    Raises:
        UnresolvableReferenceError: If a ``$ref`` does not resolve.
        InvalidCompositionError: If an ``allOf`` composes a non-object.
    """
    config = config or GeneratorConfig()

    hoisted = hoist_document(document)
    mock_data = None
    if config.mock_data.enabled:
        mock_data = MockDataGenerator(hoisted, config.mock_data)

    parsed = extract_api(hoisted)
    ensure_composite_models(parsed)
    ensure_model_links(hoisted, parsed)

    metadata = MetadataPass(hoisted, mock_data)
    normalize_operations(hoisted, parsed, metadata)
    apply_model_metadata(hoisted, parsed, metadata)

    project_graph(parsed)
    render_data = assemble(hoisted, parsed, config.metadata)
    logger.info(
        "Compiled %d models, %d services, %d operations",
        len(render_data.models),
        len(render_data.services),
        len(render_data.all_operations),
    )
    return render_data


# --- Assembly ---


def assemble(
    document: dict[str, Any], parsed: ParsedApi, metadata: Optional[dict[str, Any]] = None
) -> RenderData:
    """Order and finish the enriched graph into :class:`~specforge.models.RenderData`."""
    schemas = schemas_by_type_name(document)
    for model in parsed.models:
        assemble_model(model, resolve_if_ref(document, schemas.get(model.name)))

    models = sorted(parsed.models, key=lambda m: m.name)
    services = sort_services(parsed.services)
    return RenderData(
        models=models,
        services=services,
        all_operations=unique_operations(services),
        info=APIInfo.model_validate(document.get("info") or {}),
        vendor_extensions=vendor_extensions(document),
        metadata=dict(metadata or {}),
    )


def assemble_model(model: Model, schema: Any) -> None:
    """Set the per-model fields that only named models carry."""
    model.name_snake_case = to_python_name("model", model.name)
    reference_types = [p.type for p in model.properties if p.kind == ModelKind.REFERENCE]
    model.unique_imports = sorted({*model.imports, *reference_types} - {model.name})
    if isinstance(schema, dict) and schema.get("additionalProperties"):
        model.additional_properties_property = next(
            (p for p in model.properties if not p.name and p.kind == ModelKind.DICTIONARY),
            None,
        )


def sort_services(services: list[Service]) -> list[Service]:
    """The default service first, then the rest by name."""
    return sorted(services, key=lambda s: (s.name != DEFAULT_SERVICE_NAME, s.name))


def unique_operations(services: list[Service]) -> list[Operation]:
    seen: set[str] = set()
    operations = []
    for service in services:
        for operation in service.operations:
            if operation.name in seen:
                continue
            seen.add(operation.name)
            operations.append(operation)
    return operations


# --- Serialization ---


def render_data_to_dict(render_data: RenderData) -> dict[str, Any]:
    """Convert *render_data* to plain JSON-compatible data.

    The graph may be cyclic. A node met again while it is already being
    serialized higher up the same path is written as ``{"$ref": <name>}``
    (or ``"#<node_id>"`` for unnamed nodes).
    """
    return {
        "models": [_model_to_dict(m, frozenset()) for m in render_data.models],
        "services": [_service_to_dict(s) for s in render_data.services],
        "allOperations": [op.name for op in render_data.all_operations],
        "info": render_data.info.model_dump(by_alias=True, exclude_none=True),
        "vendorExtensions": render_data.vendor_extensions,
        "metadata": render_data.metadata,
    }


_MODEL_FIELDS = (
    "name", "type", "base", "description", "format", "openapi_type",
    "is_definition", "is_required", "is_nullable", "is_read_only",
    "is_enum", "is_integer", "is_short", "is_long", "is_not_schema",
    "is_hoisted", "is_primitive", "deprecated", "unique_items", "default",
    "prop", "media_type", "media_types", "collection_format", "code",
    "typescript_name", "typescript_type", "java_name", "java_type",
    "python_name", "python_type", "name_snake_case", "imports",
    "unique_imports", "vendor_extensions", "mock_data",
)


def _is_empty(value: Any) -> bool:
    if value is None or value is False:
        return True
    return isinstance(value, (str, list, dict)) and not value


def _model_ref(model: Model) -> dict[str, str]:
    return {"$ref": model.name or f"#{model.node_id}"}


def _model_to_dict(model: Model, path: frozenset[int]) -> dict[str, Any]:
    if model.node_id in path:
        return _model_ref(model)
    path = path | {model.node_id}

    data: dict[str, Any] = {"kind": model.kind.value}
    for name in _MODEL_FIELDS:
        value = getattr(model, name)
        if not _is_empty(value):
            data[name] = value
    if model.location is not None:
        data["location"] = model.location.value
    if model.enum:
        data["enum"] = [_enum_to_dict(e) for e in model.enum]
    if model.link is not None:
        # Named links are serialized where they are defined
        data["link"] = (
            _model_ref(model.link) if model.link.is_definition else _model_to_dict(model.link, path)
        )
    if model.properties:
        data["properties"] = [_model_to_dict(p, path) for p in model.properties]
    if model.composed_models:
        data["composed_models"] = [m.name for m in model.composed_models]
    if model.composed_primitives:
        data["composed_primitives"] = [_model_to_dict(p, path) for p in model.composed_primitives]
    return data


def _enum_to_dict(value: EnumValue) -> dict[str, Any]:
    data = {"name": value.name, "value": value.value, "type": value.type}
    if value.description:
        data["description"] = value.description
    return data


def _operation_to_dict(operation: Operation) -> dict[str, Any]:
    return {
        "name": operation.name,
        "method": operation.method,
        "path": operation.path,
        "operation_id": operation.operation_id,
        "summary": operation.summary,
        "description": operation.description,
        "deprecated": operation.deprecated,
        "operation_id_pascal_case": operation.operation_id_pascal_case,
        "operation_id_kebab_case": operation.operation_id_kebab_case,
        "operation_id_snake_case": operation.operation_id_snake_case,
        "imports": operation.imports,
        "vendor_extensions": operation.vendor_extensions,
        "parameters": [_model_to_dict(p, frozenset()) for p in operation.parameters],
        "responses": [_model_to_dict(r, frozenset()) for r in operation.responses],
        "results": [_model_to_dict(r, frozenset()) for r in operation.results],
    }


def _service_to_dict(service: Service) -> dict[str, Any]:
    return {
        "name": service.name,
        "class_name": service.class_name,
        "class_name_snake_case": service.class_name_snake_case,
        "name_snake_case": service.name_snake_case,
        "imports": service.imports,
        "model_imports": service.model_imports,
        "operations": [_operation_to_dict(op) for op in service.operations],
    }
