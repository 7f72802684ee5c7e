"""Complete the ``link`` of array and dictionary nodes.

The extractor leaves ``link`` empty when an array's ``items`` or a
dictionary's ``additionalProperties`` is a ``$ref``, because at that point the
referenced model may not exist yet. This pass walks each raw schema in
lockstep with its node tree and points such links at the named model.
Inline element schemas already have a linked node; the walk simply descends
into it.

Named object models also get their ``type`` set to their own name here, so
that projections refer to the generated type rather than ``any``.
"""

from __future__ import annotations

from typing import Any

from specforge.generator.naming import camel_case, trim_quotes
from specforge.graph import VisitedSet
from specforge.models import Model, ModelKind, ParsedApi
from specforge.parser.extractor import merge_parameters, schema_type, type_name
from specforge.parser.resolver import is_ref, resolve_if_ref


def schemas_by_type_name(document: dict[str, Any]) -> dict[str, Any]:
    schemas = (document.get("components") or {}).get("schemas") or {}
    return {type_name(name): schema for name, schema in schemas.items()}


def spec_operation(document: dict[str, Any], path: str, method: str) -> dict[str, Any] | None:
    path_item = resolve_if_ref(document, (document.get("paths") or {}).get(path))
    if not isinstance(path_item, dict):
        return None
    return resolve_if_ref(document, path_item.get(method.lower()))


def spec_parameters_by_name(
    document: dict[str, Any], path: str, spec_op: dict[str, Any] | None
) -> dict[str, dict[str, Any]]:
    """Raw parameters of an operation (path-level included), keyed by ``name``."""
    path_item = resolve_if_ref(document, (document.get("paths") or {}).get(path)) or {}
    merged = merge_parameters(
        [resolve_if_ref(document, p) for p in path_item.get("parameters") or []],
        [resolve_if_ref(document, p) for p in (spec_op or {}).get("parameters") or []],
    )
    return {p.get("name"): p for p in merged}


def ensure_model_links(document: dict[str, Any], parsed: ParsedApi) -> None:
    """Fill in missing links on every model and operation parameter of *parsed*."""
    walker = LinkWalker(document, parsed.models_by_name())
    schemas = schemas_by_type_name(document)

    for model in parsed.models:
        schema = resolve_if_ref(document, schemas.get(model.name))
        if not isinstance(schema, dict):
            continue
        if schema_type(schema)[0] == "object" and schema.get("properties"):
            model.type = model.name
        walker.walk(model, schema)

    for service in parsed.services:
        for operation in service.operations:
            spec_op = spec_operation(document, operation.path, operation.method)
            parameters = spec_parameters_by_name(document, operation.path, spec_op)
            for parameter in operation.parameters:
                spec_parameter = parameters.get(parameter.prop)
                if spec_parameter is None:
                    continue
                schema = resolve_if_ref(document, spec_parameter.get("schema"))
                if isinstance(schema, dict):
                    walker.walk(parameter, schema)


class LinkWalker:
    """Lockstep walk of raw schemas and nodes; each node is walked once."""

    def __init__(self, document: dict[str, Any], models_by_name: dict[str, Model]) -> None:
        self.document = document
        self.models_by_name = models_by_name
        self.visited = VisitedSet()

    def _link_element(self, model: Model, element: Any) -> None:
        if is_ref(element):
            target = self.models_by_name.get(type_name(element["$ref"]))
            if target is not None and model.link is None:
                model.link = target
        elif model.link is not None and isinstance(element, dict):
            self.walk(model.link, element)

    def walk(self, model: Model, schema: dict[str, Any]) -> None:
        if not self.visited.visit(model):
            return

        if model.kind == ModelKind.DICTIONARY and schema.get("additionalProperties"):
            self._link_element(model, schema["additionalProperties"])
        elif model.kind == ModelKind.ARRAY and schema.get("items"):
            self._link_element(model, schema["items"])

        properties = schema.get("properties") or {}
        for prop in model.properties:
            if prop in self.visited:
                continue
            if not prop.name and prop.kind == ModelKind.DICTIONARY and not model.is_composed:
                # additionalProperties of an object that also declares properties
                self.walk(prop, schema)
            elif trim_quotes(prop.name) in properties:
                sub_schema = resolve_if_ref(self.document, properties[trim_quotes(prop.name)])
                if isinstance(sub_schema, dict):
                    self.walk(prop, sub_schema)

        if model.is_composed:
            branches = schema.get(camel_case(model.kind.value)) or []
            for prop, branch in zip(model.properties, branches):
                sub_schema = resolve_if_ref(self.document, branch)
                if isinstance(sub_schema, dict):
                    self.walk(prop, sub_schema)
