"""Project every graph node into TypeScript, Java and Python names and types.

Each target has its own primitive table keyed by raw type and format, its own
collection spellings and its own reserved-word rules (see
:mod:`specforge.generator.naming`). The three ``*_type`` functions dispatch on
:class:`~specforge.models.ModelKind` so that every kind is handled explicitly
for every target.

Array and dictionary elements are projected recursively through ``link``.
When the element is an enum the raw ``type`` (the enum's name) is used
instead, so that a list of enum values does not expand into the enum's
underlying primitive.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from specforge.generator.naming import to_java_name, to_python_name, trim_quotes
from specforge.graph import VisitedSet
from specforge.models import COMPOSED_KINDS, Model, ModelKind, ParsedApi

logger = logging.getLogger(__name__)

PRIMITIVE_TYPES = frozenset({"string", "integer", "number", "boolean", "null", "any", "binary", "void"})

_COLLECTION_KINDS = frozenset({ModelKind.ARRAY, ModelKind.DICTIONARY})


# --- Primitive tables ---


def typescript_primitive(model: Model) -> str:
    if model.type == "string" and model.format in ("date", "date-time"):
        return "Date"
    if model.type == "binary":
        return "Blob"
    return model.type


_JAVA_NUMBER_FORMATS = {
    "int32": "Integer",
    "int64": "Long",
    "float": "Float",
    "double": "Double",
}

_JAVA_STRING_FORMATS = {
    "date": "LocalDate",
    "date-time": "OffsetDateTime",
    "uuid": "UUID",
    "uri": "URI",
    "byte": "byte[]",
    "binary": "byte[]",
}


def java_primitive(model: Model) -> str:
    if model.type == "string" and model.format in _JAVA_STRING_FORMATS:
        return _JAVA_STRING_FORMATS[model.format]
    if model.type == "binary":
        return "byte[]"
    if model.type == "number":
        if model.format in _JAVA_NUMBER_FORMATS:
            return _JAVA_NUMBER_FORMATS[model.format]
        return "Integer" if model.openapi_type == "integer" else "BigDecimal"
    if model.type == "boolean":
        return "Boolean"
    if model.type == "string":
        return "String"
    if model.type == "any":
        return "Object"
    return model.type


def python_primitive(model: Model) -> str:
    if model.type == "string" and model.format == "date":
        return "date"
    if model.type == "string" and model.format == "date-time":
        return "datetime"
    if model.type == "any":
        return "object"
    if model.type == "binary":
        return "bytearray"
    if model.type == "number":
        if model.openapi_type == "integer" or model.format in ("int32", "int64"):
            return "int"
        return "float"
    if model.type == "boolean":
        return "bool"
    if model.type == "string":
        return "str"
    return model.type


# --- Type projection ---


def _element_type(
    model: Model, project: Callable[[Model, Optional[frozenset[int]]], str], seen: frozenset[int]
) -> str:
    link = model.link
    seen = seen | {model.node_id}
    if link is None or link.kind == ModelKind.ENUM or link.node_id in seen:
        return model.type
    return project(link, seen)


def typescript_type(model: Model, seen: Optional[frozenset[int]] = None) -> str:
    seen = seen or frozenset()
    if model.kind in (ModelKind.GENERIC, ModelKind.REFERENCE):
        return typescript_primitive(model)
    if model.kind == ModelKind.ARRAY:
        return f"Array<{_element_type(model, typescript_type, seen)}>"
    if model.kind == ModelKind.DICTIONARY:
        return f"{{ [key: string]: {_element_type(model, typescript_type, seen)}; }}"
    if model.kind in COMPOSED_KINDS:
        return model.name
    # INTERFACE, ENUM
    return model.type


def java_type(model: Model, seen: Optional[frozenset[int]] = None) -> str:
    seen = seen or frozenset()
    if model.kind in (ModelKind.GENERIC, ModelKind.REFERENCE):
        return java_primitive(model)
    if model.kind == ModelKind.ARRAY:
        container = "Set" if model.unique_items else "List"
        return f"{container}<{_element_type(model, java_type, seen)}>"
    if model.kind == ModelKind.DICTIONARY:
        return f"Map<String, {_element_type(model, java_type, seen)}>"
    if model.kind in COMPOSED_KINDS:
        return model.name
    # INTERFACE, ENUM: an untyped object is an interface of type "any"
    return java_primitive(model) if model.type in PRIMITIVE_TYPES else model.type


def python_type(model: Model, seen: Optional[frozenset[int]] = None) -> str:
    seen = seen or frozenset()
    if model.kind in (ModelKind.GENERIC, ModelKind.REFERENCE):
        return python_primitive(model)
    if model.kind == ModelKind.ARRAY:
        return f"List[{_element_type(model, python_type, seen)}]"
    if model.kind == ModelKind.DICTIONARY:
        return f"Dict[str, {_element_type(model, python_type, seen)}]"
    if model.kind in COMPOSED_KINDS:
        return model.name
    return python_primitive(model) if model.type in PRIMITIVE_TYPES else model.type


def is_primitive(model: Model) -> bool:
    return (
        model.type in PRIMITIVE_TYPES
        and model.kind not in COMPOSED_KINDS
        and model.kind not in _COLLECTION_KINDS
    )


# --- Node projection ---


def project_model(model: Model) -> None:
    """Set every projection field of *model* (not of its children)."""
    model.name = trim_quotes(model.name)
    model.typescript_name = model.name
    model.typescript_type = typescript_type(model)
    model.java_name = to_java_name(model.name)
    model.java_type = java_type(model)
    model.python_name = to_python_name("property", model.name)
    model.python_type = python_type(model)
    model.is_primitive = is_primitive(model)


class _Projector:
    def __init__(self) -> None:
        self.visited = VisitedSet()

    def walk(self, model: Model) -> None:
        if not self.visited.visit(model):
            return
        # Children first so element projections see final names
        if model.link is not None:
            self.walk(model.link)
        for prop in model.properties:
            self.walk(prop)
        project_model(model)


def project_graph(parsed: ParsedApi) -> None:
    """Project every model, property, parameter, response and result of *parsed*."""
    projector = _Projector()
    for model in parsed.models:
        projector.walk(model)
    for service in parsed.services:
        for operation in service.operations:
            for model in [*operation.parameters, *operation.responses, *operation.results]:
                projector.walk(model)
    logger.debug("Projected %d nodes", len(projector.visited))
