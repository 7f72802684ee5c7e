"""Rewrite a document so that every schema needing a generated type is named.

Code generators can only emit a class, interface or enum for a schema that has
a name. Anonymous schemas nested inside properties, array items, dictionary
values, composite branches or operation bodies are therefore *hoisted*: a
deep copy is registered under ``components/schemas`` with a name derived from
its position, and the inline location is replaced with a ``$ref`` to it.

The stages, in the order :func:`hoist_document` runs them:

1. :func:`keep_first_tag` -- returns a deep copy of the input, so the
   caller's document is never touched.
2. :func:`hoist_operation_bodies` -- JSON request and response bodies.
3. :func:`hoist_inline_schemas` -- depth-first over ``components/schemas``.
4. :func:`inline_non_object_refs` -- the opposite direction: references to
   schemas that will never become a generated type (arrays, dictionaries,
   primitives) are replaced by the schema body and the named entry deleted.

Hoisting only restructures the document. Semantic problems such as an
``allOf`` composing a primitive are reported later by
:mod:`specforge.enrichment.composites`.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Optional

from specforge.generator.naming import camel_case, upper_first
from specforge.parser.extractor import schema_type
from specforge.parser.resolver import (
    is_ref,
    ref_schema_name,
    resolve_if_ref,
    resolve_ref,
    schema_ref,
)

logger = logging.getLogger(__name__)

HOISTED_EXTENSION = "x-specforge-hoisted"
"""Vendor extension set on every schema created by hoisting."""

_COMPOSITE_KEYS = (("anyOf", "AnyOf"), ("allOf", "AllOf"), ("oneOf", "OneOf"))


def hoist_document(document: dict[str, Any]) -> dict[str, Any]:
    """Run every hoisting stage and return the rewritten copy of *document*."""
    hoisted = keep_first_tag(document)
    ensure_schemas(hoisted)
    hoist_operation_bodies(hoisted)
    hoist_inline_schemas(hoisted)
    return inline_non_object_refs(hoisted)


def keep_first_tag(document: dict[str, Any]) -> dict[str, Any]:
    """Return a deep copy of *document* where every ``tags`` list of strings keeps its first entry.

    An operation declaring several tags would otherwise be generated once per
    tag.
    """

    def _copy(value: Any, key: Optional[str] = None) -> Any:
        if key == "tags" and isinstance(value, list) and value and isinstance(value[0], str):
            return [value[0]]
        if isinstance(value, dict):
            return {k: _copy(v, k) for k, v in value.items()}
        if isinstance(value, list):
            return [_copy(v) for v in value]
        return copy.deepcopy(value)

    return _copy(document)


def ensure_schemas(document: dict[str, Any]) -> dict[str, Any]:
    """Make sure ``components/schemas`` exists and return it."""
    components = document.setdefault("components", {})
    if components.get("schemas") is None:
        components["schemas"] = {}
    return components["schemas"]


# --- Operation bodies ---


def _operation_base_name(operation: dict[str, Any], path: str, method: str) -> str:
    return upper_first(camel_case(operation.get("operationId") or f"{path}-{method}"))


def _is_hoistable_body(schema: Any) -> bool:
    if not isinstance(schema, dict) or is_ref(schema):
        return False
    return schema_type(schema)[0] in ("object", "array") or is_composite(schema)


def _hoist_json_body(
    document: dict[str, Any], container: Any, schema_name: str
) -> None:
    if not isinstance(container, dict):
        return
    media = (container.get("content") or {}).get("application/json")
    if not isinstance(media, dict) or not _is_hoistable_body(media.get("schema")):
        return
    document["components"]["schemas"][schema_name] = media["schema"]
    media["schema"] = schema_ref(schema_name)
    logger.debug("Hoisted operation body as %s", schema_name)


def hoist_operation_bodies(document: dict[str, Any]) -> None:
    """Give inline JSON request and response bodies a name.

    Responses become ``{Operation}{code}Response`` and request bodies
    ``{Operation}RequestContent``, where ``{Operation}`` is the PascalCased
    ``operationId`` (or path and method when there is none). This runs before
    :func:`hoist_inline_schemas` so that the new entries get the same nested
    treatment as every other named schema.
    """
    ensure_schemas(document)
    for path, path_item in (document.get("paths") or {}).items():
        for method, raw_operation in (path_item or {}).items():
            operation = resolve_if_ref(document, raw_operation)
            if not isinstance(operation, dict):
                continue
            base_name = _operation_base_name(operation, path, method)

            for code, raw_response in (operation.get("responses") or {}).items():
                response = resolve_if_ref(document, raw_response)
                _hoist_json_body(document, response, f"{base_name}{code}Response")

            if "requestBody" in operation:
                request_body = resolve_if_ref(document, operation["requestBody"])
                _hoist_json_body(document, request_body, f"{base_name}RequestContent")


# --- Nested inline schemas ---


def is_composite(schema: dict[str, Any]) -> bool:
    return bool(schema.get("allOf") or schema.get("anyOf") or schema.get("oneOf"))


def _is_string_enum(schema: dict[str, Any]) -> bool:
    return schema_type(schema)[0] == "string" and bool(schema.get("enum"))


def _has_sub_schemas_to_visit(schema: Any) -> bool:
    if not isinstance(schema, dict) or is_ref(schema):
        return False
    return (
        schema_type(schema)[0] in ("object", "array")
        or is_composite(schema)
        or bool(schema.get("not"))
        or _is_string_enum(schema)
    )


def _needs_name(schema: dict[str, Any]) -> bool:
    return (
        (schema_type(schema)[0] == "object" and bool(schema.get("properties")))
        or is_composite(schema)
        or _is_string_enum(schema)
    )


@dataclass
class _Candidate:
    """An inline schema found at ``container[key]``."""

    name_parts: list[str]
    container: Any
    key: Any

    @property
    def schema(self) -> dict[str, Any]:
        return self.container[self.key]


def _composite_candidates(
    schema: dict[str, Any], name_parts: list[str], keyword: str, prefix: str
) -> list[_Candidate]:
    candidates = []
    branches = schema[keyword]
    inline_index = 0
    for i, branch in enumerate(branches):
        if not _has_sub_schemas_to_visit(branch):
            continue
        if branch.get("title"):
            parts = [upper_first(camel_case(branch["title"]))]
        else:
            parts = [*name_parts, f"{prefix}{inline_index or ''}"]
        candidates.append(_Candidate(parts, branches, i))
        inline_index += 1
    return candidates


def _candidates(name_parts: list[str], schema: dict[str, Any]) -> list[_Candidate]:
    candidates: list[_Candidate] = []
    if _has_sub_schemas_to_visit(schema.get("not")):
        candidates.append(_Candidate([*name_parts, "Not"], schema, "not"))
    for keyword, prefix in _COMPOSITE_KEYS:
        if schema.get(keyword):
            candidates.extend(_composite_candidates(schema, name_parts, keyword, prefix))
    if _has_sub_schemas_to_visit(schema.get("items")):
        candidates.append(_Candidate([*name_parts, "Inner"], schema, "items"))
    properties = schema.get("properties") or {}
    for name, property_schema in properties.items():
        if _has_sub_schemas_to_visit(property_schema):
            candidates.append(_Candidate([*name_parts, name], properties, name))
    if _has_sub_schemas_to_visit(schema.get("additionalProperties")):
        candidates.append(_Candidate([*name_parts, "Value"], schema, "additionalProperties"))
    return candidates


def _hoist_sub_schemas(name_parts: list[str], schema: dict[str, Any]) -> list[tuple[str, dict[str, Any]]]:
    """Hoist the nameable inline children of *schema*, deepest first.

    Children are processed before the parent is copied, so a hoisted copy
    already holds ``$ref`` objects for its own nested schemas.

    Returns:
        ``(name, schema)`` pairs to register under ``components/schemas``.
    """
    candidates = _candidates(name_parts, schema)

    nested: list[tuple[str, dict[str, Any]]] = []
    for candidate in candidates:
        nested.extend(_hoist_sub_schemas(candidate.name_parts, candidate.schema))

    hoisted: list[tuple[str, dict[str, Any]]] = []
    for candidate in candidates:
        sub_schema = candidate.schema
        if not _needs_name(sub_schema):
            continue
        parts = [*candidate.name_parts, *(["Enum"] if _is_string_enum(sub_schema) else [])]
        name = "".join(upper_first(part) for part in parts)
        hoisted.append((name, copy.deepcopy({**sub_schema, HOISTED_EXTENSION: True})))
        candidate.container[candidate.key] = schema_ref(name)

    return [*hoisted, *nested]


def hoist_inline_schemas(document: dict[str, Any]) -> None:
    """Hoist every nameable inline schema nested in ``components/schemas``."""
    schemas = ensure_schemas(document)
    for name, schema in list(schemas.items()):
        if is_ref(schema) or not isinstance(schema, dict):
            continue
        for hoisted_name, hoisted_schema in _hoist_sub_schemas([name], schema):
            logger.debug("Hoisted inline schema %s", hoisted_name)
            schemas[hoisted_name] = hoisted_schema


# --- Non-object reference inlining ---


def _is_inlinable(schema: Any) -> bool:
    if not isinstance(schema, dict):
        return False
    raw_type = schema_type(schema)[0]
    return bool(raw_type) and raw_type != "object" and not _is_string_enum(schema)


def inline_non_object_refs(document: dict[str, Any]) -> dict[str, Any]:
    """Replace references to non-object, non-enum schemas with the schema body.

    Only objects and enums become generated named types, so an array or
    primitive alias must appear as an inline expression wherever it is used.
    Inlined named schemas that are no longer needed are deleted.

    A chain of such aliases referring back to itself (``A`` is an array of
    ``A``) cannot be inlined; those references are kept along with their
    targets.

    Returns:
        A new document; *document* is left untouched.
    """
    inlined: set[str] = set()
    kept: set[str] = set()

    def _copy(value: Any, stack: tuple[str, ...]) -> Any:
        if isinstance(value, dict):
            if is_ref(value):
                ref = value["$ref"]
                resolved = resolve_ref(document, ref)
                if _is_inlinable(resolved):
                    if ref in stack:
                        kept.add(ref)
                        return dict(value)
                    inlined.add(ref)
                    return _copy(resolved, (*stack, ref))
            return {k: _copy(v, stack) for k, v in value.items()}
        if isinstance(value, list):
            return [_copy(v, stack) for v in value]
        return copy.deepcopy(value)

    result = _copy(document, ())

    schemas = result["components"]["schemas"]
    for ref in sorted(inlined - kept):
        name = ref_schema_name(ref)
        if name is not None and name in schemas:
            logger.debug("Inlined non-object schema %s", name)
            del schemas[name]
    return result
