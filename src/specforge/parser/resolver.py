"""Resolve ``$ref`` JSON Reference pointers in OpenAPI documents.

OpenAPI documents use ``$ref`` pointers (e.g.
``{"$ref": "#/components/schemas/Pet"}``) to share schemas.
:func:`resolve_ref` and :func:`resolve_if_ref` are pure lookups against the
*current* document. Every compilation stage that rewrites
``components/schemas`` hands a new document to the next stage, so callers
always resolve against the snapshot they own.

Only **internal** references (those starting with ``#/``) are supported.
Anything that cannot be resolved raises
:class:`~specforge.exceptions.UnresolvableReferenceError`.
"""

from __future__ import annotations

from typing import Any

from specforge.exceptions import UnresolvableReferenceError

SCHEMA_REF_PREFIX = "#/components/schemas/"


def is_ref(node: Any) -> bool:
    """Return ``True`` if *node* is a reference object."""
    return isinstance(node, dict) and "$ref" in node


def split_ref(ref: str) -> list[str]:
    """Split a ``#/a/b/c`` pointer into unescaped path segments.

    Handles RFC 6901 JSON Pointer escaping (``~1`` for ``/``, ``~0`` for
    ``~``).

    Raises:
        UnresolvableReferenceError: If the reference is external.
    """
    if not ref.startswith("#/"):
        raise UnresolvableReferenceError(
            ref, "only internal references (#/...) are supported"
        )
    return [segment.replace("~1", "/").replace("~0", "~") for segment in ref[2:].split("/")]


def schema_ref(name: str) -> dict[str, str]:
    """Build a reference object pointing at ``components/schemas/<name>``."""
    return {"$ref": f"{SCHEMA_REF_PREFIX}{name.replace('~', '~0').replace('/', '~1')}"}


def ref_schema_name(ref: str) -> str | None:
    """Return the schema name a ``#/components/schemas/...`` reference targets."""
    segments = split_ref(ref)
    if len(segments) == 3 and segments[:2] == ["components", "schemas"]:
        return segments[2]
    return None


def resolve_ref(document: dict[str, Any], ref: str) -> Any:
    """Resolve a single ``$ref`` string against *document*.

    Args:
        document: The document the reference lives in.
        ref: The ``$ref`` string (e.g. ``"#/components/schemas/Pet"``).

    Returns:
        The value found at the referenced path. It is **not** copied.

    Raises:
        UnresolvableReferenceError: If the reference is external, if any
            segment of the pointer does not exist, or if the pointer
            resolves to ``None``.
    """
    current: Any = document
    for segment in split_ref(ref):
        if isinstance(current, dict):
            if segment not in current:
                raise UnresolvableReferenceError(ref, f"key '{segment}' not found")
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise UnresolvableReferenceError(
                    ref, f"invalid array index '{segment}'"
                ) from exc
        else:
            raise UnresolvableReferenceError(
                ref, f"cannot navigate into {type(current).__name__}"
            )

    if current is None:
        raise UnresolvableReferenceError(ref, "target is empty")
    return current


def resolve_if_ref(document: dict[str, Any], node: Any) -> Any:
    """Return *node* unchanged unless it is a reference, which is resolved."""
    if is_ref(node):
        return resolve_ref(document, node["$ref"])
    return node

