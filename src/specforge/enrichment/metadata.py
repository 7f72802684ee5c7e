"""Propagate raw schema details onto graph nodes.

The extractor keeps only what it needs to decide a node's shape. Templates
also need the declared ``format``, integer width, deprecation, enum and
``not`` flags, vendor extensions and a sample value, so this pass walks every
raw schema in lockstep with its node tree and copies them across. The walk
descends into array items, dictionary values, object properties (matched by
name) and composite branches (matched by position).

One :class:`MetadataPass` is shared by the model and operation stages of a
compilation, so each node is enriched exactly once even when it is reachable
from several places.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specforge.enrichment.links import schemas_by_type_name
from specforge.enrichment.mock_data import MockDataGenerator
from specforge.generator.naming import camel_case, trim_quotes
from specforge.graph import VisitedSet
from specforge.models import Model, ModelKind, ParsedApi
from specforge.parser.extractor import schema_type
from specforge.parser.hoister import HOISTED_EXTENSION
from specforge.parser.resolver import resolve_if_ref

logger = logging.getLogger(__name__)


def vendor_extensions(source: dict[str, Any]) -> dict[str, Any]:
    """Return the ``x-`` prefixed entries of *source*."""
    return {key: value for key, value in source.items() if str(key).startswith("x-")}


class MetadataPass:
    """Copies schema metadata onto nodes, visiting each node once.

    Args:
        document: The hoisted document that schemas are resolved against.
        mock_data: Sample value generator; ``None`` leaves ``mock_data`` unset.
    """

    def __init__(self, document: dict[str, Any], mock_data: Optional[MockDataGenerator] = None) -> None:
        self.document = document
        self.mock_data = mock_data
        self.visited = VisitedSet()

    def apply(self, model: Model, schema: Any) -> None:
        """Enrich *model* and its children from *schema*, unless already done."""
        schema = resolve_if_ref(self.document, schema)
        if not isinstance(schema, dict) or not self.visited.visit(model):
            return

        raw_type, _ = schema_type(schema)
        model.format = schema.get("format")
        model.openapi_type = raw_type
        model.is_integer = raw_type == "integer"
        model.is_short = model.format == "int32"
        model.is_long = model.format == "int64"
        model.deprecated = bool(schema.get("deprecated"))
        model.is_not_schema = bool(schema.get("not"))
        model.is_enum = bool(schema.get("enum"))
        model.vendor_extensions = vendor_extensions(schema)
        model.is_hoisted = bool(model.vendor_extensions.get(HOISTED_EXTENSION))
        if self.mock_data is not None:
            model.mock_data = self.mock_data.generate(schema)

        if model.kind == ModelKind.ARRAY and model.link is not None and schema.get("items"):
            self.apply(model.link, schema["items"])

        additional = schema.get("additionalProperties")
        if model.kind == ModelKind.DICTIONARY and model.link is not None and isinstance(additional, dict):
            self.apply(model.link, additional)

        if model.is_composed:
            branches = schema.get(camel_case(model.kind.value)) or []
            for prop, branch in zip(model.properties, branches):
                self.apply(prop, branch)
            return

        properties = schema.get("properties") or {}
        for prop in model.properties:
            name = trim_quotes(prop.name)
            if name in properties:
                self.apply(prop, properties[name])
            elif not name and prop.kind == ModelKind.DICTIONARY and additional:
                self.apply(prop, {"type": "object", "additionalProperties": additional})


def apply_model_metadata(document: dict[str, Any], parsed: ParsedApi, metadata: MetadataPass) -> None:
    """Enrich every named model of *parsed* (and, through it, its properties)."""
    schemas = schemas_by_type_name(document)
    for model in parsed.models:
        schema = schemas.get(model.name)
        if schema is None:
            continue
        metadata.apply(model, schema)
    logger.debug("Schema metadata applied to %d nodes", len(metadata.visited))
