"""Graph enrichment passes.

Each pass walks the extracted graph in lockstep with the hoisted document
and fills in what the extractor leaves out. All of them are guarded by a
:class:`~specforge.graph.VisitedSet`, so cyclic schemas terminate and each
node is handled once per pass.

1. **Composites** (:mod:`~specforge.enrichment.composites`) -- members of
   ``oneOf``/``anyOf``/``allOf`` models, with ``allOf`` flattened and
   validated.
2. **Links** (:mod:`~specforge.enrichment.links`) -- element and value
   models of arrays and dictionaries that point at named schemas.
3. **Metadata** (:mod:`~specforge.enrichment.metadata`) -- format,
   integer width, deprecation, vendor extensions and mock data, the latter
   produced by :mod:`~specforge.enrichment.mock_data`.
"""

from specforge.enrichment.composites import ensure_composite_models
from specforge.enrichment.links import ensure_model_links
from specforge.enrichment.metadata import MetadataPass, apply_model_metadata
from specforge.enrichment.mock_data import MockDataGenerator

__all__ = [
    "ensure_composite_models",
    "ensure_model_links",
    "MetadataPass",
    "apply_model_metadata",
    "MockDataGenerator",
]
