"""OpenAPI document parser -- load, hoist, resolve ``$ref`` pointers, and extract the graph.

This sub-package is the front half of the specforge pipeline: turning a raw
OpenAPI 3.x document (JSON or YAML, local file, URL or stdin) into the
initial :class:`~specforge.models.ParsedApi` graph.

Typical usage::

    from specforge.parser import extract_api, hoist_document, load_document

    document = load_document("openapi.yaml")
    parsed = extract_api(hoist_document(document))

Sub-modules:

* :mod:`~specforge.parser.loader` -- I/O layer plus format detection and
  OpenAPI version validation.
* :mod:`~specforge.parser.resolver` -- ``$ref`` lookups and full
  dereferencing with circular-reference detection.
* :mod:`~specforge.parser.hoister` -- names every anonymous schema that
  needs a generated type.
* :mod:`~specforge.parser.extractor` -- builds models and services from
  the hoisted document.
"""

from specforge.parser.extractor import extract_api
from specforge.parser.hoister import hoist_document
from specforge.parser.loader import load_document, validate_openapi_version

__all__ = ["load_document", "validate_openapi_version", "hoist_document", "extract_api"]
