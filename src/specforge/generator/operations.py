"""Normalize operations: responses, parameters, names and service ordering.

The extractor reports responses the way its intermediate representation
always has: only a ``default`` response coded ``200`` and no difference
between "returns anything" and "returns nothing". Generated clients and
server handler wrappers however expect:

* every declared response, keyed by status code, with the ``default``
  response under the sentinel code ``0``. An explicit ``200`` response that
  is structurally identical to ``default`` is merged into that entry;
* ``void`` responses where nothing is declared as content;
* operation names synthesised from path and method when there is no
  ``operationId``;
* body parameters named after their type, and legacy ``collectionFormat``
  values derived from ``style``/``explode``;
* operations sorted by name, and services exposing the models they import.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from specforge.enrichment.links import LinkWalker, spec_operation, spec_parameters_by_name
from specforge.enrichment.metadata import MetadataPass, vendor_extensions
from specforge.generator.naming import (
    camel_case,
    kebab_case,
    snake_case,
    to_python_name,
    upper_first,
)
from specforge.models import Model, ModelKind, Operation, ParameterLocation, ParsedApi, Service
from specforge.parser.extractor import ModelExtractor, operation_results
from specforge.parser.resolver import resolve_if_ref

logger = logging.getLogger(__name__)

DEFAULT_RESPONSE_CODE = 0
"""Sentinel status code of the ``default`` response."""

_QUERY_COLLECTION_FORMATS = {
    "spaceDelimited": "ssv",
    "pipeDelimited": "tsv",
    "simple": "csv",
    "form": "csv",
}


def generated_operation_name(path: str, method: str) -> str:
    """Name an operation without ``operationId``: ``/pets/{id}`` GET -> ``petsByIdGet``."""
    path = re.sub(r"{(.*?)}", r"by-\1", path)
    path = re.sub(r"[/:]", "-", path)
    return camel_case(f"{path}-{method}")


def collection_format(location: ParameterLocation, spec_parameter: dict[str, Any]) -> Optional[str]:
    """Translate OpenAPI 3 ``style``/``explode`` into a Swagger 2 ``collectionFormat``."""
    if location not in (ParameterLocation.QUERY, ParameterLocation.HEADER):
        return None
    style = spec_parameter.get("style") or ("form" if location == ParameterLocation.QUERY else "simple")
    explode = spec_parameter.get("explode")
    if explode is None:
        explode = style == "form"
    if explode:
        return "multi"
    if location == ParameterLocation.QUERY:
        return _QUERY_COLLECTION_FORMATS.get(style, "multi")
    return "csv"


def normalize_responses(
    extractor: ModelExtractor, raw_responses: dict[Any, Any]
) -> list[Model]:
    """Build one node per declared response, aliasing ``default`` to code ``0``.

    An explicit ``200`` response whose resolved definition equals the
    ``default`` response is dropped in favour of the ``default`` entry.
    """
    document = extractor.document
    raw_by_key = {str(key): raw for key, raw in raw_responses.items()}
    default = resolve_if_ref(document, raw_by_key.get("default"))

    responses = []
    for key, raw in raw_by_key.items():
        if key == "default":
            code: Optional[int] = DEFAULT_RESPONSE_CODE
        elif key.isdigit():
            code = int(key)
        else:
            logger.debug("Skipping response range %s", key)
            continue
        if code == 200 and default is not None and resolve_if_ref(document, raw) == default:
            continue
        responses.append(extractor.response(raw, code))
    return sorted(responses, key=lambda r: r.code)


class OperationNormalizer:
    """Rewrites the operations of a :class:`~specforge.models.ParsedApi` in place.

    Args:
        document: The hoisted document.
        parsed: Extractor output whose services are normalized.
        metadata: Shared metadata pass; parameters and responses are
            enriched through it.
    """

    def __init__(self, document: dict[str, Any], parsed: ParsedApi, metadata: MetadataPass) -> None:
        self.document = document
        self.parsed = parsed
        self.metadata = metadata
        self.extractor = ModelExtractor(document, parsed.graph)
        self.links = LinkWalker(document, parsed.models_by_name())

    def normalize(self) -> None:
        for service in self.parsed.services:
            self.normalize_service(service)

    def normalize_service(self, service: Service) -> None:
        request_imports: list[str] = []
        response_imports: list[str] = []

        for operation in service.operations:
            spec_op = spec_operation(self.document, operation.path, operation.method)
            operation.vendor_extensions = vendor_extensions(spec_op or {})
            if spec_op is not None:
                self._normalize_responses(operation, spec_op)
                response_imports.extend(
                    r.type for r in operation.responses if r.kind == ModelKind.REFERENCE
                )
                if not spec_op.get("operationId"):
                    operation.name = generated_operation_name(operation.path, operation.method.lower())

            self._normalize_parameters(operation, spec_op)
            request_imports.extend(
                p.type for p in operation.parameters if p.kind == ModelKind.REFERENCE
            )

            operation.operation_id_pascal_case = upper_first(operation.name)
            operation.operation_id_kebab_case = kebab_case(operation.name)
            operation.operation_id_snake_case = to_python_name("operation", operation.name)

        service.operations.sort(key=lambda op: op.name)
        service.model_imports = sorted(set(service.imports + request_imports + response_imports))
        service.class_name = f"{service.name}Api"
        service.class_name_snake_case = snake_case(service.class_name)
        service.name_snake_case = snake_case(service.name)

    def _normalize_responses(self, operation: Operation, spec_op: dict[str, Any]) -> None:
        raw_responses = {str(k): v for k, v in (spec_op.get("responses") or {}).items()}
        operation.responses = normalize_responses(self.extractor, raw_responses)

        for response in operation.responses:
            key = "default" if response.code == DEFAULT_RESPONSE_CODE else str(response.code)
            spec_response = resolve_if_ref(self.document, raw_responses.get(key))
            if not isinstance(spec_response, dict):
                continue
            content = spec_response.get("content")
            if not content:
                response.type = response.base = "void"
                continue
            response.media_types = list(content)
            media = content.get("application/json") or next(iter(content.values()))
            schema = (media or {}).get("schema")
            if schema is None:
                continue
            resolved = resolve_if_ref(self.document, schema)
            if isinstance(resolved, dict):
                self.links.walk(response, resolved)
            self.metadata.apply(response, schema)

        operation.results = operation_results(operation.responses, self.parsed.graph)

    def _normalize_parameters(self, operation: Operation, spec_op: Optional[dict[str, Any]]) -> None:
        spec_parameters = spec_parameters_by_name(self.document, operation.path, spec_op)

        for parameter in operation.parameters:
            spec_parameter = spec_parameters.get(parameter.prop)
            if spec_parameter is not None and parameter.location != ParameterLocation.BODY:
                schema = spec_parameter.get("schema")
                if schema is not None:
                    self.metadata.apply(parameter, schema)
                parameter.collection_format = collection_format(parameter.location, spec_parameter)

            if parameter.location == ParameterLocation.BODY:
                self._normalize_body(parameter, spec_op)

    def _normalize_body(self, parameter: Model, spec_op: Optional[dict[str, Any]]) -> None:
        parameter.name = camel_case(parameter.type) if parameter.kind == ModelKind.REFERENCE else "body"
        parameter.prop = "body"

        spec_body = resolve_if_ref(self.document, (spec_op or {}).get("requestBody"))
        if not isinstance(spec_body, dict):
            return
        content = spec_body.get("content") or {}
        if parameter.media_type and parameter.media_type in content:
            schema = (content[parameter.media_type] or {}).get("schema")
            resolved = resolve_if_ref(self.document, schema)
            if isinstance(resolved, dict):
                self.links.walk(parameter, resolved)
                self.metadata.apply(parameter, resolved)
        parameter.media_types = list(content)


def normalize_operations(document: dict[str, Any], parsed: ParsedApi, metadata: MetadataPass) -> None:
    """Normalize every operation of every service in *parsed*."""
    OperationNormalizer(document, parsed, metadata).normalize()
