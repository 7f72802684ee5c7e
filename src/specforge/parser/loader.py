"""Read bundled OpenAPI documents from a local file, a URL, or stdin.

The compiler expects a document whose references have already been bundled
into a single file; this module only performs the I/O and turns the text into
a ``dict``. Both JSON and YAML are accepted, and the document must declare an
OpenAPI 3.x version.

The two public functions are:

* :func:`load_document` -- Load and parse a document from any supported source.
* :func:`validate_openapi_version` -- Check and return the ``openapi`` version
  string, rejecting Swagger 2.x.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specforge.exceptions import SpecParseError

logger = logging.getLogger(__name__)


def load_document(source: str) -> dict[str, Any]:
    """Load an OpenAPI document from a URL, file path, or stdin (``-``).

    Args:
        source: An ``http(s)://`` URL, a file path, or ``-`` for stdin.

    Returns:
        The parsed document.

    Raises:
        SpecParseError: If the source cannot be read, parsed, or does not
            declare an OpenAPI 3.x version.
    """
    if source == "-":
        text, hint = _read_stdin(), ""
    elif source.startswith(("http://", "https://")):
        text, hint = _fetch(source)
    else:
        text, hint = _read_file(Path(source))

    document = parse_document(text, hint=hint)
    validate_openapi_version(document)
    logger.debug("Loaded OpenAPI %s document from %s", document["openapi"], source)
    return document


def _read_stdin() -> str:
    try:
        text = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc
    if not text.strip():
        raise SpecParseError("No input received from stdin")
    return text


def _fetch(url: str) -> tuple[str, str]:
    """Fetch a document over HTTP, using the content type as a format hint."""
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        return response.text, "json"
    if "yaml" in content_type or "yml" in content_type:
        return response.text, "yaml"
    return response.text, ""


def _read_file(path: Path) -> tuple[str, str]:
    if not path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc
    if not text.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        return text, "json"
    if suffix in (".yaml", ".yml"):
        return text, "yaml"
    return text, ""


def parse_document(text: str, hint: str = "") -> dict[str, Any]:
    """Parse *text* as JSON or YAML.

    JSON is tried first unless *hint* is ``"yaml"``; valid JSON is also valid
    YAML, but the JSON parser is stricter and gives better error messages.

    Args:
        text: The raw document text.
        hint: Optional format hint (``"json"`` or ``"yaml"``).

    Raises:
        SpecParseError: If the text parses as neither format, or parses to
            something other than a mapping.
    """
    errors: list[str] = []

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(text))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            errors.append(f"JSON error: {exc}")

    try:
        return _require_mapping(yaml.safe_load(text))
    except yaml.YAMLError as exc:
        errors.append(f"YAML error: {exc}")

    raise SpecParseError("Failed to parse document as JSON or YAML\n  " + "\n  ".join(errors))


def _require_mapping(value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        found = type(value).__name__ if value is not None else "empty document"
        raise SpecParseError(f"Document must be a JSON/YAML object (got {found})")
    return value


def validate_openapi_version(document: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    Raises:
        SpecParseError: If the version is missing, not 3.x, or the document
            is a Swagger 2.x document.
    """
    if "swagger" in document:
        raise SpecParseError(
            f"Swagger {document['swagger']} is not supported. "
            "Convert the document to OpenAPI 3.x first."
        )

    version = document.get("openapi")
    if version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(version)
    if not version_str.startswith("3."):
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version_str}. Only OpenAPI 3.x is supported."
        )
    return version_str
