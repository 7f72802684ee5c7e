"""Casing helpers and per-target reserved-word rules.

The word splitting in :func:`words` follows the same boundaries as the
JavaScript tooling the generated code has historically been named with
(acronym runs, lower-to-upper transitions and digit runs are separate
words), so operation names, hoisted schema names and file names stay stable
across generator versions.

:func:`snake_case` is not built on :func:`words`: it
reproduces the Python client generator's underscore rules, where ``.`` is a
segment boundary and ``$`` becomes ``__``.
"""

from __future__ import annotations

import re
from typing import Literal

_WORD_RE = re.compile(
    r"[A-Z]?[a-z]+(?=[^A-Za-z0-9]|[A-Z]|$)"
    r"|[A-Z]+(?=[^A-Za-z0-9]|[A-Z][a-z]|$)"
    r"|[A-Z]?[a-z]+"
    r"|[A-Z]+"
    r"|[0-9]+"
)


def words(value: str) -> list[str]:
    """Split *value* into words.

    >>> words("XMLHttpRequest")
    ['XML', 'Http', 'Request']
    >>> words("/widgets/{id}-get")
    ['widgets', 'id', 'get']
    """
    return _WORD_RE.findall(value)


def upper_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def camel_case(value: str) -> str:
    """``get-widget by id`` -> ``getWidgetById``."""
    parts = [w.lower() for w in words(value)]
    if not parts:
        return ""
    return parts[0] + "".join(upper_first(p) for p in parts[1:])


def pascal_case(value: str) -> str:
    return upper_first(camel_case(value))


def kebab_case(value: str) -> str:
    """``getWidgetById`` -> ``get-widget-by-id``."""
    return "-".join(w.lower() for w in words(value))


def snake_case(value: str) -> str:
    """Underscore *value* the way the Python client generator does.

    >>> snake_case("HTTPResponseCode")
    'http_response_code'
    >>> snake_case("model.Name$v2")
    'model/name__v2'
    """
    value = value.replace(".", "/").replace("$", "__")
    value = re.sub(r"([A-Z]+)([A-Z][a-z][a-z]+)", r"\1_\2", value)
    value = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", value)
    value = re.sub(r"[-\s]", "_", value)
    return value.lower()


def trim_quotes(value: str) -> str:
    return value.strip("\"'")


# --- Reserved words ---

TYPESCRIPT_RESERVED_WORDS = frozenset({
    "arguments", "break", "case", "catch", "class", "const", "continue",
    "debugger", "default", "delete", "do", "else", "enum", "eval", "export",
    "extends", "false", "finally", "for", "function", "if", "implements",
    "import", "in", "instanceof", "interface", "let", "new", "null", "package",
    "private", "protected", "public", "return", "static", "super", "switch",
    "this", "throw", "true", "try", "typeof", "var", "void", "while", "with",
    "yield",
})

PYTHON_KEYWORDS = frozenset({
    # local variable names used inside generated API methods
    "all_params", "resource_path", "path_params", "query_params",
    "header_params", "form_params", "local_var_files", "body_params",
    "auth_settings",
    # @property
    "property",
    # typing names
    "schema", "base64", "json", "date", "float",
    # reserved words
    "and", "del", "from", "not", "while", "as", "elif", "global", "or", "with",
    "assert", "else", "if", "pass", "yield", "break", "except", "import",
    "print", "class", "exec", "in", "raise", "continue", "finally", "is",
    "return", "def", "for", "lambda", "try", "self", "nonlocal", "None", "True",
    "False", "async", "await",
})

JAVA_KEYWORDS = frozenset({
    "object", "list", "file",
    # local variables of generated API methods
    "localVarPath", "localVarQueryParams", "localVarCollectionQueryParams",
    "localVarHeaderParams", "localVarCookieParams", "localVarFormParams",
    "localVarPostBody", "localVarAccepts", "localVarAccept",
    "localVarContentTypes", "localVarContentType", "localVarAuthNames",
    "localReturnType",
    # runtime classes of the generated client
    "ApiClient", "ApiException", "ApiResponse", "Configuration", "StringUtil",
    # reserved words
    "_", "abstract", "continue", "for", "new", "switch", "assert", "default",
    "if", "package", "synchronized", "boolean", "do", "goto", "private",
    "this", "break", "double", "implements", "protected", "throw", "byte",
    "else", "import", "public", "throws", "case", "enum", "instanceof",
    "return", "transient", "catch", "extends", "int", "short", "try", "char",
    "final", "interface", "static", "void", "class", "finally", "long",
    "strictfp", "volatile", "const", "float", "native", "super", "while",
    "null", "offsetdatetime", "localdate", "localtime",
})


def escape_typescript_name(name: str) -> str:
    """Prefix TypeScript reserved words with ``_``."""
    return f"_{name}" if name in TYPESCRIPT_RESERVED_WORDS else name


def _unescape(name: str) -> str:
    # Names colliding with TypeScript were already prefixed with "_".
    return name[1:] if name.startswith("_") else name


def to_python_name(entity: Literal["model", "property", "operation"], name: str) -> str:
    """Snake-case *name* and disambiguate it from Python reserved words.

    Reserved model names become ``model_<name>``, operations ``call_<name>``
    and properties ``var<name>``.
    """
    name_snake_case = snake_case(name)
    if _unescape(name) not in PYTHON_KEYWORDS:
        return name_snake_case

    suffix = name_snake_case if name.startswith("_") else f"_{name_snake_case}"
    if entity == "model":
        return f"model{suffix}"
    if entity == "operation":
        return f"call{suffix}"
    return f"var{name_snake_case}"


def to_java_name(name: str) -> str:
    """Camel-case *name* and disambiguate it from Java reserved words."""
    unescaped = camel_case(_unescape(name))
    if unescaped not in JAVA_KEYWORDS:
        return unescaped
    if unescaped == "class":
        return "propertyClass"
    return f"_{unescaped}"
