"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specforge.exceptions.SpecforgeError` subclass.
Build scripts can inspect the exit code to tell a broken document apart
from a broken template directory without parsing stderr.

Example::

    $ specforge generate --spec-path api.yaml --template-dirs missing
    $ echo $?
    9   # EXIT_TEMPLATE_DIR_NOT_FOUND
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be loaded, parsed, or resolved."""

EXIT_INVALID_COMPOSITION = 8
"""A composed schema violates composition rules (``allOf`` with a non-object member)."""

EXIT_TEMPLATE_DIR_NOT_FOUND = 9
"""A requested template directory does not exist."""

EXIT_TEMPLATE_OUTPUT_ERROR = 11
"""A rendered template produced a malformed file-emission directive."""
