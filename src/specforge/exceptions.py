"""Exception hierarchy for specforge.

All exceptions inherit from :class:`SpecforgeError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specforge.exit_codes`.
The top-level error handler in :func:`specforge.app.main` catches
``SpecforgeError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Compilation is fail-fast: none of these errors is recovered from inside a
run, and nothing is written to the output directory once one is raised.

Subclass hierarchy::

    SpecforgeError (exit 1)
    +-- InvalidUsageError                  (exit 2)
    +-- SpecParseError                     (exit 7)
    |   +-- UnresolvableReferenceError     (exit 7)
    +-- InvalidCompositionError            (exit 8)
    +-- TemplateDirectoryNotFoundError     (exit 9)
    +-- TemplateOutputError                (exit 11)
    +-- ConfigError                        (exit 1)
"""

from specforge.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_COMPOSITION,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_TEMPLATE_DIR_NOT_FOUND,
    EXIT_TEMPLATE_OUTPUT_ERROR,
)


class SpecforgeError(Exception):
    """Base exception for all specforge errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specforge.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecforgeError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(SpecforgeError):
    """Raised when the OpenAPI document cannot be loaded, parsed, or validated."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class UnresolvableReferenceError(SpecParseError):
    """Raised when a ``$ref`` does not point at an existing node of the document.

    Args:
        ref: The offending reference string, e.g. ``#/components/schemas/Pet``.
        reason: Optional detail on where the lookup failed.
    """

    def __init__(self, ref: str, reason: str | None = None):
        message = f"Unable to resolve reference '{ref}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.ref = ref


class InvalidCompositionError(SpecforgeError):
    """Raised when an ``allOf`` schema composes a non-object member."""

    exit_code = EXIT_INVALID_COMPOSITION

    def __init__(self, model_name: str):
        super().__init__(
            f'Schema "{model_name}" defines allOf with non-object types. '
            "allOf may only compose object types in the OpenAPI specification."
        )
        self.model_name = model_name


class TemplateDirectoryNotFoundError(SpecforgeError):
    """Raised when a template directory is neither built in nor on disk."""

    exit_code = EXIT_TEMPLATE_DIR_NOT_FOUND

    def __init__(self, template_dir: str):
        super().__init__(f"Template directory {template_dir} does not exist!")
        self.template_dir = template_dir


class TemplateOutputError(SpecforgeError):
    """Raised when a template fails to render or emits a malformed file header."""

    exit_code = EXIT_TEMPLATE_OUTPUT_ERROR


class ConfigError(SpecforgeError):
    """Raised for configuration problems (invalid project file, bad environment values)."""

    exit_code = EXIT_GENERIC_FAILURE
