"""Inspect commands -- examine the compiled graph without rendering.

``specforge inspect models|operations|services`` compile the document
exactly as ``generate`` would and print the result as a table (or JSON /
tab-separated text with ``--json`` / ``--plain``).
"""

from __future__ import annotations

from typing import Optional

import typer

from specforge.exceptions import InvalidUsageError, SpecforgeError
from specforge.models import RenderData
from specforge.output import error, info, print_table


inspect_app = typer.Typer(no_args_is_help=True)

_SPEC_PATH_OPTION = typer.Option(
    None, "--spec-path", "-s", help="OpenAPI document (defaults to the configured one)."
)


def _compile(spec_path: Optional[str]) -> RenderData:
    """Compile the given (or configured) document, exiting on failure."""
    from specforge.config import resolve_config
    from specforge.generator.assembler import compile_document
    from specforge.parser.loader import load_document

    try:
        config = resolve_config(spec_path=spec_path)
        if not config.spec_path:
            raise InvalidUsageError("No OpenAPI document given. Pass --spec-path or set SPECFORGE_SPEC.")
        return compile_document(load_document(config.spec_path), config)
    except SpecforgeError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


@inspect_app.command("models")
def inspect_models(spec_path: Optional[str] = _SPEC_PATH_OPTION) -> None:
    """List the generated models with their projected types.

    Example::

        specforge inspect models --spec-path openapi.yaml
    """
    data = _compile(spec_path)
    if not data.models:
        info("No models in this document.")
        return

    headers = ["Model", "Kind", "TypeScript", "Java", "Python", "Properties"]
    rows = [
        [
            model.name,
            model.kind.value,
            model.typescript_type,
            model.java_type,
            model.python_type,
            str(len([p for p in model.properties if p.name])),
        ]
        for model in data.models
    ]
    print_table(headers, rows, title=f"Models ({len(rows)})")


@inspect_app.command("operations")
def inspect_operations(spec_path: Optional[str] = _SPEC_PATH_OPTION) -> None:
    """List every operation with its service and result types."""
    data = _compile(spec_path)
    if not data.all_operations:
        info("No operations in this document.")
        return

    headers = ["Service", "Operation", "Method", "Path", "Results"]
    rows = [
        [
            op.service,
            op.name,
            op.method,
            op.path,
            ", ".join(f"{r.code}: {r.typescript_type}" for r in op.results),
        ]
        for op in data.all_operations
    ]
    print_table(headers, rows, title=f"Operations ({len(rows)})")


@inspect_app.command("services")
def inspect_services(spec_path: Optional[str] = _SPEC_PATH_OPTION) -> None:
    """List the services (one per tag) and the models they import."""
    data = _compile(spec_path)
    headers = ["Service", "Class", "Operations", "Models"]
    rows = [
        [
            service.name,
            service.class_name,
            str(len(service.operations)),
            ", ".join(service.model_imports) or "-",
        ]
        for service in data.services
    ]
    print_table(headers, rows, title=f"Services ({len(rows)})")
