"""The ``specforge generate`` command.

Compiles an OpenAPI document, renders every template of the requested
template sets against the result, and writes the files the templates emit.
Template directories are resolved before the document is even loaded, and
files are only written once every template has rendered, so a failure at
any stage leaves the output directory untouched.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer

from specforge.exceptions import InvalidUsageError, SpecforgeError, TemplateDirectoryNotFoundError
from specforge.models import GeneratorConfig
from specforge.output import debug, error, info, print_json, success, suggest, warning


def parse_metadata(value: Optional[str]) -> Optional[dict[str, Any]]:
    """Parse the ``--metadata`` JSON object.

    Raises:
        InvalidUsageError: If *value* is not a JSON object.
    """
    if value is None:
        return None
    try:
        data = json.loads(value)
    except json.JSONDecodeError as exc:
        raise InvalidUsageError(f"--metadata is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidUsageError("--metadata must be a JSON object")
    return data


def run_generate(config: GeneratorConfig) -> list[str]:
    """Compile, render and write according to *config*.

    Returns:
        Paths (relative to ``config.output_path``) of the files written.

    Raises:
        SpecforgeError: On any failure; nothing has been written by then.
    """
    from specforge.generator.assembler import compile_document, render_data_to_dict
    from specforge.parser.loader import load_document
    from specforge.render.templates import collect_templates, render_templates
    from specforge.render.writer import emit_files

    if not config.spec_path:
        raise InvalidUsageError("No OpenAPI document given. Pass --spec-path or set SPECFORGE_SPEC.")
    if not config.template_dirs and not config.print_data:
        raise InvalidUsageError("No template directory given. Pass --template-dirs.")

    templates = collect_templates(config.template_dirs)
    render_data = compile_document(load_document(config.spec_path), config)

    if config.print_data:
        print_json(render_data_to_dict(render_data))
    if not templates:
        return []

    rendered = render_templates(templates, render_data.to_context(), config.render_workers)
    return emit_files(rendered, Path(config.output_path))


def generate_command(
    spec_path: Optional[str] = typer.Option(
        None, "--spec-path", "-s", help="OpenAPI document: file path, http(s) URL, or '-' for stdin."
    ),
    template_dirs: Optional[list[str]] = typer.Option(
        None, "--template-dirs", "-t", help="Built-in template set or directory (repeatable)."
    ),
    output_path: Optional[str] = typer.Option(
        None, "--output-path", "-o", help="Root directory for generated files."
    ),
    metadata: Optional[str] = typer.Option(
        None, "--metadata", help="JSON object exposed to templates as 'metadata'."
    ),
    print_data: bool = typer.Option(
        False, "--print-data", help="Print the compiled render data to stdout."
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", min=1, help="Threads used to render templates."
    ),
) -> None:
    """Generate files from an OpenAPI document and template sets.

    Example::

        specforge generate --spec-path openapi.yaml -t models-summary -o generated
    """
    from specforge.config import resolve_config

    try:
        config = resolve_config(
            spec_path=spec_path,
            template_dirs=template_dirs,
            output_path=output_path,
            metadata=parse_metadata(metadata),
            print_data=print_data or None,
            render_workers=workers,
        )
        info(f"Generating from {config.spec_path or '-'}")
        written = run_generate(config)
    except SpecforgeError as exc:
        error(str(exc))
        if isinstance(exc, TemplateDirectoryNotFoundError):
            from specforge.render.templates import builtin_template_sets

            suggest(f"Built-in template sets: {', '.join(builtin_template_sets())}")
        raise typer.Exit(code=exc.exit_code) from None

    for path in written:
        debug(f"Wrote {path}")
    if config.template_dirs and not written:
        warning("No files written; every emitted file already exists or no template emitted one.")
    success(f"Generated {len(written)} files in {config.output_path}")
