"""specforge -- Compile OpenAPI 3.x documents into a render-ready schema graph.

This package turns a bundled OpenAPI document into a normalized,
cross-referenced graph of models, operations and services. Every node is
annotated with TypeScript, Java and Python names and type expressions, and
the graph is handed to jinja2 templates which emit files through a small
sentinel-delimited file protocol.

Typical workflow::

    specforge generate --spec-path openapi.yaml \\
        --template-dirs models-summary --output-path generated/

Modules:
    app: Typer application and CLI entry point.
    models: Graph node dataclasses and pydantic configuration models.
    config: Configuration precedence and XDG data directory.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
