"""Locate, load and render Jinja2 template sets.

A template set is a directory of ``*.j2`` files. Each file is rendered once
against the context of :meth:`~specforge.models.RenderData.to_context`;
files ending in ``.partial.j2`` are only used through ``{% include %}`` or
``{% import %}`` and are never rendered on their own.

Template directories are looked up among the built-in sets shipped in
``specforge/generators/`` first, then relative to the working directory.

Rendering is embarrassingly parallel: the render data is read-only by the
time templates see it, so templates are rendered on a thread pool. Loading
(and compiling) happens up front on the calling thread.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jinja2

from specforge.exceptions import TemplateDirectoryNotFoundError, TemplateOutputError
from specforge.generator.naming import camel_case, kebab_case, snake_case, upper_first

logger = logging.getLogger(__name__)

BUILTIN_GENERATORS_DIR = Path(__file__).resolve().parent.parent / "generators"

TEMPLATE_SUFFIX = ".j2"
PARTIAL_SUFFIX = ".partial.j2"


@dataclass(frozen=True)
class TemplateFile:
    """A renderable template inside a resolved template directory."""

    root: Path
    name: str

    @property
    def path(self) -> Path:
        return self.root / self.name


def builtin_template_sets() -> list[str]:
    """Names of the template sets shipped with specforge."""
    return sorted(path.name for path in BUILTIN_GENERATORS_DIR.iterdir() if path.is_dir())


def resolve_template_dir(template_dir: str, cwd: Path | None = None) -> Path:
    """Return the directory for *template_dir*.

    Raises:
        TemplateDirectoryNotFoundError: If neither a built-in set nor a
            directory relative to *cwd* exists.
    """
    builtin = BUILTIN_GENERATORS_DIR / template_dir
    if builtin.is_dir():
        return builtin

    local = (cwd or Path.cwd()) / template_dir
    if local.is_dir():
        return local

    raise TemplateDirectoryNotFoundError(template_dir)


def list_template_files(template_dir: Path) -> list[TemplateFile]:
    """All non-partial templates below *template_dir*, in a stable order."""
    return [
        TemplateFile(root=template_dir, name=path.relative_to(template_dir).as_posix())
        for path in sorted(template_dir.rglob(f"*{TEMPLATE_SUFFIX}"))
        if path.is_file() and not path.name.endswith(PARTIAL_SUFFIX)
    ]


def collect_templates(template_dirs: list[str], cwd: Path | None = None) -> list[TemplateFile]:
    """Resolve every directory before anything is rendered."""
    resolved = [resolve_template_dir(t, cwd) for t in template_dirs]
    templates = [t for directory in resolved for t in list_template_files(directory)]
    logger.debug("Found %d templates in %d directories", len(templates), len(resolved))
    return templates


def create_environment(root: Path) -> jinja2.Environment:
    """Jinja2 environment for one template directory, with the naming filters."""
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(root)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters.update(
        camel_case=camel_case,
        upper_first=upper_first,
        kebab_case=kebab_case,
        snake_case=snake_case,
    )
    return env


def render_templates(
    templates: list[TemplateFile], context: dict[str, Any], max_workers: int = 4
) -> list[str]:
    """Render *templates* against *context*; output order follows *templates*.

    Raises:
        TemplateOutputError: If a template fails to load or render.
    """
    environments: dict[Path, jinja2.Environment] = {}
    loaded = []
    for template in templates:
        env = environments.get(template.root)
        if env is None:
            env = environments[template.root] = create_environment(template.root)
        try:
            loaded.append((template, env.get_template(template.name)))
        except jinja2.TemplateError as exc:
            raise TemplateOutputError(f"Cannot load template {template.path}: {exc}") from exc

    def _render(item: tuple[TemplateFile, jinja2.Template]) -> str:
        template, compiled = item
        try:
            return compiled.render(context)
        except jinja2.TemplateError as exc:
            raise TemplateOutputError(f"Cannot render template {template.path}: {exc}") from exc

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        rendered = list(pool.map(_render, loaded))
    logger.debug("Rendered %d templates", len(rendered))
    return rendered
