"""Tests for specforge.render.templates."""

from __future__ import annotations

from pathlib import Path

import pytest

from specforge.exceptions import TemplateDirectoryNotFoundError, TemplateOutputError
from specforge.render.templates import (
    BUILTIN_GENERATORS_DIR,
    TemplateFile,
    builtin_template_sets,
    collect_templates,
    create_environment,
    list_template_files,
    render_templates,
    resolve_template_dir,
)


def _write(root: Path, name: str, text: str) -> None:
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


# ---------------------------------------------------------------------------
# Template directory resolution
# ---------------------------------------------------------------------------


class TestResolveTemplateDir:
    """Test template directory lookup."""

    def test_builtin_set(self) -> None:
        assert resolve_template_dir("models-summary") == BUILTIN_GENERATORS_DIR / "models-summary"

    def test_relative_to_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "custom").mkdir()
        assert resolve_template_dir("custom", cwd=tmp_path) == tmp_path / "custom"

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(TemplateDirectoryNotFoundError, match="missing does not exist") as exc_info:
            resolve_template_dir("missing", cwd=tmp_path)
        assert exc_info.value.exit_code == 9

    def test_builtin_set_names(self) -> None:
        assert "models-summary" in builtin_template_sets()

    def test_collect_fails_before_listing(self, tmp_path: Path) -> None:
        (tmp_path / "ok").mkdir()
        with pytest.raises(TemplateDirectoryNotFoundError):
            collect_templates(["ok", "missing"], cwd=tmp_path)


class TestListTemplateFiles:
    """Test template file discovery."""

    def test_partials_and_other_files_skipped(self, tmp_path: Path) -> None:
        _write(tmp_path, "b.md.j2", "")
        _write(tmp_path, "a.md.j2", "")
        _write(tmp_path, "nested/c.ts.j2", "")
        _write(tmp_path, "_macros.partial.j2", "")
        _write(tmp_path, "README.md", "")
        names = [t.name for t in list_template_files(tmp_path)]
        assert names == ["a.md.j2", "b.md.j2", "nested/c.ts.j2"]

    def test_builtin_set_contents(self) -> None:
        templates = collect_templates(["models-summary"])
        assert [t.name for t in templates] == ["index.md.j2", "models.md.j2"]
        assert all(isinstance(t, TemplateFile) for t in templates)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRenderTemplates:
    """Test rendering with jinja2."""

    def test_naming_filters(self, tmp_path: Path) -> None:
        env = create_environment(tmp_path)
        template = env.from_string(
            "{{ 'get widget' | camel_case }} {{ 'getWidget' | upper_first }} "
            "{{ 'getWidget' | kebab_case }} {{ 'getWidget' | snake_case }}"
        )
        assert template.render() == "getWidget GetWidget get-widget get_widget"

    def test_order_preserved(self, tmp_path: Path) -> None:
        for i in range(6):
            _write(tmp_path, f"t{i}.j2", f"{i}:{{{{ value }}}}")
        templates = list_template_files(tmp_path)
        rendered = render_templates(templates, {"value": "x"}, max_workers=3)
        assert rendered == [f"{i}:x" for i in range(6)]

    def test_includes_partials(self, tmp_path: Path) -> None:
        _write(tmp_path, "_greet.partial.j2", "{% macro greet(n) %}hi {{ n }}{% endmacro %}")
        _write(tmp_path, "main.j2", '{% from "_greet.partial.j2" import greet %}{{ greet("bob") }}')
        assert render_templates(list_template_files(tmp_path), {}) == ["hi bob"]

    def test_keeps_trailing_newline(self, tmp_path: Path) -> None:
        _write(tmp_path, "t.j2", "line\n")
        assert render_templates(list_template_files(tmp_path), {}) == ["line\n"]

    def test_syntax_error(self, tmp_path: Path) -> None:
        _write(tmp_path, "broken.j2", "{% if %}")
        with pytest.raises(TemplateOutputError, match="Cannot load template"):
            render_templates(list_template_files(tmp_path), {})

    def test_render_error(self, tmp_path: Path) -> None:
        _write(tmp_path, "broken.j2", "{{ missing.attribute }}")
        with pytest.raises(TemplateOutputError, match="Cannot render template"):
            render_templates(list_template_files(tmp_path), {})

    def test_missing_value_renders_empty(self, tmp_path: Path) -> None:
        _write(tmp_path, "t.j2", "[{{ missing }}]")
        assert render_templates(list_template_files(tmp_path), {}) == ["[]"]
