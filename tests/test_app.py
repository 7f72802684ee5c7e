"""CLI tests for the specforge application (generate and inspect)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from specforge import __version__
from specforge.app import app
from specforge.commands.generate import parse_metadata
from specforge.exceptions import InvalidUsageError
from specforge.exit_codes import (
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_TEMPLATE_DIR_NOT_FOUND,
)
from specforge.render.writer import MANIFEST_FILE_PATH

FIXTURES_DIR = Path(__file__).parent / "fixtures"
WIDGETS = str(FIXTURES_DIR / "widgets.yaml")
EDGE_CASES = str(FIXTURES_DIR / "edge_cases.yaml")


class TestRoot:
    """Test the root app options."""

    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"specforge {__version__}" in result.output


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------


class TestGenerate:
    """Test the generate command."""

    def test_models_summary(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app,
            ["--quiet", "generate", "--spec-path", WIDGETS, "-t", "models-summary", "-o", "out"],
        )
        assert result.exit_code == 0, result.output

        index = (isolated_config / "out" / "docs" / "index.md").read_text(encoding="utf-8")
        assert index.startswith("# Widgets (1.0.0)")
        assert "[GetWidget200Response](models/get-widget-200-response.md)" in index
        assert "`GET /widgets/{id}` `getWidget` -> `GetWidget200Response`" in index
        assert "  - path `id`: `string` (required)" in index

        model = isolated_config / "out" / "docs" / "models" / "get-widget-200-response.md"
        text = model.read_text(encoding="utf-8")
        assert text.startswith("# GetWidget200Response")
        assert "| `name` | `string` | `String` | `str` | no |" in text

        manifest = (isolated_config / "out" / MANIFEST_FILE_PATH).read_text(encoding="utf-8")
        assert manifest.split("\n") == [
            "docs/index.md",
            "docs/models/get-widget-200-response.md",
        ]

    def test_metadata_reaches_templates(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app,
            [
                "--quiet",
                "generate",
                "-s",
                WIDGETS,
                "-t",
                "models-summary",
                "-o",
                "out",
                "--metadata",
                '{"docsDir": "reference"}',
            ],
        )
        assert result.exit_code == 0, result.output
        assert (isolated_config / "out" / "reference" / "index.md").is_file()

    def test_regeneration_removes_stale_files(self, cli_runner, isolated_config: Path) -> None:
        args = ["--quiet", "generate", "-s", EDGE_CASES, "-t", "models-summary", "-o", "out"]
        assert cli_runner.invoke(app, args).exit_code == 0
        stale = isolated_config / "out" / "docs" / "models" / "removed-model.md"
        stale.write_text("stale", encoding="utf-8")
        manifest = isolated_config / "out" / MANIFEST_FILE_PATH
        manifest.write_text(manifest.read_text(encoding="utf-8") + "\ndocs/models/removed-model.md", encoding="utf-8")

        assert cli_runner.invoke(app, args).exit_code == 0
        assert not stale.exists()
        assert (isolated_config / "out" / "docs" / "models" / "pet.md").is_file()

    def test_custom_template_dir(self, cli_runner, isolated_config: Path) -> None:
        templates = isolated_config / "templates"
        templates.mkdir()
        (templates / "ops.txt.j2").write_text(
            '###SPECFORGE_WRITE_FILE###{"dir": ".", "name": "ops", "ext": ".txt"}\n'
            "{% for op in allOperations %}{{ op.name }}\n{% endfor %}"
            "###/SPECFORGE_WRITE_FILE###",
            encoding="utf-8",
        )
        result = cli_runner.invoke(app, ["--quiet", "generate", "-s", WIDGETS, "-t", "templates"])
        assert result.exit_code == 0, result.output
        assert (isolated_config / "ops.txt").read_text(encoding="utf-8") == "getWidget\n"

    def test_print_data(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--quiet", "generate", "-s", WIDGETS, "--print-data"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["allOperations"] == ["getWidget"]
        assert [m["name"] for m in data["models"]] == ["GetWidget200Response"]

    def test_spec_from_environment(
        self, cli_runner, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SPECFORGE_SPEC", WIDGETS)
        result = cli_runner.invoke(app, ["--quiet", "generate", "-t", "models-summary"])
        assert result.exit_code == 0, result.output
        assert (isolated_config / "docs" / "index.md").is_file()

    def test_missing_spec_path(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["generate", "-t", "models-summary"])
        assert result.exit_code == EXIT_INVALID_USAGE

    def test_missing_template_dirs(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["generate", "-s", WIDGETS])
        assert result.exit_code == EXIT_INVALID_USAGE

    def test_unknown_template_dir(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["generate", "-s", WIDGETS, "-t", "no-such-templates"])
        assert result.exit_code == EXIT_TEMPLATE_DIR_NOT_FOUND
        assert not (isolated_config / MANIFEST_FILE_PATH).exists()

    def test_unreadable_spec(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app, ["generate", "-s", str(isolated_config / "nope.yaml"), "-t", "models-summary"]
        )
        assert result.exit_code == EXIT_SPEC_PARSE_ERROR
        assert not (isolated_config / "docs").exists()

    def test_invalid_metadata(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app, ["generate", "-s", WIDGETS, "-t", "models-summary", "--metadata", "[1]"]
        )
        assert result.exit_code == EXIT_INVALID_USAGE


class TestParseMetadata:
    """Test --metadata parsing."""

    def test_none(self) -> None:
        assert parse_metadata(None) is None

    def test_object(self) -> None:
        assert parse_metadata('{"a": 1}') == {"a": 1}

    def test_invalid_json(self) -> None:
        with pytest.raises(InvalidUsageError, match="not valid JSON"):
            parse_metadata("{")


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


class TestInspect:
    """Test the inspect sub-commands."""

    def test_models_json(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "inspect", "models", "-s", WIDGETS])
        assert result.exit_code == 0, result.output
        (row,) = json.loads(result.stdout)
        assert row["Model"] == "GetWidget200Response"
        assert row["Kind"] == "interface"
        assert row["Properties"] == "1"

    def test_operations_plain(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--plain", "inspect", "operations", "-s", WIDGETS])
        assert result.exit_code == 0, result.output
        lines = result.stdout.splitlines()
        assert lines[0] == "Service\tOperation\tMethod\tPath\tResults"
        assert lines[1] == "Default\tgetWidget\tGET\t/widgets/{id}\t200: GetWidget200Response"

    def test_services_json(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "inspect", "services", "-s", EDGE_CASES])
        assert result.exit_code == 0, result.output
        rows = json.loads(result.stdout)
        assert [r["Service"] for r in rows] == ["Default", "Keywords"]
        assert rows[1]["Class"] == "KeywordsApi"

    def test_without_spec(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["inspect", "models"])
        assert result.exit_code == EXIT_INVALID_USAGE
