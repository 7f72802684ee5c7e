"""Shared test fixtures for specforge.

Provides reusable fixtures for loading OpenAPI fixture documents, creating
isolated config environments, managing output state, and running CLI
commands. These fixtures are automatically discovered by pytest and available
to all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from specforge.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict[str, Any]:
    """Load a YAML fixture document from ``tests/fixtures``."""
    with open(FIXTURES_DIR / name, encoding="utf-8") as f:
        return yaml.safe_load(f)


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw document fixtures (plain dicts loaded from YAML files)
# ---------------------------------------------------------------------------


@pytest.fixture
def widgets_doc() -> dict[str, Any]:
    """Single operation with an inline object response."""
    return load_fixture("widgets.yaml")


@pytest.fixture
def edge_cases_doc() -> dict[str, Any]:
    """Reserved words, collection formats, default responses, nested schemas."""
    return load_fixture("edge_cases.yaml")


@pytest.fixture
def composition_doc() -> dict[str, Any]:
    """allOf / oneOf / anyOf schemas."""
    return load_fixture("composition.yaml")


@pytest.fixture
def cycles_doc() -> dict[str, Any]:
    """Schemas reachable from themselves through arrays and dictionaries."""
    return load_fixture("cycles.yaml")


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_DATA_HOME to a subdirectory of tmp_path so that crash logs
    never touch the real user directory, clears all SPECFORGE_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "SPECFORGE_SPEC",
        "SPECFORGE_OUTPUT",
        "SPECFORGE_TEMPLATE_DIRS",
        "SPECFORGE_RENDER_WORKERS",
        "SPECFORGE_CONFIG",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
