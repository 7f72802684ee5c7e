"""Configuration resolution and XDG data paths.

A ``specforge generate`` run is configured by a single
:class:`~specforge.models.GeneratorConfig`, merged from four layers
(highest precedence first):

1. CLI flags;
2. ``SPECFORGE_*`` environment variables (see :data:`ENV_VARS`);
3. the project file ``./specforge.json``, or the file named by
   ``SPECFORGE_CONFIG``;
4. the model defaults.

Crash logs are kept under the XDG data directory, see :func:`get_data_dir`.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specforge.exceptions import ConfigError
from specforge.models import GeneratorConfig

_APP_NAME = "specforge"
_PROJECT_CONFIG_FILENAME = "specforge.json"

CONFIG_PATH_ENV_VAR = "SPECFORGE_CONFIG"

ENV_VARS = {
    "SPECFORGE_SPEC": "spec_path",
    "SPECFORGE_OUTPUT": "output_path",
    "SPECFORGE_TEMPLATE_DIRS": "template_dirs",
    "SPECFORGE_RENDER_WORKERS": "render_workers",
}
"""Environment variable -> :class:`~specforge.models.GeneratorConfig` field."""


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on platforms following the XDG Base Directory spec (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory, creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specforge/`` (default
    ``~/.local/share/specforge/``). Elsewhere: ``~/.specforge/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_logs_dir() -> Path:
    """Return ``<data_dir>/logs``, where crash logs are written."""
    path = get_data_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Project config ---


def project_config_path() -> Path:
    env_path = os.environ.get(CONFIG_PATH_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path.cwd() / _PROJECT_CONFIG_FILENAME


def load_project_config() -> Optional[dict[str, Any]]:
    """Load the project configuration file.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    path = project_config_path()
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for var, field in ENV_VARS.items():
        value = os.environ.get(var)
        if not value:
            continue
        if field == "template_dirs":
            overrides[field] = [d for d in value.split(os.pathsep) if d]
        else:
            overrides[field] = value
    return overrides


# --- Precedence resolution ---


def resolve_config(
    spec_path: Optional[str] = None,
    template_dirs: Optional[list[str]] = None,
    output_path: Optional[str] = None,
    metadata: Optional[dict[str, Any]] = None,
    print_data: Optional[bool] = None,
    render_workers: Optional[int] = None,
) -> GeneratorConfig:
    """Merge every configuration layer into a :class:`~specforge.models.GeneratorConfig`.

    Arguments are the CLI flags; ``None`` (or an empty list) means "not
    given" so that lower layers apply.

    Raises:
        ConfigError: If the project file or an environment value is invalid.
    """
    merged: dict[str, Any] = dict(load_project_config() or {})
    merged.update(_env_overrides())

    cli = {
        "spec_path": spec_path,
        "template_dirs": template_dirs or None,
        "output_path": output_path,
        "metadata": metadata,
        "print_data": print_data,
        "render_workers": render_workers,
    }
    merged.update({key: value for key, value in cli.items() if value is not None})

    try:
        return GeneratorConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
