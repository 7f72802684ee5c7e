"""Split rendered template output into files and write them.

A template emits any number of files by wrapping each one in sentinels::

    ###SPECFORGE_WRITE_FILE###{"id": "index", "dir": "docs", "name": "index", "ext": ".md", "overwrite": true}
    ...file contents...
    ###/SPECFORGE_WRITE_FILE###

The JSON header (see :class:`~specforge.models.WriteFileConfig`) runs up to
the end of its JSON object; everything after it up to the end sentinel is the
file's literal content, minus a single line break directly after the
header. Text outside the sentinels is discarded.

A file is written when it does not exist yet or ``overwrite`` is set, and,
when ``generateConditionallyId`` names another file, only if that file is
written too. Files written with ``overwrite`` are listed in a manifest in the
output root; the files of the previous run's manifest are deleted before
anything new is written. Files without ``overwrite`` are written once and
then owned by the user.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from specforge.exceptions import TemplateOutputError
from specforge.generator.naming import kebab_case
from specforge.models import WriteFileConfig

logger = logging.getLogger(__name__)

WRITE_FILE_START = "###SPECFORGE_WRITE_FILE###"
WRITE_FILE_END = "###/SPECFORGE_WRITE_FILE###"

MANIFEST_FILE_PATH = ".specforge-manifest"
LEGACY_MANIFEST_FILE_PATH = ".openapi-generator/FILES"


@dataclass
class SplitFile:
    """One file segment of rendered output."""

    config: WriteFileConfig
    contents: str
    relative_path: str
    should_write: bool = False


# --- Cleanup ---


def clean_generated_code(output_path: Path) -> list[str]:
    """Delete the files listed in the previous run's manifest.

    The legacy manifest is used only when the current one is absent.

    Returns:
        The relative paths that were deleted.
    """
    manifest = output_path / MANIFEST_FILE_PATH
    legacy = output_path / LEGACY_MANIFEST_FILE_PATH
    if not manifest.is_file() and legacy.is_file():
        manifest = legacy
    if not manifest.is_file():
        return []

    deleted = []
    entries = dict.fromkeys(line for line in manifest.read_text(encoding="utf-8").split("\n") if line)
    for entry in entries:
        path = output_path / entry
        if path.is_file():
            path.unlink()
            deleted.append(entry)
    logger.debug("Removed %d previously generated files listed in %s", len(deleted), manifest)
    return deleted


# --- Splitting ---


def _parse_segment(segment: str) -> tuple[WriteFileConfig, str]:
    header, _, _ = segment.partition(WRITE_FILE_END)
    try:
        data, end = json.JSONDecoder().raw_decode(header.lstrip())
    except json.JSONDecodeError as exc:
        raise TemplateOutputError(f"Invalid file header after {WRITE_FILE_START}: {exc}") from exc
    try:
        config = WriteFileConfig.model_validate(data)
    except ValidationError as exc:
        raise TemplateOutputError(f"Invalid file header {data!r}: {exc}") from exc
    body = header.lstrip()[end:]
    # One line break may separate the header from the contents
    if body.startswith("\r\n"):
        body = body[2:]
    elif body.startswith("\n"):
        body = body[1:]
    return config, body


def file_name(config: WriteFileConfig) -> str:
    name = kebab_case(config.name) if config.kebab_case_file_name else config.name
    return f"{name}{config.ext}"


def split_files(rendered: list[str]) -> list[SplitFile]:
    """Extract every file segment from *rendered*, in output order.

    Raises:
        TemplateOutputError: If a header is not a valid JSON file config.
    """
    files = []
    for contents in rendered:
        for segment in contents.split(WRITE_FILE_START)[1:]:
            if WRITE_FILE_END not in segment:
                continue
            config, body = _parse_segment(segment)
            relative_path = Path(config.dir, file_name(config)).as_posix()
            files.append(SplitFile(config=config, contents=body, relative_path=relative_path))
    return files


# --- Writing ---


def atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* through a temp file in the same directory."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
            newline="",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


def write_files(files: list[SplitFile], output_path: Path) -> list[str]:
    """Write *files* under *output_path* and record the manifest.

    A file already on disk is kept unless its ``overwrite`` flag is set.

    Returns:
        The relative paths actually written, in order.
    """
    for split in files:
        split.should_write = split.config.overwrite or not (output_path / split.relative_path).exists()
    by_id = {f.config.id: f for f in files if f.config.id}
    written = []
    manifest = []

    for split in files:
        condition = by_id.get(split.config.generate_conditionally_id or "")
        if not split.should_write or (condition is not None and not condition.should_write):
            logger.debug("Skipping %s", split.relative_path)
            continue
        atomic_write(output_path / split.relative_path, split.contents)
        written.append(split.relative_path)
        if split.config.overwrite:
            manifest.append(split.relative_path)

    atomic_write(output_path / MANIFEST_FILE_PATH, "\n".join(manifest))
    logger.info("Wrote %d files to %s", len(written), output_path)
    return written


def emit_files(rendered: list[str], output_path: Path) -> list[str]:
    """Clean the previous run's files, then split and write *rendered*."""
    files = split_files(rendered)
    clean_generated_code(output_path)
    return write_files(files, output_path)
