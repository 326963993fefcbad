"""Collision-safe, atomic output writer."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

import yaml

from chartmigrate.core.document import ConfigDocument
from chartmigrate.core.exceptions import OutputWriteError
from chartmigrate.core.versions import SemanticVersion

logger = logging.getLogger(__name__)

# Upper bound on -N suffixes tried before giving up
MAX_SUFFIX = 10_000


def output_name(input_path: str | Path, target_version: SemanticVersion | str) -> str:
    """Canonical output file name: ``<stem>-<target>.<ext>``."""
    path = Path(input_path)
    suffix = ".json" if path.suffix.lower() == ".json" else ".yaml"
    return f"{path.stem}-{target_version}{suffix}"


def serialize(document: ConfigDocument, as_json: bool = False) -> str:
    """Render a document as YAML (key order kept) or JSON."""
    if as_json:
        return json.dumps(document.data, indent=2, ensure_ascii=False, default=str) + "\n"
    return yaml.safe_dump(
        document.data,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )


def write_output(
    document: ConfigDocument,
    input_path: str | Path,
    target_version: SemanticVersion | str,
    output_dir: str | Path | None = None,
) -> Path:
    """Write a migrated document next to its input (or into ``output_dir``).

    The document is written to a temp file in the destination directory and
    published under the first free name among ``<stem>-<target>.<ext>``,
    ``<stem>-<target>-1.<ext>``, ... using a hard link, which fails instead
    of replacing an existing file. An existing file is never overwritten,
    even by a concurrent writer racing for the same name.

    Returns:
        Path of the published file.

    Raises:
        OutputWriteError: If the destination cannot be written.
    """
    input_path = Path(input_path)
    directory = Path(output_dir) if output_dir is not None else input_path.parent
    base = output_name(input_path, target_version)
    stem, ext = base.rsplit(".", 1)
    content = serialize(document, as_json=(ext == "json"))

    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(dir=directory, prefix=f".{stem}.", suffix=".tmp")
    except OSError as e:
        raise OutputWriteError(
            f"Cannot create output in {directory}: {e}",
            context={"output_dir": str(directory)},
        ) from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        return _publish(Path(temp_name), directory, stem, ext)
    except OSError as e:
        raise OutputWriteError(
            f"Failed to write output: {e}",
            context={"output_dir": str(directory), "name": base},
        ) from e
    finally:
        if os.path.exists(temp_name):
            os.unlink(temp_name)


def _publish(temp_path: Path, directory: Path, stem: str, ext: str) -> Path:
    for n in range(MAX_SUFFIX):
        name = f"{stem}.{ext}" if n == 0 else f"{stem}-{n}.{ext}"
        candidate = directory / name
        try:
            os.link(temp_path, candidate)
        except FileExistsError:
            continue
        logger.info(f"Wrote {candidate}", extra={"context": {"bytes": temp_path.stat().st_size}})
        return candidate
    raise OutputWriteError(
        f"No free output name for {stem}.{ext} after {MAX_SUFFIX} attempts",
        context={"output_dir": str(directory)},
    )
