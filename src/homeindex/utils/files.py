"""Utility helpers for working with files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Collection

from homeindex.models import FileRecord, ScanError, ScanGroup

LOGGER = logging.getLogger(__name__)


def normalize_extension(value: str | Path) -> str:
    """Return the lowercase extension of a path, or normalise a bare extension."""
    text = str(value).strip()
    suffix = Path(text).suffix
    if suffix or not text or "/" in text or os.sep in text:
        return suffix.lower()
    # bare extension such as ".PDF" or "pdf"
    return "." + text.lstrip(".").lower()


def file_record(path: Path) -> FileRecord:
    """Stat ``path`` into a :class:`FileRecord`."""
    stat = path.stat()
    created = getattr(stat, "st_birthtime", stat.st_ctime)
    return FileRecord(
        path=path,
        extension=path.suffix.lower(),
        size=stat.st_size,
        created=created,
        modified=stat.st_mtime,
    )


def scan_directory(root: Path, extensions: Collection[str], *, name: str | None = None) -> ScanGroup:
    """Recursively collect files under ``root`` whose extension is accepted.

    Symlinked directories are not followed. Unreadable directories and files
    are recorded in the group's errors and the walk continues.
    """
    root = Path(root).expanduser()
    group = ScanGroup(name=name or str(root))
    accepted = {ext.lower() for ext in extensions}

    if not root.exists():
        LOGGER.debug("Skipping missing directory %s", root)
        return group
    if not root.is_dir():
        group.errors.append(ScanError(error="Not a directory", directory=str(root)))
        return group

    def _on_error(exc: OSError) -> None:
        LOGGER.error("Error scanning directory %s: %s", exc.filename, exc)
        group.errors.append(ScanError(error=str(exc), directory=str(exc.filename or root)))

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error, followlinks=False):
        dirnames.sort()
        for filename in sorted(filenames):
            if Path(filename).suffix.lower() not in accepted:
                continue
            path = Path(dirpath) / filename
            try:
                if not path.is_file():
                    continue
                group.files.append(file_record(path.absolute()))
            except OSError as exc:
                LOGGER.warning("Cannot stat %s: %s", path, exc)
                group.errors.append(ScanError(error=str(exc), file=str(path)))

    return group
