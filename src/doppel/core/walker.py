"""Depth-bounded directory tree walking."""

from __future__ import annotations

import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path

from doppel.core.errors import PathNotFoundError
from doppel.models.entry import FileEntry, FolderEntry
from doppel.utils import check_cancelled, dir_info

log = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10


def ensure_exists(path: str | Path) -> Path:
    """Return the absolute form of *path*, or raise if it does not exist."""
    if not os.path.exists(path):
        raise PathNotFoundError(path)
    return Path(os.path.abspath(path))


def walk_folders(
    root: str | Path,
    depth: int = 0,
    max_depth: int = DEFAULT_MAX_DEPTH,
    cancel: threading.Event | None = None,
) -> list[FolderEntry]:
    """List every directory beneath *root*, depth first.

    Each directory is emitted before its own subdirectories, with its
    recursive size and file count attached.  Directories deeper than
    *max_depth* are left out.  A subdirectory that cannot be read is
    logged and omitted along with everything below it.
    """
    if depth > max_depth:
        return []
    check_cancelled(cancel)

    children = _read_dir(root)
    if children is None:
        return []

    entries: list[FolderEntry] = []
    for child in children:
        try:
            if not child.is_dir(follow_symlinks=False):
                continue
        except OSError:
            log.debug("Cannot stat: %s", child.path)
            continue
        if not _is_readable(child.path):
            continue

        size, file_count = dir_info(child.path, cancel)
        entries.append(
            FolderEntry(
                name=child.name,
                path=Path(child.path),
                depth=depth,
                file_count=file_count,
                size=size,
            )
        )
        entries.extend(walk_folders(child.path, depth + 1, max_depth, cancel))
    return entries


def walk_files(
    root: str | Path,
    depth: int = 0,
    max_depth: int = DEFAULT_MAX_DEPTH,
    cancel: threading.Event | None = None,
) -> list[FileEntry]:
    """List every regular file beneath *root*, depth first.

    Files inside directories deeper than *max_depth* are left out.
    Unreadable directories and files that vanish mid-scan are logged
    and skipped.
    """
    if depth > max_depth:
        return []
    check_cancelled(cancel)

    children = _read_dir(root)
    if children is None:
        return []

    entries: list[FileEntry] = []
    for child in children:
        try:
            if child.is_file(follow_symlinks=False):
                st = child.stat(follow_symlinks=False)
                entries.append(
                    FileEntry(
                        name=child.name,
                        path=Path(child.path),
                        size=st.st_size,
                        extension=os.path.splitext(child.name)[1],
                        modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
                    )
                )
            elif child.is_dir(follow_symlinks=False):
                entries.extend(walk_files(child.path, depth + 1, max_depth, cancel))
        except OSError as e:
            log.warning("Skipping %s: %s", child.path, e)
    return entries


def _read_dir(path: str | Path) -> list[os.DirEntry] | None:
    """Return the children of *path* sorted by name, or None if unreadable."""
    try:
        with os.scandir(path) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError as e:
        log.warning("Cannot read %s: %s", path, e)
        return None


def _is_readable(path: str) -> bool:
    """Check that a directory can be listed."""
    try:
        with os.scandir(path) as it:
            next(it, None)
    except OSError as e:
        log.warning("Skipping %s: %s", path, e)
        return False
    return True
