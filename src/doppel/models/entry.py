"""Scanned entry dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True, slots=True)
class FolderEntry:
    """Single directory found during a folder scan.

    ``size`` and ``file_count`` are recursive totals over every regular
    file beneath the directory.  ``depth`` is the distance from the scan
    root, where direct children of the root sit at depth 0.
    """

    name: str
    path: Path
    depth: int
    file_count: int
    size: int


@dataclass(frozen=True, slots=True)
class FileEntry:
    """Single regular file found during a file scan."""

    name: str
    path: Path
    size: int
    extension: str
    modified: datetime


@dataclass(frozen=True, slots=True)
class LocatedEntry:
    """A scanned entry prepared for duplicate grouping.

    ``source`` is the root path the entry was found under, exactly as the
    caller passed it.  It is only set for multi-root comparisons.
    """

    entry: FolderEntry | FileEntry
    source: str | None = None

    @property
    def original_name(self) -> str:
        return self.entry.name

    @property
    def key(self) -> str:
        """Normalized name used for bucketing."""
        return self.entry.name.lower()

    @property
    def path(self) -> Path:
        return self.entry.path

    @property
    def size(self) -> int:
        return self.entry.size

    @property
    def file_count(self) -> int | None:
        """Recursive file count for folders, None for files."""
        if isinstance(self.entry, FolderEntry):
            return self.entry.file_count
        return None
