"""Scan and duplicate report dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from doppel.models.entry import FileEntry, FolderEntry, LocatedEntry


class SearchMode(str, Enum):
    """How entries sharing a name are judged to be duplicates.

    ``full`` matches on name alone.  ``perfect`` additionally requires
    size (and file count, for folders) to be within tolerance.
    """

    FULL = "full"
    PERFECT = "perfect"


@dataclass(frozen=True, slots=True)
class DuplicateGroup:
    """Two or more entries judged equivalent under one search mode."""

    name: str
    locations: tuple[LocatedEntry, ...]

    def __post_init__(self) -> None:
        if len(self.locations) < 2:
            raise ValueError(f"Duplicate group '{self.name}' needs at least 2 locations")

    @property
    def count(self) -> int:
        return len(self.locations)


@dataclass(slots=True)
class ScanResult:
    """Flat listing produced by one folder or file scan."""

    path: str
    entries: list[FolderEntry] | list[FileEntry] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.entries)


@dataclass(slots=True)
class DuplicateReport:
    """Duplicate groups found beneath a single root."""

    path: str
    groups: list[DuplicateGroup] = field(default_factory=list)
    total_duplicates: int = 0
    total_analyzed: int = 0


@dataclass(slots=True)
class ComparisonReport:
    """Duplicate groups found across several roots."""

    sources: list[str]
    groups: list[DuplicateGroup] = field(default_factory=list)
    total_duplicates: int = 0
    per_source_counts: dict[str, int] = field(default_factory=dict)
    total_analyzed: int = 0

    def groups_spanning_sources(self) -> list[DuplicateGroup]:
        """Groups whose members come from more than one root."""
        return [g for g in self.groups if len({loc.source for loc in g.locations}) > 1]

