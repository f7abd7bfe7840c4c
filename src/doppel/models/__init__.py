"""Doppel data models."""

from doppel.models.entry import FileEntry, FolderEntry, LocatedEntry
from doppel.models.report import (
    ComparisonReport,
    DuplicateGroup,
    DuplicateReport,
    ScanResult,
    SearchMode,
)

__all__ = [
    "ComparisonReport",
    "DuplicateGroup",
    "DuplicateReport",
    "FileEntry",
    "FolderEntry",
    "LocatedEntry",
    "ScanResult",
    "SearchMode",
]
