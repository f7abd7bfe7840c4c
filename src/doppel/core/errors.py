"""Errors surfaced to callers of the scan engine."""

from __future__ import annotations

from pathlib import Path


class ScanError(Exception):
    """Base class for scan failures reported to the caller."""


class PathNotFoundError(ScanError):
    """A root path does not exist."""

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        super().__init__(f"Path does not exist: {self.path}")


class InvalidArgumentError(ScanError, ValueError):
    """A scan was requested with unusable arguments."""


class ScanCancelled(ScanError):
    """The scan was cancelled before it completed."""
