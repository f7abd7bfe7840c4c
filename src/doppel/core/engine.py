"""Scanning and duplicate-finding orchestration engine."""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Sequence

from doppel.core.errors import InvalidArgumentError
from doppel.core.grouping import find_duplicate_groups, parse_mode, total_duplicates
from doppel.core.walker import DEFAULT_MAX_DEPTH, ensure_exists, walk_files, walk_folders
from doppel.models.entry import LocatedEntry
from doppel.models.report import ComparisonReport, DuplicateReport, ScanResult, SearchMode

log = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]  # (root, status_message)
Walker = Callable[..., list]


class ScanEngine:
    """Runs folder and file scans and groups their duplicates.

    The engine holds configuration only.  Every call builds and returns
    its own entry and group lists, so one engine can serve concurrent
    callers.

    An optional *cancel* event stops a scan at the next directory
    boundary with ScanCancelled.  Folder stats computed by GNU ``find``
    are not interrupted mid-run, see ``dir_info``.
    """

    def __init__(
        self,
        max_depth: int = DEFAULT_MAX_DEPTH,
        workers: int = 4,
        cancel: threading.Event | None = None,
    ) -> None:
        if max_depth < 0:
            raise InvalidArgumentError("Maximum depth must be non-negative")
        self.max_depth = max_depth
        self.workers = max(1, workers)
        self._cancel = cancel

    # ── single root ──────────────────────────────────────────────────────

    def scan_folders(self, root: str) -> ScanResult:
        """List every folder beneath *root* with its size and file count."""
        return ScanResult(path=root, entries=self._walk(walk_folders, root))

    def scan_files(self, root: str) -> ScanResult:
        """List every file beneath *root*."""
        return ScanResult(path=root, entries=self._walk(walk_files, root))

    def find_duplicate_folders(self, root: str, mode: SearchMode | str = SearchMode.PERFECT) -> DuplicateReport:
        """Find folders sharing a name beneath *root*."""
        return self._find_duplicates(walk_folders, root, mode)

    def find_duplicate_files(self, root: str, mode: SearchMode | str = SearchMode.PERFECT) -> DuplicateReport:
        """Find files sharing a name beneath *root*."""
        return self._find_duplicates(walk_files, root, mode)

    # ── multiple roots ───────────────────────────────────────────────────

    def compare_folders(
        self,
        roots: Sequence[str],
        mode: SearchMode | str = SearchMode.PERFECT,
        on_progress: ProgressCallback | None = None,
    ) -> ComparisonReport:
        """Find folders sharing a name across two or more roots."""
        return self._compare(walk_folders, roots, mode, on_progress)

    def compare_files(
        self,
        roots: Sequence[str],
        mode: SearchMode | str = SearchMode.PERFECT,
        on_progress: ProgressCallback | None = None,
    ) -> ComparisonReport:
        """Find files sharing a name across two or more roots."""
        return self._compare(walk_files, roots, mode, on_progress)

    # ── internals ────────────────────────────────────────────────────────

    def _walk(self, walker: Walker, root: str) -> list:
        path = ensure_exists(root)
        entries = walker(path, max_depth=self.max_depth, cancel=self._cancel)
        log.info("Scanned %s: %d entries", root, len(entries))
        return entries

    def _find_duplicates(self, walker: Walker, root: str, mode: SearchMode | str) -> DuplicateReport:
        mode = parse_mode(mode)
        entries = self._walk(walker, root)
        groups = find_duplicate_groups((LocatedEntry(e) for e in entries), mode)
        return DuplicateReport(
            path=root,
            groups=groups,
            total_duplicates=total_duplicates(groups),
            total_analyzed=len(entries),
        )

    def _compare(
        self,
        walker: Walker,
        roots: Sequence[str],
        mode: SearchMode | str,
        on_progress: ProgressCallback | None,
    ) -> ComparisonReport:
        sources = _usable_roots(roots)
        mode = parse_mode(mode)
        paths = [ensure_exists(source) for source in sources]

        if (os.cpu_count() or 1) > 1 and self.workers > 1:
            walked = self._walk_parallel(walker, sources, paths, on_progress)
        else:
            walked = self._walk_sequential(walker, sources, paths, on_progress)

        located: list[LocatedEntry] = []
        per_source: dict[str, int] = {}
        for source, entries in zip(sources, walked):
            per_source[source] = len(entries)
            located.extend(LocatedEntry(e, source=source) for e in entries)

        groups = find_duplicate_groups(located, mode)
        return ComparisonReport(
            sources=sources,
            groups=groups,
            total_duplicates=total_duplicates(groups),
            per_source_counts=per_source,
            total_analyzed=len(located),
        )

    def _walk_one(
        self,
        walker: Walker,
        source: str,
        path: Path,
        on_progress: ProgressCallback | None,
    ) -> list:
        if on_progress:
            on_progress(source, "scanning")
        try:
            entries = walker(path, max_depth=self.max_depth, cancel=self._cancel)
        except Exception:
            log.exception("Scan of '%s' failed", source)
            if on_progress:
                on_progress(source, "error")
            raise
        log.info("Scanned %s: %d entries", source, len(entries))
        if on_progress:
            on_progress(source, "done")
        return entries

    def _walk_sequential(
        self,
        walker: Walker,
        sources: list[str],
        paths: list[Path],
        on_progress: ProgressCallback | None,
    ) -> list[list]:
        """Walk roots one at a time."""
        return [self._walk_one(walker, s, p, on_progress) for s, p in zip(sources, paths)]

    def _walk_parallel(
        self,
        walker: Walker,
        sources: list[str],
        paths: list[Path],
        on_progress: ProgressCallback | None,
    ) -> list[list]:
        """Walk roots concurrently via a small thread pool.

        Results are collected in root order, so the combined listing is
        the same as a sequential walk would produce.
        """
        max_workers = min(self.workers, len(sources))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(self._walk_one, walker, s, p, on_progress)
                for s, p in zip(sources, paths)
            ]
            return [future.result() for future in futures]


def _usable_roots(roots: Sequence[str]) -> list[str]:
    """Drop blank and repeated roots and require at least two of the rest."""
    if isinstance(roots, str):
        raise InvalidArgumentError("Expected a list of root paths, got a single string")
    usable = list(dict.fromkeys(r for r in roots if r and str(r).strip()))
    if len(usable) < 2:
        raise InvalidArgumentError("At least 2 distinct folder paths are required")
    return usable
