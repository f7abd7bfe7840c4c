"""Duplicate grouping of scanned entries."""

from __future__ import annotations

import logging
from typing import Iterable

from doppel.core.errors import InvalidArgumentError
from doppel.models.entry import LocatedEntry
from doppel.models.report import DuplicateGroup, SearchMode

log = logging.getLogger(__name__)

TOLERANCE = 0.10
"""Maximum relative difference for a ``perfect`` match."""


def relative_delta(a: int, b: int) -> float:
    """Return ``|a - b| / max(a, b)``, treating two zeros as identical."""
    larger = max(a, b)
    if larger == 0:
        return 0.0
    return abs(a - b) / larger


def is_similar(entry: LocatedEntry, representative: LocatedEntry, tolerance: float = TOLERANCE) -> bool:
    """Check whether *entry* is close enough to a cluster representative.

    Sizes must be within *tolerance*.  When both sides are folders their
    recursive file counts must be within *tolerance* too.
    """
    if relative_delta(entry.size, representative.size) > tolerance:
        return False
    count, rep_count = entry.file_count, representative.file_count
    if count is not None and rep_count is not None:
        return relative_delta(count, rep_count) <= tolerance
    return True


def bucket_by_name(entries: Iterable[LocatedEntry]) -> dict[str, list[LocatedEntry]]:
    """Group entries by lower-cased name, keeping discovery order."""
    buckets: dict[str, list[LocatedEntry]] = {}
    for entry in entries:
        buckets.setdefault(entry.key, []).append(entry)
    return buckets


def partition_similar(members: list[LocatedEntry], tolerance: float = TOLERANCE) -> list[list[LocatedEntry]]:
    """Split a name bucket into clusters of similar entries.

    Each member joins the first existing cluster whose first member it is
    similar to, or starts a new cluster.  Only the representative is
    compared, so the result depends on member order.
    """
    clusters: list[list[LocatedEntry]] = []
    for member in members:
        for cluster in clusters:
            if is_similar(member, cluster[0], tolerance):
                cluster.append(member)
                break
        else:
            clusters.append([member])
    return clusters


def parse_mode(mode: SearchMode | str) -> SearchMode:
    """Coerce a mode name to a SearchMode."""
    try:
        return SearchMode(mode)
    except ValueError:
        raise InvalidArgumentError(f"Unknown search mode: {mode!r}") from None


def find_duplicate_groups(entries: Iterable[LocatedEntry], mode: SearchMode | str) -> list[DuplicateGroup]:
    """Find groups of entries sharing a name, most populous first.

    In ``full`` mode every name bucket with two or more members is a
    group.  In ``perfect`` mode buckets are further split by size and
    file count similarity, and only clusters of two or more survive.
    Groups with equal counts keep their discovery order.
    """
    mode = parse_mode(mode)

    groups: list[DuplicateGroup] = []
    for members in bucket_by_name(entries).values():
        if len(members) < 2:
            continue
        clusters = [members] if mode is SearchMode.FULL else partition_similar(members)
        for cluster in clusters:
            if len(cluster) > 1:
                groups.append(DuplicateGroup(name=cluster[0].original_name, locations=tuple(cluster)))

    groups.sort(key=lambda g: g.count, reverse=True)
    log.debug("Found %d duplicate groups (%s mode)", len(groups), mode.value)
    return groups


def total_duplicates(groups: Iterable[DuplicateGroup]) -> int:
    """Total number of locations across all groups."""
    return sum(g.count for g in groups)
