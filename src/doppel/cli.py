"""CLI interface for Doppel."""

from __future__ import annotations

import json
import logging
import sys
import time
from typing import Any, NoReturn

import click

from doppel.core.engine import ScanEngine
from doppel.core.errors import InvalidArgumentError, ScanError
from doppel.models.entry import FileEntry, FolderEntry, LocatedEntry
from doppel.models.report import DuplicateGroup, SearchMode
from doppel.settings import DEFAULTS, Settings
from doppel.utils import bytes_to_human, format_elapsed

_MODES = [m.value for m in SearchMode]


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _setting_int(key: str, minimum: int) -> int:
    """Read an integer setting, rejecting values a scan cannot use."""
    value = Settings.instance().get(key)
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"Setting '{key}' expects an integer, got {value!r}") from None
    if parsed < minimum:
        raise InvalidArgumentError(f"Setting '{key}' is out of range: {parsed}")
    return parsed


def _build_engine(max_depth: int | None) -> ScanEngine:
    if max_depth is None:
        max_depth = _setting_int("scan.max_depth", 0)
    return ScanEngine(max_depth=max_depth, workers=_setting_int("scan.workers", 1))


def _resolve_mode(mode: str | None) -> str:
    return mode or Settings.instance().get("scan.mode")


def _fail(message: str) -> NoReturn:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


def _folder_to_dict(entry: FolderEntry) -> dict[str, Any]:
    return {
        "name": entry.name,
        "path": str(entry.path),
        "depth": entry.depth,
        "file_count": entry.file_count,
        "size": entry.size,
    }


def _file_to_dict(entry: FileEntry) -> dict[str, Any]:
    return {
        "name": entry.name,
        "path": str(entry.path),
        "size": entry.size,
        "extension": entry.extension,
        "modified": entry.modified.isoformat(),
    }


def _entry_to_dict(entry: FolderEntry | FileEntry) -> dict[str, Any]:
    if isinstance(entry, FolderEntry):
        return _folder_to_dict(entry)
    return _file_to_dict(entry)


def _location_to_dict(location: LocatedEntry) -> dict[str, Any]:
    data = _entry_to_dict(location.entry)
    data["original_name"] = location.original_name
    if location.source is not None:
        data["source"] = location.source
    return data


def _group_to_dict(group: DuplicateGroup) -> dict[str, Any]:
    return {
        "name": group.name,
        "count": group.count,
        "locations": [_location_to_dict(loc) for loc in group.locations],
    }


def _echo_groups(groups: list[DuplicateGroup]) -> None:
    for group in groups:
        click.echo(f"\n  {click.style(group.name, fg='cyan', bold=True)} ({group.count} locations)")
        for loc in group.locations:
            details = bytes_to_human(loc.size)
            if loc.file_count is not None:
                details += f", {loc.file_count:,} files"
            source_tag = click.style(f" [{loc.source}]", fg="blue") if loc.source else ""
            click.echo(f"    {loc.path}  {click.style(details, fg='bright_black')}{source_tag}")


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """Doppel: find folders and files that share a name."""
    _setup_logging(verbose)


_max_depth_option = click.option(
    "--max-depth", "-d", type=click.IntRange(min=0), default=None,
    help="Maximum depth below the root (default from settings)",
)
_mode_option = click.option(
    "--mode", "-m", type=click.Choice(_MODES), default=None,
    help="'full' matches names only, 'perfect' also needs size within 10%",
)
_files_option = click.option("--files", "-f", "files_mode", is_flag=True, help="Compare files instead of folders")
_json_option = click.option("--json", "as_json", is_flag=True, help="Output as JSON")


# ── folders ──────────────────────────────────────────────────────────────

@main.command()
@click.argument("path")
@_max_depth_option
@_json_option
def folders(path: str, max_depth: int | None, as_json: bool) -> None:
    """List every folder beneath PATH with its size and file count."""
    try:
        engine = _build_engine(max_depth)
        result = engine.scan_folders(path)
    except ScanError as exc:
        _fail(str(exc))

    if as_json:
        data = {
            "path": result.path,
            "count": result.count,
            "folders": [_folder_to_dict(e) for e in result.entries],
        }
        click.echo(json.dumps(data, indent=2))
        return

    for entry in result.entries:
        indent = "  " * (entry.depth + 1)
        click.echo(
            f"{indent}{click.style(entry.name, fg='cyan')}  "
            f"{click.style(bytes_to_human(entry.size), fg='green')} ({entry.file_count:,} files)"
        )
    click.echo(f"\n{result.count:,} folders under {result.path}")


# ── files ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("path")
@_max_depth_option
@_json_option
def files(path: str, max_depth: int | None, as_json: bool) -> None:
    """List every file beneath PATH."""
    try:
        engine = _build_engine(max_depth)
        result = engine.scan_files(path)
    except ScanError as exc:
        _fail(str(exc))

    if as_json:
        data = {
            "path": result.path,
            "count": result.count,
            "files": [_file_to_dict(e) for e in result.entries],
        }
        click.echo(json.dumps(data, indent=2))
        return

    for entry in result.entries:
        modified = entry.modified.strftime("%Y-%m-%d %H:%M")
        click.echo(f"  {entry.path}  {click.style(bytes_to_human(entry.size), fg='green')}  {modified}")
    total = sum(e.size for e in result.entries)
    click.echo(f"\n{result.count:,} files under {result.path}, {bytes_to_human(total)} total")


# ── duplicates ───────────────────────────────────────────────────────────

@main.command()
@click.argument("path")
@_files_option
@_mode_option
@_max_depth_option
@_json_option
def duplicates(path: str, files_mode: bool, mode: str | None, max_depth: int | None, as_json: bool) -> None:
    """Find folders (or files) beneath PATH that share a name."""
    mode = _resolve_mode(mode)
    started = time.monotonic()
    try:
        engine = _build_engine(max_depth)
        if files_mode:
            report = engine.find_duplicate_files(path, mode)
        else:
            report = engine.find_duplicate_folders(path, mode)
    except ScanError as exc:
        _fail(str(exc))

    if as_json:
        data = {
            "path": report.path,
            "mode": mode,
            "duplicates": [_group_to_dict(g) for g in report.groups],
            "total_duplicates": report.total_duplicates,
            "total_analyzed": report.total_analyzed,
        }
        click.echo(json.dumps(data, indent=2))
        return

    noun = "files" if files_mode else "folders"
    if not report.groups:
        click.echo(f"No duplicate {noun} found among {report.total_analyzed:,} scanned ({mode} search).")
        return

    _echo_groups(report.groups)
    click.echo(
        f"\n{len(report.groups):,} groups, {report.total_duplicates:,} duplicate {noun} "
        f"among {report.total_analyzed:,} scanned ({mode} search, {format_elapsed(time.monotonic() - started)})\n"
    )


# ── compare ──────────────────────────────────────────────────────────────

@main.command()
@click.argument("paths", nargs=-1, required=True)
@_files_option
@_mode_option
@_max_depth_option
@_json_option
def compare(paths: tuple[str, ...], files_mode: bool, mode: str | None, max_depth: int | None, as_json: bool) -> None:
    """Find folders (or files) sharing a name across two or more PATHS."""
    mode = _resolve_mode(mode)

    def on_progress(source: str, status: str) -> None:
        if as_json:
            return
        if status == "done":
            click.echo(f"  {click.style('✓', fg='green')} scanned {source}")
        elif status == "error":
            click.echo(f"  {click.style('✗', fg='red')} {source}: error during scan")

    try:
        engine = _build_engine(max_depth)
        if files_mode:
            report = engine.compare_files(list(paths), mode, on_progress=on_progress)
        else:
            report = engine.compare_folders(list(paths), mode, on_progress=on_progress)
    except ScanError as exc:
        _fail(str(exc))

    if as_json:
        data = {
            "sources": report.sources,
            "mode": mode,
            "duplicates": [_group_to_dict(g) for g in report.groups],
            "total_duplicates": report.total_duplicates,
            "per_source_counts": report.per_source_counts,
            "total_analyzed": report.total_analyzed,
        }
        click.echo(json.dumps(data, indent=2))
        return

    noun = "files" if files_mode else "folders"
    _echo_groups(report.groups)
    click.echo()
    for source, count in report.per_source_counts.items():
        click.echo(f"  {source:40s} {count:>8,} {noun}")
    spanning = len(report.groups_spanning_sources())
    click.echo(
        f"\n{len(report.groups):,} groups ({spanning:,} across roots), "
        f"{report.total_duplicates:,} duplicate {noun} ({mode} search)\n"
    )


# ── config ───────────────────────────────────────────────────────────────

@main.group()
def config() -> None:
    """Show or change persistent settings."""


@config.command("show")
@_json_option
def config_show(as_json: bool) -> None:
    """Show effective settings."""
    settings = Settings.instance()
    values = settings.as_dict()
    if as_json:
        click.echo(json.dumps(values, indent=2))
        return
    click.echo(f"  {click.style('File:', bold=True)} {settings.path}")
    for key, value in values.items():
        click.echo(f"  {key:20s} {value}")


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Set a persistent setting."""
    if key not in DEFAULTS:
        _fail(f"Unknown setting '{key}'. Known settings: {', '.join(DEFAULTS)}")

    parsed: Any = value
    if isinstance(DEFAULTS[key], int):
        try:
            parsed = int(value)
        except ValueError:
            _fail(f"'{key}' expects an integer, got '{value}'")
        if parsed < (1 if key == "scan.workers" else 0):
            _fail(f"'{key}' is out of range: {parsed}")
    elif key == "scan.mode" and value not in _MODES:
        _fail(f"'{key}' must be one of: {', '.join(_MODES)}")

    Settings.instance().set(key, parsed)
    click.echo(f"{key} = {parsed}")
