"""Shared utility functions."""

from __future__ import annotations

import logging
import os
import subprocess
import threading
from pathlib import Path

from doppel.core.errors import ScanCancelled

log = logging.getLogger(__name__)


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def dir_info(path: Path | str, cancel: threading.Event | None = None) -> tuple[int, int]:
    """Calculate total size and file count of a directory tree.

    Every regular file at any depth is counted; directories and symlinks
    are not.  Items that cannot be read are skipped, so an empty or fully
    inaccessible tree yields ``(0, 0)`` rather than an error.

    Uses GNU ``find`` (C-speed walk) when available, falling back to
    ``os.scandir`` on systems without it.

    *cancel* is checked before ``find`` starts and at every directory of
    the fallback walk.  A running ``find`` is not interrupted, so a
    cancelled scan can take up to its timeout to notice.

    Returns:
        (total_bytes, file_count) tuple.
    """
    check_cancelled(cancel)
    try:
        return _dir_info_find(str(path))
    except (OSError, subprocess.SubprocessError, ValueError) as e:
        log.debug("find unavailable for %s (%s), walking with scandir", path, e)
        return _dir_info_scandir(path, cancel)


def _dir_info_find(path_str: str) -> tuple[int, int]:
    """Walk a directory tree using GNU find (pure C, no Python per-file overhead).

    ``find`` keeps going past unreadable directories and exits non-zero
    afterwards, so a non-zero exit with output is still a usable partial
    total.  A non-zero exit without any output means ``find`` itself
    failed (e.g. no ``-printf`` support) and the caller should fall back.
    """
    proc = subprocess.run(
        ["find", path_str, "-type", "f", "-printf", "%s\n"],
        capture_output=True, timeout=60,
    )
    if proc.returncode != 0 and not proc.stdout:
        raise subprocess.SubprocessError(proc.stderr.decode(errors="replace").strip())
    total = count = 0
    for line in proc.stdout.split(b"\n"):
        if line:
            total += int(line)
            count += 1
    return total, count


def _dir_info_scandir(path: Path | str, cancel: threading.Event | None = None) -> tuple[int, int]:
    """Walk a directory tree using os.scandir (pure Python fallback)."""
    total = 0
    count = 0
    pending: list[Path | str] = [path]
    while pending:
        check_cancelled(cancel)
        current = pending.pop()
        try:
            with os.scandir(current) as it:
                children = list(it)
        except OSError as e:
            log.debug("Cannot read %s: %s", current, e)
            continue
        for child in children:
            try:
                if child.is_dir(follow_symlinks=False):
                    pending.append(child.path)
                elif child.is_file(follow_symlinks=False):
                    total += child.stat(follow_symlinks=False).st_size
                    count += 1
            except OSError as e:
                log.debug("Skipping %s: %s", child.path, e)
    return total, count


def check_cancelled(cancel: threading.Event | None) -> None:
    """Raise ScanCancelled once *cancel* has been set."""
    if cancel is not None and cancel.is_set():
        raise ScanCancelled("Scan cancelled")


def bytes_to_human(size_bytes: int) -> str:
    """Convert byte count to a human-readable string."""
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    if size_bytes == 0:
        return "0 B"

    units = ("B", "KB", "MB", "GB", "TB")
    value = float(size_bytes)
    for unit in units[:-1]:
        if abs(value) < 1024:
            return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1024
    return f"{value:.1f} {units[-1]}"


def format_elapsed(seconds: float) -> str:
    """Format an elapsed time as a human-readable string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds) // 60
    secs = seconds - minutes * 60
    return f"{minutes}m {secs:.0f}s"
