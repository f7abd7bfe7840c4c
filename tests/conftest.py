"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from doppel.settings import Settings


def build_tree(base: Path, layout: dict) -> Path:
    """Create a directory tree from a nested dict.

    Dict values are subdirectories, bytes values are file contents and
    int values are file sizes (filled with ``x``).
    """
    base.mkdir(parents=True, exist_ok=True)
    for name, value in layout.items():
        target = base / name
        if isinstance(value, dict):
            build_tree(target, value)
        elif isinstance(value, bytes):
            target.write_bytes(value)
        else:
            target.write_bytes(b"x" * value)
    return base


def files_totaling(count: int, total: int) -> dict[str, int]:
    """Layout of *count* files whose sizes add up to *total* bytes."""
    each, extra = divmod(total, count)
    return {f"f{i}.bin": each + (extra if i == 0 else 0) for i in range(count)}


@pytest.fixture
def isolate_settings(tmp_path, monkeypatch):
    """Redirect settings to a temp config directory."""
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setattr(Settings, "_instance", None)
    return config_home / "doppel" / "settings.json"


@pytest.fixture
def similar_tree(tmp_path):
    """Two 'x' folders of nearly equal size plus an unrelated 'y'."""
    return build_tree(
        tmp_path / "root",
        {
            "A": {"x": files_totaling(5, 100)},
            "B": {"x": files_totaling(5, 104)},
            "C": {"y": {"only.txt": 10}},
        },
    )


@pytest.fixture
def divergent_tree(tmp_path):
    """Two 'x' folders whose sizes and file counts differ widely."""
    return build_tree(
        tmp_path / "root",
        {
            "A": {"x": files_totaling(5, 100)},
            "B": {"x": files_totaling(50, 10000)},
            "C": {"y": {"only.txt": 10}},
        },
    )


@pytest.fixture
def deep_tree(tmp_path):
    """A five-level chain a/b/c/d/e with one file per level."""
    return build_tree(
        tmp_path / "deep",
        {
            "top.txt": 1,
            "a": {
                "a.txt": 2,
                "b": {"b.txt": 3, "c": {"c.txt": 4, "d": {"d.txt": 5, "e": {"e.txt": 6}}}},
            },
        },
    )
