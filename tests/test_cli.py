"""Tests for the command-line interface."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from doppel.cli import main
from doppel.settings import Settings

from conftest import build_tree

pytestmark = pytest.mark.usefixtures("isolate_settings")


@pytest.fixture
def runner():
    return CliRunner()


class TestScanCommands:
    def test_folders_json(self, runner, similar_tree):
        result = runner.invoke(main, ["folders", str(similar_tree), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["count"] == 6
        assert data["folders"][0]["name"] == "A"
        assert data["folders"][1] == {
            "name": "x",
            "path": str(similar_tree / "A" / "x"),
            "depth": 1,
            "file_count": 5,
            "size": 100,
        }

    def test_folders_human(self, runner, similar_tree):
        result = runner.invoke(main, ["folders", str(similar_tree)])

        assert result.exit_code == 0, result.output
        assert "6 folders under" in result.output

    def test_files_json(self, runner, similar_tree):
        result = runner.invoke(main, ["files", str(similar_tree), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["count"] == 11
        assert data["files"][0]["extension"] == ".bin"

    def test_max_depth_option(self, runner, deep_tree):
        result = runner.invoke(main, ["folders", str(deep_tree), "--max-depth", "0", "--json"])
        assert [f["name"] for f in json.loads(result.output)["folders"]] == ["a"]

    def test_missing_path(self, runner, tmp_path):
        result = runner.invoke(main, ["folders", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "Path does not exist" in result.output


class TestDuplicates:
    def test_full_json(self, runner, divergent_tree):
        result = runner.invoke(main, ["duplicates", str(divergent_tree), "--mode", "full", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["mode"] == "full"
        assert data["total_duplicates"] == 2
        assert data["duplicates"][0]["name"] == "x"
        assert data["duplicates"][0]["locations"][0]["original_name"] == "x"

    def test_perfect_none_found(self, runner, divergent_tree):
        result = runner.invoke(main, ["duplicates", str(divergent_tree), "--mode", "perfect"])

        assert result.exit_code == 0, result.output
        assert "No duplicate folders found" in result.output

    def test_mode_from_settings(self, runner, divergent_tree):
        Settings.instance().set("scan.mode", "full")
        result = runner.invoke(main, ["duplicates", str(divergent_tree), "--json"])
        assert json.loads(result.output)["total_duplicates"] == 2

    def test_files_mode(self, runner, tmp_path):
        root = build_tree(tmp_path / "f", {"a": {"Report.pdf": 100}, "b": {"report.pdf": 101}})
        result = runner.invoke(main, ["duplicates", str(root), "--files"])

        assert result.exit_code == 0, result.output
        assert "Report.pdf" in result.output
        assert "2 duplicate files" in result.output


class TestCompare:
    def test_compare_json(self, runner, tmp_path):
        left = build_tree(tmp_path / "left", {"shared": {"a.txt": 10}})
        right = build_tree(tmp_path / "right", {"Shared": {"b.txt": 10}, "extra": {}})

        result = runner.invoke(main, ["compare", str(left), str(right), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["per_source_counts"] == {str(left): 1, str(right): 2}
        assert [loc["source"] for loc in data["duplicates"][0]["locations"]] == [str(left), str(right)]

    def test_compare_human(self, runner, tmp_path):
        left = build_tree(tmp_path / "left", {"shared": {"a.txt": 10}})
        right = build_tree(tmp_path / "right", {"shared": {"b.txt": 10}})

        result = runner.invoke(main, ["compare", str(left), str(right)])

        assert result.exit_code == 0, result.output
        assert "1 across roots" in result.output

    def test_single_path_rejected(self, runner, similar_tree):
        result = runner.invoke(main, ["compare", str(similar_tree)])

        assert result.exit_code == 1
        assert "At least 2" in result.output

    def test_missing_path_named(self, runner, tmp_path, similar_tree):
        missing = str(tmp_path / "missing")
        result = runner.invoke(main, ["compare", missing, str(similar_tree)])

        assert result.exit_code == 1
        assert missing in result.output


class TestConfig:
    def test_set_and_show(self, runner, isolate_settings):
        result = runner.invoke(main, ["config", "set", "scan.max_depth", "4"])
        assert result.exit_code == 0, result.output
        assert json.loads(isolate_settings.read_text()) == {"scan": {"max_depth": 4}}

        Settings._instance = None
        result = runner.invoke(main, ["config", "show", "--json"])
        assert json.loads(result.output)["scan.max_depth"] == 4

    def test_unknown_key(self, runner):
        result = runner.invoke(main, ["config", "set", "scan.colour", "red"])

        assert result.exit_code == 1
        assert "Unknown setting" in result.output

    def test_bad_integer(self, runner):
        result = runner.invoke(main, ["config", "set", "scan.workers", "many"])

        assert result.exit_code == 1
        assert "expects an integer" in result.output

    def test_bad_mode(self, runner):
        result = runner.invoke(main, ["config", "set", "scan.mode", "fuzzy"])
        assert result.exit_code == 1


class TestBadSettings:
    @pytest.mark.parametrize(
        "scan, message",
        [
            ({"max_depth": -1}, "out of range"),
            ({"workers": "many"}, "expects an integer"),
            ({"workers": 0}, "out of range"),
        ],
    )
    def test_scan_reports_error(self, runner, isolate_settings, similar_tree, scan, message):
        isolate_settings.parent.mkdir(parents=True)
        isolate_settings.write_text(json.dumps({"scan": scan}))

        result = runner.invoke(main, ["folders", str(similar_tree)])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert message in result.output

    def test_compare_reports_error(self, runner, isolate_settings, tmp_path):
        isolate_settings.parent.mkdir(parents=True)
        isolate_settings.write_text(json.dumps({"scan": {"workers": "many"}}))
        left = build_tree(tmp_path / "left", {"a": {}})
        right = build_tree(tmp_path / "right", {"a": {}})

        result = runner.invoke(main, ["compare", str(left), str(right)])

        assert result.exit_code == 1
        assert "Error: Setting 'scan.workers'" in result.output
