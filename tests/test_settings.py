"""Tests for the settings store."""

from __future__ import annotations

import json

import pytest

from doppel.settings import DEFAULTS, Settings

pytestmark = pytest.mark.usefixtures("isolate_settings")


class TestSettings:
    def test_defaults_when_missing(self):
        settings = Settings()
        assert settings.get("scan.max_depth") == 10
        assert settings.get("scan.mode") == "perfect"
        assert settings.get("unknown.key") is None
        assert settings.get("unknown.key", "fallback") == "fallback"

    def test_set_persists(self, isolate_settings):
        Settings().set("scan.max_depth", 3)

        data = json.loads(isolate_settings.read_text())
        assert data == {"scan": {"max_depth": 3}}
        assert Settings().get("scan.max_depth") == 3

    def test_as_dict_reports_effective_values(self):
        settings = Settings()
        settings.set("scan.mode", "full")

        values = settings.as_dict()
        assert set(values) == set(DEFAULTS)
        assert values["scan.mode"] == "full"
        assert values["scan.workers"] == 4

    def test_corrupt_file_ignored(self, isolate_settings):
        isolate_settings.parent.mkdir(parents=True)
        isolate_settings.write_text("{not json")

        assert Settings().get("scan.max_depth") == 10

    def test_non_object_file_ignored(self, isolate_settings):
        isolate_settings.parent.mkdir(parents=True)
        isolate_settings.write_text("[1, 2, 3]")

        settings = Settings()
        settings.set("scan.mode", "full")
        assert settings.get("scan.mode") == "full"

    def test_singleton(self):
        assert Settings.instance() is Settings.instance()
