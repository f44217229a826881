"""Tests for config.py and logging_config.py."""

import json
import logging

from farmops.config import get_settings
from farmops.logging_config import JsonFormatter


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("FARMOPS_CALENDAR_DAYS", "FARMOPS_CALENDAR_LIMIT", "FARMOPS_TREND_MONTHS", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = get_settings()
        assert settings.calendar_days == 30
        assert settings.calendar_limit == 5
        assert settings.trend_months == 6
        assert settings.log_level == "INFO"

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("FARMOPS_CALENDAR_DAYS", "14")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        settings = get_settings()
        assert settings.calendar_days == 14
        assert settings.log_level == "DEBUG"

    def test_bad_number_falls_back(self, monkeypatch):
        monkeypatch.setenv("FARMOPS_CALENDAR_LIMIT", "five")
        assert get_settings().calendar_limit == 5


def test_json_formatter():
    record = logging.LogRecord("farmops.importer", logging.INFO, "importer.py", 12, "3 rows imported", None, None)
    entry = json.loads(JsonFormatter().format(record))
    assert entry["level"] == "INFO"
    assert entry["logger"] == "farmops.importer"
    assert entry["message"] == "3 rows imported"
