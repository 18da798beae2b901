"""Tests for src.config — Settings validation."""

import pytest
from pydantic import ValidationError

from src.config import Settings, _load_settings


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.ALARMS_FILE == "alarms_data.json"
        assert s.TICK_SECONDS == 1.0
        assert s.SNOOZE_MINUTES == 30
        assert s.CONFLICT_WINDOW_MINUTES == 2

    def test_string_values_coerced(self):
        s = Settings(TICK_SECONDS="0.5", SNOOZE_MINUTES="15", CONFLICT_WINDOW_MINUTES="0")
        assert s.TICK_SECONDS == 0.5
        assert s.SNOOZE_MINUTES == 15
        assert s.CONFLICT_WINDOW_MINUTES == 0

    @pytest.mark.parametrize("field,value", [
        ("TICK_SECONDS", "0"),
        ("SNOOZE_MINUTES", "-5"),
        ("CONFLICT_WINDOW_MINUTES", "-1"),
        ("SNOOZE_MINUTES", "soon"),
    ])
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            Settings(**{field: value})

    def test_log_level_normalized(self):
        assert Settings(LOG_LEVEL=" debug ").LOG_LEVEL == "DEBUG"


class TestLoadSettings:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("ALARMS_FILE", "/tmp/alarms.json")
        monkeypatch.setenv("SNOOZE_MINUTES", "10")
        s = _load_settings()
        assert s.ALARMS_FILE == "/tmp/alarms.json"
        assert s.SNOOZE_MINUTES == 10
