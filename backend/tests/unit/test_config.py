"""
Unit tests for application settings.
"""
import pytest
from pydantic import ValidationError

from pattern_race.config import Settings


class TestSettings:
    def test_defaults_match_pipeline_constants(self):
        config = Settings(_env_file=None)

        assert config.tick_interval_seconds == 5.0
        assert config.recent_window_seconds == 30.0
        assert config.history_capacity == 100
        assert config.recent_events_count == 10
        assert config.stream_buffer_size == 1000
        assert config.seed_total_components == 147
        assert config.seed_average_score == 63.67

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("PATTERN_RACE_TICK_INTERVAL_SECONDS", "1.5")
        monkeypatch.setenv("PATTERN_RACE_HISTORY_CAPACITY", "25")

        config = Settings(_env_file=None)

        assert config.tick_interval_seconds == 1.5
        assert config.history_capacity == 25

    def test_rejects_wildcard_cors_in_production(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, environment="production", cors_origins=["*"])

    def test_rejects_malformed_cors_origin(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cors_origins=["localhost:3000"])

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, tick_interval_seconds=0)
