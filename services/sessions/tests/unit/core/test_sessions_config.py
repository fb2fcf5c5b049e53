import pytest
from pydantic import ValidationError
from src.core.config import Settings, get_settings


class TestSettings:
    """Test Settings configuration class."""

    def test_default_values(self):
        config = Settings()

        assert config.processing_session_gap_seconds == 1800
        assert config.sessions_quantiles == [0.1, 0.5, 0.9, 0.99]
        assert config.sessions_sketch_level == 8
        assert config.report_period_days == 30
        assert config.sessions_executor == "threads"
        assert config.report_file_name == "session_metrics.tsv"
        assert config.otel_service_name == "sessions"
        assert config.metrics_textfile_path is None

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("REPORT_YEAR", "2015")
        monkeypatch.setenv("REPORT_MONTH", "6")
        monkeypatch.setenv("REPORT_DAY", "1")
        monkeypatch.setenv("SESSIONS_EXECUTOR", "serial")

        config = Settings()

        assert (config.report_year, config.report_month, config.report_day) == (2015, 6, 1)
        assert config.sessions_executor == "serial"

    def test_redaction_keeps_domain_fields_visible(self):
        config = Settings()

        assert "password" in config.app_log_redaction_patterns
        assert "session" not in config.app_log_redaction_patterns

    @pytest.mark.parametrize(
        "overrides",
        [
            {"processing_session_gap_seconds": 0},
            {"sessions_quantiles": []},
            {"sessions_quantiles": [0.5, 1.5]},
            {"report_month": 13},
            {"report_period_days": 0},
            {"sessions_executor": "gpu"},
            {"sessions_sketch_level": 0},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            Settings(**overrides)

    def test_quantile_levels_are_sorted(self):
        config = Settings(sessions_quantiles=[0.9, 0.1, 0.5])

        assert config.sessions_quantiles == [0.1, 0.5, 0.9]

    def test_duplicate_quantile_levels_are_rejected(self):
        """Each level is one report column, so repeats would corrupt the report."""
        with pytest.raises(ValidationError, match="duplicate"):
            Settings(sessions_quantiles=[0.5, 0.5])

    def test_settings_are_cached(self, monkeypatch):
        get_settings.cache_clear()
        monkeypatch.setenv("REPORT_PERIOD_DAYS", "7")
        try:
            assert get_settings() is get_settings()
            assert get_settings().report_period_days == 7
        finally:
            get_settings.cache_clear()
