"""Tests for underbar.core.settings."""

import pytest
from pydantic import ValidationError

from underbar.core.settings import UnderbarSettings, get_settings, reset_settings


class TestUnderbarSettings:
    """Test settings defaults and environment loading."""

    def test_defaults(self):
        settings = UnderbarSettings()
        assert settings.log_level == "INFO"
        assert settings.json_logs is None
        assert settings.timer_backend == "thread"
        assert settings.shuffle_seed is None

    def test_reads_prefixed_environment(self, monkeypatch):
        """UNDERBAR_-prefixed variables override defaults."""
        monkeypatch.setenv("UNDERBAR_LOG_LEVEL", "debug")
        monkeypatch.setenv("UNDERBAR_TIMER_BACKEND", "asyncio")
        monkeypatch.setenv("UNDERBAR_SHUFFLE_SEED", "42")
        settings = UnderbarSettings()
        assert settings.log_level == "DEBUG"
        assert settings.timer_backend == "asyncio"
        assert settings.shuffle_seed == 42

    def test_reads_dotenv_file(self, tmp_path):
        """.env in the working directory is honoured."""
        (tmp_path / ".env").write_text("UNDERBAR_JSON_LOGS=true\n")
        assert UnderbarSettings().json_logs is True

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("UNDERBAR_TIMER_BACKEND", "celery")
        with pytest.raises(ValidationError):
            UnderbarSettings()

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            UnderbarSettings(log_level="chatty")


class TestGetSettings:
    """Test the cached accessor."""

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_reset_rereads_environment(self, monkeypatch):
        assert get_settings().shuffle_seed is None
        monkeypatch.setenv("UNDERBAR_SHUFFLE_SEED", "7")
        assert get_settings().shuffle_seed is None
        reset_settings()
        assert get_settings().shuffle_seed == 7
