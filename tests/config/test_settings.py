"""Tests for Settings and structured logging setup."""

import pytest
import structlog
from pydantic import ValidationError

from src.config.logging import configure_logging
from src.config.settings import Environment, LogLevel, Settings


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestSettings:
    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        settings = Settings(_env_file=None)
        assert settings.DATABASE_URL.startswith("sqlite+aiosqlite://")
        assert settings.DQI_HASH_CHAR_LIMIT == 10_000
        assert settings.DQI_MAX_SAMPLE_VALUES == 3
        assert settings.ENVIRONMENT == Environment.DEV
        assert not settings.is_production

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("DQI_HASH_CHAR_LIMIT", "2048")
        monkeypatch.setenv("environment", "prod")
        settings = Settings(_env_file=None)
        assert settings.DQI_HASH_CHAR_LIMIT == 2048
        assert settings.is_production

    def test_sample_limit_capped_at_three(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, DQI_MAX_SAMPLE_VALUES=4)


class TestConfigureLogging:
    def test_dev_uses_console_renderer(self, reset_structlog) -> None:
        configure_logging(Settings(_env_file=None, ENVIRONMENT=Environment.DEV))
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_prod_uses_json_renderer(self, reset_structlog) -> None:
        configure_logging(
            Settings(_env_file=None, ENVIRONMENT=Environment.PROD, LOG_LEVEL=LogLevel.WARNING)
        )
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
