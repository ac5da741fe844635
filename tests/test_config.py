"""
Configuration tests.
"""

import pytest

from app.config import Settings, get_settings


def test_get_settings_returns_settings() -> None:
    """get_settings returns a Settings instance."""
    settings = get_settings()
    assert isinstance(settings, Settings)


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Scheduler and evaluation defaults when env is unset."""
    for name in (
        "SCHEDULER_ENABLED",
        "SCHEDULER_TIMEZONE",
        "NIGHTLY_EVALUATION_CRON",
        "WEEKLY_EVALUATION_CRON",
        "TENANT_EVALUATION_TIMEOUT_SECONDS",
        "JOB_HISTORY_LIMIT",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = Settings()
    assert settings.scheduler_enabled is False
    assert settings.scheduler_timezone == "Asia/Seoul"
    assert settings.nightly_evaluation_cron == "0 2 * * *"
    assert settings.weekly_evaluation_cron == "0 3 * * 0"
    assert settings.tenant_evaluation_timeout_seconds == 300.0
    assert settings.job_history_limit == 10


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Scheduler settings load from env."""
    monkeypatch.setenv("SCHEDULER_ENABLED", "true")
    monkeypatch.setenv("SCHEDULER_TIMEZONE", "UTC")
    monkeypatch.setenv("NIGHTLY_EVALUATION_CRON", "30 1 * * *")
    monkeypatch.setenv("TENANT_EVALUATION_TIMEOUT_SECONDS", "45")
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.scheduler_enabled is True
        assert settings.scheduler_timezone == "UTC"
        assert settings.nightly_evaluation_cron == "30 1 * * *"
        assert settings.tenant_evaluation_timeout_seconds == 45.0
    finally:
        get_settings.cache_clear()


def test_generic_postgres_url_uses_psycopg3(monkeypatch: pytest.MonkeyPatch) -> None:
    """postgresql:// URLs are rewritten to the psycopg3 driver."""
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db:5432/compliance")
    assert Settings().database_url == "postgresql+psycopg://u:p@db:5432/compliance"


def test_sqlite_url_kept(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    assert Settings().database_url == "sqlite://"
