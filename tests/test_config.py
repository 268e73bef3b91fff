import logging

import pytest

from partnership.config import DEFAULT_COMMENT_AUTHORS, DashboardConfig, configure_logging


ENV_VARS = [
    "DASHBOARD_DATABASE_URL",
    "DATABASE_URL",
    "APP_PASSWORD",
    "AUTH_SECRET",
    "DASHBOARD_STRICT_UPDATES",
    "TASK_TRANSITION_POLICY",
    "DASHBOARD_SEED_SAMPLE_DATA",
    "COMMENT_AUTHORS",
    "DASHBOARD_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = DashboardConfig.from_env()
    assert config.database_url.startswith("sqlite:///")
    assert config.is_local_sqlite
    assert config.app_password is None
    assert config.strict_updates is False
    assert config.task_transition_policy == "permissive"
    assert config.seed_sample_data is True
    assert config.comment_authors == DEFAULT_COMMENT_AUTHORS
    assert config.log_level == "INFO"


def test_dashboard_url_wins_over_shared_url(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg2://u:p@db/shared")
    monkeypatch.setenv("DASHBOARD_DATABASE_URL", "sqlite:////tmp/own.db")
    config = DashboardConfig.from_env()
    assert config.database_url == "sqlite:////tmp/own.db"
    assert not config.is_local_sqlite


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("APP_PASSWORD", "  pw  ")
    monkeypatch.setenv("AUTH_SECRET", "")
    monkeypatch.setenv("DASHBOARD_STRICT_UPDATES", "yes")
    monkeypatch.setenv("TASK_TRANSITION_POLICY", "STRICT")
    monkeypatch.setenv("DASHBOARD_SEED_SAMPLE_DATA", "0")
    monkeypatch.setenv("COMMENT_AUTHORS", "Ana, Bo ,,")
    monkeypatch.setenv("DASHBOARD_LOG_LEVEL", "debug")
    config = DashboardConfig.from_env()
    assert config.app_password == "pw"
    assert config.auth_secret == "default-secret"
    assert config.strict_updates is True
    assert config.task_transition_policy == "strict"
    assert config.seed_sample_data is False
    assert config.comment_authors == ["Ana", "Bo"]
    assert config.log_level == "DEBUG"


def test_unknown_policy_falls_back(monkeypatch):
    monkeypatch.setenv("TASK_TRANSITION_POLICY", "chaotic")
    assert DashboardConfig.from_env().task_transition_policy == "permissive"


def test_configure_logging_is_idempotent():
    logger = configure_logging("DEBUG")
    count = len(logger.handlers)
    configure_logging("WARNING")
    assert len(logger.handlers) == count
    assert logger.level == logging.WARNING
