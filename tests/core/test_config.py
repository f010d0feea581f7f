"""Unit tests for src/core/config.py"""

import pytest

from src.core.config import DEFAULT_DATABASE_URL, Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ARCADE_DATABASE_URL", "ARCADE_DB_ECHO", "ARCADE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = Settings.from_env()
    assert settings.database_url == DEFAULT_DATABASE_URL == "sqlite:///game-logs.db"
    assert settings.echo_sql is False
    assert settings.log_level == "INFO"


def test_values_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARCADE_DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("ARCADE_DB_ECHO", "yes")
    monkeypatch.setenv("ARCADE_LOG_LEVEL", "debug")

    settings = Settings.from_env()
    assert settings.database_url == "sqlite:///:memory:"
    assert settings.echo_sql is True
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "value, expected",
    [("1", True), ("TRUE", True), ("on", True), ("0", False), ("no", False), ("   ", False)],
)
def test_echo_flag(monkeypatch: pytest.MonkeyPatch, value: str, expected: bool) -> None:
    monkeypatch.setenv("ARCADE_DB_ECHO", value)
    assert Settings.from_env().echo_sql is expected


def test_blank_values_fall_back_to_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARCADE_DATABASE_URL", "  ")
    monkeypatch.setenv("ARCADE_LOG_LEVEL", "")
    settings = Settings.from_env()
    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.log_level == "INFO"
