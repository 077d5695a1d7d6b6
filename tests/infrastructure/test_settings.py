"""Tests for infrastructure settings."""

from unittest.mock import MagicMock

from src.infrastructure import settings as settings_module
from src.infrastructure.settings import LedgerSettings


def _isolate_env(monkeypatch) -> None:
    monkeypatch.setattr(settings_module.dotenv, "load_dotenv", lambda: None)
    for name in ("LEDGER_BACKEND", "LEDGER_MAX_RETRIES", "LEDGER_OWNER"):
        monkeypatch.delenv(name, raising=False)


def test_from_env_defaults(monkeypatch) -> None:
    """Without variables the SQL backend and three retries are used."""
    _isolate_env(monkeypatch)

    settings = LedgerSettings.from_env()

    assert settings == LedgerSettings(
        backend="sqlalchemy",
        max_retries=3,
        owner=None,
    )


def test_from_env_reads_values(monkeypatch) -> None:
    """Values are normalized from the environment."""
    _isolate_env(monkeypatch)
    monkeypatch.setenv("LEDGER_BACKEND", " Memory ")
    monkeypatch.setenv("LEDGER_MAX_RETRIES", "5")
    monkeypatch.setenv("LEDGER_OWNER", " alice ")

    settings = LedgerSettings.from_env()

    assert settings.backend == "memory"
    assert settings.max_retries == 5
    assert settings.owner == "alice"


def test_invalid_retries_fall_back_with_warning(monkeypatch) -> None:
    """A non-numeric retry budget should warn and use the default."""
    _isolate_env(monkeypatch)
    fake_logger = MagicMock()
    monkeypatch.setattr(settings_module, "get_app_logger", lambda: fake_logger)
    monkeypatch.setenv("LEDGER_MAX_RETRIES", "many")

    settings = LedgerSettings.from_env()

    assert settings.max_retries == 3
    fake_logger.warning.assert_called_once()


def test_negative_retries_clamp_to_zero(monkeypatch) -> None:
    _isolate_env(monkeypatch)
    monkeypatch.setenv("LEDGER_MAX_RETRIES", "-2")

    assert LedgerSettings.from_env().max_retries == 0
