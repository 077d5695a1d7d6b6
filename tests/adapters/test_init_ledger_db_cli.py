"""Tests for the init_ledger_db_cli adapter."""

from unittest.mock import MagicMock

import pytest

from src.adapters import init_ledger_db_cli
from src.domain.errors import BackendUnavailable


def _patch_repository(monkeypatch, repository):
    dummy_adapter = object()
    monkeypatch.setattr(
        init_ledger_db_cli,
        "build_database_adapter",
        lambda: dummy_adapter,
    )

    def _fake_repository(db_port):
        assert db_port is dummy_adapter
        return repository

    monkeypatch.setattr(
        init_ledger_db_cli,
        "SqlAlchemyLedgerRepository",
        _fake_repository,
    )


def test_main_creates_schema(monkeypatch, capsys):
    """The CLI should create the schema and report success."""
    fake_logger = MagicMock()
    repository = MagicMock()
    monkeypatch.setattr(
        init_ledger_db_cli,
        "get_app_logger",
        lambda: fake_logger,
    )
    _patch_repository(monkeypatch, repository)

    init_ledger_db_cli.main()

    repository.create_schema.assert_called_once()
    assert "ready" in capsys.readouterr().out


def test_main_exits_when_database_is_down(monkeypatch):
    """Storage failures should end the process with status 1."""
    fake_logger = MagicMock()
    repository = MagicMock()
    repository.create_schema.side_effect = BackendUnavailable("refused")
    monkeypatch.setattr(
        init_ledger_db_cli,
        "get_app_logger",
        lambda: fake_logger,
    )
    _patch_repository(monkeypatch, repository)

    with pytest.raises(SystemExit) as excinfo:
        init_ledger_db_cli.main()

    assert excinfo.value.code == 1
    assert "refused" in fake_logger.error.call_args.args[0]
