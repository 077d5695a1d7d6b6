"""Tests specific to the SQLAlchemy ledger repository."""

from dataclasses import replace
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from src.domain.errors import (
    BackendUnavailable,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.domain.models import SourceRecord, SourceType
from src.infrastructure import sqlalchemy_ledger_repository as repo_module
from src.infrastructure.db import (
    SqlAlchemyDatabaseEngineAdapter,
    _create_engine,
)


def _build_repository():
    engine = _create_engine("sqlite+pysqlite:///:memory:")
    repository = repo_module.SqlAlchemyLedgerRepository(
        SqlAlchemyDatabaseEngineAdapter(engine=engine)
    )
    repository.create_schema()
    return repository, engine


def _source(source_id: str = "src-1") -> SourceRecord:
    return SourceRecord(
        id=source_id,
        owner="alice",
        name="Checking",
        source_type=SourceType.BANK_ACCOUNT,
        currency="USD",
        initial_balance=Decimal("19.99"),
        current_balance=Decimal("19.99"),
    )


def test_create_schema_is_idempotent() -> None:
    repository, engine = _build_repository()

    repository.create_schema()

    with engine.connect() as conn:
        tables = {
            row[0]
            for row in conn.execute(
                text("SELECT name FROM sqlite_master WHERE type = 'table'")
            )
        }
    assert {
        "ledger_sources",
        "ledger_credit_card_details",
        "ledger_categories",
        "ledger_subcategories",
        "ledger_transactions",
    } <= tables


def test_amounts_are_stored_as_cents() -> None:
    repository, engine = _build_repository()
    repository.insert_source(_source())

    with engine.connect() as conn:
        row = conn.execute(
            text(
                "SELECT initial_balance_cents, source_type "
                "FROM ledger_sources WHERE id = 'src-1'"
            )
        ).one()

    assert row.initial_balance_cents == 1999
    assert row.source_type == "BANK_ACCOUNT"


def test_duplicate_insert_raises_conflict() -> None:
    repository, _ = _build_repository()
    repository.insert_source(_source())

    with pytest.raises(ConflictError):
        repository.insert_source(_source())


def test_out_of_range_amount_raises_validation_error() -> None:
    """Cents beyond a 64-bit column should not escape as OverflowError."""
    repository, _ = _build_repository()
    oversized = replace(
        _source(),
        initial_balance=Decimal("1e17"),
        current_balance=Decimal("1e17"),
    )

    with pytest.raises(ValidationError):
        repository.insert_source(oversized)
    assert repository.list_sources("alice") == []


def test_unreachable_database_raises_backend_unavailable(tmp_path) -> None:
    engine = _create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'missing' / 'ledger.db'}"
    )
    repository = repo_module.SqlAlchemyLedgerRepository(
        SqlAlchemyDatabaseEngineAdapter(engine=engine)
    )

    with pytest.raises(BackendUnavailable):
        repository.ping()
    with pytest.raises(BackendUnavailable):
        repository.insert_source(_source())


def test_operational_errors_are_translated_on_reads() -> None:
    """A failing connection should surface as BackendUnavailable."""
    engine = MagicMock()
    engine.connect.side_effect = OperationalError(
        "SELECT 1",
        {},
        Exception("server closed the connection"),
    )
    db_port = MagicMock()
    db_port.get_ledger_engine.return_value = engine
    repository = repo_module.SqlAlchemyLedgerRepository(db_port)

    with pytest.raises(BackendUnavailable):
        repository.list_sources("alice")


def test_update_source_uses_version_guard() -> None:
    """Source rewrites should go through the compare-and-swap statement."""
    engine = MagicMock()
    conn = MagicMock()
    engine.begin.return_value.__enter__.return_value = conn
    conn.execute.return_value.first.return_value = None
    db_port = MagicMock()
    db_port.get_ledger_engine.return_value = engine
    repository = repo_module.SqlAlchemyLedgerRepository(db_port)

    with pytest.raises(NotFoundError):
        repository.update_source(_source(), expected_version=4)

    statement, params = conn.execute.call_args_list[0].args
    assert statement is repo_module.UPDATE_SOURCE_SQL
    assert params["expected_version"] == 4
    assert "version = :expected_version" in str(statement)
