"""Composition root for wiring infrastructure adapters."""

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.application.use_cases.ledger_service import LedgerService
from src.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from src.infrastructure.ledger_repository_factory import (
    create_ledger_repository,
)
from src.infrastructure.logging.logger import get_app_logger
from src.infrastructure.settings import LedgerSettings


def build_database_adapter() -> DatabaseEnginePort:
    """Return the database adapter instance."""
    return SqlAlchemyDatabaseEngineAdapter()


def build_ledger_repository(
    db_port: DatabaseEnginePort | None = None,
    settings: LedgerSettings | None = None,
) -> LedgerRepositoryPort:
    """Return the configured ledger repository."""
    resolved_settings = settings or LedgerSettings.from_env()
    resolved_db = db_port
    if resolved_db is None and resolved_settings.backend == "sqlalchemy":
        resolved_db = build_database_adapter()
    return create_ledger_repository(
        resolved_db,
        logger=get_app_logger(),
        settings=resolved_settings,
    )


def build_ledger_service(
    repository: LedgerRepositoryPort | None = None,
    settings: LedgerSettings | None = None,
) -> LedgerService:
    """Return the ledger facade wired to the configured repository."""
    resolved_settings = settings or LedgerSettings.from_env()
    resolved_repository = repository or build_ledger_repository(
        settings=resolved_settings,
    )
    return LedgerService(
        resolved_repository,
        logger=get_app_logger(),
        max_retries=resolved_settings.max_retries,
    )


__all__ = [
    "build_database_adapter",
    "build_ledger_repository",
    "build_ledger_service",
]
