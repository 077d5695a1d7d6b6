"""Factory helpers to select the ledger repository backend."""

import os

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.infrastructure.logging.logger import get_app_logger
from src.infrastructure.memory_ledger_repository import (
    InMemoryLedgerRepository,
)
from src.infrastructure.settings import SUPPORTED_BACKENDS, LedgerSettings
from src.infrastructure.sqlalchemy_ledger_repository import (
    SqlAlchemyLedgerRepository,
)


def create_ledger_repository(
    db_port: DatabaseEnginePort | None,
    logger=None,
    backend: str | None = None,
    settings: LedgerSettings | None = None,
) -> LedgerRepositoryPort:
    """Return a ledger repository implementation based on configuration.

    Args:
        db_port: Port providing the ledger engine (SQL backend only).
        logger: Optional logger compatible with logging.Logger-like API.
        backend: Optional backend override (sqlalchemy or memory).
        settings: Optional settings; read from the environment otherwise.

    Returns:
        LedgerRepositoryPort: Concrete repository implementation.
    """
    resolved_logger = logger or get_app_logger()
    selected_backend = (
        backend
        or (settings.backend if settings else None)
        or os.getenv("LEDGER_BACKEND", "sqlalchemy")
    ).strip().lower()

    if selected_backend == "sqlalchemy":
        if db_port is None:
            raise RuntimeError("SQLAlchemy backend requires a database port.")
        return SqlAlchemyLedgerRepository(db_port)

    if selected_backend == "memory":
        resolved_logger.warning(
            "Using the in-memory ledger backend; data is not persisted"
        )
        return InMemoryLedgerRepository()

    raise ValueError(
        "Unsupported ledger backend: "
        f"{selected_backend}. Expected one of: "
        f"{', '.join(SUPPORTED_BACKENDS)}."
    )


__all__ = ["create_ledger_repository"]
