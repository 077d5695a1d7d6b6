"""CLI adapter creating the ledger schema in the configured database."""

from src.domain.errors import LedgerError
from src.infrastructure.container import build_database_adapter
from src.infrastructure.logging.logger import get_app_logger
from src.infrastructure.sqlalchemy_ledger_repository import (
    SqlAlchemyLedgerRepository,
)


def main() -> None:
    """Create ledger tables and indexes when they are missing."""
    logger = get_app_logger()
    db_adapter = build_database_adapter()
    repository = SqlAlchemyLedgerRepository(db_adapter)

    try:
        repository.create_schema()
    except LedgerError as exc:
        logger.error(f"Schema creation failed: {exc.message}")
        raise SystemExit(1) from exc

    logger.info("Ledger schema is ready.")
    print("Ledger schema is ready.")


if __name__ == "__main__":  # pragma: no cover
    main()
