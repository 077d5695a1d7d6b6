"""SQLAlchemy-backed repository for ledger storage.

Amounts are stored as integer minor units (cents) and dates as ISO strings
so the same statements run unchanged on SQLite and PostgreSQL. Every public
method opens its own connection and runs in a single database transaction.
"""

from contextlib import contextmanager
from datetime import date
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.exc import (
    DataError,
    IntegrityError,
    InterfaceError,
    OperationalError,
)

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.domain.errors import (
    BackendUnavailable,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.domain.models import (
    Category,
    CategoryType,
    CreditCardDetails,
    SourceRecord,
    SourceType,
    SubCategory,
    TransactionRecord,
    TransactionType,
    TransferLeg,
)
from src.utils.decimal_utils import (
    coerce_decimal,
    from_minor_units,
    to_minor_units,
)


SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS ledger_sources (
        id TEXT PRIMARY KEY,
        owner TEXT NOT NULL,
        name TEXT NOT NULL,
        source_type TEXT NOT NULL,
        currency TEXT NOT NULL,
        initial_balance_cents BIGINT NOT NULL,
        current_balance_cents BIGINT NOT NULL,
        notes TEXT NOT NULL DEFAULT '',
        version INTEGER NOT NULL DEFAULT 0
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS ix_ledger_sources_owner
    ON ledger_sources (owner)
    """,
    """
    CREATE TABLE IF NOT EXISTS ledger_credit_card_details (
        source_id TEXT PRIMARY KEY REFERENCES ledger_sources (id),
        credit_limit_cents BIGINT NOT NULL,
        interest_rate TEXT NOT NULL,
        billing_cycle_start_day INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ledger_categories (
        id TEXT PRIMARY KEY,
        owner TEXT NOT NULL,
        name TEXT NOT NULL,
        category_type TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ledger_subcategories (
        id TEXT PRIMARY KEY,
        owner TEXT NOT NULL,
        category_id TEXT NOT NULL REFERENCES ledger_categories (id),
        name TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ledger_transactions (
        id TEXT PRIMARY KEY,
        owner TEXT NOT NULL,
        txn_date TEXT NOT NULL,
        transaction_type TEXT NOT NULL,
        source_id TEXT NOT NULL REFERENCES ledger_sources (id),
        amount_cents BIGINT NOT NULL CHECK (amount_cents > 0),
        category_id TEXT,
        subcategory_id TEXT,
        notes TEXT NOT NULL DEFAULT '',
        counterparty TEXT,
        related_transaction_id TEXT,
        transfer_id TEXT,
        transfer_leg TEXT,
        destination_source_id TEXT,
        version INTEGER NOT NULL DEFAULT 0
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS ix_ledger_transactions_owner
    ON ledger_transactions (owner)
    """,
    """
    CREATE INDEX IF NOT EXISTS ix_ledger_transactions_transfer
    ON ledger_transactions (transfer_id)
    """,
    """
    CREATE INDEX IF NOT EXISTS ix_ledger_transactions_related
    ON ledger_transactions (related_transaction_id)
    """,
)

SOURCE_COLUMNS = """
    id, owner, name, source_type, currency, initial_balance_cents,
    current_balance_cents, notes, version
"""

TRANSACTION_COLUMNS = """
    id, owner, txn_date, transaction_type, source_id, amount_cents,
    category_id, subcategory_id, notes, counterparty,
    related_transaction_id, transfer_id, transfer_leg,
    destination_source_id, version
"""

INSERT_SOURCE_SQL = text(
    """
    INSERT INTO ledger_sources (
        id, owner, name, source_type, currency, initial_balance_cents,
        current_balance_cents, notes, version
    )
    VALUES (
        :id, :owner, :name, :source_type, :currency,
        :initial_balance_cents, :current_balance_cents, :notes, :version
    )
    """
)

SELECT_SOURCE_SQL = text(
    f"""
    SELECT {SOURCE_COLUMNS}
    FROM ledger_sources
    WHERE id = :id AND owner = :owner
    """
)

SELECT_SOURCES_SQL = text(
    f"""
    SELECT {SOURCE_COLUMNS}
    FROM ledger_sources
    WHERE owner = :owner
    ORDER BY name, id
    """
)

UPDATE_SOURCE_SQL = text(
    """
    UPDATE ledger_sources
    SET name = :name,
        source_type = :source_type,
        currency = :currency,
        notes = :notes,
        version = version + 1
    WHERE id = :id AND owner = :owner AND version = :expected_version
    """
)

ADJUST_BALANCE_SQL = text(
    """
    UPDATE ledger_sources
    SET current_balance_cents = current_balance_cents + :delta_cents,
        version = version + 1
    WHERE id = :id AND owner = :owner
    """
)

DELETE_SOURCE_SQL = text(
    "DELETE FROM ledger_sources WHERE id = :id AND owner = :owner"
)

COUNT_SOURCE_REFERENCES_SQL = text(
    """
    SELECT COUNT(*) AS references_count
    FROM ledger_transactions
    WHERE owner = :owner
      AND (source_id = :id OR destination_source_id = :id)
    """
)

SELECT_CARD_SQL = text(
    """
    SELECT c.source_id, c.credit_limit_cents, c.interest_rate,
           c.billing_cycle_start_day
    FROM ledger_credit_card_details c
    JOIN ledger_sources s ON s.id = c.source_id
    WHERE c.source_id = :source_id AND s.owner = :owner
    """
)

SELECT_CARDS_SQL = text(
    """
    SELECT c.source_id, c.credit_limit_cents, c.interest_rate,
           c.billing_cycle_start_day
    FROM ledger_credit_card_details c
    JOIN ledger_sources s ON s.id = c.source_id
    WHERE s.owner = :owner
    ORDER BY c.source_id
    """
)

INSERT_CARD_SQL = text(
    """
    INSERT INTO ledger_credit_card_details (
        source_id, credit_limit_cents, interest_rate, billing_cycle_start_day
    )
    VALUES (
        :source_id, :credit_limit_cents, :interest_rate,
        :billing_cycle_start_day
    )
    """
)

UPDATE_CARD_SQL = text(
    """
    UPDATE ledger_credit_card_details
    SET credit_limit_cents = :credit_limit_cents,
        interest_rate = :interest_rate,
        billing_cycle_start_day = :billing_cycle_start_day
    WHERE source_id = :source_id
    """
)

DELETE_CARD_SQL = text(
    """
    DELETE FROM ledger_credit_card_details
    WHERE source_id = :source_id
      AND source_id IN (
          SELECT id FROM ledger_sources WHERE owner = :owner
      )
    """
)

SOURCE_EXISTS_SQL = text(
    "SELECT 1 FROM ledger_sources WHERE id = :id AND owner = :owner"
)

INSERT_CATEGORY_SQL = text(
    """
    INSERT INTO ledger_categories (id, owner, name, category_type)
    VALUES (:id, :owner, :name, :category_type)
    """
)

SELECT_CATEGORY_SQL = text(
    """
    SELECT id, owner, name, category_type
    FROM ledger_categories
    WHERE id = :id AND owner = :owner
    """
)

SELECT_CATEGORIES_SQL = text(
    """
    SELECT id, owner, name, category_type
    FROM ledger_categories
    WHERE owner = :owner
    ORDER BY name, id
    """
)

UPDATE_CATEGORY_SQL = text(
    """
    UPDATE ledger_categories
    SET name = :name, category_type = :category_type
    WHERE id = :id AND owner = :owner
    """
)

DELETE_CATEGORY_SQL = text(
    "DELETE FROM ledger_categories WHERE id = :id AND owner = :owner"
)

INSERT_SUBCATEGORY_SQL = text(
    """
    INSERT INTO ledger_subcategories (id, owner, category_id, name)
    VALUES (:id, :owner, :category_id, :name)
    """
)

SELECT_SUBCATEGORY_SQL = text(
    """
    SELECT id, owner, category_id, name
    FROM ledger_subcategories
    WHERE id = :id AND owner = :owner
    """
)

SELECT_SUBCATEGORIES_SQL = text(
    """
    SELECT id, owner, category_id, name
    FROM ledger_subcategories
    WHERE owner = :owner
    ORDER BY name, id
    """
)

SELECT_CATEGORY_SUBCATEGORIES_SQL = text(
    """
    SELECT id, owner, category_id, name
    FROM ledger_subcategories
    WHERE owner = :owner AND category_id = :category_id
    ORDER BY name, id
    """
)

UPDATE_SUBCATEGORY_SQL = text(
    """
    UPDATE ledger_subcategories
    SET name = :name, category_id = :category_id
    WHERE id = :id AND owner = :owner
    """
)

DELETE_SUBCATEGORY_SQL = text(
    "DELETE FROM ledger_subcategories WHERE id = :id AND owner = :owner"
)

COUNT_CATEGORY_REFERENCES_SQL = text(
    """
    SELECT COUNT(*) AS references_count
    FROM ledger_transactions
    WHERE owner = :owner AND category_id = :id
    """
)

COUNT_SUBCATEGORY_REFERENCES_SQL = text(
    """
    SELECT COUNT(*) AS references_count
    FROM ledger_transactions
    WHERE owner = :owner AND subcategory_id = :id
    """
)

INSERT_TRANSACTION_SQL = text(
    """
    INSERT INTO ledger_transactions (
        id, owner, txn_date, transaction_type, source_id, amount_cents,
        category_id, subcategory_id, notes, counterparty,
        related_transaction_id, transfer_id, transfer_leg,
        destination_source_id, version
    )
    VALUES (
        :id, :owner, :txn_date, :transaction_type, :source_id,
        :amount_cents, :category_id, :subcategory_id, :notes, :counterparty,
        :related_transaction_id, :transfer_id, :transfer_leg,
        :destination_source_id, :version
    )
    """
)

SELECT_TRANSACTION_SQL = text(
    f"""
    SELECT {TRANSACTION_COLUMNS}
    FROM ledger_transactions
    WHERE id = :id AND owner = :owner
    """
)

SELECT_TRANSACTIONS_SQL = text(
    f"""
    SELECT {TRANSACTION_COLUMNS}
    FROM ledger_transactions
    WHERE owner = :owner
    ORDER BY txn_date, id
    """
)

SELECT_TRANSFER_LEGS_SQL = text(
    f"""
    SELECT {TRANSACTION_COLUMNS}
    FROM ledger_transactions
    WHERE transfer_id = :transfer_id AND owner = :owner
    ORDER BY id
    """
)

SELECT_REPAYMENTS_SQL = text(
    f"""
    SELECT {TRANSACTION_COLUMNS}
    FROM ledger_transactions
    WHERE related_transaction_id = :id
      AND owner = :owner
      AND transaction_type IN (:repayment_received, :repayment_made)
    ORDER BY txn_date, id
    """
)

UPDATE_TRANSACTION_SQL = text(
    """
    UPDATE ledger_transactions
    SET txn_date = :txn_date,
        transaction_type = :transaction_type,
        source_id = :source_id,
        amount_cents = :amount_cents,
        category_id = :category_id,
        subcategory_id = :subcategory_id,
        notes = :notes,
        counterparty = :counterparty,
        related_transaction_id = :related_transaction_id,
        transfer_id = :transfer_id,
        transfer_leg = :transfer_leg,
        destination_source_id = :destination_source_id,
        version = version + 1
    WHERE id = :id AND owner = :owner AND version = :expected_version
    """
)

DELETE_TRANSACTION_SQL = text(
    "DELETE FROM ledger_transactions WHERE id = :id AND owner = :owner"
)

DELETE_TRANSACTION_VERSION_SQL = text(
    """
    DELETE FROM ledger_transactions
    WHERE id = :id AND owner = :owner AND version = :expected_version
    """
)

PING_SQL = "SELECT 1"


class SqlAlchemyLedgerRepository(LedgerRepositoryPort):
    """Repository backed by SQLAlchemy for ledger storage."""

    def __init__(self, db_port: DatabaseEnginePort) -> None:
        """Initialize the repository.

        Args:
            db_port: Port providing access to the ledger engine.
        """
        self._db_port = db_port

    def create_schema(self) -> None:
        """Create ledger tables and indexes when missing."""
        with self._begin() as conn:
            for statement in SCHEMA_STATEMENTS:
                conn.exec_driver_sql(statement)

    def ping(self) -> None:
        with self._connect() as conn:
            conn.exec_driver_sql(PING_SQL)

    # Sources

    def insert_source(self, record: SourceRecord) -> SourceRecord:
        with self._begin() as conn:
            conn.execute(INSERT_SOURCE_SQL, self._source_params(record))
        return record

    def get_source(self, owner: str, source_id: str) -> SourceRecord | None:
        with self._connect() as conn:
            row = conn.execute(
                SELECT_SOURCE_SQL,
                {"id": source_id, "owner": owner},
            ).first()
        return self._to_source(row) if row else None

    def list_sources(self, owner: str) -> list[SourceRecord]:
        with self._connect() as conn:
            rows = conn.execute(SELECT_SOURCES_SQL, {"owner": owner}).all()
        return [self._to_source(row) for row in rows]

    def update_source(
        self,
        record: SourceRecord,
        expected_version: int,
    ) -> SourceRecord:
        params = self._source_params(record)
        params["expected_version"] = expected_version
        key = {"id": record.id, "owner": record.owner}
        with self._begin() as conn:
            result = conn.execute(UPDATE_SOURCE_SQL, params)
            row = conn.execute(SELECT_SOURCE_SQL, key).first()
        if row is None:
            raise NotFoundError("Source", record.id)
        if result.rowcount == 0:
            raise ConflictError.stale_version("Source", record.id)
        return self._to_source(row)

    def adjust_balance(
        self,
        owner: str,
        source_id: str,
        delta: Decimal,
    ) -> SourceRecord:
        key = {"id": source_id, "owner": owner}
        with self._begin() as conn:
            conn.execute(
                ADJUST_BALANCE_SQL,
                {**key, "delta_cents": to_minor_units(delta)},
            )
            row = conn.execute(SELECT_SOURCE_SQL, key).first()
        if row is None:
            raise NotFoundError("Source", source_id)
        return self._to_source(row)

    def delete_source(self, owner: str, source_id: str) -> bool:
        with self._begin() as conn:
            result = conn.execute(
                DELETE_SOURCE_SQL,
                {"id": source_id, "owner": owner},
            )
        return result.rowcount > 0

    def count_source_references(self, owner: str, source_id: str) -> int:
        return self._count(
            COUNT_SOURCE_REFERENCES_SQL,
            {"id": source_id, "owner": owner},
        )

    # Credit card details

    def get_credit_card_details(
        self,
        owner: str,
        source_id: str,
    ) -> CreditCardDetails | None:
        with self._connect() as conn:
            row = conn.execute(
                SELECT_CARD_SQL,
                {"source_id": source_id, "owner": owner},
            ).first()
        return self._to_card(row) if row else None

    def list_credit_card_details(self, owner: str) -> list[CreditCardDetails]:
        with self._connect() as conn:
            rows = conn.execute(SELECT_CARDS_SQL, {"owner": owner}).all()
        return [self._to_card(row) for row in rows]

    def insert_credit_card_details(
        self,
        owner: str,
        details: CreditCardDetails,
    ) -> CreditCardDetails:
        with self._begin() as conn:
            self._require_source(conn, owner, details.source_id)
            conn.execute(INSERT_CARD_SQL, self._card_params(details))
        return details

    def upsert_credit_card_details(
        self,
        owner: str,
        details: CreditCardDetails,
    ) -> CreditCardDetails:
        params = self._card_params(details)
        with self._begin() as conn:
            self._require_source(conn, owner, details.source_id)
            result = conn.execute(UPDATE_CARD_SQL, params)
            if result.rowcount == 0:
                conn.execute(INSERT_CARD_SQL, params)
        return details

    def delete_credit_card_details(self, owner: str, source_id: str) -> bool:
        with self._begin() as conn:
            result = conn.execute(
                DELETE_CARD_SQL,
                {"source_id": source_id, "owner": owner},
            )
        return result.rowcount > 0

    # Categories

    def insert_category(self, category: Category) -> Category:
        with self._begin() as conn:
            conn.execute(INSERT_CATEGORY_SQL, self._category_params(category))
        return category

    def get_category(self, owner: str, category_id: str) -> Category | None:
        with self._connect() as conn:
            row = conn.execute(
                SELECT_CATEGORY_SQL,
                {"id": category_id, "owner": owner},
            ).first()
        return self._to_category(row) if row else None

    def list_categories(self, owner: str) -> list[Category]:
        with self._connect() as conn:
            rows = conn.execute(SELECT_CATEGORIES_SQL, {"owner": owner}).all()
        return [self._to_category(row) for row in rows]

    def update_category(self, category: Category) -> Category:
        with self._begin() as conn:
            result = conn.execute(
                UPDATE_CATEGORY_SQL,
                self._category_params(category),
            )
        if result.rowcount == 0:
            raise NotFoundError("Category", category.id)
        return category

    def delete_category(self, owner: str, category_id: str) -> bool:
        with self._begin() as conn:
            result = conn.execute(
                DELETE_CATEGORY_SQL,
                {"id": category_id, "owner": owner},
            )
        return result.rowcount > 0

    def insert_subcategory(self, subcategory: SubCategory) -> SubCategory:
        with self._begin() as conn:
            parent = conn.execute(
                SELECT_CATEGORY_SQL,
                {"id": subcategory.category_id, "owner": subcategory.owner},
            ).first()
            if parent is None:
                raise NotFoundError("Category", subcategory.category_id)
            conn.execute(
                INSERT_SUBCATEGORY_SQL,
                self._subcategory_params(subcategory),
            )
        return subcategory

    def get_subcategory(
        self,
        owner: str,
        subcategory_id: str,
    ) -> SubCategory | None:
        with self._connect() as conn:
            row = conn.execute(
                SELECT_SUBCATEGORY_SQL,
                {"id": subcategory_id, "owner": owner},
            ).first()
        return self._to_subcategory(row) if row else None

    def list_subcategories(
        self,
        owner: str,
        category_id: str | None = None,
    ) -> list[SubCategory]:
        with self._connect() as conn:
            if category_id is None:
                rows = conn.execute(
                    SELECT_SUBCATEGORIES_SQL,
                    {"owner": owner},
                ).all()
            else:
                rows = conn.execute(
                    SELECT_CATEGORY_SUBCATEGORIES_SQL,
                    {"owner": owner, "category_id": category_id},
                ).all()
        return [self._to_subcategory(row) for row in rows]

    def update_subcategory(self, subcategory: SubCategory) -> SubCategory:
        with self._begin() as conn:
            result = conn.execute(
                UPDATE_SUBCATEGORY_SQL,
                self._subcategory_params(subcategory),
            )
        if result.rowcount == 0:
            raise NotFoundError("SubCategory", subcategory.id)
        return subcategory

    def delete_subcategory(self, owner: str, subcategory_id: str) -> bool:
        with self._begin() as conn:
            result = conn.execute(
                DELETE_SUBCATEGORY_SQL,
                {"id": subcategory_id, "owner": owner},
            )
        return result.rowcount > 0

    def count_category_references(self, owner: str, category_id: str) -> int:
        return self._count(
            COUNT_CATEGORY_REFERENCES_SQL,
            {"id": category_id, "owner": owner},
        )

    def count_subcategory_references(
        self,
        owner: str,
        subcategory_id: str,
    ) -> int:
        return self._count(
            COUNT_SUBCATEGORY_REFERENCES_SQL,
            {"id": subcategory_id, "owner": owner},
        )

    # Transactions

    def insert_transaction(
        self,
        record: TransactionRecord,
    ) -> TransactionRecord:
        with self._begin() as conn:
            conn.execute(
                INSERT_TRANSACTION_SQL,
                self._transaction_params(record),
            )
        return record

    def get_transaction(
        self,
        owner: str,
        transaction_id: str,
    ) -> TransactionRecord | None:
        with self._connect() as conn:
            row = conn.execute(
                SELECT_TRANSACTION_SQL,
                {"id": transaction_id, "owner": owner},
            ).first()
        return self._to_transaction(row) if row else None

    def list_transactions(self, owner: str) -> list[TransactionRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                SELECT_TRANSACTIONS_SQL,
                {"owner": owner},
            ).all()
        return [self._to_transaction(row) for row in rows]

    def find_transfer_legs(
        self,
        owner: str,
        transfer_id: str,
    ) -> list[TransactionRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                SELECT_TRANSFER_LEGS_SQL,
                {"transfer_id": transfer_id, "owner": owner},
            ).all()
        return [self._to_transaction(row) for row in rows]

    def update_transaction(
        self,
        record: TransactionRecord,
        expected_version: int,
    ) -> TransactionRecord:
        params = self._transaction_params(record)
        params["expected_version"] = expected_version
        key = {"id": record.id, "owner": record.owner}
        with self._begin() as conn:
            result = conn.execute(UPDATE_TRANSACTION_SQL, params)
            row = conn.execute(SELECT_TRANSACTION_SQL, key).first()
        if row is None:
            raise NotFoundError("Transaction", record.id)
        if result.rowcount == 0:
            raise ConflictError.stale_version("Transaction", record.id)
        return self._to_transaction(row)

    def delete_transaction(
        self,
        owner: str,
        transaction_id: str,
        expected_version: int | None = None,
    ) -> bool:
        params = {"id": transaction_id, "owner": owner}
        statement = DELETE_TRANSACTION_SQL
        if expected_version is not None:
            params["expected_version"] = expected_version
            statement = DELETE_TRANSACTION_VERSION_SQL
        with self._begin() as conn:
            result = conn.execute(statement, params)
        return result.rowcount > 0

    def list_repayments(
        self,
        owner: str,
        transaction_id: str,
    ) -> list[TransactionRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                SELECT_REPAYMENTS_SQL,
                {
                    "id": transaction_id,
                    "owner": owner,
                    "repayment_received": (
                        TransactionType.REPAYMENT_RECEIVED.name
                    ),
                    "repayment_made": TransactionType.REPAYMENT_MADE.name,
                },
            ).all()
        return [self._to_transaction(row) for row in rows]

    # Helpers

    @contextmanager
    def _connect(self):
        try:
            with self._db_port.get_ledger_engine().connect() as conn:
                yield conn
        except (OperationalError, InterfaceError) as exc:
            raise BackendUnavailable(str(exc)) from exc

    @contextmanager
    def _begin(self):
        try:
            with self._db_port.get_ledger_engine().begin() as conn:
                yield conn
        except (OperationalError, InterfaceError) as exc:
            raise BackendUnavailable(str(exc)) from exc
        except IntegrityError as exc:
            raise ConflictError(
                f"Ledger integrity violation: {exc.orig}"
            ) from exc
        except (DataError, OverflowError) as exc:
            raise ValidationError(
                f"Value out of storage range: {exc}",
                field="amount",
            ) from exc

    def _count(self, statement, params: dict) -> int:
        with self._connect() as conn:
            row = conn.execute(statement, params).first()
        return int(row.references_count) if row else 0

    @staticmethod
    def _require_source(conn, owner: str, source_id: str) -> None:
        row = conn.execute(
            SOURCE_EXISTS_SQL,
            {"id": source_id, "owner": owner},
        ).first()
        if row is None:
            raise NotFoundError("Source", source_id)

    @staticmethod
    def _source_params(record: SourceRecord) -> dict:
        return {
            "id": record.id,
            "owner": record.owner,
            "name": record.name,
            "source_type": record.source_type.name,
            "currency": record.currency,
            "initial_balance_cents": to_minor_units(record.initial_balance),
            "current_balance_cents": to_minor_units(record.current_balance),
            "notes": record.notes,
            "version": record.version,
        }

    @staticmethod
    def _to_source(row) -> SourceRecord:
        return SourceRecord(
            id=row.id,
            owner=row.owner,
            name=row.name,
            source_type=SourceType[row.source_type],
            currency=row.currency,
            initial_balance=from_minor_units(row.initial_balance_cents),
            current_balance=from_minor_units(row.current_balance_cents),
            notes=row.notes or "",
            version=int(row.version),
        )

    @staticmethod
    def _card_params(details: CreditCardDetails) -> dict:
        return {
            "source_id": details.source_id,
            "credit_limit_cents": to_minor_units(details.credit_limit),
            "interest_rate": str(details.interest_rate),
            "billing_cycle_start_day": details.billing_cycle_start_day,
        }

    @staticmethod
    def _to_card(row) -> CreditCardDetails:
        return CreditCardDetails(
            source_id=row.source_id,
            credit_limit=from_minor_units(row.credit_limit_cents),
            interest_rate=coerce_decimal(row.interest_rate),
            billing_cycle_start_day=row.billing_cycle_start_day,
        )

    @staticmethod
    def _category_params(category: Category) -> dict:
        return {
            "id": category.id,
            "owner": category.owner,
            "name": category.name,
            "category_type": category.category_type.name,
        }

    @staticmethod
    def _to_category(row) -> Category:
        return Category(
            id=row.id,
            owner=row.owner,
            name=row.name,
            category_type=CategoryType[row.category_type],
        )

    @staticmethod
    def _subcategory_params(subcategory: SubCategory) -> dict:
        return {
            "id": subcategory.id,
            "owner": subcategory.owner,
            "category_id": subcategory.category_id,
            "name": subcategory.name,
        }

    @staticmethod
    def _to_subcategory(row) -> SubCategory:
        return SubCategory(
            id=row.id,
            owner=row.owner,
            category_id=row.category_id,
            name=row.name,
        )

    @staticmethod
    def _transaction_params(record: TransactionRecord) -> dict:
        return {
            "id": record.id,
            "owner": record.owner,
            "txn_date": record.date.isoformat(),
            "transaction_type": record.transaction_type.name,
            "source_id": record.source_id,
            "amount_cents": to_minor_units(record.amount),
            "category_id": record.category_id,
            "subcategory_id": record.subcategory_id,
            "notes": record.notes,
            "counterparty": record.counterparty,
            "related_transaction_id": record.related_transaction_id,
            "transfer_id": record.transfer_id,
            "transfer_leg": (
                record.transfer_leg.name if record.transfer_leg else None
            ),
            "destination_source_id": record.destination_source_id,
            "version": record.version,
        }

    @staticmethod
    def _to_transaction(row) -> TransactionRecord:
        return TransactionRecord(
            id=row.id,
            owner=row.owner,
            date=date.fromisoformat(str(row.txn_date)[:10]),
            transaction_type=TransactionType[row.transaction_type],
            source_id=row.source_id,
            amount=from_minor_units(row.amount_cents),
            category_id=row.category_id,
            subcategory_id=row.subcategory_id,
            notes=row.notes or "",
            counterparty=row.counterparty,
            related_transaction_id=row.related_transaction_id,
            transfer_id=row.transfer_id,
            transfer_leg=(
                TransferLeg[row.transfer_leg] if row.transfer_leg else None
            ),
            destination_source_id=row.destination_source_id,
            version=int(row.version),
        )


__all__ = [
    "SqlAlchemyLedgerRepository",
    "SCHEMA_STATEMENTS",
    "INSERT_SOURCE_SQL",
    "ADJUST_BALANCE_SQL",
    "UPDATE_SOURCE_SQL",
    "UPDATE_TRANSACTION_SQL",
]
