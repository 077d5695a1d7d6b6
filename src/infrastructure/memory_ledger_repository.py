"""In-process ledger repository backed by dictionaries.

Useful for tests and embedded use. Each method holds a single lock for its
whole body, which makes every call an atomic single-row operation just like
a statement against the SQL backend.
"""

from dataclasses import replace
from decimal import Decimal
import threading

from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.domain.errors import ConflictError, NotFoundError
from src.domain.models import (
    Category,
    CreditCardDetails,
    SourceRecord,
    SubCategory,
    TransactionRecord,
    TransactionType,
)


class InMemoryLedgerRepository(LedgerRepositoryPort):
    """Ledger storage held in memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sources: dict[str, SourceRecord] = {}
        self._cards: dict[str, CreditCardDetails] = {}
        self._categories: dict[str, Category] = {}
        self._subcategories: dict[str, SubCategory] = {}
        self._transactions: dict[str, TransactionRecord] = {}
        self._transfer_index: dict[str, set[str]] = {}

    def ping(self) -> None:
        return None

    # Sources

    def insert_source(self, record: SourceRecord) -> SourceRecord:
        with self._lock:
            if record.id in self._sources:
                raise ConflictError(f"Source {record.id} already exists")
            self._sources[record.id] = record
            return record

    def get_source(self, owner: str, source_id: str) -> SourceRecord | None:
        with self._lock:
            return self._owned(self._sources.get(source_id), owner)

    def list_sources(self, owner: str) -> list[SourceRecord]:
        with self._lock:
            return [
                row for row in self._sources.values() if row.owner == owner
            ]

    def update_source(
        self,
        record: SourceRecord,
        expected_version: int,
    ) -> SourceRecord:
        with self._lock:
            current = self._owned(self._sources.get(record.id), record.owner)
            if current is None:
                raise NotFoundError("Source", record.id)
            if current.version != expected_version:
                raise ConflictError.stale_version("Source", record.id)
            updated = replace(
                current,
                name=record.name,
                source_type=record.source_type,
                currency=record.currency,
                notes=record.notes,
                version=current.version + 1,
            )
            self._sources[record.id] = updated
            return updated

    def adjust_balance(
        self,
        owner: str,
        source_id: str,
        delta: Decimal,
    ) -> SourceRecord:
        with self._lock:
            current = self._owned(self._sources.get(source_id), owner)
            if current is None:
                raise NotFoundError("Source", source_id)
            updated = replace(
                current,
                current_balance=current.current_balance + delta,
                version=current.version + 1,
            )
            self._sources[source_id] = updated
            return updated

    def delete_source(self, owner: str, source_id: str) -> bool:
        with self._lock:
            if self._owned(self._sources.get(source_id), owner) is None:
                return False
            del self._sources[source_id]
            return True

    def count_source_references(self, owner: str, source_id: str) -> int:
        with self._lock:
            return sum(
                1
                for row in self._transactions.values()
                if row.owner == owner
                and source_id in (row.source_id, row.destination_source_id)
            )

    # Credit card details

    def get_credit_card_details(
        self,
        owner: str,
        source_id: str,
    ) -> CreditCardDetails | None:
        with self._lock:
            if self._owned(self._sources.get(source_id), owner) is None:
                return None
            return self._cards.get(source_id)

    def list_credit_card_details(self, owner: str) -> list[CreditCardDetails]:
        with self._lock:
            return [
                details
                for source_id, details in self._cards.items()
                if self._owned(self._sources.get(source_id), owner)
            ]

    def insert_credit_card_details(
        self,
        owner: str,
        details: CreditCardDetails,
    ) -> CreditCardDetails:
        with self._lock:
            self._require_source(owner, details.source_id)
            if details.source_id in self._cards:
                raise ConflictError(
                    f"Credit card details already exist for "
                    f"{details.source_id}"
                )
            self._cards[details.source_id] = details
            return details

    def upsert_credit_card_details(
        self,
        owner: str,
        details: CreditCardDetails,
    ) -> CreditCardDetails:
        with self._lock:
            self._require_source(owner, details.source_id)
            self._cards[details.source_id] = details
            return details

    def delete_credit_card_details(self, owner: str, source_id: str) -> bool:
        with self._lock:
            if self._owned(self._sources.get(source_id), owner) is None:
                return False
            return self._cards.pop(source_id, None) is not None

    # Categories

    def insert_category(self, category: Category) -> Category:
        with self._lock:
            self._categories[category.id] = category
            return category

    def get_category(self, owner: str, category_id: str) -> Category | None:
        with self._lock:
            return self._owned(self._categories.get(category_id), owner)

    def list_categories(self, owner: str) -> list[Category]:
        with self._lock:
            return [
                row for row in self._categories.values() if row.owner == owner
            ]

    def update_category(self, category: Category) -> Category:
        with self._lock:
            current = self._owned(
                self._categories.get(category.id),
                category.owner,
            )
            if current is None:
                raise NotFoundError("Category", category.id)
            self._categories[category.id] = category
            return category

    def delete_category(self, owner: str, category_id: str) -> bool:
        with self._lock:
            if self._owned(self._categories.get(category_id), owner) is None:
                return False
            del self._categories[category_id]
            return True

    def insert_subcategory(self, subcategory: SubCategory) -> SubCategory:
        with self._lock:
            parent = self._owned(
                self._categories.get(subcategory.category_id),
                subcategory.owner,
            )
            if parent is None:
                raise NotFoundError("Category", subcategory.category_id)
            self._subcategories[subcategory.id] = subcategory
            return subcategory

    def get_subcategory(
        self,
        owner: str,
        subcategory_id: str,
    ) -> SubCategory | None:
        with self._lock:
            return self._owned(self._subcategories.get(subcategory_id), owner)

    def list_subcategories(
        self,
        owner: str,
        category_id: str | None = None,
    ) -> list[SubCategory]:
        with self._lock:
            return [
                row
                for row in self._subcategories.values()
                if row.owner == owner
                and (category_id is None or row.category_id == category_id)
            ]

    def update_subcategory(self, subcategory: SubCategory) -> SubCategory:
        with self._lock:
            current = self._owned(
                self._subcategories.get(subcategory.id),
                subcategory.owner,
            )
            if current is None:
                raise NotFoundError("SubCategory", subcategory.id)
            self._subcategories[subcategory.id] = subcategory
            return subcategory

    def delete_subcategory(self, owner: str, subcategory_id: str) -> bool:
        with self._lock:
            if (
                self._owned(self._subcategories.get(subcategory_id), owner)
                is None
            ):
                return False
            del self._subcategories[subcategory_id]
            return True

    def count_category_references(self, owner: str, category_id: str) -> int:
        with self._lock:
            return sum(
                1
                for row in self._transactions.values()
                if row.owner == owner and row.category_id == category_id
            )

    def count_subcategory_references(
        self,
        owner: str,
        subcategory_id: str,
    ) -> int:
        with self._lock:
            return sum(
                1
                for row in self._transactions.values()
                if row.owner == owner and row.subcategory_id == subcategory_id
            )

    # Transactions

    def insert_transaction(
        self,
        record: TransactionRecord,
    ) -> TransactionRecord:
        with self._lock:
            if record.id in self._transactions:
                raise ConflictError(f"Transaction {record.id} already exists")
            self._transactions[record.id] = record
            if record.transfer_id:
                self._transfer_index.setdefault(
                    record.transfer_id,
                    set(),
                ).add(record.id)
            return record

    def get_transaction(
        self,
        owner: str,
        transaction_id: str,
    ) -> TransactionRecord | None:
        with self._lock:
            return self._owned(self._transactions.get(transaction_id), owner)

    def list_transactions(self, owner: str) -> list[TransactionRecord]:
        with self._lock:
            return [
                row
                for row in self._transactions.values()
                if row.owner == owner
            ]

    def find_transfer_legs(
        self,
        owner: str,
        transfer_id: str,
    ) -> list[TransactionRecord]:
        with self._lock:
            leg_ids = self._transfer_index.get(transfer_id, set())
            legs = [
                self._transactions[leg_id]
                for leg_id in leg_ids
                if leg_id in self._transactions
            ]
            return sorted(
                [leg for leg in legs if leg.owner == owner],
                key=lambda leg: leg.id,
            )

    def update_transaction(
        self,
        record: TransactionRecord,
        expected_version: int,
    ) -> TransactionRecord:
        with self._lock:
            current = self._owned(
                self._transactions.get(record.id),
                record.owner,
            )
            if current is None:
                raise NotFoundError("Transaction", record.id)
            if current.version != expected_version:
                raise ConflictError.stale_version("Transaction", record.id)
            updated = replace(record, version=current.version + 1)
            self._transactions[record.id] = updated
            return updated

    def delete_transaction(
        self,
        owner: str,
        transaction_id: str,
        expected_version: int | None = None,
    ) -> bool:
        with self._lock:
            current = self._owned(
                self._transactions.get(transaction_id),
                owner,
            )
            if current is None:
                return False
            if (
                expected_version is not None
                and current.version != expected_version
            ):
                return False
            del self._transactions[transaction_id]
            leg_ids = self._transfer_index.get(current.transfer_id)
            if leg_ids is not None:
                leg_ids.discard(transaction_id)
                if not leg_ids:
                    del self._transfer_index[current.transfer_id]
            return True

    def list_repayments(
        self,
        owner: str,
        transaction_id: str,
    ) -> list[TransactionRecord]:
        with self._lock:
            return [
                row
                for row in self._transactions.values()
                if row.owner == owner
                and row.related_transaction_id == transaction_id
                and row.transaction_type
                in (
                    TransactionType.REPAYMENT_RECEIVED,
                    TransactionType.REPAYMENT_MADE,
                )
            ]

    @staticmethod
    def _owned(row, owner: str):
        if row is None or row.owner != owner:
            return None
        return row

    def _require_source(self, owner: str, source_id: str) -> None:
        if self._owned(self._sources.get(source_id), owner) is None:
            raise NotFoundError("Source", source_id)


__all__ = ["InMemoryLedgerRepository"]
