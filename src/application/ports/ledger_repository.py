"""Application port for ledger storage.

The port is the storage boundary of the ledger core. Every method is one
atomic single-row operation (or a read) scoped by ``owner``; rows of other
owners behave exactly like missing rows. Multi-row consistency is the job
of the use cases, which sequence these calls and compensate on failure.

Conventions shared by every implementation:

* ``update_*`` methods take the rewritten record plus the version read
  before the change, and raise ``ConflictError.stale_version`` when the
  stored version differs, or ``NotFoundError`` when the row is gone.
  They return the stored record with its version bumped.
* ``adjust_balance`` adds a signed delta in a single atomic statement so
  concurrent adjustments cannot overwrite each other.
* ``delete_*`` methods return False when nothing matched.
* Connectivity problems surface as ``BackendUnavailable``.
"""

from decimal import Decimal
from typing import Protocol

from src.domain.models import (
    Category,
    CreditCardDetails,
    SourceRecord,
    SubCategory,
    TransactionRecord,
)


class LedgerRepositoryPort(Protocol):
    """Port exposing owner-scoped ledger storage."""

    def ping(self) -> None:
        """Raise BackendUnavailable when the store cannot be reached."""

    # Sources

    def insert_source(self, record: SourceRecord) -> SourceRecord:
        """Persist a new source row."""

    def get_source(self, owner: str, source_id: str) -> SourceRecord | None:
        """Return a source row or None."""

    def list_sources(self, owner: str) -> list[SourceRecord]:
        """Return every source of the owner."""

    def update_source(
        self,
        record: SourceRecord,
        expected_version: int,
    ) -> SourceRecord:
        """Rewrite name, type, currency and notes of a source."""

    def adjust_balance(
        self,
        owner: str,
        source_id: str,
        delta: Decimal,
    ) -> SourceRecord:
        """Atomically add ``delta`` to the current balance."""

    def delete_source(self, owner: str, source_id: str) -> bool:
        """Delete a source row."""

    def count_source_references(self, owner: str, source_id: str) -> int:
        """Count transactions and transfer legs touching the source."""

    # Credit card details

    def get_credit_card_details(
        self,
        owner: str,
        source_id: str,
    ) -> CreditCardDetails | None:
        """Return credit card details of a source or None."""

    def list_credit_card_details(self, owner: str) -> list[CreditCardDetails]:
        """Return credit card details of every card of the owner."""

    def insert_credit_card_details(
        self,
        owner: str,
        details: CreditCardDetails,
    ) -> CreditCardDetails:
        """Persist credit card details for an existing source."""

    def upsert_credit_card_details(
        self,
        owner: str,
        details: CreditCardDetails,
    ) -> CreditCardDetails:
        """Insert or replace credit card details."""

    def delete_credit_card_details(self, owner: str, source_id: str) -> bool:
        """Delete credit card details of a source."""

    # Categories

    def insert_category(self, category: Category) -> Category:
        """Persist a new category."""

    def get_category(self, owner: str, category_id: str) -> Category | None:
        """Return a category or None."""

    def list_categories(self, owner: str) -> list[Category]:
        """Return every category of the owner."""

    def update_category(self, category: Category) -> Category:
        """Rewrite a category."""

    def delete_category(self, owner: str, category_id: str) -> bool:
        """Delete a category row (subcategories are handled by callers)."""

    def insert_subcategory(self, subcategory: SubCategory) -> SubCategory:
        """Persist a new subcategory."""

    def get_subcategory(
        self,
        owner: str,
        subcategory_id: str,
    ) -> SubCategory | None:
        """Return a subcategory or None."""

    def list_subcategories(
        self,
        owner: str,
        category_id: str | None = None,
    ) -> list[SubCategory]:
        """Return subcategories, optionally of one category."""

    def update_subcategory(self, subcategory: SubCategory) -> SubCategory:
        """Rewrite a subcategory."""

    def delete_subcategory(self, owner: str, subcategory_id: str) -> bool:
        """Delete a subcategory."""

    def count_category_references(self, owner: str, category_id: str) -> int:
        """Count transactions referencing the category."""

    def count_subcategory_references(
        self,
        owner: str,
        subcategory_id: str,
    ) -> int:
        """Count transactions referencing the subcategory."""

    # Transactions

    def insert_transaction(
        self,
        record: TransactionRecord,
    ) -> TransactionRecord:
        """Persist a transaction or transfer leg."""

    def get_transaction(
        self,
        owner: str,
        transaction_id: str,
    ) -> TransactionRecord | None:
        """Return a transaction or None."""

    def list_transactions(self, owner: str) -> list[TransactionRecord]:
        """Return every transaction of the owner."""

    def find_transfer_legs(
        self,
        owner: str,
        transfer_id: str,
    ) -> list[TransactionRecord]:
        """Return the legs sharing a transfer id (indexed lookup)."""

    def update_transaction(
        self,
        record: TransactionRecord,
        expected_version: int,
    ) -> TransactionRecord:
        """Rewrite a transaction."""

    def delete_transaction(
        self,
        owner: str,
        transaction_id: str,
        expected_version: int | None = None,
    ) -> bool:
        """Delete a transaction, optionally only at a given version."""

    def list_repayments(
        self,
        owner: str,
        transaction_id: str,
    ) -> list[TransactionRecord]:
        """Return repayments linked to a lending or borrowing."""


__all__ = ["LedgerRepositoryPort"]
