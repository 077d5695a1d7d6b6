"""Domain models for transactions and two-legged transfers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class TransferLeg(str, Enum):
    """Side of a transfer a leg represents."""

    DEBIT = "debit"
    CREDIT = "credit"


class TransactionType(str, Enum):
    """Closed set of transaction kinds."""

    INCOME = "Income"
    EXPENSE = "Expense"
    TRANSFER = "Transfer"
    LEND = "Lend"
    BORROW = "Borrow"
    REPAYMENT_RECEIVED = "Repayment Received"
    REPAYMENT_MADE = "Repayment Made"

    @classmethod
    def parse(cls, value) -> "TransactionType":
        """Resolve a member from a member, its label, or its name.

        Raises:
            ValueError: If the value does not name a transaction type.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            cleaned = value.strip().lower()
            for member in cls:
                if cleaned in (member.value.lower(), member.name.lower()):
                    return member
        raise ValueError(f"Unknown transaction type: {value!r}")


@dataclass(frozen=True)
class TransactionRecord:
    """Stored transaction row.

    Transfer legs share ``transfer_id`` and point at each other's source
    through ``destination_source_id``. Repayments reference the LEND or
    BORROW they settle through ``related_transaction_id``.
    """

    id: str
    owner: str
    date: date
    transaction_type: TransactionType
    source_id: str
    amount: Decimal
    category_id: str | None = None
    subcategory_id: str | None = None
    notes: str = ""
    counterparty: str | None = None
    related_transaction_id: str | None = None
    transfer_id: str | None = None
    transfer_leg: TransferLeg | None = None
    destination_source_id: str | None = None
    version: int = 0

    @property
    def is_transfer_leg(self) -> bool:
        return self.transfer_id is not None


@dataclass(frozen=True)
class TransactionData:
    """Caller input for a single-source transaction."""

    date: date
    transaction_type: TransactionType | str
    source_id: str
    amount: Decimal | str | int
    category_id: str | None = None
    subcategory_id: str | None = None
    notes: str = ""
    counterparty: str | None = None
    related_transaction_id: str | None = None


@dataclass(frozen=True)
class TransferData:
    """Caller input for creating a transfer between two sources."""

    source_id: str
    destination_source_id: str
    amount: Decimal | str | int
    date: date
    notes: str = ""
    transaction_type: TransactionType | str = TransactionType.TRANSFER
    category_id: str | None = None
    subcategory_id: str | None = None


@dataclass(frozen=True)
class TransferChanges:
    """Partial update of a transfer; ``None`` leaves a field unchanged.

    Source and destination are accepted only to reject them: re-pointing a
    transfer is a delete followed by a create.
    """

    amount: Decimal | str | int | None = None
    date: date | None = None
    notes: str | None = None
    transaction_type: TransactionType | str | None = None
    category_id: str | None = None
    subcategory_id: str | None = None
    source_id: str | None = None
    destination_source_id: str | None = None


@dataclass(frozen=True)
class TransferLegs:
    """Both legs of one transfer."""

    transfer_id: str
    debit: TransactionRecord
    credit: TransactionRecord

    @property
    def amount(self) -> Decimal:
        return self.debit.amount

    @property
    def source_id(self) -> str:
        return self.debit.source_id

    @property
    def destination_source_id(self) -> str:
        return self.credit.source_id


__all__ = [
    "TransferLeg",
    "TransactionType",
    "TransactionRecord",
    "TransactionData",
    "TransferData",
    "TransferChanges",
    "TransferLegs",
]
