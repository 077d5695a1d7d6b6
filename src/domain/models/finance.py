"""Domain models for derived ledger aggregates."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from .sources import SourceType


class OutstandingStatus(str, Enum):
    """Repayment progress of a lending or borrowing transaction."""

    ONGOING = "Ongoing"
    PARTIAL = "Partial"
    PAID = "Paid"


@dataclass(frozen=True)
class SourceBalance:
    """Current balance of one source.

    Attributes:
        available_credit: Credit limit minus balance; None unless the
            source is a credit card.
    """

    source_id: str
    source_name: str
    source_type: SourceType
    currency: str
    current_balance: Decimal
    credit_limit: Decimal | None = None
    available_credit: Decimal | None = None


@dataclass(frozen=True)
class OutstandingEntry:
    """Outstanding amount of one LEND or BORROW transaction."""

    transaction_id: str
    counterparty: str | None
    date: date
    initial_outstanding: Decimal
    repaid: Decimal
    outstanding_balance: Decimal
    status: OutstandingStatus


@dataclass(frozen=True)
class CounterpartyOutstanding:
    """Outstanding totals per counterparty."""

    counterparty: str | None
    initial_outstanding: Decimal
    outstanding_balance: Decimal
    transaction_count: int


@dataclass(frozen=True)
class MonthlySummary:
    """Income and expense totals of one calendar month."""

    month: date
    total_income: Decimal
    total_expense: Decimal
    transaction_count: int

    @property
    def net(self) -> Decimal:
        """Return total_income minus total_expense."""
        return self.total_income - self.total_expense


@dataclass(frozen=True)
class InvestmentSummary:
    """Value of an investment source versus the money moved into it."""

    source_id: str
    source_name: str
    total_value: Decimal
    net_invested: Decimal

    @property
    def gain(self) -> Decimal:
        return self.total_value - self.net_invested


@dataclass(frozen=True)
class BalanceDrift:
    """Source whose stored balance disagrees with its transaction log."""

    source_id: str
    source_name: str
    expected_balance: Decimal
    current_balance: Decimal

    @property
    def difference(self) -> Decimal:
        return self.current_balance - self.expected_balance


__all__ = [
    "OutstandingStatus",
    "SourceBalance",
    "OutstandingEntry",
    "CounterpartyOutstanding",
    "MonthlySummary",
    "InvestmentSummary",
    "BalanceDrift",
]
