"""Domain models for money sources and their credit card extension."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class SourceType(str, Enum):
    """Closed set of source kinds."""

    BANK_ACCOUNT = "Bank Account"
    CREDIT_CARD = "Credit Card"
    CASH = "Cash"
    DIGITAL_WALLET = "Digital Wallet"
    INVESTMENT = "Investment"
    OTHER = "Other"

    @classmethod
    def parse(cls, value) -> "SourceType":
        """Resolve a member from a member, its label, or its name.

        Raises:
            ValueError: If the value does not name a source type.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            cleaned = value.strip()
            for member in cls:
                if cleaned.lower() in (
                    member.value.lower(),
                    member.name.lower(),
                ):
                    return member
        raise ValueError(f"Unknown source type: {value!r}")


@dataclass(frozen=True)
class SourceRecord:
    """Stored source row.

    Attributes:
        id: Opaque identifier.
        owner: Identity owning the source.
        name: Display name.
        source_type: Kind of source.
        currency: ISO 4217 code.
        initial_balance: Opening balance, immutable after creation.
        current_balance: Authoritative running balance.
        notes: Free text.
        version: Row version, bumped on every write.
    """

    id: str
    owner: str
    name: str
    source_type: SourceType
    currency: str
    initial_balance: Decimal
    current_balance: Decimal
    notes: str = ""
    version: int = 0


@dataclass(frozen=True)
class CreditCardDetails:
    """Credit card attributes stored 1:1 with a CREDIT_CARD source."""

    source_id: str
    credit_limit: Decimal
    interest_rate: Decimal = Decimal("0")
    billing_cycle_start_day: int | None = None


@dataclass(frozen=True)
class SourceView:
    """Source joined with its credit card details."""

    id: str
    owner: str
    name: str
    source_type: SourceType
    currency: str
    initial_balance: Decimal
    current_balance: Decimal
    notes: str
    credit_limit: Decimal | None = None
    interest_rate: Decimal | None = None
    billing_cycle_start_day: int | None = None

    @property
    def available_credit(self) -> Decimal | None:
        """Return credit limit minus current balance for credit cards."""
        if self.source_type is not SourceType.CREDIT_CARD:
            return None
        if self.credit_limit is None:
            return None
        return self.credit_limit - self.current_balance

    @classmethod
    def from_parts(
        cls,
        record: SourceRecord,
        details: CreditCardDetails | None,
    ) -> "SourceView":
        return cls(
            id=record.id,
            owner=record.owner,
            name=record.name,
            source_type=record.source_type,
            currency=record.currency,
            initial_balance=record.initial_balance,
            current_balance=record.current_balance,
            notes=record.notes,
            credit_limit=details.credit_limit if details else None,
            interest_rate=details.interest_rate if details else None,
            billing_cycle_start_day=(
                details.billing_cycle_start_day if details else None
            ),
        )


@dataclass(frozen=True)
class SourceData:
    """Caller input for creating or editing a source.

    Credit card fields are only read when ``source_type`` is a credit card.
    """

    name: str
    source_type: SourceType | str
    currency: str = "USD"
    initial_balance: Decimal | str | int = Decimal("0")
    notes: str = ""
    credit_limit: Decimal | str | int | None = None
    interest_rate: Decimal | str | int | None = None
    billing_cycle_start_day: int | None = None


__all__ = [
    "SourceType",
    "SourceRecord",
    "CreditCardDetails",
    "SourceView",
    "SourceData",
]
