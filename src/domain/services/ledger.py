"""Balance arithmetic over transactions.

These helpers are the single place where a transaction's type is turned
into a signed balance effect. Use cases and aggregates both rely on them so
stored balances and recomputed balances agree by construction.
"""

from collections.abc import Iterable
from decimal import Decimal

from src.domain.constants import BALANCE_DIRECTIONS
from src.domain.models import (
    TransactionRecord,
    TransactionType,
    TransferLeg,
)


def direction_for(
    transaction_type: TransactionType,
    transfer_leg: TransferLeg | None = None,
) -> int:
    """Return +1 or -1 for the balance effect of a transaction type.

    Args:
        transaction_type: Type of the transaction.
        transfer_leg: Side of the transfer, required for TRANSFER.

    Returns:
        int: +1 when the source balance increases, -1 otherwise.

    Raises:
        ValueError: If a transfer leg is missing its side.
    """
    direction = BALANCE_DIRECTIONS[transaction_type]
    if direction is not None:
        return direction
    if transfer_leg is TransferLeg.DEBIT:
        return -1
    if transfer_leg is TransferLeg.CREDIT:
        return 1
    raise ValueError("Transfer legs require a debit or credit side")


def signed_amount(
    transaction_type: TransactionType,
    amount: Decimal,
    transfer_leg: TransferLeg | None = None,
) -> Decimal:
    """Return the amount with the sign of its balance effect."""
    return amount * direction_for(transaction_type, transfer_leg)


def signed_effect(record: TransactionRecord) -> Decimal:
    """Return the signed balance effect of a stored transaction."""
    return signed_amount(
        record.transaction_type,
        record.amount,
        record.transfer_leg,
    )


def balance_delta(
    old_type: TransactionType,
    old_amount: Decimal,
    new_type: TransactionType,
    new_amount: Decimal,
) -> Decimal:
    """Return the correction to apply when a transaction is rewritten.

    The delta is ``new signed amount - old signed amount`` so the previous
    effect is never applied twice.
    """
    return signed_amount(new_type, new_amount) - signed_amount(
        old_type,
        old_amount,
    )


def effects_by_source(
    transactions: Iterable[TransactionRecord],
) -> dict[str, Decimal]:
    """Sum signed effects of transactions per source id."""
    totals: dict[str, Decimal] = {}
    for record in transactions:
        totals[record.source_id] = (
            totals.get(record.source_id, Decimal("0")) + signed_effect(record)
        )
    return totals


__all__ = [
    "direction_for",
    "signed_amount",
    "signed_effect",
    "balance_delta",
    "effects_by_source",
]
