"""Tests for signed balance effects."""

from datetime import date
from decimal import Decimal

import pytest

from src.domain.constants import BALANCE_DIRECTIONS, CATEGORY_RULES
from src.domain.models import (
    TransactionRecord,
    TransactionType,
    TransferLeg,
)
from src.domain.services import (
    balance_delta,
    direction_for,
    effects_by_source,
    signed_effect,
)


def _record(txn_type, amount, source_id="a", leg=None) -> TransactionRecord:
    return TransactionRecord(
        id=f"{txn_type.name}-{amount}-{source_id}",
        owner="alice",
        date=date(2025, 1, 1),
        transaction_type=txn_type,
        source_id=source_id,
        amount=Decimal(amount),
        transfer_id="tr" if leg else None,
        transfer_leg=leg,
    )


def test_every_transaction_type_has_direction_and_category_rule() -> None:
    assert set(BALANCE_DIRECTIONS) == set(TransactionType)
    assert set(CATEGORY_RULES) == set(TransactionType)


@pytest.mark.parametrize(
    ("txn_type", "expected"),
    [
        (TransactionType.INCOME, 1),
        (TransactionType.EXPENSE, -1),
        (TransactionType.LEND, -1),
        (TransactionType.BORROW, 1),
        (TransactionType.REPAYMENT_RECEIVED, 1),
        (TransactionType.REPAYMENT_MADE, -1),
    ],
)
def test_direction_for_single_source_types(txn_type, expected) -> None:
    assert direction_for(txn_type) == expected


def test_transfer_direction_depends_on_leg() -> None:
    assert direction_for(TransactionType.TRANSFER, TransferLeg.DEBIT) == -1
    assert direction_for(TransactionType.TRANSFER, TransferLeg.CREDIT) == 1
    with pytest.raises(ValueError):
        direction_for(TransactionType.TRANSFER)


def test_balance_delta_applies_difference_only() -> None:
    assert balance_delta(
        TransactionType.EXPENSE,
        Decimal("50"),
        TransactionType.EXPENSE,
        Decimal("80"),
    ) == Decimal("-30")
    assert balance_delta(
        TransactionType.EXPENSE,
        Decimal("50"),
        TransactionType.INCOME,
        Decimal("50"),
    ) == Decimal("100")


def test_effects_by_source_sums_signed_amounts() -> None:
    rows = [
        _record(TransactionType.INCOME, "100", "a"),
        _record(TransactionType.EXPENSE, "30", "a"),
        _record(TransactionType.TRANSFER, "20", "a", TransferLeg.DEBIT),
        _record(TransactionType.TRANSFER, "20", "b", TransferLeg.CREDIT),
    ]

    assert effects_by_source(rows) == {
        "a": Decimal("50"),
        "b": Decimal("20"),
    }
    assert sum(signed_effect(row) for row in rows[2:]) == 0
