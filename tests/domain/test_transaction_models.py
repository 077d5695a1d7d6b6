"""Tests for the transaction and transfer dataclasses."""

from dataclasses import fields
from datetime import date

from src.domain.models import TransferChanges, TransferData


def test_transfer_changes_default_to_unchanged() -> None:
    changes = TransferChanges()

    assert all(
        getattr(changes, field.name) is None for field in fields(changes)
    )


def test_transfer_changes_accepts_a_new_date() -> None:
    changes = TransferChanges(date=date(2025, 2, 1), notes="moved")

    assert changes.date == date(2025, 2, 1)
    assert changes.amount is None
    assert "date" in {field.name for field in fields(TransferChanges)}


def test_transfer_data_keeps_caller_values() -> None:
    data = TransferData(
        source_id="a",
        destination_source_id="b",
        amount="10",
        date=date(2025, 2, 1),
    )

    assert data.date == date(2025, 2, 1)
    assert data.notes == ""
