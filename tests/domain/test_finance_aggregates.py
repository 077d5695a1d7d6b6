"""Tests for the pure aggregate computations."""

from datetime import date
from decimal import Decimal

import pytest

from src.domain.models import (
    CreditCardDetails,
    OutstandingStatus,
    SourceRecord,
    SourceType,
    SourceView,
    TransactionRecord,
    TransactionType,
    TransferLeg,
)
from src.domain.services import (
    compute_balance_drift,
    compute_counterparty_totals,
    compute_investment_summary,
    compute_monthly_summary,
    compute_outstanding,
    compute_source_balances,
)


def _txn(txn_id, txn_type, amount, **extra) -> TransactionRecord:
    fields = {
        "id": txn_id,
        "owner": "alice",
        "date": date(2025, 2, 10),
        "transaction_type": txn_type,
        "source_id": "bank",
        "amount": Decimal(amount),
    }
    fields.update(extra)
    return TransactionRecord(**fields)


def _source(source_id, source_type, initial, current, name=None):
    return SourceRecord(
        id=source_id,
        owner="alice",
        name=name or source_id.title(),
        source_type=source_type,
        currency="USD",
        initial_balance=Decimal(initial),
        current_balance=Decimal(current),
    )


def test_source_balances_sorted_with_available_credit() -> None:
    card = SourceView.from_parts(
        _source("visa", SourceType.CREDIT_CARD, "850", "850"),
        CreditCardDetails(source_id="visa", credit_limit=Decimal("5000")),
    )
    bank = SourceView.from_parts(
        _source("bank", SourceType.BANK_ACCOUNT, "10", "10", name="bank"),
        None,
    )

    rows = compute_source_balances([card, bank])

    assert [row.source_id for row in rows] == ["bank", "visa"]
    assert rows[0].available_credit is None
    assert rows[1].available_credit == Decimal("4150")
    assert rows[1].credit_limit == Decimal("5000")


def test_outstanding_tracks_partial_and_paid_repayments() -> None:
    rows = [
        _txn("l1", TransactionType.LEND, "100", counterparty="Bob"),
        _txn("l2", TransactionType.LEND, "40", counterparty="Ann"),
        _txn("l3", TransactionType.LEND, "25", counterparty="Bob"),
        _txn(
            "r1",
            TransactionType.REPAYMENT_RECEIVED,
            "30",
            related_transaction_id="l1",
        ),
        _txn(
            "r2",
            TransactionType.REPAYMENT_RECEIVED,
            "40",
            related_transaction_id="l2",
        ),
        _txn("b1", TransactionType.BORROW, "500", counterparty="Bank"),
    ]

    entries = compute_outstanding(rows, TransactionType.LEND)

    by_id = {entry.transaction_id: entry for entry in entries}
    assert [entry.counterparty for entry in entries] == ["Ann", "Bob", "Bob"]
    assert by_id["l1"].outstanding_balance == Decimal("70")
    assert by_id["l1"].status is OutstandingStatus.PARTIAL
    assert by_id["l2"].status is OutstandingStatus.PAID
    assert by_id["l3"].status is OutstandingStatus.ONGOING

    open_only = compute_outstanding(
        rows,
        TransactionType.LEND,
        include_settled=False,
    )
    assert {entry.transaction_id for entry in open_only} == {"l1", "l3"}

    borrowing = compute_outstanding(rows, TransactionType.BORROW)
    assert [entry.outstanding_balance for entry in borrowing] == [
        Decimal("500")
    ]

    totals = compute_counterparty_totals(entries)
    assert [
        (row.counterparty, row.outstanding_balance) for row in totals
    ] == [("Ann", Decimal("0")), ("Bob", Decimal("95"))]
    assert totals[1].transaction_count == 2


def test_outstanding_rejects_other_kinds() -> None:
    with pytest.raises(ValueError):
        compute_outstanding([], TransactionType.INCOME)


def test_monthly_summary_counts_transfer_once() -> None:
    rows = [
        _txn("i1", TransactionType.INCOME, "1000"),
        _txn("e1", TransactionType.EXPENSE, "200"),
        _txn(
            "t1",
            TransactionType.TRANSFER,
            "300",
            transfer_id="tr",
            transfer_leg=TransferLeg.DEBIT,
        ),
        _txn(
            "t2",
            TransactionType.TRANSFER,
            "300",
            source_id="savings",
            transfer_id="tr",
            transfer_leg=TransferLeg.CREDIT,
        ),
        _txn("e2", TransactionType.EXPENSE, "15", date=date(2025, 3, 2)),
    ]

    summary = compute_monthly_summary(rows)

    assert [row.month for row in summary] == [
        date(2025, 2, 1),
        date(2025, 3, 1),
    ]
    february = summary[0]
    assert february.total_income == Decimal("1000")
    assert february.total_expense == Decimal("200")
    assert february.transaction_count == 3
    assert february.net == Decimal("800")
    assert summary[1].transaction_count == 1


def test_investment_summary_uses_transfers_as_contributions() -> None:
    broker = _source("broker", SourceType.INVESTMENT, "1000", "1600")
    rows = [
        _txn(
            "t1",
            TransactionType.TRANSFER,
            "500",
            source_id="broker",
            transfer_id="tr",
            transfer_leg=TransferLeg.CREDIT,
        ),
        _txn("i1", TransactionType.INCOME, "100", source_id="broker"),
    ]

    (summary,) = compute_investment_summary(
        [broker, _source("bank", SourceType.BANK_ACCOUNT, "0", "0")],
        rows,
    )

    assert summary.net_invested == Decimal("1500")
    assert summary.total_value == Decimal("1600")
    assert summary.gain == Decimal("100")


def test_balance_drift_reports_only_inconsistent_sources() -> None:
    rows = [_txn("e1", TransactionType.EXPENSE, "25")]
    consistent = _source("bank", SourceType.BANK_ACCOUNT, "100", "75")
    drifted = _source("cash", SourceType.CASH, "50", "60")

    drifts = compute_balance_drift([consistent, drifted], rows)

    assert [drift.source_id for drift in drifts] == ["cash"]
    assert drifts[0].expected_balance == Decimal("50")
    assert drifts[0].difference == Decimal("10")
