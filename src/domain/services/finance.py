"""Domain services for derived ledger aggregates.

All functions are pure: they take rows already read from the repository
and return new frozen models, so running them twice on the same input
yields identical output.
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from src.domain.constants import OUTSTANDING_TYPES, REPAYMENT_TARGETS
from src.domain.models import (
    BalanceDrift,
    CounterpartyOutstanding,
    InvestmentSummary,
    MonthlySummary,
    OutstandingEntry,
    OutstandingStatus,
    SourceBalance,
    SourceRecord,
    SourceType,
    SourceView,
    TransactionRecord,
    TransactionType,
    TransferLeg,
)
from src.domain.services.ledger import effects_by_source

ZERO = Decimal("0")


def _by_name(row) -> tuple[str, str]:
    return (row.source_name.lower(), row.source_id)


def compute_source_balances(
    sources: Iterable[SourceView],
) -> list[SourceBalance]:
    """Build one balance row per source, ordered by name.

    Args:
        sources: Sources joined with their credit card details.

    Returns:
        list[SourceBalance]: Balance rows with available credit for cards.
    """
    balances = [
        SourceBalance(
            source_id=source.id,
            source_name=source.name,
            source_type=source.source_type,
            currency=source.currency,
            current_balance=source.current_balance,
            credit_limit=(
                source.credit_limit
                if source.source_type is SourceType.CREDIT_CARD
                else None
            ),
            available_credit=source.available_credit,
        )
        for source in sources
    ]
    return sorted(balances, key=_by_name)


def _status_for(repaid: Decimal, outstanding: Decimal) -> OutstandingStatus:
    if outstanding <= 0:
        return OutstandingStatus.PAID
    if repaid == 0:
        return OutstandingStatus.ONGOING
    return OutstandingStatus.PARTIAL


def compute_outstanding(
    transactions: Iterable[TransactionRecord],
    kind: TransactionType,
    *,
    include_settled: bool = True,
) -> list[OutstandingEntry]:
    """Compute outstanding balances of LEND or BORROW transactions.

    Args:
        transactions: Every transaction of one owner.
        kind: TransactionType.LEND or TransactionType.BORROW.
        include_settled: Keep fully repaid entries when True.

    Returns:
        list[OutstandingEntry]: Entries grouped by counterparty, then by date.

    Raises:
        ValueError: If ``kind`` is not a lending or borrowing type.
    """
    if kind not in OUTSTANDING_TYPES:
        raise ValueError(f"Outstanding balances are undefined for {kind}")
    rows = list(transactions)
    repayment_types = {
        repayment
        for repayment, target in REPAYMENT_TARGETS.items()
        if target is kind
    }
    repaid_by_parent: dict[str, Decimal] = {}
    for row in rows:
        if (
            row.transaction_type in repayment_types
            and row.related_transaction_id
        ):
            repaid_by_parent[row.related_transaction_id] = (
                repaid_by_parent.get(row.related_transaction_id, ZERO)
                + row.amount
            )

    entries = []
    for row in rows:
        if row.transaction_type is not kind:
            continue
        repaid = repaid_by_parent.get(row.id, ZERO)
        outstanding = row.amount - repaid
        if not include_settled and outstanding == 0:
            continue
        entries.append(
            OutstandingEntry(
                transaction_id=row.id,
                counterparty=row.counterparty,
                date=row.date,
                initial_outstanding=row.amount,
                repaid=repaid,
                outstanding_balance=outstanding,
                status=_status_for(repaid, outstanding),
            )
        )
    return sorted(
        entries,
        key=lambda entry: (
            (entry.counterparty or "").lower(),
            entry.date,
            entry.transaction_id,
        ),
    )


def compute_counterparty_totals(
    entries: Iterable[OutstandingEntry],
) -> list[CounterpartyOutstanding]:
    """Sum outstanding entries per counterparty, preserving entry order."""
    totals: dict[str, list] = {}
    order: list[str] = []
    names: dict[str, str | None] = {}
    for entry in entries:
        key = (entry.counterparty or "").lower()
        if key not in totals:
            order.append(key)
            names[key] = entry.counterparty
            totals[key] = [ZERO, ZERO, 0]
        totals[key][0] += entry.initial_outstanding
        totals[key][1] += entry.outstanding_balance
        totals[key][2] += 1
    return [
        CounterpartyOutstanding(
            counterparty=names[key],
            initial_outstanding=totals[key][0],
            outstanding_balance=totals[key][1],
            transaction_count=totals[key][2],
        )
        for key in order
    ]


def compute_monthly_summary(
    transactions: Iterable[TransactionRecord],
) -> list[MonthlySummary]:
    """Group transactions by calendar month.

    A transfer is counted once (its debit leg) and contributes neither
    income nor expense.

    Args:
        transactions: Every transaction of one owner.

    Returns:
        list[MonthlySummary]: One row per month, oldest first.
    """
    income: dict[date, Decimal] = {}
    expense: dict[date, Decimal] = {}
    counts: dict[date, int] = {}
    for row in transactions:
        if row.transfer_leg is TransferLeg.CREDIT:
            continue
        month = row.date.replace(day=1)
        counts[month] = counts.get(month, 0) + 1
        income.setdefault(month, ZERO)
        expense.setdefault(month, ZERO)
        if row.transaction_type is TransactionType.INCOME:
            income[month] += row.amount
        elif row.transaction_type is TransactionType.EXPENSE:
            expense[month] += row.amount
    return [
        MonthlySummary(
            month=month,
            total_income=income[month],
            total_expense=expense[month],
            transaction_count=counts[month],
        )
        for month in sorted(counts)
    ]


def compute_investment_summary(
    sources: Iterable[SourceRecord | SourceView],
    transactions: Iterable[TransactionRecord],
) -> list[InvestmentSummary]:
    """Compare investment source values with the money moved into them.

    Net invested is the opening balance plus transfers in minus transfers
    out; everything else on the source counts as gain or loss.
    """
    investments = [
        source
        for source in sources
        if source.source_type is SourceType.INVESTMENT
    ]
    moved: dict[str, Decimal] = {}
    for row in transactions:
        if row.transfer_leg is TransferLeg.CREDIT:
            moved[row.source_id] = moved.get(row.source_id, ZERO) + row.amount
        elif row.transfer_leg is TransferLeg.DEBIT:
            moved[row.source_id] = moved.get(row.source_id, ZERO) - row.amount
    summaries = [
        InvestmentSummary(
            source_id=source.id,
            source_name=source.name,
            total_value=source.current_balance,
            net_invested=source.initial_balance + moved.get(source.id, ZERO),
        )
        for source in investments
    ]
    return sorted(summaries, key=_by_name)


def compute_balance_drift(
    sources: Iterable[SourceRecord | SourceView],
    transactions: Iterable[TransactionRecord],
) -> list[BalanceDrift]:
    """Return sources whose stored balance differs from the log.

    Args:
        sources: Sources of one owner.
        transactions: Every transaction of the same owner.

    Returns:
        list[BalanceDrift]: Empty when the ledger is consistent.
    """
    effects = effects_by_source(transactions)
    drifts = []
    for source in sources:
        expected = source.initial_balance + effects.get(source.id, ZERO)
        if expected != source.current_balance:
            drifts.append(
                BalanceDrift(
                    source_id=source.id,
                    source_name=source.name,
                    expected_balance=expected,
                    current_balance=source.current_balance,
                )
            )
    return drifts


__all__ = [
    "compute_source_balances",
    "compute_outstanding",
    "compute_counterparty_totals",
    "compute_monthly_summary",
    "compute_investment_summary",
    "compute_balance_drift",
]
