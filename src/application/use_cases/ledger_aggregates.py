"""Read-only aggregate views over the ledger.

Every call re-reads the repository and recomputes through pure domain
services, so two calls without an intervening write return equal results.
When storage is unavailable the views degrade to empty lists.
"""

from typing import Callable, TypeVar

from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.application.use_cases.concurrency import OwnerLocks
from src.domain.constants import OUTSTANDING_TYPES
from src.domain.errors import BackendUnavailable, ValidationError
from src.domain.models import (
    BalanceDrift,
    CounterpartyOutstanding,
    InvestmentSummary,
    MonthlySummary,
    OutstandingEntry,
    SourceBalance,
    SourceView,
    TransactionType,
)
from src.domain.services import (
    compute_balance_drift,
    compute_counterparty_totals,
    compute_investment_summary,
    compute_monthly_summary,
    compute_outstanding,
    compute_source_balances,
    parse_transaction_type,
)
from src.infrastructure.logging.logger import get_app_logger

T = TypeVar("T")


class BalanceAggregator:
    """Compute balances, outstanding debts and summaries for an owner."""

    def __init__(
        self,
        repository: LedgerRepositoryPort,
        logger=None,
        locks: OwnerLocks | None = None,
    ) -> None:
        self._repository = repository
        self._logger = logger or get_app_logger()
        self._locks = locks or OwnerLocks()

    def source_balances(self, owner: str) -> list[SourceBalance]:
        """Return one balance row per source, with available credit."""
        return self._read(
            owner,
            "source_balances",
            lambda: compute_source_balances(self._source_views(owner)),
        )

    def lending_outstanding(
        self,
        owner: str,
        include_settled: bool = True,
    ) -> list[OutstandingEntry]:
        """Return outstanding amounts of money lent to others."""
        return self._outstanding(owner, TransactionType.LEND, include_settled)

    def borrowing_outstanding(
        self,
        owner: str,
        include_settled: bool = True,
    ) -> list[OutstandingEntry]:
        """Return outstanding amounts of money borrowed from others."""
        return self._outstanding(
            owner,
            TransactionType.BORROW,
            include_settled,
        )

    def outstanding_by_counterparty(
        self,
        owner: str,
        kind: TransactionType | str,
    ) -> list[CounterpartyOutstanding]:
        """Return lending or borrowing totals grouped by counterparty.

        Raises:
            ValidationError: If ``kind`` is not Lend or Borrow.
        """
        parsed = parse_transaction_type(kind)
        if parsed not in OUTSTANDING_TYPES:
            raise ValidationError(
                "kind must be Lend or Borrow",
                field="kind",
            )
        return compute_counterparty_totals(
            self._outstanding(owner, parsed, include_settled=True)
        )

    def monthly_summary(self, owner: str) -> list[MonthlySummary]:
        """Return income, expense and counts per calendar month."""
        return self._read(
            owner,
            "monthly_summary",
            lambda: compute_monthly_summary(
                self._repository.list_transactions(owner)
            ),
        )

    def investment_summary(self, owner: str) -> list[InvestmentSummary]:
        """Return value and net invested amount per investment source."""
        return self._read(
            owner,
            "investment_summary",
            lambda: compute_investment_summary(
                self._repository.list_sources(owner),
                self._repository.list_transactions(owner),
            ),
        )

    def ledger_check(self, owner: str) -> list[BalanceDrift]:
        """Return sources whose stored balance disagrees with the log."""
        drifts = self._read(
            owner,
            "ledger_check",
            lambda: compute_balance_drift(
                self._repository.list_sources(owner),
                self._repository.list_transactions(owner),
            ),
        )
        for drift in drifts:
            self._logger.error(
                f"Balance drift on source {drift.source_id}: stored "
                f"{drift.current_balance}, expected {drift.expected_balance}"
            )
        return drifts

    def _outstanding(
        self,
        owner: str,
        kind: TransactionType,
        include_settled: bool,
    ) -> list[OutstandingEntry]:
        return self._read(
            owner,
            f"{kind.name.lower()}_outstanding",
            lambda: compute_outstanding(
                self._repository.list_transactions(owner),
                kind,
                include_settled=include_settled,
            ),
        )

    def _source_views(self, owner: str) -> list[SourceView]:
        cards = {
            details.source_id: details
            for details in self._repository.list_credit_card_details(owner)
        }
        return [
            SourceView.from_parts(record, cards.get(record.id))
            for record in self._repository.list_sources(owner)
        ]

    def _read(
        self,
        owner: str,
        view: str,
        compute: Callable[[], list[T]],
    ) -> list[T]:
        with self._locks.hold(owner):
            try:
                return compute()
            except BackendUnavailable as exc:
                self._logger.warning(
                    f"{view} unavailable for owner={owner}: {exc.message}"
                )
                return []


__all__ = ["BalanceAggregator"]
