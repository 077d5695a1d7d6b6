"""Facade exposing every ledger operation behind one object.

All components share one owner lock registry, so a transfer and an
aggregate read of the same owner never interleave within a process.
"""

from datetime import date

from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.application.use_cases.category_catalog import (
    CategoryCatalog,
    RestoreDefaultsResult,
)
from src.application.use_cases.concurrency import (
    DEFAULT_MAX_RETRIES,
    OwnerLocks,
)
from src.application.use_cases.ledger_aggregates import BalanceAggregator
from src.application.use_cases.source_registry import SourceRegistry
from src.application.use_cases.transaction_store import TransactionStore
from src.application.use_cases.transfer_coordinator import (
    TransferCoordinator,
)
from src.domain.models import (
    BalanceDrift,
    Category,
    CategoryTree,
    CategoryType,
    CounterpartyOutstanding,
    InvestmentSummary,
    MonthlySummary,
    OutstandingEntry,
    SourceBalance,
    SourceData,
    SourceView,
    SubCategory,
    TransactionData,
    TransactionRecord,
    TransactionType,
    TransferChanges,
    TransferData,
    TransferLegs,
)
from src.infrastructure.logging.logger import get_app_logger, get_usage_logger


class LedgerService:
    """Entry point for callers of the ledger core."""

    def __init__(
        self,
        repository: LedgerRepositoryPort,
        logger=None,
        usage_logger=None,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        """Wire the use cases around one repository.

        Args:
            repository: Ledger storage port.
            logger: Optional logger compatible with logging.Logger-like API.
            usage_logger: Optional logger recording invoked operations.
            max_retries: Retries allowed when a version check fails.
        """
        self._repository = repository
        self._logger = logger or get_app_logger()
        self._usage = usage_logger or get_usage_logger()
        locks = OwnerLocks()
        self.sources = SourceRegistry(
            repository,
            logger=self._logger,
            locks=locks,
            max_retries=max_retries,
        )
        self.categories = CategoryCatalog(
            repository,
            logger=self._logger,
            locks=locks,
        )
        self.transactions = TransactionStore(
            repository,
            logger=self._logger,
            locks=locks,
            max_retries=max_retries,
        )
        self.transfers = TransferCoordinator(
            repository,
            logger=self._logger,
            locks=locks,
            max_retries=max_retries,
        )
        self.aggregates = BalanceAggregator(
            repository,
            logger=self._logger,
            locks=locks,
        )

    def ping(self) -> None:
        """Raise BackendUnavailable when storage cannot be reached."""
        self._repository.ping()

    # Sources

    def create_source(self, owner: str, data: SourceData) -> SourceView:
        self._track("create_source", owner)
        return self.sources.create_source(owner, data)

    def update_source(
        self,
        owner: str,
        source_id: str,
        data: SourceData,
    ) -> SourceView:
        self._track("update_source", owner)
        return self.sources.update_source(owner, source_id, data)

    def delete_source(self, owner: str, source_id: str) -> None:
        self._track("delete_source", owner)
        self.sources.delete_source(owner, source_id)

    def get_source(self, owner: str, source_id: str) -> SourceView:
        return self.sources.get_source(owner, source_id)

    def list_sources(self, owner: str) -> list[SourceView]:
        return self.sources.list_sources(owner)

    # Categories

    def create_category(
        self,
        owner: str,
        name: str,
        category_type: CategoryType | str,
    ) -> Category:
        self._track("create_category", owner)
        return self.categories.create_category(owner, name, category_type)

    def update_category(
        self,
        owner: str,
        category_id: str,
        name: str | None = None,
        category_type: CategoryType | str | None = None,
    ) -> Category:
        self._track("update_category", owner)
        return self.categories.update_category(
            owner,
            category_id,
            name=name,
            category_type=category_type,
        )

    def delete_category(self, owner: str, category_id: str) -> None:
        self._track("delete_category", owner)
        self.categories.delete_category(owner, category_id)

    def create_subcategory(
        self,
        owner: str,
        category_id: str,
        name: str,
    ) -> SubCategory:
        self._track("create_subcategory", owner)
        return self.categories.create_subcategory(owner, category_id, name)

    def update_subcategory(
        self,
        owner: str,
        subcategory_id: str,
        name: str | None = None,
        category_id: str | None = None,
    ) -> SubCategory:
        self._track("update_subcategory", owner)
        return self.categories.update_subcategory(
            owner,
            subcategory_id,
            name=name,
            category_id=category_id,
        )

    def delete_subcategory(self, owner: str, subcategory_id: str) -> None:
        self._track("delete_subcategory", owner)
        self.categories.delete_subcategory(owner, subcategory_id)

    def list_categories(self, owner: str) -> list[CategoryTree]:
        return self.categories.list_categories(owner)

    def restore_default_categories(self, owner: str) -> RestoreDefaultsResult:
        self._track("restore_default_categories", owner)
        return self.categories.restore_defaults(owner)

    # Transactions

    def create_transaction(
        self,
        owner: str,
        data: TransactionData,
    ) -> TransactionRecord:
        self._track("create_transaction", owner)
        return self.transactions.create_transaction(owner, data)

    def update_transaction(
        self,
        owner: str,
        transaction_id: str,
        data: TransactionData,
    ) -> TransactionRecord:
        self._track("update_transaction", owner)
        return self.transactions.update_transaction(
            owner,
            transaction_id,
            data,
        )

    def delete_transaction(self, owner: str, transaction_id: str) -> None:
        self._track("delete_transaction", owner)
        self.transactions.delete_transaction(owner, transaction_id)

    def get_transaction(
        self,
        owner: str,
        transaction_id: str,
    ) -> TransactionRecord:
        return self.transactions.get_transaction(owner, transaction_id)

    def list_transactions(
        self,
        owner: str,
        start: date | None = None,
        end: date | None = None,
        source_id: str | None = None,
    ) -> list[TransactionRecord]:
        return self.transactions.list_transactions(
            owner,
            start=start,
            end=end,
            source_id=source_id,
        )

    # Transfers

    def create_transfer(self, owner: str, data: TransferData) -> TransferLegs:
        self._track("create_transfer", owner)
        return self.transfers.create_transfer(owner, data)

    def update_transfer(
        self,
        owner: str,
        transfer_id: str,
        changes: TransferChanges,
    ) -> TransferLegs:
        self._track("update_transfer", owner)
        return self.transfers.update_transfer(owner, transfer_id, changes)

    def delete_transfer(self, owner: str, transfer_id: str) -> None:
        self._track("delete_transfer", owner)
        self.transfers.delete_transfer(owner, transfer_id)

    def get_transfer(self, owner: str, transfer_id: str) -> TransferLegs:
        return self.transfers.get_transfer(owner, transfer_id)

    # Aggregates

    def source_balances(self, owner: str) -> list[SourceBalance]:
        return self.aggregates.source_balances(owner)

    def lending_outstanding(
        self,
        owner: str,
        include_settled: bool = True,
    ) -> list[OutstandingEntry]:
        return self.aggregates.lending_outstanding(owner, include_settled)

    def borrowing_outstanding(
        self,
        owner: str,
        include_settled: bool = True,
    ) -> list[OutstandingEntry]:
        return self.aggregates.borrowing_outstanding(owner, include_settled)

    def outstanding_by_counterparty(
        self,
        owner: str,
        kind: TransactionType | str,
    ) -> list[CounterpartyOutstanding]:
        return self.aggregates.outstanding_by_counterparty(owner, kind)

    def monthly_summary(self, owner: str) -> list[MonthlySummary]:
        return self.aggregates.monthly_summary(owner)

    def investment_summary(self, owner: str) -> list[InvestmentSummary]:
        return self.aggregates.investment_summary(owner)

    def ledger_check(self, owner: str) -> list[BalanceDrift]:
        return self.aggregates.ledger_check(owner)

    def _track(self, operation: str, owner: str) -> None:
        self._usage.info(f"operation={operation} owner={owner}")


__all__ = ["LedgerService"]
