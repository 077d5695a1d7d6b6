"""Application use cases package."""

from .category_catalog import CategoryCatalog, RestoreDefaultsResult
from .compensation import CompensatingSequence
from .concurrency import OwnerLocks, run_with_retries
from .ledger_aggregates import BalanceAggregator
from .ledger_service import LedgerService
from .source_registry import SourceRegistry
from .transaction_store import TransactionStore
from .transfer_coordinator import TransferCoordinator

__all__ = [
    "CategoryCatalog",
    "RestoreDefaultsResult",
    "CompensatingSequence",
    "OwnerLocks",
    "run_with_retries",
    "BalanceAggregator",
    "LedgerService",
    "SourceRegistry",
    "TransactionStore",
    "TransferCoordinator",
]
