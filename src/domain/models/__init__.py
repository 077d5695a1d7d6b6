"""Domain models package."""

from .categories import Category, CategoryTree, CategoryType, SubCategory
from .finance import (
    BalanceDrift,
    CounterpartyOutstanding,
    InvestmentSummary,
    MonthlySummary,
    OutstandingEntry,
    OutstandingStatus,
    SourceBalance,
)
from .sources import (
    CreditCardDetails,
    SourceData,
    SourceRecord,
    SourceType,
    SourceView,
)
from .transactions import (
    TransactionData,
    TransactionRecord,
    TransactionType,
    TransferChanges,
    TransferData,
    TransferLeg,
    TransferLegs,
)

__all__ = [
    "Category",
    "CategoryTree",
    "CategoryType",
    "SubCategory",
    "BalanceDrift",
    "CounterpartyOutstanding",
    "InvestmentSummary",
    "MonthlySummary",
    "OutstandingEntry",
    "OutstandingStatus",
    "SourceBalance",
    "CreditCardDetails",
    "SourceData",
    "SourceRecord",
    "SourceType",
    "SourceView",
    "TransactionData",
    "TransactionRecord",
    "TransactionType",
    "TransferChanges",
    "TransferData",
    "TransferLeg",
    "TransferLegs",
]
