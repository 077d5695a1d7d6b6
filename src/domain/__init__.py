"""Domain package for ledger rules and core models."""

from .errors import (
    BackendUnavailable,
    CompensationFailure,
    ConflictError,
    LedgerError,
    NotFoundError,
    ValidationError,
)
from .models import (
    Category,
    CategoryType,
    SourceData,
    SourceType,
    SourceView,
    SubCategory,
    TransactionData,
    TransactionRecord,
    TransactionType,
    TransferChanges,
    TransferData,
    TransferLegs,
)

__all__ = [
    "BackendUnavailable",
    "CompensationFailure",
    "ConflictError",
    "LedgerError",
    "NotFoundError",
    "ValidationError",
    "Category",
    "CategoryType",
    "SourceData",
    "SourceType",
    "SourceView",
    "SubCategory",
    "TransactionData",
    "TransactionRecord",
    "TransactionType",
    "TransferChanges",
    "TransferData",
    "TransferLegs",
]
