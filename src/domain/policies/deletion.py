"""Deletion policies for entities referenced by the transaction log.

Sources and categories follow the same rule: an entity referenced by any
transaction is never deleted, and the caller is told how many rows refer
to it.
"""

from src.domain.errors import ConflictError


def ensure_source_deletable(source_id: str, reference_count: int) -> None:
    """Refuse to delete a source that has transaction history.

    Args:
        source_id: Source being deleted.
        reference_count: Transactions or transfer legs touching the source.

    Raises:
        ConflictError: If any transaction references the source.
    """
    if reference_count > 0:
        raise ConflictError(
            f"Source {source_id} has {reference_count} transactions; "
            "delete them before deleting the source",
            details={"source_id": source_id, "references": reference_count},
        )


def ensure_category_deletable(category_id: str, reference_count: int) -> None:
    """Refuse to delete a category or subcategory still in use.

    Raises:
        ConflictError: If any transaction references it.
    """
    if reference_count > 0:
        raise ConflictError(
            f"Category {category_id} is used by {reference_count} "
            "transactions",
            details={
                "category_id": category_id,
                "references": reference_count,
            },
        )


def ensure_no_repayments(transaction_id: str, repayment_count: int) -> None:
    """Refuse to delete a lending or borrowing that has repayments.

    Raises:
        ConflictError: If repayments reference the transaction.
    """
    if repayment_count > 0:
        raise ConflictError(
            f"Transaction {transaction_id} has {repayment_count} repayments",
            details={
                "transaction_id": transaction_id,
                "references": repayment_count,
            },
        )


__all__ = [
    "ensure_source_deletable",
    "ensure_category_deletable",
    "ensure_no_repayments",
]
