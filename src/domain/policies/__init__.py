"""Domain policies package."""

from .deletion import (
    ensure_category_deletable,
    ensure_no_repayments,
    ensure_source_deletable,
)

__all__ = [
    "ensure_category_deletable",
    "ensure_no_repayments",
    "ensure_source_deletable",
]
