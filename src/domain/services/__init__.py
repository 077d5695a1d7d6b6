"""Domain services package."""

from .finance import (
    compute_balance_drift,
    compute_counterparty_totals,
    compute_investment_summary,
    compute_monthly_summary,
    compute_outstanding,
    compute_source_balances,
)
from .ledger import (
    balance_delta,
    direction_for,
    effects_by_source,
    signed_amount,
    signed_effect,
)
from .normalization import (
    normalize_counterparty,
    normalize_currency,
    normalize_name,
    normalize_notes,
)
from .validation import (
    parse_category_type,
    parse_source_type,
    parse_transaction_type,
    require_amount,
    require_billing_day,
    require_currency,
    require_name,
    require_non_negative_amount,
    require_positive_amount,
    warn_on_negative_balance,
)

__all__ = [
    "compute_balance_drift",
    "compute_counterparty_totals",
    "compute_investment_summary",
    "compute_monthly_summary",
    "compute_outstanding",
    "compute_source_balances",
    "balance_delta",
    "direction_for",
    "effects_by_source",
    "signed_amount",
    "signed_effect",
    "normalize_counterparty",
    "normalize_currency",
    "normalize_name",
    "normalize_notes",
    "parse_category_type",
    "parse_source_type",
    "parse_transaction_type",
    "require_amount",
    "require_billing_day",
    "require_currency",
    "require_name",
    "require_non_negative_amount",
    "require_positive_amount",
    "warn_on_negative_balance",
]
