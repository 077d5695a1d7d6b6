"""Domain validation helpers.

Every helper raises ``ValidationError`` naming the offending field, so use
cases can validate a whole payload before writing anything.
"""

from decimal import Decimal
from logging import Logger

from src.domain.constants import CURRENCY_CODE_LENGTH, MAX_AMOUNT
from src.domain.errors import ValidationError
from src.domain.models import (
    CategoryType,
    SourceType,
    TransactionType,
)
from src.domain.services.normalization import (
    normalize_currency,
    normalize_name,
)
from src.utils.decimal_utils import quantize_amount


def require_name(name: str | None, field: str = "name") -> str:
    """Return the normalized name or raise when it is blank."""
    cleaned = normalize_name(name)
    if not cleaned:
        raise ValidationError(f"{field} must not be empty", field=field)
    return cleaned


def require_currency(currency: str | None) -> str:
    """Return the upper-cased currency code or raise when malformed."""
    code = normalize_currency(currency)
    if len(code) != CURRENCY_CODE_LENGTH or not code.isalpha():
        raise ValidationError(
            f"currency must be a {CURRENCY_CODE_LENGTH}-letter code",
            field="currency",
        )
    return code


def require_amount(value, field: str = "amount") -> Decimal:
    """Return a two-digit Decimal amount, accepting zero and negatives."""
    if value is None:
        raise ValidationError(f"{field} is required", field=field)
    try:
        amount = quantize_amount(value)
    except ValueError as exc:
        raise ValidationError(str(exc), field=field) from exc
    if abs(amount) > MAX_AMOUNT:
        raise ValidationError(
            f"{field} must not exceed {MAX_AMOUNT} in magnitude",
            field=field,
        )
    return amount


def require_positive_amount(value, field: str = "amount") -> Decimal:
    """Return a strictly positive two-digit Decimal amount."""
    amount = require_amount(value, field=field)
    if amount <= 0:
        raise ValidationError(
            f"{field} must be greater than zero",
            field=field,
        )
    return amount


def require_non_negative_amount(value, field: str) -> Decimal:
    """Return a two-digit Decimal amount that is zero or more."""
    amount = require_amount(value, field=field)
    if amount < 0:
        raise ValidationError(f"{field} must not be negative", field=field)
    return amount


def require_billing_day(value: int | None) -> int | None:
    """Validate an optional billing cycle start day (1..31)."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            "billing_cycle_start_day must be an integer",
            field="billing_cycle_start_day",
        )
    if not 1 <= value <= 31:
        raise ValidationError(
            "billing_cycle_start_day must be between 1 and 31",
            field="billing_cycle_start_day",
        )
    return value


def parse_source_type(value) -> SourceType:
    try:
        return SourceType.parse(value)
    except ValueError as exc:
        raise ValidationError(str(exc), field="source_type") from exc


def parse_category_type(value) -> CategoryType:
    try:
        return CategoryType.parse(value)
    except ValueError as exc:
        raise ValidationError(str(exc), field="category_type") from exc


def parse_transaction_type(value) -> TransactionType:
    try:
        return TransactionType.parse(value)
    except ValueError as exc:
        raise ValidationError(str(exc), field="transaction_type") from exc


def warn_on_negative_balance(
    source_type: SourceType,
    balance: Decimal,
    logger: Logger,
) -> None:
    """Warn when a non credit card source is overdrawn.

    Args:
        source_type: Kind of source.
        balance: Balance after a write.
        logger: Logger used for warnings.
    """
    if source_type is not SourceType.CREDIT_CARD and balance < 0:
        logger.warning(
            f"Balance is negative for source_type={source_type.value}: "
            f"{balance}"
        )


__all__ = [
    "require_name",
    "require_currency",
    "require_amount",
    "require_positive_amount",
    "require_non_negative_amount",
    "require_billing_day",
    "parse_source_type",
    "parse_category_type",
    "parse_transaction_type",
    "warn_on_negative_balance",
]
