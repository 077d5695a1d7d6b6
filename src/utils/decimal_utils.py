"""Helpers for Decimal normalization."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")


def coerce_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal.

    Args:
        value: Raw numeric value from SQL or adapters.

    Returns:
        Decimal: Normalized numeric value.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_amount(value) -> Decimal:
    """Coerce a value to Decimal rounded half-up to two fractional digits.

    Raises:
        ValueError: If the value is not numeric or not finite.
    """
    try:
        amount = coerce_decimal(value)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"Amount out of range: {value!r}") from exc


def to_minor_units(amount: Decimal) -> int:
    """Convert an amount to integer cents."""
    return int(quantize_amount(amount) * 100)


def from_minor_units(value) -> Decimal:
    """Convert integer cents to a two-digit Decimal amount."""
    return (Decimal(int(value or 0)) / 100).quantize(CENT)


__all__ = [
    "CENT",
    "coerce_decimal",
    "quantize_amount",
    "to_minor_units",
    "from_minor_units",
]
