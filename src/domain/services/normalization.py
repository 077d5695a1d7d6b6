"""Domain normalization helpers."""


def normalize_name(name: str | None) -> str:
    """Collapse surrounding whitespace of a display name.

    Args:
        name: Raw name from caller input.

    Returns:
        str: Stripped name, empty when missing.
    """
    if not name:
        return ""
    return " ".join(name.split())


def normalize_currency(currency: str | None) -> str:
    """Normalize currency codes to upper case.

    Args:
        currency: Raw currency code.

    Returns:
        str: Upper-cased code, empty when missing.
    """
    if not currency:
        return ""
    return currency.strip().upper()


def normalize_counterparty(counterparty: str | None) -> str | None:
    """Normalize lending/borrowing counterparty names.

    Args:
        counterparty: Raw person or organisation name.

    Returns:
        str | None: Cleaned name, None when blank.
    """
    cleaned = normalize_name(counterparty)
    return cleaned or None


def normalize_notes(notes: str | None) -> str:
    """Return notes stripped of surrounding whitespace."""
    return (notes or "").strip()


__all__ = [
    "normalize_name",
    "normalize_currency",
    "normalize_counterparty",
    "normalize_notes",
]
