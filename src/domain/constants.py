"""Domain constants for the ledger core."""

from decimal import Decimal

from .models.categories import CategoryType
from .models.transactions import TransactionType

# +1 increases the source balance, -1 decreases it. Transfer legs take
# their sign from the side they sit on.
BALANCE_DIRECTIONS: dict[TransactionType, int | None] = {
    TransactionType.INCOME: 1,
    TransactionType.EXPENSE: -1,
    TransactionType.TRANSFER: None,
    TransactionType.LEND: -1,
    TransactionType.BORROW: 1,
    TransactionType.REPAYMENT_RECEIVED: 1,
    TransactionType.REPAYMENT_MADE: -1,
}

# Category kind a transaction type may reference, and whether a category is
# mandatory for it. None forbids categories altogether.
CATEGORY_RULES: dict[TransactionType, tuple[CategoryType, bool] | None] = {
    TransactionType.INCOME: (CategoryType.INCOME, True),
    TransactionType.EXPENSE: (CategoryType.EXPENSE, True),
    TransactionType.TRANSFER: None,
    TransactionType.LEND: (CategoryType.DEBT, False),
    TransactionType.BORROW: (CategoryType.DEBT, False),
    TransactionType.REPAYMENT_RECEIVED: (CategoryType.DEBT, False),
    TransactionType.REPAYMENT_MADE: (CategoryType.DEBT, False),
}

# Repayment type -> transaction type it settles.
REPAYMENT_TARGETS: dict[TransactionType, TransactionType] = {
    TransactionType.REPAYMENT_RECEIVED: TransactionType.LEND,
    TransactionType.REPAYMENT_MADE: TransactionType.BORROW,
}

OUTSTANDING_TYPES = (TransactionType.LEND, TransactionType.BORROW)

CURRENCY_CODE_LENGTH = 3

# Largest magnitude whose cents still fit a signed 64-bit column.
MAX_AMOUNT = Decimal("92233720368547758.07")

DEFAULT_CATEGORIES: tuple[tuple[str, CategoryType, tuple[str, ...]], ...] = (
    ("Salary", CategoryType.INCOME, ("Base Pay", "Bonus")),
    ("Investments", CategoryType.INCOME, ("Dividends", "Interest")),
    ("Other Income", CategoryType.INCOME, ("Gifts", "Refunds")),
    (
        "Food",
        CategoryType.EXPENSE,
        ("Groceries", "Restaurants", "Coffee"),
    ),
    (
        "Housing",
        CategoryType.EXPENSE,
        ("Rent", "Utilities", "Maintenance"),
    ),
    (
        "Transport",
        CategoryType.EXPENSE,
        ("Fuel", "Public Transport", "Parking"),
    ),
    ("Health", CategoryType.EXPENSE, ("Pharmacy", "Doctor")),
    (
        "Entertainment",
        CategoryType.EXPENSE,
        ("Subscriptions", "Events"),
    ),
    ("Personal Loans", CategoryType.DEBT, ("Family", "Friends")),
)


__all__ = [
    "BALANCE_DIRECTIONS",
    "CATEGORY_RULES",
    "REPAYMENT_TARGETS",
    "OUTSTANDING_TYPES",
    "CURRENCY_CODE_LENGTH",
    "MAX_AMOUNT",
    "DEFAULT_CATEGORIES",
]
