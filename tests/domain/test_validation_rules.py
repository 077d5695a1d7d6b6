"""Tests for input validation, type parsing and deletion policies."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from src.domain.constants import MAX_AMOUNT
from src.domain.errors import ConflictError, ValidationError
from src.domain.models import CategoryType, SourceType, TransactionType
from src.domain.policies import (
    ensure_category_deletable,
    ensure_no_repayments,
    ensure_source_deletable,
)
from src.domain.services import (
    normalize_counterparty,
    parse_source_type,
    parse_transaction_type,
    require_amount,
    require_billing_day,
    require_currency,
    require_name,
    require_positive_amount,
    warn_on_negative_balance,
)
from src.utils.decimal_utils import from_minor_units, to_minor_units


def test_type_labels_and_names_are_accepted() -> None:
    assert parse_source_type("Credit Card") is SourceType.CREDIT_CARD
    assert parse_source_type("credit_card") is SourceType.CREDIT_CARD
    assert CategoryType.parse("Expense") is CategoryType.EXPENSE
    assert (
        parse_transaction_type("repayment received")
        is TransactionType.REPAYMENT_RECEIVED
    )


def test_unknown_type_raises_validation_error() -> None:
    with pytest.raises(ValidationError) as excinfo:
        parse_source_type("Piggy Bank")
    assert excinfo.value.field == "source_type"
    assert excinfo.value.error_code == "ERR_VALIDATION"


def test_names_and_currency_are_normalized() -> None:
    assert require_name("  Main   Checking ") == "Main Checking"
    assert require_currency(" usd ") == "USD"
    assert normalize_counterparty("   ") is None
    with pytest.raises(ValidationError):
        require_name("   ")
    with pytest.raises(ValidationError):
        require_currency("US1")


@pytest.mark.parametrize("value", ["0", "-5", "abc", "NaN", None])
def test_positive_amount_rejects_invalid_values(value) -> None:
    with pytest.raises(ValidationError):
        require_positive_amount(value)


def test_amounts_beyond_storage_range_are_rejected() -> None:
    assert require_amount(MAX_AMOUNT) == MAX_AMOUNT
    assert require_amount(-MAX_AMOUNT) == -MAX_AMOUNT
    for value in (10**18, "1e40", MAX_AMOUNT + Decimal("0.01")):
        with pytest.raises(ValidationError) as excinfo:
            require_positive_amount(value)
        assert excinfo.value.field == "amount"


def test_amounts_round_half_up_to_cents() -> None:
    assert require_positive_amount("10.005") == Decimal("10.01")
    assert to_minor_units(Decimal("-12.34")) == -1234
    assert from_minor_units(1999) == Decimal("19.99")


def test_billing_day_bounds() -> None:
    assert require_billing_day(None) is None
    assert require_billing_day(31) == 31
    with pytest.raises(ValidationError):
        require_billing_day(0)
    with pytest.raises(ValidationError):
        require_billing_day(True)


def test_negative_balance_warning_skips_credit_cards() -> None:
    logger = MagicMock()

    warn_on_negative_balance(SourceType.CREDIT_CARD, Decimal("-1"), logger)
    logger.warning.assert_not_called()

    warn_on_negative_balance(SourceType.CASH, Decimal("-1"), logger)
    logger.warning.assert_called_once()


def test_deletion_policies_refuse_referenced_entities() -> None:
    ensure_source_deletable("s", 0)
    ensure_category_deletable("c", 0)
    ensure_no_repayments("t", 0)

    with pytest.raises(ConflictError) as excinfo:
        ensure_source_deletable("s", 2)
    assert excinfo.value.details == {"source_id": "s", "references": 2}
    assert excinfo.value.retryable is False
    with pytest.raises(ConflictError):
        ensure_category_deletable("c", 1)
    with pytest.raises(ConflictError):
        ensure_no_repayments("t", 1)
