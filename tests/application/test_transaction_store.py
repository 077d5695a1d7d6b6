"""Tests for the TransactionStore use case."""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from src.application.use_cases.ledger_service import LedgerService
from src.domain.errors import (
    BackendUnavailable,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.domain.models import SourceData, TransactionData, TransactionType
from src.infrastructure.memory_ledger_repository import (
    InMemoryLedgerRepository,
)

OWNER = "alice"


def _build_ledger():
    repository = InMemoryLedgerRepository()
    logger = MagicMock()
    service = LedgerService(
        repository,
        logger=logger,
        usage_logger=MagicMock(),
    )
    bank = service.create_source(
        OWNER,
        SourceData(
            name="Bank",
            source_type="Bank Account",
            initial_balance=1000,
        ),
    )
    cash = service.create_source(
        OWNER,
        SourceData(name="Cash", source_type="Cash", initial_balance=50),
    )
    groceries = service.create_category(OWNER, "Groceries", "expense")
    salary = service.create_category(OWNER, "Salary", "income")
    return service, repository, logger, bank.id, cash.id, groceries, salary


def _balance(service, source_id) -> Decimal:
    return service.get_source(OWNER, source_id).current_balance


def _expense(source_id, category_id, amount, **extra) -> TransactionData:
    return TransactionData(
        date=extra.pop("date", date(2025, 6, 1)),
        transaction_type=extra.pop("transaction_type", "Expense"),
        source_id=source_id,
        amount=amount,
        category_id=category_id,
        **extra,
    )


def test_income_and_expense_move_balance() -> None:
    service, _, _, bank, _, groceries, salary = _build_ledger()

    service.create_transaction(
        OWNER,
        _expense(bank, salary.id, 2500, transaction_type="Income"),
    )
    expense = service.create_transaction(
        OWNER,
        _expense(bank, groceries.id, "120.50"),
    )

    assert expense.amount == Decimal("120.50")
    assert _balance(service, bank) == Decimal("3379.50")


def test_update_applies_only_the_difference() -> None:
    service, _, _, bank, _, groceries, salary = _build_ledger()
    expense = service.create_transaction(
        OWNER,
        _expense(bank, groceries.id, 100),
    )

    service.update_transaction(
        OWNER,
        expense.id,
        _expense(bank, groceries.id, 130),
    )
    assert _balance(service, bank) == Decimal("870")

    service.update_transaction(
        OWNER,
        expense.id,
        _expense(bank, salary.id, 130, transaction_type="Income"),
    )
    assert _balance(service, bank) == Decimal("1130")


def test_moving_transaction_between_sources() -> None:
    service, _, _, bank, cash, groceries, _ = _build_ledger()
    expense = service.create_transaction(
        OWNER,
        _expense(bank, groceries.id, 40),
    )

    updated = service.update_transaction(
        OWNER,
        expense.id,
        _expense(cash, groceries.id, 30),
    )

    assert updated.source_id == cash
    assert _balance(service, bank) == Decimal("1000")
    assert _balance(service, cash) == Decimal("20")


def test_delete_reverses_effect() -> None:
    service, repository, _, bank, _, groceries, _ = _build_ledger()
    expense = service.create_transaction(
        OWNER,
        _expense(bank, groceries.id, 75),
    )

    service.delete_transaction(OWNER, expense.id)

    assert _balance(service, bank) == Decimal("1000")
    assert repository.list_transactions(OWNER) == []
    with pytest.raises(NotFoundError):
        service.delete_transaction(OWNER, expense.id)


def test_failed_balance_write_removes_new_row() -> None:
    service, repository, logger, bank, _, groceries, _ = _build_ledger()
    repository.adjust_balance = MagicMock(side_effect=BackendUnavailable())

    with pytest.raises(BackendUnavailable):
        service.create_transaction(OWNER, _expense(bank, groceries.id, 10))

    assert repository.list_transactions(OWNER) == []
    logger.warning.assert_called()


def test_overdraft_is_allowed_with_warning() -> None:
    service, _, logger, _, cash, groceries, _ = _build_ledger()

    service.create_transaction(OWNER, _expense(cash, groceries.id, 80))

    assert _balance(service, cash) == Decimal("-30")
    assert any(
        "negative" in call.args[0]
        for call in logger.warning.call_args_list
    )


@pytest.mark.parametrize(
    "overrides",
    [
        {"transaction_type": "Transfer", "category_id": None},
        {"amount": 0},
        {"amount": "-3"},
        {"date": "2025-06-01"},
        {"category_id": None},
        {"transaction_type": "Income"},
        {"related_transaction_id": "txn-1"},
        {"transaction_type": "Lend", "category_id": None},
    ],
)
def test_invalid_transactions_write_nothing(overrides) -> None:
    service, repository, _, bank, _, groceries, _ = _build_ledger()
    fields = {
        "date": date(2025, 6, 1),
        "transaction_type": "Expense",
        "source_id": bank,
        "amount": 10,
        "category_id": groceries.id,
    }
    fields.update(overrides)

    with pytest.raises(ValidationError):
        service.create_transaction(OWNER, TransactionData(**fields))

    assert repository.list_transactions(OWNER) == []
    assert _balance(service, bank) == Decimal("1000")


def test_unknown_references_raise_not_found() -> None:
    service, _, _, bank, _, groceries, _ = _build_ledger()

    with pytest.raises(NotFoundError):
        service.create_transaction(
            OWNER,
            _expense("missing", groceries.id, 5),
        )
    with pytest.raises(NotFoundError):
        service.create_transaction(OWNER, _expense(bank, "missing", 5))
    with pytest.raises(NotFoundError):
        service.create_transaction(
            OWNER,
            _expense(bank, groceries.id, 5, subcategory_id="missing"),
        )


def test_subcategory_must_belong_to_category() -> None:
    service, _, _, bank, _, groceries, _ = _build_ledger()
    dining = service.create_category(OWNER, "Dining", "expense")
    lunch = service.create_subcategory(OWNER, dining.id, "Lunch")

    with pytest.raises(ValidationError):
        service.create_transaction(
            OWNER,
            _expense(bank, groceries.id, 5, subcategory_id=lunch.id),
        )


def test_repayments_settle_lending() -> None:
    service, _, _, bank, _, _, _ = _build_ledger()
    lend = service.create_transaction(
        OWNER,
        _expense(
            bank,
            None,
            300,
            transaction_type=TransactionType.LEND,
            counterparty=" Bob ",
        ),
    )
    repayment = service.create_transaction(
        OWNER,
        _expense(
            bank,
            None,
            100,
            transaction_type=TransactionType.REPAYMENT_RECEIVED,
            related_transaction_id=lend.id,
        ),
    )

    assert repayment.counterparty == "Bob"
    assert _balance(service, bank) == Decimal("800")
    (entry,) = service.lending_outstanding(OWNER)
    assert entry.outstanding_balance == Decimal("200")

    with pytest.raises(ValidationError):
        service.create_transaction(
            OWNER,
            _expense(
                bank,
                None,
                250,
                transaction_type=TransactionType.REPAYMENT_RECEIVED,
                related_transaction_id=lend.id,
            ),
        )
    with pytest.raises(ValidationError):
        service.create_transaction(
            OWNER,
            _expense(
                bank,
                None,
                10,
                transaction_type=TransactionType.REPAYMENT_MADE,
                related_transaction_id=lend.id,
            ),
        )

    service.update_transaction(
        OWNER,
        repayment.id,
        _expense(
            bank,
            None,
            300,
            transaction_type=TransactionType.REPAYMENT_RECEIVED,
            related_transaction_id=lend.id,
        ),
    )
    (entry,) = service.lending_outstanding(OWNER)
    assert entry.outstanding_balance == Decimal("0")


def test_lending_with_repayments_is_protected() -> None:
    service, _, _, bank, _, _, _ = _build_ledger()
    borrow = service.create_transaction(
        OWNER,
        _expense(
            bank,
            None,
            500,
            transaction_type=TransactionType.BORROW,
            counterparty="Bank of Mom",
        ),
    )
    service.create_transaction(
        OWNER,
        _expense(
            bank,
            None,
            200,
            transaction_type=TransactionType.REPAYMENT_MADE,
            related_transaction_id=borrow.id,
        ),
    )

    with pytest.raises(ConflictError):
        service.delete_transaction(OWNER, borrow.id)
    with pytest.raises(ConflictError):
        service.update_transaction(
            OWNER,
            borrow.id,
            _expense(
                bank,
                None,
                500,
                transaction_type=TransactionType.LEND,
                counterparty="Bank of Mom",
            ),
        )
    with pytest.raises(ValidationError):
        service.update_transaction(
            OWNER,
            borrow.id,
            _expense(
                bank,
                None,
                150,
                transaction_type=TransactionType.BORROW,
                counterparty="Bank of Mom",
            ),
        )
    assert _balance(service, bank) == Decimal("1300")


def test_list_transactions_newest_first_with_filters() -> None:
    service, _, _, bank, cash, groceries, _ = _build_ledger()
    for day, source_id in ((3, bank), (1, bank), (2, cash)):
        service.create_transaction(
            OWNER,
            _expense(source_id, groceries.id, 1, date=date(2025, 6, day)),
        )

    rows = service.list_transactions(OWNER)
    assert [row.date.day for row in rows] == [3, 2, 1]

    filtered = service.list_transactions(
        OWNER,
        start=date(2025, 6, 2),
        source_id=bank,
    )
    assert [row.date.day for row in filtered] == [3]


def test_other_owner_cannot_touch_transaction() -> None:
    service, _, _, bank, _, groceries, _ = _build_ledger()
    expense = service.create_transaction(
        OWNER,
        _expense(bank, groceries.id, 10),
    )

    with pytest.raises(NotFoundError):
        service.get_transaction("mallory", expense.id)
    with pytest.raises(NotFoundError):
        service.delete_transaction("mallory", expense.id)
    with pytest.raises(NotFoundError):
        service.create_transaction("mallory", _expense(bank, None, 10))
