"""Tests for the TransferCoordinator use case."""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from src.application.use_cases.ledger_service import LedgerService
from src.domain.errors import (
    BackendUnavailable,
    CompensationFailure,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.domain.models import (
    SourceData,
    TransactionType,
    TransferChanges,
    TransferData,
    TransferLeg,
)
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
    checking = service.create_source(
        OWNER,
        SourceData(
            name="Checking",
            source_type="Bank Account",
            initial_balance=1000,
        ),
    )
    savings = service.create_source(
        OWNER,
        SourceData(
            name="Savings",
            source_type="Bank Account",
            initial_balance=500,
        ),
    )
    return service, repository, logger, checking.id, savings.id


def _balances(service, *source_ids):
    return tuple(
        service.get_source(OWNER, source_id).current_balance
        for source_id in source_ids
    )


def _transfer(origin, destination, amount=200) -> TransferData:
    return TransferData(
        source_id=origin,
        destination_source_id=destination,
        amount=amount,
        date=date(2025, 3, 14),
        notes="Monthly savings",
    )


def test_create_update_delete_round_trip() -> None:
    service, repository, _, checking, savings = _build_ledger()

    legs = service.create_transfer(OWNER, _transfer(checking, savings))

    assert _balances(service, checking, savings) == (
        Decimal("800"),
        Decimal("700"),
    )
    assert legs.debit.transfer_id == legs.credit.transfer_id
    assert legs.debit.transfer_leg is TransferLeg.DEBIT
    assert legs.debit.source_id == checking
    assert legs.debit.destination_source_id == savings
    assert legs.credit.source_id == savings
    assert legs.credit.transaction_type is TransactionType.TRANSFER
    assert len(repository.find_transfer_legs(OWNER, legs.transfer_id)) == 2

    updated = service.update_transfer(
        OWNER,
        legs.transfer_id,
        TransferChanges(amount=300),
    )

    assert updated.amount == Decimal("300")
    assert updated.credit.amount == Decimal("300")
    assert updated.debit.notes == "Monthly savings"
    assert _balances(service, checking, savings) == (
        Decimal("700"),
        Decimal("800"),
    )

    service.delete_transfer(OWNER, legs.transfer_id)

    assert _balances(service, checking, savings) == (
        Decimal("1000"),
        Decimal("500"),
    )
    assert repository.list_transactions(OWNER) == []
    with pytest.raises(NotFoundError):
        service.delete_transfer(OWNER, legs.transfer_id)


def test_update_without_amount_keeps_balances() -> None:
    service, _, _, checking, savings = _build_ledger()
    legs = service.create_transfer(OWNER, _transfer(checking, savings))

    updated = service.update_transfer(
        OWNER,
        legs.transfer_id,
        TransferChanges(date=date(2025, 4, 1), notes="Moved"),
    )

    assert updated.debit.date == date(2025, 4, 1)
    assert updated.credit.notes == "Moved"
    assert _balances(service, checking, savings) == (
        Decimal("800"),
        Decimal("700"),
    )


def test_failed_credit_leg_rolls_back_everything() -> None:
    service, repository, logger, checking, savings = _build_ledger()
    insert = repository.insert_transaction

    def failing_insert(record):
        if record.transfer_leg is TransferLeg.CREDIT:
            raise BackendUnavailable("write timed out")
        return insert(record)

    repository.insert_transaction = failing_insert

    with pytest.raises(BackendUnavailable, match="write timed out"):
        service.create_transfer(OWNER, _transfer(checking, savings))

    assert _balances(service, checking, savings) == (
        Decimal("1000"),
        Decimal("500"),
    )
    assert repository.list_transactions(OWNER) == []
    logger.warning.assert_called()


def test_failed_undo_raises_compensation_failure() -> None:
    service, repository, logger, checking, savings = _build_ledger()
    adjust = repository.adjust_balance
    calls = []

    def flaky_adjust(owner, source_id, delta):
        calls.append(delta)
        if len(calls) == 3:
            raise BackendUnavailable("connection reset")
        return adjust(owner, source_id, delta)

    repository.adjust_balance = flaky_adjust
    repository.insert_transaction = MagicMock(
        side_effect=BackendUnavailable("disk full")
    )

    with pytest.raises(CompensationFailure) as excinfo:
        service.create_transfer(OWNER, _transfer(checking, savings))

    error = excinfo.value
    assert str(error.original_error) == "disk full"
    assert error.details["source_id"] == checking
    assert error.details["destination_source_id"] == savings
    assert error.details["transfer_id"]
    assert error.error_code == "ERR_COMPENSATION"
    logger.critical.assert_called_once()


def test_stale_leg_version_is_retried() -> None:
    service, repository, logger, checking, savings = _build_ledger()
    legs = service.create_transfer(OWNER, _transfer(checking, savings))
    update = repository.update_transaction
    calls = []

    def racing_update(record, expected_version):
        calls.append(record.id)
        if len(calls) == 1:
            raise ConflictError.stale_version("Transaction", record.id)
        return update(record, expected_version)

    repository.update_transaction = racing_update

    service.update_transfer(
        OWNER,
        legs.transfer_id,
        TransferChanges(amount=250),
    )

    assert len(calls) == 3
    assert _balances(service, checking, savings) == (
        Decimal("750"),
        Decimal("750"),
    )
    logger.warning.assert_called()


def test_retries_are_bounded() -> None:
    service, repository, _, checking, savings = _build_ledger()
    legs = service.create_transfer(OWNER, _transfer(checking, savings))
    repository.update_transaction = MagicMock(
        side_effect=ConflictError.stale_version("Transaction", "leg")
    )

    with pytest.raises(ConflictError) as excinfo:
        service.update_transfer(
            OWNER,
            legs.transfer_id,
            TransferChanges(amount=250),
        )

    assert excinfo.value.retryable is True
    assert repository.update_transaction.call_count == 4
    assert _balances(service, checking, savings) == (
        Decimal("800"),
        Decimal("700"),
    )


@pytest.mark.parametrize(
    "changes",
    [
        TransferChanges(destination_source_id="other"),
        TransferChanges(source_id="other"),
        TransferChanges(category_id="cat-1"),
        TransferChanges(transaction_type="Expense"),
        TransferChanges(amount=0),
    ],
)
def test_invalid_changes_are_rejected(changes) -> None:
    service, _, _, checking, savings = _build_ledger()
    legs = service.create_transfer(OWNER, _transfer(checking, savings))

    with pytest.raises(ValidationError):
        service.update_transfer(OWNER, legs.transfer_id, changes)

    assert service.get_transfer(OWNER, legs.transfer_id).amount == Decimal(
        "200"
    )


def test_invalid_transfers_write_nothing() -> None:
    service, repository, _, checking, savings = _build_ledger()

    with pytest.raises(ValidationError):
        service.create_transfer(OWNER, _transfer(checking, checking))
    with pytest.raises(ValidationError):
        service.create_transfer(OWNER, _transfer(checking, savings, -5))
    with pytest.raises(NotFoundError):
        service.create_transfer(OWNER, _transfer(checking, "missing"))

    assert repository.list_transactions(OWNER) == []
    assert _balances(service, checking, savings) == (
        Decimal("1000"),
        Decimal("500"),
    )


def test_transfer_legs_are_hidden_from_transaction_store() -> None:
    service, _, _, checking, savings = _build_ledger()
    legs = service.create_transfer(OWNER, _transfer(checking, savings))

    with pytest.raises(ValidationError):
        service.delete_transaction(OWNER, legs.debit.id)

    assert service.get_transfer(OWNER, legs.transfer_id).amount == Decimal(
        "200"
    )


def test_other_owner_cannot_see_transfer() -> None:
    service, _, _, checking, savings = _build_ledger()
    legs = service.create_transfer(OWNER, _transfer(checking, savings))

    with pytest.raises(NotFoundError):
        service.get_transfer("mallory", legs.transfer_id)
    with pytest.raises(NotFoundError):
        service.delete_transfer("mallory", legs.transfer_id)
