"""Use case owning single-source transactions.

Every write keeps the affected source balance equal to its initial balance
plus the signed effect of its transactions. Balance changes are applied as
atomic increments; the transaction row itself is rewritten with a version
check and the whole unit of work retried when it loses a race.
"""

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal

from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.application.use_cases.compensation import CompensatingSequence
from src.application.use_cases.concurrency import (
    DEFAULT_MAX_RETRIES,
    OwnerLocks,
    run_with_retries,
)
from src.domain.constants import (
    CATEGORY_RULES,
    OUTSTANDING_TYPES,
    REPAYMENT_TARGETS,
)
from src.domain.errors import ConflictError, NotFoundError, ValidationError
from src.domain.models import (
    TransactionData,
    TransactionRecord,
    TransactionType,
)
from src.domain.policies import ensure_no_repayments
from src.domain.services import (
    balance_delta,
    normalize_counterparty,
    normalize_notes,
    parse_transaction_type,
    require_positive_amount,
    signed_effect,
    warn_on_negative_balance,
)
from src.infrastructure.logging.logger import get_app_logger
from src.utils.utils import new_identifier


@dataclass(frozen=True)
class _ValidatedTransaction:
    date: date
    transaction_type: TransactionType
    source_id: str
    amount: Decimal
    category_id: str | None
    subcategory_id: str | None
    notes: str
    counterparty: str | None
    related_transaction_id: str | None


class TransactionStore:
    """Create, edit, and delete income, expense and debt transactions."""

    def __init__(
        self,
        repository: LedgerRepositoryPort,
        logger=None,
        locks: OwnerLocks | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        """Initialize the use case.

        Args:
            repository: Ledger storage port.
            logger: Optional logger compatible with logging.Logger-like API.
            locks: Owner lock registry shared with the other use cases.
            max_retries: Retries allowed when a version check fails.
        """
        self._repository = repository
        self._logger = logger or get_app_logger()
        self._locks = locks or OwnerLocks()
        self._max_retries = max_retries

    def create_transaction(
        self,
        owner: str,
        data: TransactionData,
    ) -> TransactionRecord:
        """Record a transaction and apply its effect to the source balance.

        Raises:
            ValidationError: If the payload is malformed, is a transfer, or
                a repayment exceeds the outstanding amount.
            NotFoundError: If a referenced entity does not exist.
        """
        with self._locks.hold(owner):
            fields = self._validate(owner, data)
            record = TransactionRecord(
                id=new_identifier(),
                owner=owner,
                date=fields.date,
                transaction_type=fields.transaction_type,
                source_id=fields.source_id,
                amount=fields.amount,
                category_id=fields.category_id,
                subcategory_id=fields.subcategory_id,
                notes=fields.notes,
                counterparty=fields.counterparty,
                related_transaction_id=fields.related_transaction_id,
            )
            effect = signed_effect(record)
            with CompensatingSequence(
                "create_transaction",
                self._logger,
                details={
                    "transaction_id": record.id,
                    "source_id": record.source_id,
                },
            ) as sequence:
                self._repository.insert_transaction(record)
                sequence.record(
                    "delete transaction",
                    lambda: self._repository.delete_transaction(
                        owner,
                        record.id,
                    ),
                )
                source = self._repository.adjust_balance(
                    owner,
                    record.source_id,
                    effect,
                )
        warn_on_negative_balance(
            source.source_type,
            source.current_balance,
            self._logger,
        )
        self._logger.info(
            f"Created {record.transaction_type.value} transaction "
            f"{record.id} on source {record.source_id} for owner={owner}"
        )
        return record

    def update_transaction(
        self,
        owner: str,
        transaction_id: str,
        data: TransactionData,
    ) -> TransactionRecord:
        """Rewrite a transaction and correct the affected balances.

        When the source is unchanged the balance moves by the difference of
        the signed amounts. When the source changes, the old effect is
        reversed on the old source and the new effect applied to the new one.

        Raises:
            ValidationError: If the payload is malformed or the transaction
                is a transfer leg.
            NotFoundError: If the transaction does not exist for the owner.
            ConflictError: If repayments forbid the change, or the row kept
                changing concurrently.
        """

        def attempt() -> TransactionRecord:
            current = self._require_transaction(owner, transaction_id)
            if current.is_transfer_leg:
                raise ValidationError(
                    "Transfer legs are edited through transfer operations",
                    field="transaction_id",
                )
            fields = self._validate(owner, data, current=current)
            self._check_repaid_parent(owner, current, fields)
            updated = replace(
                current,
                date=fields.date,
                transaction_type=fields.transaction_type,
                source_id=fields.source_id,
                amount=fields.amount,
                category_id=fields.category_id,
                subcategory_id=fields.subcategory_id,
                notes=fields.notes,
                counterparty=fields.counterparty,
                related_transaction_id=fields.related_transaction_id,
            )
            old_effect = signed_effect(current)
            new_effect = signed_effect(updated)

            with CompensatingSequence(
                "update_transaction",
                self._logger,
                details={"transaction_id": transaction_id},
            ) as sequence:
                stored = self._repository.update_transaction(
                    updated,
                    expected_version=current.version,
                )
                sequence.record(
                    "restore transaction",
                    lambda: self._restore_transaction(current),
                )
                if current.source_id == updated.source_id:
                    self._adjust(
                        sequence,
                        owner,
                        updated.source_id,
                        balance_delta(
                            current.transaction_type,
                            current.amount,
                            updated.transaction_type,
                            updated.amount,
                        ),
                    )
                else:
                    self._adjust(
                        sequence,
                        owner,
                        current.source_id,
                        -old_effect,
                    )
                    self._adjust(
                        sequence,
                        owner,
                        updated.source_id,
                        new_effect,
                    )
            return stored

        with self._locks.hold(owner):
            stored = run_with_retries(
                attempt,
                description=f"update_transaction {transaction_id}",
                logger=self._logger,
                max_retries=self._max_retries,
            )
        self._logger.info(
            f"Updated transaction {transaction_id} for owner={owner}"
        )
        return stored

    def delete_transaction(self, owner: str, transaction_id: str) -> None:
        """Delete a transaction and reverse its balance effect.

        Raises:
            ValidationError: If the transaction is a transfer leg.
            NotFoundError: If the transaction does not exist for the owner.
            ConflictError: If a lending or borrowing still has repayments.
        """

        def attempt() -> None:
            current = self._require_transaction(owner, transaction_id)
            if current.is_transfer_leg:
                raise ValidationError(
                    "Transfer legs are deleted through transfer operations",
                    field="transaction_id",
                )
            if current.transaction_type in OUTSTANDING_TYPES:
                ensure_no_repayments(
                    transaction_id,
                    len(self._repository.list_repayments(owner, current.id)),
                )
            with CompensatingSequence(
                "delete_transaction",
                self._logger,
                details={"transaction_id": transaction_id},
            ) as sequence:
                if not self._repository.delete_transaction(
                    owner,
                    transaction_id,
                    expected_version=current.version,
                ):
                    self._raise_missing_or_stale(owner, transaction_id)
                sequence.record(
                    "restore transaction",
                    lambda: self._repository.insert_transaction(current),
                )
                self._repository.adjust_balance(
                    owner,
                    current.source_id,
                    -signed_effect(current),
                )

        with self._locks.hold(owner):
            run_with_retries(
                attempt,
                description=f"delete_transaction {transaction_id}",
                logger=self._logger,
                max_retries=self._max_retries,
            )
        self._logger.info(
            f"Deleted transaction {transaction_id} for owner={owner}"
        )

    def get_transaction(
        self,
        owner: str,
        transaction_id: str,
    ) -> TransactionRecord:
        """Return one transaction of the owner."""
        with self._locks.hold(owner):
            return self._require_transaction(owner, transaction_id)

    def list_transactions(
        self,
        owner: str,
        start: date | None = None,
        end: date | None = None,
        source_id: str | None = None,
    ) -> list[TransactionRecord]:
        """Return transactions newest first, optionally filtered.

        Args:
            owner: Owner whose transactions are listed.
            start: Inclusive lower date bound.
            end: Inclusive upper date bound.
            source_id: Only rows recorded on this source.
        """
        with self._locks.hold(owner):
            rows = self._repository.list_transactions(owner)
        filtered = [
            row
            for row in rows
            if (start is None or row.date >= start)
            and (end is None or row.date <= end)
            and (source_id is None or row.source_id == source_id)
        ]
        return sorted(
            filtered,
            key=lambda row: (row.date, row.id),
            reverse=True,
        )

    def _adjust(
        self,
        sequence: CompensatingSequence,
        owner: str,
        source_id: str,
        delta: Decimal,
    ) -> None:
        if delta == 0:
            return
        source = self._repository.adjust_balance(owner, source_id, delta)
        sequence.record(
            f"revert balance of {source_id}",
            lambda: self._repository.adjust_balance(owner, source_id, -delta),
        )
        warn_on_negative_balance(
            source.source_type,
            source.current_balance,
            self._logger,
        )

    def _restore_transaction(self, previous: TransactionRecord) -> None:
        latest = self._require_transaction(previous.owner, previous.id)
        self._repository.update_transaction(
            previous,
            expected_version=latest.version,
        )

    def _raise_missing_or_stale(self, owner: str, transaction_id: str):
        if self._repository.get_transaction(owner, transaction_id) is None:
            raise NotFoundError("Transaction", transaction_id)
        raise ConflictError.stale_version("Transaction", transaction_id)

    def _require_transaction(
        self,
        owner: str,
        transaction_id: str,
    ) -> TransactionRecord:
        record = self._repository.get_transaction(owner, transaction_id)
        if record is None:
            raise NotFoundError("Transaction", transaction_id)
        return record

    def _validate(
        self,
        owner: str,
        data: TransactionData,
        current: TransactionRecord | None = None,
    ) -> _ValidatedTransaction:
        transaction_type = parse_transaction_type(data.transaction_type)
        if transaction_type is TransactionType.TRANSFER:
            raise ValidationError(
                "Transfers are recorded through transfer operations",
                field="transaction_type",
            )
        if not isinstance(data.date, date):
            raise ValidationError("date must be a date", field="date")
        amount = require_positive_amount(data.amount)
        if not data.source_id:
            raise ValidationError("source_id is required", field="source_id")
        if self._repository.get_source(owner, data.source_id) is None:
            raise NotFoundError("Source", data.source_id)
        self._check_categories(
            owner,
            transaction_type,
            data.category_id,
            data.subcategory_id,
        )

        counterparty = normalize_counterparty(data.counterparty)
        related_id = data.related_transaction_id
        if transaction_type in REPAYMENT_TARGETS:
            parent = self._check_repayment(
                owner,
                transaction_type,
                related_id,
                amount,
                current,
            )
            counterparty = counterparty or parent.counterparty
        elif related_id:
            raise ValidationError(
                "Only repayments reference another transaction",
                field="related_transaction_id",
            )
        if transaction_type in OUTSTANDING_TYPES and not counterparty:
            raise ValidationError(
                "counterparty is required for lending and borrowing",
                field="counterparty",
            )
        return _ValidatedTransaction(
            date=data.date,
            transaction_type=transaction_type,
            source_id=data.source_id,
            amount=amount,
            category_id=data.category_id,
            subcategory_id=data.subcategory_id,
            notes=normalize_notes(data.notes),
            counterparty=counterparty,
            related_transaction_id=related_id or None,
        )

    def _check_categories(
        self,
        owner: str,
        transaction_type: TransactionType,
        category_id: str | None,
        subcategory_id: str | None,
    ) -> None:
        rule = CATEGORY_RULES[transaction_type]
        if rule is None:
            if category_id or subcategory_id:
                raise ValidationError(
                    f"{transaction_type.value} transactions take no category",
                    field="category_id",
                )
            return
        expected_type, required = rule
        if not category_id:
            if required:
                raise ValidationError(
                    f"category_id is required for "
                    f"{transaction_type.value} transactions",
                    field="category_id",
                )
            if subcategory_id:
                raise ValidationError(
                    "subcategory_id requires a category_id",
                    field="subcategory_id",
                )
            return
        category = self._repository.get_category(owner, category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        if category.category_type is not expected_type:
            raise ValidationError(
                f"{transaction_type.value} transactions need a "
                f"{expected_type.value} category",
                field="category_id",
            )
        if subcategory_id:
            subcategory = self._repository.get_subcategory(
                owner,
                subcategory_id,
            )
            if subcategory is None:
                raise NotFoundError("SubCategory", subcategory_id)
            if subcategory.category_id != category_id:
                raise ValidationError(
                    "subcategory does not belong to the category",
                    field="subcategory_id",
                )

    def _check_repayment(
        self,
        owner: str,
        transaction_type: TransactionType,
        related_id: str | None,
        amount: Decimal,
        current: TransactionRecord | None,
    ) -> TransactionRecord:
        if not related_id:
            raise ValidationError(
                "Repayments must reference a lending or borrowing",
                field="related_transaction_id",
            )
        parent = self._repository.get_transaction(owner, related_id)
        if parent is None:
            raise NotFoundError("Transaction", related_id)
        expected = REPAYMENT_TARGETS[transaction_type]
        if parent.transaction_type is not expected:
            raise ValidationError(
                f"{transaction_type.value} must reference a "
                f"{expected.value} transaction",
                field="related_transaction_id",
            )
        repaid = sum(
            (
                row.amount
                for row in self._repository.list_repayments(owner, parent.id)
                if current is None or row.id != current.id
            ),
            Decimal("0"),
        )
        outstanding = parent.amount - repaid
        if amount > outstanding:
            raise ValidationError(
                f"Repayment of {amount} exceeds outstanding {outstanding}",
                field="amount",
            )
        return parent

    def _check_repaid_parent(
        self,
        owner: str,
        current: TransactionRecord,
        fields: _ValidatedTransaction,
    ) -> None:
        """Keep a lending or borrowing consistent with its repayments."""
        if current.transaction_type not in OUTSTANDING_TYPES:
            return
        repayments = self._repository.list_repayments(owner, current.id)
        if not repayments:
            return
        if fields.transaction_type is not current.transaction_type:
            raise ConflictError(
                f"Transaction {current.id} has repayments; "
                "its type cannot change",
                details={"transaction_id": current.id},
            )
        repaid = sum((row.amount for row in repayments), Decimal("0"))
        if fields.amount < repaid:
            raise ValidationError(
                f"Amount {fields.amount} is below the {repaid} already repaid",
                field="amount",
            )


__all__ = ["TransactionStore"]
