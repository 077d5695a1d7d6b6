"""Use case coordinating two-sided transfers between sources.

A transfer is stored as two TRANSFER rows sharing one ``transfer_id``: the
debit leg on the origin and the credit leg on the destination. Storage only
offers single-row writes, so each operation is a compensating sequence:
every applied step records its undo, and a failure runs the undos newest
first. Callers therefore see either the whole transfer or none of it.
"""

from dataclasses import replace
from datetime import date

from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.application.use_cases.compensation import CompensatingSequence
from src.application.use_cases.concurrency import (
    DEFAULT_MAX_RETRIES,
    OwnerLocks,
    run_with_retries,
)
from src.domain.errors import ConflictError, NotFoundError, ValidationError
from src.domain.models import (
    TransactionRecord,
    TransactionType,
    TransferChanges,
    TransferData,
    TransferLeg,
    TransferLegs,
)
from src.domain.services import (
    normalize_notes,
    parse_transaction_type,
    require_positive_amount,
    warn_on_negative_balance,
)
from src.infrastructure.logging.logger import get_app_logger
from src.utils.utils import new_identifier


class TransferCoordinator:
    """Create, edit, and delete transfers as single logical operations."""

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

    def create_transfer(self, owner: str, data: TransferData) -> TransferLegs:
        """Move an amount from one source to another.

        Steps, each with its undo: debit the origin balance, credit the
        destination balance, insert the debit leg, insert the credit leg.

        Returns:
            TransferLegs: Both stored legs.

        Raises:
            ValidationError: If the payload is malformed.
            NotFoundError: If either source does not exist for the owner.
            CompensationFailure: If a failure could not be rolled back.
        """
        self._check_transfer_type(data.transaction_type)
        self._check_no_categories(data.category_id, data.subcategory_id)
        if not data.source_id or not data.destination_source_id:
            raise ValidationError(
                "Transfers need a source and a destination",
                field="destination_source_id",
            )
        if data.source_id == data.destination_source_id:
            raise ValidationError(
                "Source and destination must differ",
                field="destination_source_id",
            )
        amount = require_positive_amount(data.amount)
        self._check_date(data.date)
        notes = normalize_notes(data.notes)

        transfer_id = new_identifier()
        debit = TransactionRecord(
            id=new_identifier(),
            owner=owner,
            date=data.date,
            transaction_type=TransactionType.TRANSFER,
            source_id=data.source_id,
            amount=amount,
            notes=notes,
            transfer_id=transfer_id,
            transfer_leg=TransferLeg.DEBIT,
            destination_source_id=data.destination_source_id,
        )
        credit = replace(
            debit,
            id=new_identifier(),
            source_id=data.destination_source_id,
            transfer_leg=TransferLeg.CREDIT,
            destination_source_id=data.source_id,
        )

        with self._locks.hold(owner):
            for source_id in (data.source_id, data.destination_source_id):
                if self._repository.get_source(owner, source_id) is None:
                    raise NotFoundError("Source", source_id)

            with CompensatingSequence(
                "create_transfer",
                self._logger,
                details=self._details(transfer_id, debit, credit),
            ) as sequence:
                self._adjust(sequence, owner, debit.source_id, -amount)
                self._adjust(sequence, owner, credit.source_id, amount)
                self._insert_leg(sequence, owner, debit)
                self._insert_leg(sequence, owner, credit)

        self._logger.info(
            f"Created transfer {transfer_id} of {amount} from "
            f"{debit.source_id} to {credit.source_id} for owner={owner}"
        )
        return TransferLegs(
            transfer_id=transfer_id,
            debit=debit,
            credit=credit,
        )

    def update_transfer(
        self,
        owner: str,
        transfer_id: str,
        changes: TransferChanges,
    ) -> TransferLegs:
        """Change the amount, date or notes of a transfer.

        Both legs are rewritten with a version check and both balances move
        by ``new amount - old amount``; the original amount is never
        applied twice.

        Raises:
            ValidationError: If the change re-points the transfer or is
                otherwise malformed.
            NotFoundError: If the id does not resolve to a transfer.
            ConflictError: If the legs kept changing concurrently.
        """
        if (
            changes.source_id is not None
            or changes.destination_source_id is not None
        ):
            raise ValidationError(
                "Transfer source and destination cannot change; delete the "
                "transfer and create a new one",
                field="source_id",
            )
        if changes.transaction_type is not None:
            self._check_transfer_type(changes.transaction_type)
        self._check_no_categories(changes.category_id, changes.subcategory_id)
        new_amount = None
        if changes.amount is not None:
            new_amount = require_positive_amount(changes.amount)
        if changes.date is not None:
            self._check_date(changes.date)

        def attempt() -> TransferLegs:
            legs = self._load_legs(owner, transfer_id)
            amount = legs.amount if new_amount is None else new_amount
            delta = amount - legs.amount
            fields = {"amount": amount}
            if changes.date is not None:
                fields["date"] = changes.date
            if changes.notes is not None:
                fields["notes"] = normalize_notes(changes.notes)

            with CompensatingSequence(
                "update_transfer",
                self._logger,
                details=self._details(transfer_id, legs.debit, legs.credit),
            ) as sequence:
                debit = self._rewrite_leg(
                    sequence,
                    legs.debit,
                    replace(legs.debit, **fields),
                )
                credit = self._rewrite_leg(
                    sequence,
                    legs.credit,
                    replace(legs.credit, **fields),
                )
                if delta:
                    self._adjust(sequence, owner, debit.source_id, -delta)
                    self._adjust(sequence, owner, credit.source_id, delta)
            return TransferLegs(
                transfer_id=transfer_id,
                debit=debit,
                credit=credit,
            )

        with self._locks.hold(owner):
            legs = run_with_retries(
                attempt,
                description=f"update_transfer {transfer_id}",
                logger=self._logger,
                max_retries=self._max_retries,
            )
        self._logger.info(
            f"Updated transfer {transfer_id} for owner={owner}"
        )
        return legs

    def delete_transfer(self, owner: str, transfer_id: str) -> None:
        """Delete both legs and reverse both balance effects.

        Raises:
            NotFoundError: If the id does not resolve to a transfer, which
                includes a transfer that was already deleted.
        """

        def attempt() -> None:
            legs = self._load_legs(owner, transfer_id)
            with CompensatingSequence(
                "delete_transfer",
                self._logger,
                details=self._details(transfer_id, legs.debit, legs.credit),
            ) as sequence:
                self._delete_leg(sequence, owner, legs.debit)
                self._delete_leg(sequence, owner, legs.credit)
                self._adjust(sequence, owner, legs.source_id, legs.amount)
                self._adjust(
                    sequence,
                    owner,
                    legs.destination_source_id,
                    -legs.amount,
                )

        with self._locks.hold(owner):
            run_with_retries(
                attempt,
                description=f"delete_transfer {transfer_id}",
                logger=self._logger,
                max_retries=self._max_retries,
            )
        self._logger.info(
            f"Deleted transfer {transfer_id} for owner={owner}"
        )

    def get_transfer(self, owner: str, transfer_id: str) -> TransferLegs:
        """Return both legs of a transfer."""
        with self._locks.hold(owner):
            return self._load_legs(owner, transfer_id)

    def _load_legs(self, owner: str, transfer_id: str) -> TransferLegs:
        legs = self._repository.find_transfer_legs(owner, transfer_id)
        by_side = {leg.transfer_leg: leg for leg in legs}
        if len(legs) != 2 or set(by_side) != set(TransferLeg):
            if legs:
                self._logger.error(
                    f"Transfer {transfer_id} has {len(legs)} legs; "
                    "expected one debit and one credit"
                )
            raise NotFoundError("Transfer", transfer_id)
        return TransferLegs(
            transfer_id=transfer_id,
            debit=by_side[TransferLeg.DEBIT],
            credit=by_side[TransferLeg.CREDIT],
        )

    def _adjust(
        self,
        sequence: CompensatingSequence,
        owner: str,
        source_id: str,
        delta,
    ) -> None:
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

    def _insert_leg(
        self,
        sequence: CompensatingSequence,
        owner: str,
        leg: TransactionRecord,
    ) -> None:
        self._repository.insert_transaction(leg)
        sequence.record(
            f"delete {leg.transfer_leg.value} leg {leg.id}",
            lambda: self._repository.delete_transaction(owner, leg.id),
        )

    def _rewrite_leg(
        self,
        sequence: CompensatingSequence,
        current: TransactionRecord,
        updated: TransactionRecord,
    ) -> TransactionRecord:
        stored = self._repository.update_transaction(
            updated,
            expected_version=current.version,
        )
        sequence.record(
            f"restore {current.transfer_leg.value} leg {current.id}",
            lambda: self._repository.update_transaction(
                current,
                expected_version=stored.version,
            ),
        )
        return stored

    def _delete_leg(
        self,
        sequence: CompensatingSequence,
        owner: str,
        leg: TransactionRecord,
    ) -> None:
        if not self._repository.delete_transaction(
            owner,
            leg.id,
            expected_version=leg.version,
        ):
            if self._repository.get_transaction(owner, leg.id) is None:
                raise NotFoundError("Transfer", leg.transfer_id)
            raise ConflictError.stale_version("Transaction", leg.id)
        sequence.record(
            f"restore {leg.transfer_leg.value} leg {leg.id}",
            lambda: self._repository.insert_transaction(leg),
        )

    @staticmethod
    def _check_transfer_type(value) -> None:
        if parse_transaction_type(value) is not TransactionType.TRANSFER:
            raise ValidationError(
                "Transfers must have the Transfer type",
                field="transaction_type",
            )

    @staticmethod
    def _check_no_categories(category_id, subcategory_id) -> None:
        if category_id or subcategory_id:
            raise ValidationError(
                "Transfers take no category",
                field="category_id",
            )

    @staticmethod
    def _check_date(value) -> None:
        if not isinstance(value, date):
            raise ValidationError("date must be a date", field="date")

    @staticmethod
    def _details(
        transfer_id: str,
        debit: TransactionRecord,
        credit: TransactionRecord,
    ) -> dict:
        return {
            "transfer_id": transfer_id,
            "debit_leg_id": debit.id,
            "credit_leg_id": credit.id,
            "source_id": debit.source_id,
            "destination_source_id": credit.source_id,
        }


__all__ = ["TransferCoordinator"]
