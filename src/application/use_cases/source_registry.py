"""Use case owning money sources and their credit card extension.

A source of type CREDIT_CARD always has exactly one CreditCardDetails row
and no other source has one. The two rows are written separately, so every
write that touches both registers compensating actions.
"""

from dataclasses import dataclass, replace
from decimal import Decimal

from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.application.use_cases.compensation import CompensatingSequence
from src.application.use_cases.concurrency import (
    DEFAULT_MAX_RETRIES,
    OwnerLocks,
    run_with_retries,
)
from src.domain.errors import NotFoundError
from src.domain.models import (
    CreditCardDetails,
    SourceData,
    SourceRecord,
    SourceType,
    SourceView,
)
from src.domain.policies import ensure_source_deletable
from src.domain.services import (
    normalize_notes,
    parse_source_type,
    require_amount,
    require_billing_day,
    require_currency,
    require_name,
    require_non_negative_amount,
)
from src.infrastructure.logging.logger import get_app_logger
from src.utils.utils import new_identifier


@dataclass(frozen=True)
class _ValidatedSource:
    name: str
    source_type: SourceType
    currency: str
    initial_balance: Decimal
    notes: str


class SourceRegistry:
    """Create, edit, and delete sources for an owner."""

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

    def create_source(self, owner: str, data: SourceData) -> SourceView:
        """Create a source, plus its credit card details for cards.

        The current balance starts at the initial balance. When the details
        write fails the source row is deleted again before the error is
        raised.

        Returns:
            SourceView: The stored source joined with its details.

        Raises:
            ValidationError: If the payload is malformed.
            CompensationFailure: If the source could not be removed after
                the details write failed.
        """
        fields = self._validate(data)
        record = SourceRecord(
            id=new_identifier(),
            owner=owner,
            name=fields.name,
            source_type=fields.source_type,
            currency=fields.currency,
            initial_balance=fields.initial_balance,
            current_balance=fields.initial_balance,
            notes=fields.notes,
        )
        details = None
        if fields.source_type is SourceType.CREDIT_CARD:
            details = self._card_details(record.id, data, previous=None)

        with self._locks.hold(owner):
            with CompensatingSequence(
                "create_source",
                self._logger,
                details={"source_id": record.id},
            ) as sequence:
                stored = self._repository.insert_source(record)
                sequence.record(
                    "delete source",
                    lambda: self._repository.delete_source(owner, record.id),
                )
                if details is not None:
                    details = self._repository.insert_credit_card_details(
                        owner,
                        details,
                    )
        self._logger.info(
            f"Created source {stored.id} ({stored.source_type.value}) "
            f"for owner={owner}"
        )
        return SourceView.from_parts(stored, details)

    def update_source(
        self,
        owner: str,
        source_id: str,
        data: SourceData,
    ) -> SourceView:
        """Edit a source's name, type, currency, notes and card details.

        Balances are never changed here. Switching to CREDIT_CARD creates
        the details row, switching away deletes it.

        Raises:
            ValidationError: If the payload is malformed.
            NotFoundError: If the source does not exist for the owner.
            ConflictError: If the row kept changing concurrently.
        """
        fields = self._validate(data)

        def attempt() -> SourceView:
            current = self._require_source(owner, source_id)
            previous = self._repository.get_credit_card_details(
                owner,
                source_id,
            )
            details = None
            if fields.source_type is SourceType.CREDIT_CARD:
                details = self._card_details(source_id, data, previous)

            with CompensatingSequence(
                "update_source",
                self._logger,
                details={"source_id": source_id},
            ) as sequence:
                updated = self._repository.update_source(
                    replace(
                        current,
                        name=fields.name,
                        source_type=fields.source_type,
                        currency=fields.currency,
                        notes=fields.notes,
                    ),
                    expected_version=current.version,
                )
                sequence.record(
                    "restore source",
                    lambda: self._restore_source(current),
                )
                if details is not None:
                    details = self._repository.upsert_credit_card_details(
                        owner,
                        details,
                    )
                    sequence.record(
                        "restore card details",
                        lambda: self._restore_details(
                            owner,
                            source_id,
                            previous,
                        ),
                    )
                elif previous is not None:
                    self._repository.delete_credit_card_details(
                        owner,
                        source_id,
                    )
                    sequence.record(
                        "restore card details",
                        lambda: self._restore_details(
                            owner,
                            source_id,
                            previous,
                        ),
                    )
            return SourceView.from_parts(updated, details)

        with self._locks.hold(owner):
            view = run_with_retries(
                attempt,
                description=f"update_source {source_id}",
                logger=self._logger,
                max_retries=self._max_retries,
            )
        self._logger.info(f"Updated source {source_id} for owner={owner}")
        return view

    def delete_source(self, owner: str, source_id: str) -> None:
        """Delete a source that has no transaction history.

        Credit card details are removed before the source row.

        Raises:
            NotFoundError: If the source does not exist for the owner.
            ConflictError: If any transaction or transfer leg references it.
        """
        with self._locks.hold(owner):
            self._require_source(owner, source_id)
            ensure_source_deletable(
                source_id,
                self._repository.count_source_references(owner, source_id),
            )
            details = self._repository.get_credit_card_details(
                owner,
                source_id,
            )
            with CompensatingSequence(
                "delete_source",
                self._logger,
                details={"source_id": source_id},
            ) as sequence:
                if details is not None:
                    self._repository.delete_credit_card_details(
                        owner,
                        source_id,
                    )
                    sequence.record(
                        "restore card details",
                        lambda: self._repository.insert_credit_card_details(
                            owner,
                            details,
                        ),
                    )
                if not self._repository.delete_source(owner, source_id):
                    raise NotFoundError("Source", source_id)
        self._logger.info(f"Deleted source {source_id} for owner={owner}")

    def get_source(self, owner: str, source_id: str) -> SourceView:
        """Return one source joined with its card details."""
        with self._locks.hold(owner):
            record = self._require_source(owner, source_id)
            details = self._repository.get_credit_card_details(
                owner,
                source_id,
            )
        return SourceView.from_parts(record, details)

    def list_sources(self, owner: str) -> list[SourceView]:
        """Return every source of the owner ordered by name."""
        with self._locks.hold(owner):
            records = self._repository.list_sources(owner)
            cards = {
                details.source_id: details
                for details in self._repository.list_credit_card_details(
                    owner
                )
            }
        views = [
            SourceView.from_parts(record, cards.get(record.id))
            for record in records
        ]
        return sorted(views, key=lambda view: (view.name.lower(), view.id))

    def _require_source(self, owner: str, source_id: str) -> SourceRecord:
        record = self._repository.get_source(owner, source_id)
        if record is None:
            raise NotFoundError("Source", source_id)
        return record

    def _restore_source(self, previous: SourceRecord) -> None:
        latest = self._require_source(previous.owner, previous.id)
        self._repository.update_source(
            replace(
                latest,
                name=previous.name,
                source_type=previous.source_type,
                currency=previous.currency,
                notes=previous.notes,
            ),
            expected_version=latest.version,
        )

    def _restore_details(
        self,
        owner: str,
        source_id: str,
        previous: CreditCardDetails | None,
    ) -> None:
        if previous is None:
            self._repository.delete_credit_card_details(owner, source_id)
        else:
            self._repository.upsert_credit_card_details(owner, previous)

    @staticmethod
    def _validate(data: SourceData) -> _ValidatedSource:
        return _ValidatedSource(
            name=require_name(data.name),
            source_type=parse_source_type(data.source_type),
            currency=require_currency(data.currency),
            initial_balance=require_amount(
                data.initial_balance,
                field="initial_balance",
            ),
            notes=normalize_notes(data.notes),
        )

    @staticmethod
    def _card_details(
        source_id: str,
        data: SourceData,
        previous: CreditCardDetails | None,
    ) -> CreditCardDetails:
        """Build card details, keeping stored values for omitted fields."""
        credit_limit = data.credit_limit
        interest_rate = data.interest_rate
        billing_day = data.billing_cycle_start_day
        if previous is not None:
            if credit_limit is None:
                credit_limit = previous.credit_limit
            if interest_rate is None:
                interest_rate = previous.interest_rate
            if billing_day is None:
                billing_day = previous.billing_cycle_start_day
        return CreditCardDetails(
            source_id=source_id,
            credit_limit=require_non_negative_amount(
                credit_limit,
                field="credit_limit",
            ),
            interest_rate=(
                require_non_negative_amount(
                    interest_rate,
                    field="interest_rate",
                )
                if interest_rate is not None
                else Decimal("0.00")
            ),
            billing_cycle_start_day=require_billing_day(billing_day),
        )


__all__ = ["SourceRegistry"]
