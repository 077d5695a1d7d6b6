"""Compensating action sequences for multi-step ledger writes.

Storage writes are single-row and independently committed, so an operation
that spans several rows records an undo action after each applied step.
When a later step raises, the recorded undos run newest first and the
original error is re-raised. If an undo fails as well, the ledger is left
inconsistent and ``CompensationFailure`` is raised instead.
"""

from typing import Any, Callable

from src.domain.errors import CompensationFailure
from src.infrastructure.logging.logger import get_app_logger


class CompensatingSequence:
    """Context manager collecting undo actions for applied steps.

    Example:
        with CompensatingSequence("create_transfer", logger) as sequence:
            repository.adjust_balance(owner, origin, -amount)
            sequence.record(
                "restore origin balance",
                lambda: repository.adjust_balance(owner, origin, amount),
            )
    """

    def __init__(
        self,
        operation: str,
        logger=None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the sequence.

        Args:
            operation: Name of the logical operation, used in logs/errors.
            logger: Optional logger compatible with logging.Logger-like API.
            details: Identifiers attached to a CompensationFailure.
        """
        self._operation = operation
        self._logger = logger or get_app_logger()
        self._details = dict(details or {})
        self._steps: list[tuple[str, Callable[[], Any]]] = []

    def record(self, description: str, undo: Callable[[], Any]) -> None:
        """Register the undo action of a step that has been applied."""
        self._steps.append((description, undo))

    def __enter__(self) -> "CompensatingSequence":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc is None or not isinstance(exc, Exception):
            return False
        failures = self._compensate(exc)
        if failures:
            raise CompensationFailure(
                self._operation,
                exc,
                failures,
                details=self._details,
            ) from exc
        if self._steps:
            self._logger.warning(
                f"{self._operation} rolled back {len(self._steps)} steps "
                f"after error: {exc}"
            )
        return False

    def _compensate(self, error: Exception) -> list[Exception]:
        failures: list[Exception] = []
        for description, undo in reversed(self._steps):
            try:
                undo()
            except Exception as undo_error:
                failures.append(undo_error)
                self._logger.critical(
                    f"{self._operation}: undo '{description}' failed "
                    f"after {type(error).__name__}: {undo_error}; "
                    f"details={self._details}"
                )
        return failures


__all__ = ["CompensatingSequence"]
