"""Error taxonomy for ledger operations.

Every error carries a stable ``error_code`` and a ``details`` mapping so that
callers (UI layers, CLIs) can react without parsing messages.
"""

from typing import Any, Dict


class LedgerError(Exception):
    """Base ledger exception."""

    def __init__(
        self,
        message: str,
        error_code: str,
        details: Dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(LedgerError):
    """Raised when input is malformed; nothing has been written."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            error_code="ERR_VALIDATION",
            details=details,
        )
        self.field = field


class NotFoundError(LedgerError):
    """Raised when an entity is absent or owned by someone else."""

    def __init__(self, resource: str, resource_id: Any = None) -> None:
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND",
            details={"resource": resource, "id": resource_id},
        )
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(LedgerError):
    """Raised when an operation would break an invariant or loses a race."""

    def __init__(
        self,
        message: str,
        details: Dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(
            message=message,
            error_code="ERR_CONFLICT",
            details=details,
        )
        self.retryable = retryable

    @classmethod
    def stale_version(cls, resource: str, resource_id: str) -> "ConflictError":
        """Build the error raised when a compare-and-swap write misses."""
        return cls(
            f"{resource} {resource_id} was modified concurrently",
            details={"resource": resource, "id": resource_id},
            retryable=True,
        )


class CompensationFailure(LedgerError):
    """Raised when undoing a partially applied operation also failed.

    The entities named in ``details`` need manual reconciliation.
    """

    def __init__(
        self,
        operation: str,
        original_error: BaseException,
        compensation_errors: list[BaseException],
        details: Dict[str, Any] | None = None,
    ) -> None:
        payload = dict(details or {})
        payload["operation"] = operation
        payload["original_error"] = str(original_error)
        payload["compensation_errors"] = [
            str(error) for error in compensation_errors
        ]
        super().__init__(
            message=(
                f"{operation} failed and could not be rolled back; "
                "manual reconciliation required"
            ),
            error_code="ERR_COMPENSATION",
            details=payload,
        )
        self.operation = operation
        self.original_error = original_error
        self.compensation_errors = compensation_errors


class BackendUnavailable(LedgerError):
    """Raised when the storage backend cannot be reached."""

    def __init__(self, message: str = "Ledger storage is unavailable") -> None:
        super().__init__(
            message=message,
            error_code="ERR_BACKEND_UNAVAILABLE",
        )


__all__ = [
    "LedgerError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "CompensationFailure",
    "BackendUnavailable",
]
