"""Per-owner serialization and optimistic-conflict retries."""

from contextlib import contextmanager
import threading
from typing import Callable, Iterator, TypeVar

from src.domain.errors import ConflictError

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3


class OwnerLocks:
    """Registry of re-entrant locks, one per owner.

    Mutations and aggregate reads of one owner run under the same lock, so
    readers in this process never observe a half-applied multi-step write.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def for_owner(self, owner: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(owner)
            if lock is None:
                lock = threading.RLock()
                self._locks[owner] = lock
            return lock

    @contextmanager
    def hold(self, owner: str) -> Iterator[None]:
        with self.for_owner(owner):
            yield


def run_with_retries(
    operation: Callable[[], T],
    *,
    description: str,
    logger,
    max_retries: int = DEFAULT_MAX_RETRIES,
) -> T:
    """Run a unit of work, retrying it when it loses a version race.

    Args:
        operation: Callable performing the whole unit of work.
        description: Name used in log messages.
        logger: Logger used for retry warnings.
        max_retries: Retries allowed after the first attempt.

    Returns:
        T: Result of the first successful attempt.

    Raises:
        ConflictError: If the last attempt still conflicts, or the conflict
            is not retryable.
    """
    attempt = 0
    while True:
        try:
            return operation()
        except ConflictError as exc:
            if not exc.retryable or attempt >= max_retries:
                raise
            attempt += 1
            logger.warning(
                f"{description} conflicted ({exc.message}); "
                f"retry {attempt}/{max_retries}"
            )


__all__ = ["DEFAULT_MAX_RETRIES", "OwnerLocks", "run_with_retries"]
