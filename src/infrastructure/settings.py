"""Settings helpers for infrastructure adapters."""

from dataclasses import dataclass
import os

import dotenv

from src.application.use_cases.concurrency import DEFAULT_MAX_RETRIES
from src.infrastructure.logging.logger import get_app_logger


SUPPORTED_BACKENDS = ("sqlalchemy", "memory")


@dataclass(frozen=True)
class LedgerSettings:
    """Settings for selecting and tuning the ledger backend.

    Attributes:
        backend: Backend identifier (sqlalchemy or memory).
        max_retries: Retries allowed when a version check fails.
        owner: Owner used by command-line adapters.
    """

    backend: str = "sqlalchemy"
    max_retries: int = DEFAULT_MAX_RETRIES
    owner: str | None = None

    @classmethod
    def from_env(cls) -> "LedgerSettings":
        """Build settings from environment variables.

        Returns:
            LedgerSettings: Settings sourced from environment variables.
        """
        dotenv.load_dotenv()
        backend = os.getenv("LEDGER_BACKEND", "sqlalchemy").strip().lower()
        max_retries = cls._parse_retries(os.getenv("LEDGER_MAX_RETRIES"))
        owner = (os.getenv("LEDGER_OWNER") or "").strip() or None
        return cls(backend=backend, max_retries=max_retries, owner=owner)

    @staticmethod
    def _parse_retries(raw_value: str | None) -> int:
        """Parse the retry budget, falling back to the default.

        Args:
            raw_value: Raw LEDGER_MAX_RETRIES value.

        Returns:
            int: Non-negative retry count.
        """
        if raw_value is None or not raw_value.strip():
            return DEFAULT_MAX_RETRIES
        try:
            value = int(raw_value)
        except ValueError:
            get_app_logger().warning(
                f"Invalid LEDGER_MAX_RETRIES={raw_value!r}; "
                f"using {DEFAULT_MAX_RETRIES}"
            )
            return DEFAULT_MAX_RETRIES
        return max(value, 0)


__all__ = ["LedgerSettings", "SUPPORTED_BACKENDS"]
