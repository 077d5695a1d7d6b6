"""Generic helpers shared across layers."""

from pathlib import Path
import uuid


def get_project_root() -> Path:
    """Return the repository root directory.

    Returns:
        Path: Directory containing the ``src`` package.
    """
    return Path(__file__).resolve().parents[2]


def new_identifier() -> str:
    """Return a new opaque entity identifier."""
    return uuid.uuid4().hex


__all__ = ["get_project_root", "new_identifier"]
