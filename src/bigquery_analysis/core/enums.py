"""Core enumerations used across the package."""

from __future__ import annotations

from enum import Enum


class RejectionReason(str, Enum):
    """Why the admission pipeline refused to run a query.

    Values are strings to ease serialization and logging.
    """

    MUTATING_STATEMENT = "MUTATING_STATEMENT"
    SIZE_LIMIT_EXCEEDED = "SIZE_LIMIT_EXCEEDED"


__all__ = ["RejectionReason"]
