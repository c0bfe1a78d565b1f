"""Admission data models.

This module defines the data structures that flow through the pipeline:
- StatementClassification: Result of classifying a query's statement kind
- CostEstimate: Exact dry-run byte count and its comparison to the limit
- ExecutionOutcome: Terminal result of a request, one of Rejected,
  DryRunReport, Executed or Failed
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from bigquery_analysis.core.enums import RejectionReason
from .config import is_within_limit


def _check_byte_count(value: Any, name: str = "bytes_processed") -> None:
    # bool is an int subclass and never a valid byte count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


@dataclass(frozen=True)
class StatementClassification:
    """Result of classifying a query as mutating or read-only.

    Attributes:
        is_mutating: True if a mutating/administrative construct was found.
        matched_pattern_label: Label of the first matching construct
            (e.g. "INSERT INTO"). Present if and only if is_mutating.

    Examples:
        >>> StatementClassification(is_mutating=True, matched_pattern_label="UPDATE")
        >>> StatementClassification(is_mutating=False)
    """

    is_mutating: bool
    matched_pattern_label: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate field constraints."""
        if self.is_mutating and not self.matched_pattern_label:
            raise ValueError("is_mutating=True requires matched_pattern_label")
        if not self.is_mutating and self.matched_pattern_label is not None:
            raise ValueError("is_mutating=False forbids matched_pattern_label")

    @property
    def message(self) -> Optional[str]:
        """Rejection message naming the detected construct, if any."""
        if not self.is_mutating:
            return None
        return (
            f"DML statement detected: {self.matched_pattern_label}. "
            "Only SELECT queries are allowed."
        )


@dataclass(frozen=True)
class CostEstimate:
    """Exact byte estimate produced by a dry run.

    Attributes:
        bytes_processed: Bytes the query would scan.
        within_limit: True if bytes_processed is strictly below the size limit.
    """

    bytes_processed: int
    within_limit: bool

    def __post_init__(self) -> None:
        """Validate field constraints."""
        _check_byte_count(self.bytes_processed)
        if self.within_limit != is_within_limit(self.bytes_processed):
            raise ValueError("within_limit does not match bytes_processed")

    @classmethod
    def from_bytes(cls, bytes_processed: int) -> "CostEstimate":
        """Build an estimate, deriving within_limit by exact comparison."""
        _check_byte_count(bytes_processed)
        return cls(
            bytes_processed=bytes_processed,
            within_limit=is_within_limit(bytes_processed),
        )


class ExecutionOutcome:
    """Base class for the terminal result of a request.

    Exactly one subclass instance is built per request. Consumers must
    handle every subclass; see `outcome_to_payload` in admission/payloads.py.
    """

    __slots__ = ()

    @property
    def succeeded(self) -> bool:
        return False


@dataclass(frozen=True)
class Rejected(ExecutionOutcome):
    """The pipeline refused to run the query.

    Attributes:
        reason: Which admission gate refused it.
        detail: Human-readable explanation.
        bytes_processed: Measured estimate (size rejections only).
    """

    reason: RejectionReason
    detail: str
    bytes_processed: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate field constraints."""
        if self.reason == RejectionReason.SIZE_LIMIT_EXCEEDED:
            if self.bytes_processed is None:
                raise ValueError("SIZE_LIMIT_EXCEEDED requires bytes_processed")
            _check_byte_count(self.bytes_processed)
        elif self.bytes_processed is not None:
            raise ValueError(f"{self.reason.value} does not carry bytes_processed")


@dataclass(frozen=True)
class DryRunReport(ExecutionOutcome):
    """A successful dry run, whether or not the estimate fits the limit."""

    bytes_processed: int
    within_limit: bool
    human_readable_size: str

    def __post_init__(self) -> None:
        """Validate field constraints."""
        _check_byte_count(self.bytes_processed)

    @property
    def succeeded(self) -> bool:
        return True


@dataclass(frozen=True)
class Executed(ExecutionOutcome):
    """A query that passed admission and ran.

    Attributes:
        bytes_processed: Dry-run estimate that admitted the query.
        human_readable_size: Display form of bytes_processed.
        rows: Result records in service order, capped at the row limit.
        row_count: Number of records in rows, always derived from rows.
    """

    bytes_processed: int
    human_readable_size: str
    rows: List[Dict[str, Any]] = field(default_factory=list)
    row_count: int = field(init=False)

    def __post_init__(self) -> None:
        """Validate field constraints and derive row_count from rows."""
        _check_byte_count(self.bytes_processed)
        object.__setattr__(self, "row_count", len(self.rows))

    @property
    def succeeded(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed(ExecutionOutcome):
    """An external service call failed; error_message is its text verbatim."""

    error_message: str


__all__ = [
    "StatementClassification",
    "CostEstimate",
    "ExecutionOutcome",
    "Rejected",
    "DryRunReport",
    "Executed",
    "Failed",
]
