"""Admission controller.

This module orchestrates the two-gate admission policy:
- estimate(): dry-run a query and report its cost against the size limit
- execute_validated(): refuse mutating statements, refuse queries at or
  above the size limit, otherwise run the query and return its rows

Every stage of a request completes before the next begins: classification
before the dry run, the dry run before execution. Service failures become
`Failed` outcomes; nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Optional

from bigquery_analysis.core.enums import RejectionReason
from bigquery_analysis.core.utils import format_size_gb, format_size_gb_tb
from bigquery_analysis.services import QueryService
from .classifier import classify
from .config import DEFAULT_MAX_RESULTS, SIZE_LIMIT_LABEL
from .errors import InvalidQueryError
from .models import (
    CostEstimate,
    DryRunReport,
    Executed,
    ExecutionOutcome,
    Failed,
    Rejected,
)

logger = logging.getLogger(__name__)


def _require_query(query: object) -> str:
    if not isinstance(query, str) or not query:
        raise InvalidQueryError("Query is required")
    return query


def _resolve_max_results(max_results: Optional[int]) -> int:
    if max_results is None:
        return DEFAULT_MAX_RESULTS
    if isinstance(max_results, bool) or not isinstance(max_results, int) or max_results < 1:
        raise InvalidQueryError(f"maxResults must be a positive integer, got {max_results!r}")
    return max_results


class AdmissionController:
    """Gate queries on statement kind and dry-run cost before running them.

    Args:
        service: Backend implementing the `QueryService` protocol. Shared by
            concurrent requests; the controller itself keeps no request state.

    Examples:
        >>> controller = AdmissionController(BigQueryService())
        >>> outcome = controller.execute_validated("SELECT 1")
    """

    def __init__(self, service: QueryService) -> None:
        self.service = service

    def _dry_run(self, query: str, project_id: Optional[str]) -> CostEstimate:
        """Dry-run via the service. Service errors propagate to the caller."""
        bytes_processed = self.service.dry_run(query, project_id)
        estimate = CostEstimate.from_bytes(int(bytes_processed))
        logger.debug(
            "Dry run estimate: %d bytes (within limit: %s)",
            estimate.bytes_processed,
            estimate.within_limit,
        )
        return estimate

    def estimate(self, query: str, project_id: Optional[str] = None) -> ExecutionOutcome:
        """Report whether a query is valid and what it would cost.

        The estimate path never executes anything, so it skips statement
        classification.

        Args:
            query: Query text. Must be non-empty.
            project_id: Optional project override; empty string means none.

        Returns:
            DryRunReport on success (including over-limit estimates), or
            Failed with the service's message.

        Raises:
            InvalidQueryError: If query is empty.
        """
        query = _require_query(query)
        project_id = project_id or None

        try:
            estimate = self._dry_run(query, project_id)
        except Exception as e:
            logger.error("Dry run error: %s", e)
            return Failed(error_message=str(e))

        return DryRunReport(
            bytes_processed=estimate.bytes_processed,
            within_limit=estimate.within_limit,
            human_readable_size=format_size_gb_tb(estimate.bytes_processed),
        )

    def execute_validated(
        self,
        query: str,
        project_id: Optional[str] = None,
        max_results: Optional[int] = DEFAULT_MAX_RESULTS,
    ) -> ExecutionOutcome:
        """Validate, cost-check and, if admitted, run a read-only query.

        Args:
            query: Query text. Must be non-empty.
            project_id: Optional project override; empty string means none.
            max_results: Row cap for the results. None means the default (100).

        Returns:
            Rejected (mutating statement or size limit), Failed (service
            error) or Executed with the returned rows.

        Raises:
            InvalidQueryError: If query is empty or max_results is not a
                positive integer.
        """
        query = _require_query(query)
        row_cap = _resolve_max_results(max_results)
        project_id = project_id or None

        classification = classify(query)
        if classification.is_mutating:
            logger.info("Rejected mutating statement: %s", classification.matched_pattern_label)
            return Rejected(
                reason=RejectionReason.MUTATING_STATEMENT,
                detail=classification.message or "",
            )

        try:
            estimate = self._dry_run(query, project_id)
        except Exception as e:
            logger.error("Dry run error: %s", e)
            return Failed(error_message=str(e))

        size = format_size_gb(estimate.bytes_processed)
        if not estimate.within_limit:
            logger.info("Rejected oversized query: %s", size)
            return Rejected(
                reason=RejectionReason.SIZE_LIMIT_EXCEEDED,
                detail=f"Query would process {size}, which exceeds the {SIZE_LIMIT_LABEL} limit.",
                bytes_processed=estimate.bytes_processed,
            )

        try:
            rows = self.service.execute(query, project_id, row_cap)
        except Exception as e:
            logger.error("Query error: %s", e)
            return Failed(error_message=str(e))

        return Executed(
            bytes_processed=estimate.bytes_processed,
            human_readable_size=size,
            rows=list(rows),
        )


__all__ = ["AdmissionController"]
