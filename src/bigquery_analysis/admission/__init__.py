"""Admission control for BigQuery Analysis Tools.

This module gates queries before they reach BigQuery:

- **Classifier**: classify() - lexical detection of mutating statements
- **Models**: StatementClassification, CostEstimate and the ExecutionOutcome
  variants (Rejected, DryRunReport, Executed, Failed)
- **Config**: Size limit and row cap constants (import from .config)
- **Controller**: AdmissionController - estimate() and execute_validated()
- **Payloads**: outcome_to_payload() - JSON documents returned to clients

Public API:
    AdmissionController: Runs the admission pipeline over a QueryService
    classify: Classify a query as mutating or read-only
    InvalidQueryError: Raised for malformed requests (e.g. empty query)
    SIZE_LIMIT_BYTES: The 1 TB admission threshold

Usage:
    >>> from bigquery_analysis.admission import AdmissionController
    >>> from bigquery_analysis.services.bigquery import BigQueryService
    >>> controller = AdmissionController(BigQueryService())
    >>> outcome = controller.estimate("SELECT * FROM `project.dataset.table`")

For implementation details:
    - See admission/classifier.py for the mutating-statement catalog
    - See services/__init__.py for the QueryService protocol
"""

from __future__ import annotations

from bigquery_analysis.core.enums import RejectionReason

from .classifier import classify
from .config import DEFAULT_MAX_RESULTS, SIZE_LIMIT_BYTES
from .controller import AdmissionController
from .errors import AdmissionError, InvalidQueryError, QueryServiceError
from .models import (
    CostEstimate,
    DryRunReport,
    Executed,
    ExecutionOutcome,
    Failed,
    Rejected,
    StatementClassification,
)
from .payloads import outcome_to_payload

__all__ = [
    # Pipeline
    "AdmissionController",
    "classify",
    # Data models
    "StatementClassification",
    "CostEstimate",
    "ExecutionOutcome",
    "Rejected",
    "DryRunReport",
    "Executed",
    "Failed",
    "outcome_to_payload",
    # Errors
    "AdmissionError",
    "InvalidQueryError",
    "QueryServiceError",
    # Constants and enums
    "SIZE_LIMIT_BYTES",
    "DEFAULT_MAX_RESULTS",
    "RejectionReason",
]
