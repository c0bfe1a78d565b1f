"""BigQuery implementation of the query service protocol.

Authentication uses application default credentials (gcloud CLI login or a
service account); this module never resolves credentials itself.
"""

from __future__ import annotations

import base64
import datetime as dt
import logging
import threading
from decimal import Decimal
from typing import Any, Dict, List, Optional

from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import bigquery

from bigquery_analysis.admission.config import DEFAULT_MAX_RESULTS
from bigquery_analysis.admission.errors import QueryServiceError

logger = logging.getLogger(__name__)


def _to_jsonable(value: Any) -> Any:
    """Convert a BigQuery cell value into something json.dumps accepts."""
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        # NUMERIC/BIGNUMERIC keep their exact digits
        return str(value)
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


def row_to_record(row: Any) -> Dict[str, Any]:
    """Convert a `bigquery.Row` (or any mapping-like row) to a plain dict."""
    return {key: _to_jsonable(value) for key, value in row.items()}


def _error_message(exc: Exception) -> str:
    # GoogleAPICallError.message omits the HTTP status prefix
    message = getattr(exc, "message", None)
    return str(message) if message else str(exc)


class BigQueryService:
    """Query service backed by a single long-lived `bigquery.Client`.

    The client is created on first use so that importing the MCP server
    does not require credentials. It is shared by all requests and holds
    no per-query state.
    """

    def __init__(
        self,
        client: Optional[bigquery.Client] = None,
        *,
        project_id: Optional[str] = None,
        location: Optional[str] = None,
    ) -> None:
        self._client = client
        self._client_lock = threading.Lock()
        self.project_id = project_id
        self.location = location

    @property
    def client(self) -> bigquery.Client:
        if self._client is not None:
            return self._client
        # Concurrent first requests must share one client
        with self._client_lock:
            if self._client is None:
                try:
                    self._client = bigquery.Client(
                        project=self.project_id, location=self.location
                    )
                except (auth_exceptions.GoogleAuthError, api_exceptions.GoogleAPIError) as e:
                    raise QueryServiceError(_error_message(e)) from e
                logger.info(
                    "Created BigQuery client (project: %s, location: %s)",
                    self._client.project,
                    self.location or "default",
                )
        return self._client

    def dry_run(self, query: str, project_id: Optional[str] = None) -> int:
        """Dry-run a query and return its exact bytes-processed estimate."""
        job_config = bigquery.QueryJobConfig(dry_run=True)
        try:
            job = self.client.query(query, job_config=job_config, project=project_id or None)
        except (auth_exceptions.GoogleAuthError, api_exceptions.GoogleAPIError) as e:
            raise QueryServiceError(_error_message(e)) from e

        total = job.total_bytes_processed
        logger.debug("Dry run %s: %s bytes", job.job_id, total)
        return int(total or 0)

    def execute(
        self,
        query: str,
        project_id: Optional[str] = None,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> List[Dict[str, Any]]:
        """Run a query and return at most max_results records."""
        try:
            job = self.client.query(query, project=project_id or None)
            rows = job.result(max_results=max_results)
            records = [row_to_record(row) for row in rows]
        except (auth_exceptions.GoogleAuthError, api_exceptions.GoogleAPIError) as e:
            raise QueryServiceError(_error_message(e)) from e

        logger.info("Query job %s returned %d rows", job.job_id, len(records))
        return records


__all__ = ["BigQueryService", "row_to_record"]
