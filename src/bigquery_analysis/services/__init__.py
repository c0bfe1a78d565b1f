"""Query service interface.

This module defines the protocol (interface) the admission pipeline uses to
reach the query backend. The pipeline never talks to a concrete client;
it receives an object implementing `QueryService`, which keeps it testable
without any network dependency.

To implement a new backend:

1. Create a new module in this package (e.g. `my_backend.py`)
2. Define a class with `dry_run()` and `execute()` matching the protocol
3. Raise `QueryServiceError` with the backend's message on failure

Example:
    ```python
    # services/my_backend.py
    from typing import Any, Dict, List, Optional
    from bigquery_analysis.admission.errors import QueryServiceError

    class MyBackendService:
        def dry_run(self, query: str, project_id: Optional[str] = None) -> int:
            return 0

        def execute(
            self, query: str, project_id: Optional[str] = None, max_results: int = 100
        ) -> List[Dict[str, Any]]:
            return []
    ```
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol


class QueryService(Protocol):
    """Protocol defining the two calls the admission pipeline makes.

    Implementations hold connection and credential context but no
    per-query state, and must be safe to call from concurrent requests.

    Methods:
        dry_run: Validate and cost-estimate a query without running it.
        execute: Run a query and return up to max_results records.
    """

    def dry_run(self, query: str, project_id: Optional[str] = None) -> int:
        """Estimate the bytes a query would process.

        Args:
            query: Query text, passed through unchanged.
            project_id: Project to bill and resolve names against. None uses
                the service default.

        Returns:
            Exact number of bytes the query would scan.

        Raises:
            QueryServiceError: If the backend rejects the query (syntax,
                permission, quota) or the call fails.
        """
        ...

    def execute(
        self,
        query: str,
        project_id: Optional[str] = None,
        max_results: int = 100,
    ) -> List[Dict[str, Any]]:
        """Run a query and return its records.

        Args:
            query: Query text, passed through unchanged.
            project_id: Project override, or None for the service default.
            max_results: Maximum number of records to return.

        Returns:
            Records in result order, each a JSON-ready dict.

        Raises:
            QueryServiceError: If the backend fails the query.
        """
        ...


__all__ = ["QueryService"]
