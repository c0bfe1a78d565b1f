"""Shared pytest fixtures for admission pipeline tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from bigquery_analysis.admission import AdmissionController
from bigquery_analysis.services import QueryService

ONE_GB = 1024 ** 3
TWO_RECORDS = [{"id": 1, "name": "John"}, {"id": 2, "name": "Jane"}]


@pytest.fixture
def fake_service() -> MagicMock:
    """Query service double: 1 GB dry runs and two result rows by default."""
    service = MagicMock(spec=QueryService)
    service.dry_run.return_value = ONE_GB
    service.execute.return_value = [dict(r) for r in TWO_RECORDS]
    return service


@pytest.fixture
def controller(fake_service: MagicMock) -> AdmissionController:  # pylint: disable=redefined-outer-name
    """Admission controller wired to the fake service."""
    return AdmissionController(fake_service)
