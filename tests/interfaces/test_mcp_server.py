"""Tests for the MCP server tools and outcome serialization.

Tools are plain async functions once registered, so they are driven with
asyncio.run against a controller wired to a fake query service.
"""

from __future__ import annotations

import asyncio
import json

import pytest
from mcp.shared.exceptions import McpError
from mcp.types import INVALID_PARAMS

from bigquery_analysis.admission import (
    AdmissionController,
    QueryServiceError,
)
from bigquery_analysis.core.settings import ServerSettings
from bigquery_analysis.interfaces.mcp import server
from bigquery_analysis.services.bigquery import BigQueryService
from conftest import TWO_RECORDS


@pytest.fixture
def wired_server(monkeypatch, fake_service):
    """Point the server's shared controller at the fake service."""
    monkeypatch.setattr(server, "_CONTROLLER", AdmissionController(fake_service))
    return fake_service


def _dry_run(**kwargs):
    return asyncio.run(server.dry_run_query(**kwargs))


def _run_validated(**kwargs):
    return asyncio.run(server.run_query_with_validation(**kwargs))


class TestDryRunQueryTool:
    """Tests for the dry_run_query tool."""

    def test_valid_query(self, wired_server):  # pylint: disable=redefined-outer-name
        wired_server.dry_run.return_value = 1073741824

        payload = _dry_run(query="SELECT * FROM t")

        assert payload["success"] is True
        assert payload["bytesProcessed"] == "1073741824"
        assert payload["isBelowLimit"] is True
        assert "1.00 GB" in payload["formattedSize"]
        assert payload["message"] == (
            "Dry run successful. Query will process 1.00 GB, which is below the 1 TB limit."
        )

    def test_over_limit_query(self, wired_server):  # pylint: disable=redefined-outer-name
        wired_server.dry_run.return_value = 1099511627777

        payload = _dry_run(query="SELECT * FROM t")

        assert payload["success"] is True
        assert payload["bytesProcessed"] == "1099511627777"
        assert payload["isBelowLimit"] is False
        assert "exceeds the 1 TB limit" in payload["message"]

    def test_service_error(self, wired_server):  # pylint: disable=redefined-outer-name
        wired_server.dry_run.side_effect = QueryServiceError("Invalid query syntax")

        payload = _dry_run(query="SELECT * FROM t")

        assert payload == {"success": False, "error": "Invalid query syntax"}

    def test_empty_query_is_invalid_params(self, wired_server):  # pylint: disable=redefined-outer-name
        with pytest.raises(McpError) as exc_info:
            _dry_run(query="")

        assert exc_info.value.error.code == INVALID_PARAMS
        assert exc_info.value.error.message == "Query is required"
        assert wired_server.mock_calls == []

    def test_project_id_is_forwarded(self, wired_server):  # pylint: disable=redefined-outer-name
        _dry_run(query="SELECT 1", projectId="billing-project")
        wired_server.dry_run.assert_called_once_with("SELECT 1", "billing-project")


class TestRunQueryWithValidationTool:
    """Tests for the run_query_with_validation tool."""

    def test_dml_is_rejected_without_service_calls(self, wired_server):  # pylint: disable=redefined-outer-name
        payload = _run_validated(query="INSERT INTO t VALUES (1)")

        assert payload["success"] is False
        assert "INSERT INTO" in payload["error"]
        assert set(payload) == {"success", "error"}
        assert wired_server.mock_calls == []

    def test_admitted_query_returns_rows(self, wired_server):  # pylint: disable=redefined-outer-name
        wired_server.dry_run.return_value = 1073741824

        payload = _run_validated(query="SELECT * FROM t")

        assert payload == {
            "success": True,
            "bytesProcessed": "1073741824",
            "formattedSize": "1.00 GB",
            "rowCount": 2,
            "results": TWO_RECORDS,
        }

    def test_oversized_query_is_rejected_without_execution(self, wired_server):  # pylint: disable=redefined-outer-name
        wired_server.dry_run.return_value = 2000000000000

        payload = _run_validated(query="SELECT * FROM t")

        assert payload["success"] is False
        assert payload["bytesProcessed"] == "2000000000000"
        assert payload["formattedSize"] == "1862.65 GB"
        assert "exceeds the 1 TB limit" in payload["error"]
        wired_server.execute.assert_not_called()

    def test_max_results_is_forwarded(self, wired_server):  # pylint: disable=redefined-outer-name
        _run_validated(query="SELECT 1", maxResults=10)
        wired_server.execute.assert_called_once_with("SELECT 1", None, 10)

    def test_max_results_defaults_to_100(self, wired_server):  # pylint: disable=redefined-outer-name
        _run_validated(query="SELECT 1")
        wired_server.execute.assert_called_once_with("SELECT 1", None, 100)

    @pytest.mark.parametrize("kwargs", [{"query": ""}, {"query": "SELECT 1", "maxResults": 0}])
    def test_invalid_input_is_invalid_params(self, wired_server, kwargs):  # pylint: disable=redefined-outer-name
        with pytest.raises(McpError) as exc_info:
            _run_validated(**kwargs)

        assert exc_info.value.error.code == INVALID_PARAMS
        assert wired_server.mock_calls == []

    def test_payloads_are_json_serializable(self, wired_server):  # pylint: disable=redefined-outer-name
        payload = _run_validated(query="SELECT * FROM t")
        assert json.loads(json.dumps(payload)) == payload


class TestConfiguration:
    """Tests for configure() and the lazily built controller."""

    def test_configure_rebuilds_controller_from_settings(self, monkeypatch):
        monkeypatch.setattr(server, "_CONTROLLER", None)
        monkeypatch.setattr(server, "_SETTINGS", ServerSettings())

        server.configure(ServerSettings(project_id="p1", location="EU"))
        controller = server._get_controller()  # pylint: disable=protected-access

        assert isinstance(controller.service, BigQueryService)
        assert controller.service.project_id == "p1"
        assert controller.service.location == "EU"
        assert server._get_controller() is controller  # pylint: disable=protected-access

    def test_run_uses_stdio_transport(self, monkeypatch):
        calls = []

        async def fake_run_stdio_async():
            calls.append("stdio")

        monkeypatch.setattr(server, "_CONTROLLER", None)
        monkeypatch.setattr(server, "_SETTINGS", ServerSettings())
        monkeypatch.setattr(server._SERVER, "run_stdio_async", fake_run_stdio_async)  # pylint: disable=protected-access

        server.run(ServerSettings(project_id="p2"))

        assert calls == ["stdio"]
        assert server._SETTINGS.project_id == "p2"  # pylint: disable=protected-access
