"""
MCP server exposing admission-controlled BigQuery tools.

Tools:
 - dry_run_query: validate a query and estimate the bytes it would process
 - run_query_with_validation: run a read-only query if it is below 1 TB
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any, Dict, Optional

try:
    from mcp.server.fastmcp import FastMCP
    from mcp.shared.exceptions import McpError
    from mcp.types import INVALID_PARAMS, ErrorData
except Exception as exc:
    raise RuntimeError(
        "The 'mcp' package is required for the MCP server. Install with: pip install mcp"
    ) from exc

from bigquery_analysis.admission import AdmissionController, InvalidQueryError
from bigquery_analysis.admission.payloads import outcome_to_payload
from bigquery_analysis.core.settings import ServerSettings
from bigquery_analysis.services.bigquery import BigQueryService


# Global configuration
_SETTINGS = ServerSettings()
_CONTROLLER: AdmissionController | None = None
_SERVER = FastMCP("bigquery-analysis-server")

# Configure logging for MCP server
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr)  # MCP uses stdout for protocol
    ],
)
logger = logging.getLogger(__name__)


def configure(settings: Optional[ServerSettings] = None) -> None:
    """Set server settings and drop any controller built from older ones."""
    global _SETTINGS, _CONTROLLER
    _SETTINGS = settings or ServerSettings()
    _CONTROLLER = None


def _get_controller() -> AdmissionController:
    """Return the shared controller, building its BigQuery service on first use."""
    global _CONTROLLER
    if _CONTROLLER is None:
        service = BigQueryService(project_id=_SETTINGS.project_id, location=_SETTINGS.location)
        _CONTROLLER = AdmissionController(service)
    return _CONTROLLER


def _invalid_params(exc: InvalidQueryError) -> McpError:
    return McpError(ErrorData(code=INVALID_PARAMS, message=str(exc)))


# -------------------------
# MARK: Tools
# -------------------------


@_SERVER.tool("dry_run_query")
async def dry_run_query(query: str, projectId: Optional[str] = None) -> Dict[str, Any]:  # noqa: N803
    """Perform a dry run of a BigQuery query to check if it's valid and estimate its size.

    Args:
        query: The SQL query to dry run.
        projectId: Google Cloud project ID (optional, uses default if not provided).
    """
    controller = _get_controller()
    try:
        outcome = await asyncio.to_thread(controller.estimate, query, projectId)
    except InvalidQueryError as e:
        raise _invalid_params(e) from e
    return outcome_to_payload(outcome)


@_SERVER.tool("run_query_with_validation")
async def run_query_with_validation(
    query: str,
    projectId: Optional[str] = None,  # noqa: N803
    maxResults: Optional[int] = None,  # noqa: N803
) -> Dict[str, Any]:
    """Run a BigQuery query with dry run validation (fails if query exceeds 1 TB or contains DML statements).

    Args:
        query: The SQL query to run (only SELECT queries are allowed).
        projectId: Google Cloud project ID (optional, uses default if not provided).
        maxResults: Maximum number of results to return (default: 100).
    """
    controller = _get_controller()
    try:
        outcome = await asyncio.to_thread(
            controller.execute_validated, query, projectId, maxResults
        )
    except InvalidQueryError as e:
        raise _invalid_params(e) from e
    return outcome_to_payload(outcome)


# Transport functions
def run(settings: Optional[ServerSettings] = None) -> None:
    """Run MCP server over stdio."""
    configure(settings)

    logger.info("Starting BigQuery Analysis MCP Server...")
    logger.info("Default project: %s", _SETTINGS.project_id or "from credentials")

    asyncio.run(_SERVER.run_stdio_async())


async def _run_http(host: str, port: int) -> None:
    """Start HTTP server with explicit uvicorn configuration."""
    try:
        import uvicorn
    except ImportError:
        raise RuntimeError("uvicorn is required for HTTP mode: pip install uvicorn")

    app = _SERVER.streamable_http_app()
    config = uvicorn.Config(
        app,
        host=host,
        port=int(port),
        log_level="info",
    )
    server = uvicorn.Server(config)
    await server.serve()


def run_http(
    settings: Optional[ServerSettings] = None, *, host: str = "127.0.0.1", port: int = 8765
) -> None:
    """Run MCP server over HTTP."""
    configure(settings)

    logger.info("Starting HTTP MCP server on %s:%d", host, port)
    logger.info("Default project: %s", _SETTINGS.project_id or "from credentials")

    asyncio.run(_run_http(host, port))


def run_https(
    settings: Optional[ServerSettings] = None,
    *,
    host: str = "127.0.0.1",
    port: int = 8765,
    certfile: str = "config/certs/localhost.pem",
    keyfile: str = "config/certs/localhost-key.pem",
) -> None:
    """Run MCP server over HTTPS."""
    configure(settings)

    logger.info("Starting HTTPS MCP server on %s:%d", host, port)
    logger.info("Default project: %s", _SETTINGS.project_id or "from credentials")

    try:
        import uvicorn
    except ImportError:
        raise RuntimeError("uvicorn is required for HTTPS mode: pip install uvicorn")

    app = _SERVER.streamable_http_app()
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level="info",
        ssl_certfile=certfile,
        ssl_keyfile=keyfile,
    )
    server = uvicorn.Server(config)
    asyncio.run(server.serve())
