import argparse
import importlib
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import colorlog
import yaml

from bigquery_analysis import __version__ as _PACKAGE_VERSION
from bigquery_analysis.admission import AdmissionController, InvalidQueryError, outcome_to_payload
from bigquery_analysis.core.settings import ServerSettings, load_settings
from bigquery_analysis.services.bigquery import BigQueryService


def setup_logging(
    verbose: bool = False, warnings_only: bool = False, errors_only: bool = False
) -> None:
    logger = logging.getLogger()
    for h in list(logger.handlers):
        logger.removeHandler(h)
    log_format = (
        "%(asctime)s:%(levelname)s:%(name)s in %(filename)s:%(funcName)s:%(lineno)d: %(message)s"
    )
    log_colors = {
        "DEBUG": "cyan",
        "INFO": "green",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "bold_red",
    }
    # stderr: stdout belongs to the MCP stdio protocol and to JSON output
    stream_handler = colorlog.StreamHandler(sys.stderr)
    formatter = colorlog.ColoredFormatter(f"%(log_color)s{log_format}", log_colors=log_colors)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)
    if errors_only:
        logger.setLevel(logging.ERROR)
    elif warnings_only:
        logger.setLevel(logging.WARNING)
    else:
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _resolve_settings(args: argparse.Namespace) -> Optional[ServerSettings]:
    """Load YAML settings and apply --project/--location. None on error (already logged)."""
    config_arg = getattr(args, "config", None)
    try:
        settings = load_settings(Path(config_arg) if config_arg else None)
    except (FileNotFoundError, yaml.YAMLError, ValueError, OSError) as e:
        logging.error("Failed to load settings: %s", e)
        return None
    return settings.with_overrides(
        project_id=getattr(args, "project", None),
        location=getattr(args, "location", None),
    )


def _read_sql(args: argparse.Namespace) -> str:
    """Return SQL from --file, the positional argument, or stdin ('-' or omitted)."""
    file_arg = getattr(args, "file", None)
    if file_arg:
        return Path(file_arg).read_text(encoding="utf-8")
    sql = getattr(args, "sql", None)
    if sql is None or sql == "-":
        return sys.stdin.read()
    return sql


def _build_controller(settings: ServerSettings) -> AdmissionController:
    service = BigQueryService(project_id=settings.project_id, location=settings.location)
    return AdmissionController(service)


def _emit(payload: Dict[str, Any]) -> int:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))
    return 0 if payload.get("success") else 1


def _run_admission(args: argparse.Namespace, *, execute: bool) -> int:
    settings = _resolve_settings(args)
    if settings is None:
        return 2
    try:
        sql = _read_sql(args)
    except OSError as e:
        logging.error("Failed to read SQL: %s", e)
        return 2

    controller = _build_controller(settings)
    project_id = getattr(args, "project", None)
    try:
        if execute:
            outcome = controller.execute_validated(
                sql, project_id, max_results=getattr(args, "max_results", None)
            )
        else:
            outcome = controller.estimate(sql, project_id)
    except InvalidQueryError as e:
        logging.error("Invalid parameters: %s", e)
        return 2
    return _emit(outcome_to_payload(outcome))


def cmd_dry_run(args: argparse.Namespace) -> int:
    """Dry-run a query and print the estimate as JSON.

    Exit codes: 0 success, 1 the dry run failed, 2 invalid input.
    """
    return _run_admission(args, execute=False)


def cmd_query(args: argparse.Namespace) -> int:
    """Run a query through admission control and print the outcome as JSON.

    Exit codes: 0 success, 1 rejected or failed, 2 invalid input.
    """
    return _run_admission(args, execute=True)


def cmd_mcp_server(args: argparse.Namespace) -> int:
    """Start the MCP server.

    Default: stdio. If --port is set, run HTTP transport at host:port.
    """
    try:
        mcp_server = importlib.import_module("bigquery_analysis.interfaces.mcp.server")
    except (ModuleNotFoundError, AttributeError, ImportError) as e:
        logging.error(
            "Failed to import MCP server. Ensure 'mcp' is installed. Error: %s",
            e,
        )
        return 3
    settings = _resolve_settings(args)
    if settings is None:
        return 2
    port = getattr(args, "port", None)
    host = getattr(args, "host", None) or "127.0.0.1"
    https = bool(getattr(args, "https", False))
    certfile = getattr(args, "certfile", None)
    keyfile = getattr(args, "keyfile", None)
    project_display = settings.project_id or "from credentials"
    if port and https:
        logging.info(
            "Starting MCP HTTPS server on %s:%s (project: %s)",
            host,
            port,
            project_display,
        )
    elif port:
        logging.info(
            "Starting MCP HTTP server on %s:%s (project: %s)",
            host,
            port,
            project_display,
        )
    else:
        logging.info("Starting MCP stdio server (project: %s)", project_display)
    try:
        if port and https:
            getattr(mcp_server, "run_https")(
                settings,
                host=host,
                port=int(port),
                certfile=certfile or "config/certs/localhost.pem",
                keyfile=keyfile or "config/certs/localhost-key.pem",
            )
        elif port:
            getattr(mcp_server, "run_http")(settings, host=host, port=int(port))
        else:
            mcp_server.run(settings)
    except KeyboardInterrupt:
        pass
    return 0


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value}")
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value}")
    return n


def _add_sql_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "sql",
        nargs="?",
        default=None,
        help="SQL text. Use '-' or omit to read from stdin.",
    )
    p.add_argument("--file", default=None, help="Read SQL from this file instead")
    p.add_argument(
        "--project",
        default=None,
        help="Google Cloud project ID (overrides config; defaults to credentials' project)",
    )
    p.add_argument("--location", default=None, help="BigQuery job location (e.g. US, EU)")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="bigquery-analysis",
        description=f"BigQuery Analysis Tools (v{_PACKAGE_VERSION})",
    )
    p.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    p.add_argument(
        "--warnings-only",
        action="store_true",
        help="Show only warnings and errors (overrides --verbose)",
    )
    p.add_argument(
        "--errors-only",
        action="store_true",
        help="Show only errors (overrides --warnings-only and --verbose)",
    )
    p.add_argument(
        "--config",
        default=None,
        help="Path to server.yaml (defaults to config/server.yaml when present)",
    )

    sub = p.add_subparsers(dest="command", required=True)

    p_dry = sub.add_parser("dry-run", help="Estimate bytes processed without running the query")
    _add_sql_arguments(p_dry)
    p_dry.set_defaults(func=cmd_dry_run)

    p_query = sub.add_parser(
        "query",
        help="Run a read-only query if it contains no DML and processes less than 1 TB",
    )
    _add_sql_arguments(p_query)
    p_query.add_argument(
        "--max-results",
        type=_positive_int,
        default=None,
        help="Maximum number of rows to return (default 100)",
    )
    p_query.set_defaults(func=cmd_query)

    p_mcp = sub.add_parser("mcp-server", help="Run the MCP server (stdio or HTTP)")
    p_mcp.add_argument(
        "--project",
        default=None,
        help="Default Google Cloud project ID (overrides config)",
    )
    p_mcp.add_argument("--location", default=None, help="BigQuery job location (e.g. US, EU)")
    p_mcp.add_argument(
        "--port",
        default=None,
        help="If set, run HTTP/HTTPS transport on the given port",
    )
    p_mcp.add_argument(
        "--host",
        default=None,
        help="Host to bind for HTTP transport (default 127.0.0.1)",
    )
    p_mcp.add_argument("--https", action="store_true", help="Enable HTTPS (requires cert and key)")
    p_mcp.add_argument(
        "--certfile",
        default=None,
        help="Path to TLS cert PEM (default config/certs/localhost.pem)",
    )
    p_mcp.add_argument(
        "--keyfile",
        default=None,
        help="Path to TLS key PEM (default config/certs/localhost-key.pem)",
    )
    p_mcp.set_defaults(func=cmd_mcp_server)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(
        verbose=bool(args.verbose),
        warnings_only=bool(getattr(args, "warnings_only", False)),
        errors_only=bool(getattr(args, "errors_only", False)),
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
