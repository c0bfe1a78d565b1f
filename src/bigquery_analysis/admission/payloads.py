"""JSON payloads for admission outcomes.

Both the MCP tools and the CLI return these documents, so a client sees the
same shape whichever interface it uses.
"""

from __future__ import annotations

from typing import Any, Dict

from bigquery_analysis.core.enums import RejectionReason
from bigquery_analysis.core.utils import format_size_gb
from .config import SIZE_LIMIT_LABEL
from .models import DryRunReport, Executed, ExecutionOutcome, Failed, Rejected


def outcome_to_payload(outcome: ExecutionOutcome) -> Dict[str, Any]:
    """Convert an outcome into the JSON document returned to clients.

    bytesProcessed is always a string so 64-bit counts survive clients whose
    numbers are doubles.

    Raises:
        TypeError: If outcome is not one of the known variants.
    """
    if isinstance(outcome, DryRunReport):
        size_gb = format_size_gb(outcome.bytes_processed)
        if outcome.within_limit:
            message = (
                f"Dry run successful. Query will process {size_gb}, "
                f"which is below the {SIZE_LIMIT_LABEL} limit."
            )
        else:
            message = (
                f"Dry run successful, but query will process {size_gb}, "
                f"which exceeds the {SIZE_LIMIT_LABEL} limit."
            )
        return {
            "success": True,
            "bytesProcessed": str(outcome.bytes_processed),
            "formattedSize": outcome.human_readable_size,
            "isBelowLimit": outcome.within_limit,
            "message": message,
        }
    if isinstance(outcome, Executed):
        return {
            "success": True,
            "bytesProcessed": str(outcome.bytes_processed),
            "formattedSize": outcome.human_readable_size,
            "rowCount": outcome.row_count,
            "results": outcome.rows,
        }
    if isinstance(outcome, Rejected):
        if outcome.reason == RejectionReason.SIZE_LIMIT_EXCEEDED:
            return {
                "success": False,
                "bytesProcessed": str(outcome.bytes_processed),
                "formattedSize": format_size_gb(outcome.bytes_processed or 0),
                "error": outcome.detail,
            }
        return {"success": False, "error": outcome.detail}
    if isinstance(outcome, Failed):
        return {"success": False, "error": outcome.error_message}
    raise TypeError(f"Unhandled outcome type: {type(outcome).__name__}")


__all__ = ["outcome_to_payload"]
