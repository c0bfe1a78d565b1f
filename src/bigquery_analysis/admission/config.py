"""Admission control constants.

This module centralizes the limits the admission pipeline enforces.

Units:
    - Byte counts are plain Python ints (arbitrary precision, never floats).
    - "GB" and "TB" in messages are binary units (1024**3 and 1024**4 bytes).
"""

from __future__ import annotations

# ============================================================================
# SIZE UNITS
# ============================================================================

from bigquery_analysis.core.utils import BYTES_PER_GB, BYTES_PER_TB  # noqa: F401


# ============================================================================
# ADMISSION LIMITS
# ============================================================================

# Queries whose dry-run estimate is at or above this value are refused
SIZE_LIMIT_BYTES = 1_099_511_627_776  # 1 TB

# Human label used in user-facing messages for SIZE_LIMIT_BYTES
SIZE_LIMIT_LABEL = "1 TB"

# Row cap applied to executed queries when the caller does not pass one
DEFAULT_MAX_RESULTS = 100


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def is_within_limit(bytes_processed: int) -> bool:
    """Return True when an estimate is strictly below SIZE_LIMIT_BYTES.

    Args:
        bytes_processed: Exact byte count reported by a dry run.

    Returns:
        True if the query may run, False otherwise.

    Examples:
        >>> is_within_limit(1024 ** 3)
        True
        >>> is_within_limit(SIZE_LIMIT_BYTES)
        False
    """
    return int(bytes_processed) < SIZE_LIMIT_BYTES
