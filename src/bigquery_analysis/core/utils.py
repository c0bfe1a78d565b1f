"""Core utility functions for BigQuery Analysis Tools.

This module provides the byte-size formatting shared by the admission
pipeline and its outer layers.
"""

from __future__ import annotations

# Binary units; "GB" and "TB" in messages mean these
BYTES_PER_GB = 1024 ** 3
BYTES_PER_TB = 1024 ** 4


def bytes_to_gb(num_bytes: int) -> float:
    """Convert a byte count to binary gigabytes for display."""
    # int / int true division is correctly rounded for arbitrarily large ints
    return int(num_bytes) / BYTES_PER_GB


def format_size_gb(num_bytes: int) -> str:
    """Format a byte count as gigabytes with two decimals.

    Examples:
        >>> format_size_gb(1073741824)
        '1.00 GB'
    """
    return f"{bytes_to_gb(num_bytes):.2f} GB"


def format_size_gb_tb(num_bytes: int) -> str:
    """Format a byte count as gigabytes and terabytes.

    Examples:
        >>> format_size_gb_tb(1073741824)
        '1.00 GB (0.0010 TB)'
        >>> format_size_gb_tb(1099511627776)
        '1024.00 GB (1.0000 TB)'
    """
    terabytes = int(num_bytes) / BYTES_PER_TB
    return f"{format_size_gb(num_bytes)} ({terabytes:.4f} TB)"
