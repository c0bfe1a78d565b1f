"""Tests for byte-size formatting helpers."""

import os
import subprocess
import sys
from pathlib import Path

import pytest

from bigquery_analysis.core.utils import bytes_to_gb, format_size_gb, format_size_gb_tb


@pytest.mark.parametrize(
    "num_bytes, expected",
    [
        (0, "0.00 GB"),
        (1073741824, "1.00 GB"),
        (1099511627776, "1024.00 GB"),
        (2000000000000, "1862.65 GB"),
    ],
)
def test_format_size_gb(num_bytes, expected):
    assert format_size_gb(num_bytes) == expected


@pytest.mark.parametrize(
    "num_bytes, expected",
    [
        (1073741824, "1.00 GB (0.0010 TB)"),
        (1099511627776, "1024.00 GB (1.0000 TB)"),
        (1099511627777, "1024.00 GB (1.0000 TB)"),
    ],
)
def test_format_size_gb_tb(num_bytes, expected):
    assert format_size_gb_tb(num_bytes) == expected


def test_bytes_to_gb_handles_values_beyond_uint64():
    assert bytes_to_gb(2 ** 70) == 2 ** 40


SRC_DIR = Path(__file__).resolve().parents[2] / "src"


@pytest.mark.parametrize(
    "statement",
    [
        "from bigquery_analysis.core.utils import format_size_gb",
        "import bigquery_analysis.admission.config",
        "from bigquery_analysis.admission.payloads import outcome_to_payload",
    ],
)
def test_module_imports_in_fresh_interpreter(statement):
    """Each module imports on its own, without a prior admission import."""
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    result = subprocess.run(
        [sys.executable, "-c", statement],
        capture_output=True,
        text=True,
        encoding="utf-8",
        env=env,
        check=False,
    )
    assert result.returncode == 0, result.stderr
