"""Tests for duration and rate formatting."""

import pytest

from bdd_report.formatting import format_duration, success_rate
from bdd_report.models.report import ExecutionStats


@pytest.mark.parametrize(
    ("duration_ms", "expected"),
    [
        (0, "0s"),
        (999, "0s"),
        (65_000, "1m 5s"),
        (90_000, "1m 30s"),
        (120_000, "2m"),
        (3_600_000, "1h"),
        (3_661_000, "1h 1m 1s"),
        (3_605_000, "1h 5s"),
    ],
)
def test_format_duration(duration_ms: int, expected: str) -> None:
    """Leading zero units are omitted; zero renders as seconds."""
    assert format_duration(duration_ms) == expected


def test_success_rate_has_one_decimal() -> None:
    """Rates are percentages with one decimal place."""
    stats = ExecutionStats(total_scenarios=3, passed=2, failed=1, skipped=0)

    assert success_rate(stats) == "66.7"


def test_success_rate_without_scenarios() -> None:
    """No scenarios means a zero rate rather than a division error."""
    assert success_rate(ExecutionStats()) == "0.0"
