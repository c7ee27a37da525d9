"""Tests for normalized report models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from bdd_report.models.report import (
    ExecutionMetadata,
    ExecutionStats,
    NormalizedReport,
)
from bdd_report.testing.factories import (
    ExecutionMetadataFactory,
    ScenarioOutcomeFactory,
)


def test_stats_count_outcomes_by_status() -> None:
    """Counts each status and keeps the total consistent."""
    outcomes = [
        ScenarioOutcomeFactory.build(status="PASSED"),
        ScenarioOutcomeFactory.build(status="PASSED"),
        ScenarioOutcomeFactory.build(status="FAILED"),
        ScenarioOutcomeFactory.build(status="SKIPPED"),
    ]

    stats = ExecutionStats.from_outcomes(outcomes)

    assert stats == ExecutionStats(total_scenarios=4, passed=2, failed=1, skipped=1)


def test_stats_of_no_outcomes_are_zero() -> None:
    """An empty run has all-zero stats."""
    assert ExecutionStats.from_outcomes([]) == ExecutionStats()


def test_stats_reject_inconsistent_total() -> None:
    """Total must equal the sum of the per-status counts."""
    with pytest.raises(ValidationError, match="total_scenarios must equal"):
        ExecutionStats(total_scenarios=3, passed=1, failed=1, skipped=0)


def test_metadata_rejects_end_before_start() -> None:
    """End time may not precede start time."""
    start = datetime(2099, 1, 1, tzinfo=timezone.utc)

    with pytest.raises(ValidationError, match="end_time"):
        ExecutionMetadata(start_time=start, end_time=start - timedelta(seconds=1))


def test_metadata_allows_missing_timestamps() -> None:
    """Timestamps are optional."""
    metadata = ExecutionMetadata()

    assert metadata.start_time is None
    assert metadata.end_time is None
    assert metadata.browser == "chrome"
    assert metadata.environment == "dev"


def test_outcome_rejects_negative_duration() -> None:
    """Durations are never negative."""
    with pytest.raises(ValidationError):
        ScenarioOutcomeFactory.build(duration_nanos=-1)


def test_report_from_outcomes_derives_stats() -> None:
    """Stats are computed from the given outcomes, in order."""
    passed = ScenarioOutcomeFactory.build(status="PASSED")
    failed = ScenarioOutcomeFactory.build(status="FAILED")

    report = NormalizedReport.from_outcomes(
        [passed, failed], ExecutionMetadataFactory.build()
    )

    assert report.scenarios == (passed, failed)
    assert report.stats.total_scenarios == 2
    assert report.failed_scenarios == [failed]
    assert report.is_fallback is False


def test_report_is_immutable() -> None:
    """Reports are shared read-only between consumers."""
    report = NormalizedReport.from_outcomes([], ExecutionMetadataFactory.build())

    with pytest.raises(ValidationError):
        report.is_fallback = True  # type: ignore[misc]
