"""Synthesize a minimal report when the runner's report cannot be used."""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Literal

from bdd_report.models.report import (
    ExecutionMetadata,
    NormalizedReport,
    ScenarioOutcome,
    ScenarioStatus,
)
from bdd_report.models.sidecar import SidecarMetadata

log = logging.getLogger(__name__)

STATUS_FILENAME = "test_status.txt"
EXECUTION_TIME_FILENAME = "execution_time.txt"

FALLBACK_FEATURE_NAME = "Test Execution Report"

# Leading integer, so "12.5" and "12s" read as 12.
LEADING_INTEGER = re.compile(r"[+-]?\d+")

type StatusToken = Literal["PASSED", "FAILED", "UNKNOWN"]

TOKEN_TO_STATUS: Mapping[StatusToken, ScenarioStatus] = {
    "PASSED": "PASSED",
    "FAILED": "FAILED",
    "UNKNOWN": "SKIPPED",
}


@dataclass(frozen=True, kw_only=True)
class PipelineSignals:
    """Secondary signals left behind by the pipeline's test stage."""

    status: StatusToken = "UNKNOWN"
    elapsed_seconds: int = 0


def read_pipeline_signals(pipeline_results_dir: Path) -> PipelineSignals:
    """Read the status and elapsed-seconds files, defaulting any gap."""
    status_text = _read_text(pipeline_results_dir / STATUS_FILENAME)
    elapsed_text = _read_text(pipeline_results_dir / EXECUTION_TIME_FILENAME)

    status: StatusToken = "UNKNOWN"
    if status_text == "PASSED":
        status = "PASSED"
    elif status_text == "FAILED":
        status = "FAILED"

    elapsed_seconds = 0
    if elapsed_text:
        if match := LEADING_INTEGER.match(elapsed_text):
            elapsed_seconds = max(0, int(match.group()))
        else:
            log.warning("Ignoring invalid execution time: %r", elapsed_text)

    return PipelineSignals(status=status, elapsed_seconds=elapsed_seconds)


def synthesize_report(
    pipeline_results_dir: Path,
    *,
    browser: str,
    environment: str,
    sidecar: SidecarMetadata | None = None,
    now: datetime | None = None,
) -> NormalizedReport:
    """Build a single-scenario report describing the whole run.

    Never raises: missing inputs degrade to UNKNOWN status and zero duration.
    """
    log.info("Creating fallback report from %s", pipeline_results_dir)
    signals = read_pipeline_signals(pipeline_results_dir)

    outcome = ScenarioOutcome(
        name=f"Test Execution - Status: {signals.status}",
        feature_name=FALLBACK_FEATURE_NAME,
        status=TOKEN_TO_STATUS[signals.status],
        duration_nanos=signals.elapsed_seconds * 1_000_000_000,
    )

    if (
        sidecar is not None
        and sidecar.start_time is not None
        and sidecar.end_time is not None
        and sidecar.end_time >= sidecar.start_time
    ):
        start_time, end_time = sidecar.start_time, sidecar.end_time
    else:
        end_time = now or datetime.now(timezone.utc)
        start_time = end_time - timedelta(seconds=signals.elapsed_seconds)

    metadata = ExecutionMetadata(
        start_time=start_time,
        end_time=end_time,
        total_duration_ms=signals.elapsed_seconds * 1000,
        browser=browser,
        environment=environment,
    )

    log.info(
        "Fallback metadata: 1 scenario, status=%s, duration=%ds",
        signals.status,
        signals.elapsed_seconds,
    )
    return NormalizedReport.from_outcomes([outcome], metadata, is_fallback=True)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return ""
    except (OSError, UnicodeDecodeError) as exc:
        log.warning("Could not read pipeline result %s: %s", path, exc)
        return ""
