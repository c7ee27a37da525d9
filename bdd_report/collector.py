"""Parse the BDD runner's cucumber JSON report into a normalized report."""

import json
import logging
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from pathlib import Path

from pydantic import ValidationError

from bdd_report.config import ReportSettings
from bdd_report.fallback import synthesize_report
from bdd_report.formatting import NANOS_PER_MILLI, format_duration
from bdd_report.models.cucumber import CucumberReport, Element, Feature, Step
from bdd_report.models.report import (
    ExecutionMetadata,
    NormalizedReport,
    ScenarioOutcome,
    ScenarioStatus,
)
from bdd_report.models.sidecar import SidecarMetadata

log = logging.getLogger(__name__)

GENERIC_REPORT_FILENAME = "cucumber_report.json"
DEFAULT_BROWSER = "chrome"

SKIPPED_STEP_STATUSES: frozenset[str] = frozenset(["skipped", "pending"])


class ReportUnusableError(Exception):
    """Raised when a report is missing, empty, malformed or has no features."""


def find_report_path(reports_dir: Path, environment: str) -> Path:
    """Locate the report, preferring the environment-specific file.

    Returns the generic path when nothing exists so callers can report it.
    """
    candidates = [
        reports_dir / f"cucumber_report_{environment}.json",
        reports_dir / GENERIC_REPORT_FILENAME,
    ]
    for candidate in candidates:
        if candidate.exists():
            log.info("Using cucumber report: %s", candidate.name)
            return candidate

    log.warning("No cucumber JSON report found in %s", reports_dir)
    return reports_dir / GENERIC_REPORT_FILENAME


def parse_features(report_path: Path) -> Sequence[Feature]:
    """Read and validate the report array.

    Raises:
        ReportUnusableError: If the report cannot be used as-is.

    """
    if not report_path.exists():
        raise ReportUnusableError(f"Report not found at {report_path}")

    try:
        content = report_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ReportUnusableError(f"Could not read report: {exc}") from exc

    if not content.strip():
        raise ReportUnusableError("Report file is empty")

    try:
        data = json.loads(content)
    except ValueError as exc:
        raise ReportUnusableError(f"Report is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise ReportUnusableError(
            f"Report is not an array (got {type(data).__name__})"
        )
    if not data:
        raise ReportUnusableError("Report is an empty array")

    try:
        return CucumberReport.validate_python(data)
    except ValidationError as exc:
        raise ReportUnusableError(f"Report has an unexpected structure: {exc}") from exc


def classify_scenario(steps: Sequence[Step]) -> ScenarioStatus:
    """Failed dominates skipped/pending, which dominates passed."""
    statuses = {step.result.status for step in steps if step.result is not None}
    if "failed" in statuses:
        return "FAILED"
    if statuses & SKIPPED_STEP_STATUSES:
        return "SKIPPED"
    return "PASSED"


def scenario_outcomes(
    features: Sequence[Feature], *, typed_only: bool = False
) -> Sequence[ScenarioOutcome]:
    """Normalize every scenario element, in report order.

    Backgrounds never count. With ``typed_only``, elements without an explicit
    ``scenario`` type are left out as well.
    """
    return [
        _to_outcome(feature, element)
        for feature in features
        for element in feature.elements
        if (element.is_scenario if typed_only else not element.is_background)
    ]


def _to_outcome(feature: Feature, element: Element) -> ScenarioOutcome:
    return ScenarioOutcome(
        name=element.name,
        feature_name=feature.name,
        tags=frozenset(tag.name for tag in element.tags),
        status=classify_scenario(element.steps),
        duration_nanos=sum(
            step.result.duration for step in element.steps if step.result is not None
        ),
    )


def build_metadata(
    outcomes: Sequence[ScenarioOutcome],
    settings: ReportSettings,
    sidecar: SidecarMetadata | None,
    now: datetime | None = None,
) -> ExecutionMetadata:
    """Combine sidecar timing, step durations and environment settings.

    Sidecar timing is authoritative when complete. Otherwise the duration is
    the sum of step durations and the window ends now.
    """
    if sidecar is not None and sidecar.has_complete_timing:
        start_time = sidecar.start_time
        end_time = sidecar.end_time
        total_duration_ms = sidecar.total_duration or 0
        log.info(
            "Using metadata file timing - duration: %.2fs", total_duration_ms / 1000
        )
    else:
        total_duration_ms = (
            sum(outcome.duration_nanos for outcome in outcomes) // NANOS_PER_MILLI
        )
        end_time = now or datetime.now(timezone.utc)
        start_time = end_time - timedelta(milliseconds=total_duration_ms)
        log.info(
            "Calculated duration from report: %s", format_duration(total_duration_ms)
        )

    return ExecutionMetadata(
        start_time=start_time,
        end_time=end_time,
        total_duration_ms=total_duration_ms,
        browser=resolve_browser(settings, sidecar),
        environment=resolve_environment(settings, sidecar),
    )


def resolve_browser(settings: ReportSettings, sidecar: SidecarMetadata | None) -> str:
    """An explicit BROWSER setting wins over the sidecar and the default."""
    if settings.browser:
        return settings.browser
    if sidecar is not None and sidecar.browser:
        return sidecar.browser
    return DEFAULT_BROWSER


def resolve_environment(
    settings: ReportSettings, sidecar: SidecarMetadata | None
) -> str:
    """The sidecar's environment wins over the ENV setting."""
    if sidecar is not None and sidecar.environment:
        return sidecar.environment
    return settings.environment


def collect_report(
    report_path: Path,
    settings: ReportSettings,
    sidecar: SidecarMetadata | None = None,
    now: datetime | None = None,
) -> NormalizedReport:
    """Produce the normalized report, falling back to a synthesized one.

    Input problems never propagate: they are logged and the fallback
    synthesizer's report is returned instead.
    """
    try:
        features = parse_features(report_path)
    except ReportUnusableError as exc:
        log.warning("Cannot use cucumber report: %s", exc)
        log.info("Generating fallback report from pipeline results")
        return synthesize_report(
            settings.pipeline_results_dir,
            browser=resolve_browser(settings, sidecar),
            environment=resolve_environment(settings, sidecar),
            sidecar=sidecar,
            now=now,
        )

    log.info("Analyzing JSON report with %d feature(s)", len(features))
    outcomes = scenario_outcomes(features)
    report = NormalizedReport.from_outcomes(
        outcomes, build_metadata(outcomes, settings, sidecar, now)
    )

    log.info(
        "Scenarios: %d total, %d passed, %d failed, %d skipped",
        report.stats.total_scenarios,
        report.stats.passed,
        report.stats.failed,
        report.stats.skipped,
    )
    log.info("Browser: %s", report.metadata.browser)
    return report
