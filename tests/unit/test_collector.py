"""Tests for cucumber report collection."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from bdd_report.collector import (
    ReportUnusableError,
    classify_scenario,
    collect_report,
    find_report_path,
    parse_features,
    resolve_browser,
    resolve_environment,
)
from bdd_report.models.cucumber import Step
from bdd_report.models.sidecar import SidecarMetadata
from bdd_report.testing.cucumber.payloads import feature, scenario, step, write_report
from bdd_report.testing.factories import report_settings

NOW = datetime(2099, 1, 1, 13, 0, tzinfo=timezone.utc)


def steps(*statuses: str) -> list[Step]:
    return [Step.model_validate(step(status)) for status in statuses]


@pytest.mark.parametrize(
    "statuses",
    [
        ("failed", "passed", "skipped"),
        ("passed", "skipped", "failed"),
        ("skipped", "failed", "passed"),
    ],
)
def test_failure_dominates_regardless_of_order(statuses: tuple[str, ...]) -> None:
    """One failed step fails the scenario wherever it appears."""
    assert classify_scenario(steps(*statuses)) == "FAILED"


@pytest.mark.parametrize("skip_status", ["skipped", "pending"])
def test_skip_dominates_pass(skip_status: str) -> None:
    """Skipped or pending steps make a scenario skipped."""
    assert classify_scenario(steps("passed", skip_status)) == "SKIPPED"


def test_passed_and_undefined_steps_pass() -> None:
    """Only failed, skipped and pending change the classification."""
    assert classify_scenario(steps("passed", "undefined")) == "PASSED"
    assert classify_scenario([]) == "PASSED"


def test_end_to_end_stats(tmp_path: Path) -> None:
    """Two features, three scenarios: one of each status."""
    settings = report_settings(tmp_path)
    report_path = write_report(
        settings.reports_dir / "cucumber_report.json",
        [
            feature(
                "Feature A",
                elements=[
                    scenario("Passes"),
                    scenario(
                        "Fails",
                        steps=[step("passed"), step("failed"), step("skipped")],
                        tags=["@C100"],
                    ),
                ],
            ),
            feature(
                "Feature B",
                elements=[
                    scenario("Skipped", steps=[step("skipped"), step("skipped")]),
                ],
            ),
        ],
    )

    report = collect_report(report_path, settings, now=NOW)

    assert report.is_fallback is False
    assert report.stats.total_scenarios == 3
    assert report.stats.passed == 1
    assert report.stats.failed == 1
    assert report.stats.skipped == 1
    assert (
        report.stats.passed + report.stats.failed + report.stats.skipped
        == report.stats.total_scenarios
    )
    assert [s.name for s in report.scenarios] == ["Passes", "Fails", "Skipped"]
    assert report.scenarios[1].tags == frozenset({"@C100"})
    assert report.scenarios[1].feature_name == "Feature A"


def test_backgrounds_are_not_scenarios(tmp_path: Path) -> None:
    """Background elements are left out of the stats."""
    settings = report_settings(tmp_path)
    report_path = write_report(
        settings.reports_dir / "cucumber_report.json",
        [
            feature(
                elements=[
                    scenario("Setup", element_type="background"),
                    scenario("Real scenario"),
                ]
            )
        ],
    )

    report = collect_report(report_path, settings, now=NOW)

    assert report.stats.total_scenarios == 1
    assert report.scenarios[0].name == "Real scenario"


def test_duration_sums_step_durations_without_sidecar(tmp_path: Path) -> None:
    """Without sidecar timing the duration is the sum of step durations."""
    settings = report_settings(tmp_path)
    report_path = write_report(
        settings.reports_dir / "cucumber_report.json",
        [
            feature(
                elements=[
                    scenario(steps=[step(duration=2_000_000_000)] * 3),
                    scenario(steps=[step(duration=500_000_000)]),
                ]
            )
        ],
    )

    report = collect_report(report_path, settings, now=NOW)

    assert report.scenarios[0].duration_nanos == 6_000_000_000
    assert report.metadata.total_duration_ms == 6_500
    assert report.metadata.end_time == NOW


def test_sidecar_timing_is_authoritative(tmp_path: Path) -> None:
    """Complete sidecar timing replaces the summed step durations."""
    settings = report_settings(tmp_path)
    report_path = write_report(
        settings.reports_dir / "cucumber_report.json", [feature()]
    )
    sidecar = SidecarMetadata(
        start_time=datetime(2099, 1, 1, 12, 0, tzinfo=timezone.utc),
        end_time=datetime(2099, 1, 1, 12, 10, tzinfo=timezone.utc),
        total_duration=600_000,
        browser="firefox",
        environment="test",
    )

    report = collect_report(report_path, settings, sidecar, now=NOW)

    assert report.metadata.total_duration_ms == 600_000
    assert report.metadata.start_time == sidecar.start_time
    assert report.metadata.browser == "firefox"
    assert report.metadata.environment == "test"


def test_missing_report_falls_back(tmp_path: Path) -> None:
    """An absent report yields exactly one synthesized scenario."""
    settings = report_settings(tmp_path)

    report = collect_report(
        settings.reports_dir / "cucumber_report.json", settings, now=NOW
    )

    assert report.is_fallback is True
    assert len(report.scenarios) == 1
    assert report.stats.total_scenarios == 1


@pytest.mark.parametrize(
    ("content", "reason"),
    [
        ("", "empty"),
        ("{not json", "not valid JSON"),
        ('{"features": []}', "not an array"),
        ("[]", "empty array"),
        ('[{"elements": 42}]', "unexpected structure"),
    ],
)
def test_unusable_reports_are_rejected(
    tmp_path: Path, content: str, reason: str
) -> None:
    """Each kind of unusable report raises with a reason."""
    path = tmp_path / "cucumber_report.json"
    path.write_text(content)

    with pytest.raises(ReportUnusableError, match=reason):
        parse_features(path)


def test_malformed_report_falls_back(tmp_path: Path) -> None:
    """Malformed input never propagates out of collection."""
    settings = report_settings(tmp_path)
    path = settings.reports_dir / "cucumber_report.json"
    path.parent.mkdir(parents=True)
    path.write_text("{not json")

    report = collect_report(path, settings, now=NOW)

    assert report.is_fallback is True


def test_environment_specific_report_is_preferred(tmp_path: Path) -> None:
    """The per-environment file wins over the generic one."""
    write_report(tmp_path / "cucumber_report.json", [feature()])
    specific = write_report(tmp_path / "cucumber_report_test.json", [feature()])

    assert find_report_path(tmp_path, "test") == specific
    assert find_report_path(tmp_path, "prod") == tmp_path / "cucumber_report.json"


def test_browser_and_environment_precedence(tmp_path: Path) -> None:
    """BROWSER beats the sidecar; the sidecar environment beats ENV."""
    sidecar = SidecarMetadata(browser="firefox", environment="test")

    assert resolve_browser(report_settings(tmp_path, browser="webkit"), sidecar) == (
        "webkit"
    )
    assert resolve_browser(report_settings(tmp_path), sidecar) == "firefox"
    assert resolve_browser(report_settings(tmp_path), None) == "chrome"
    assert resolve_environment(report_settings(tmp_path), sidecar) == "test"
    assert resolve_environment(report_settings(tmp_path, environment="prod"), None) == (
        "prod"
    )
