"""Tests for HTML report rendering."""

import json
from datetime import datetime, timezone
from pathlib import Path

from jinja2 import DictLoader, Environment, StrictUndefined

from bdd_report.renderer import (
    REPORT_DATA_FILENAME,
    REPORT_DIRNAME,
    REPORT_TEMPLATE,
    ReportRenderer,
    write_basic_report,
)
from bdd_report.testing.factories import ScenarioOutcomeFactory, build_report

NOW = datetime(2099, 1, 1, 13, 0, tzinfo=timezone.utc)


def broken_templates() -> Environment:
    return Environment(
        loader=DictLoader({REPORT_TEMPLATE: "{{ undefined_variable }}"}),
        undefined=StrictUndefined,
    )


def test_renders_index_and_data(tmp_path: Path) -> None:
    """Writes index.html and the normalized data next to it."""
    report = build_report(
        [
            ScenarioOutcomeFactory.build(
                name="Login works", tags=frozenset({"@smoke"}), status="PASSED"
            ),
            ScenarioOutcomeFactory.build(name="Logout breaks", status="FAILED"),
        ],
        environment="test",
    )

    assert ReportRenderer(reports_dir=tmp_path).render(report, now=NOW) is True

    output_dir = tmp_path / REPORT_DIRNAME
    index = (output_dir / "index.html").read_text()
    assert "Login works" in index
    assert "Logout breaks" in index
    assert "@smoke" in index
    assert "TEST" in index
    assert "50.0%" in index
    assert "Fallback Report" not in index
    data = json.loads((output_dir / REPORT_DATA_FILENAME).read_text())
    assert data["stats"]["total_scenarios"] == 2


def test_rerender_overwrites_previous_artifact(tmp_path: Path) -> None:
    """The artifact reflects only the latest input."""
    renderer = ReportRenderer(reports_dir=tmp_path)
    renderer.render(build_report([ScenarioOutcomeFactory.build(name="Alpha")]))
    (renderer.output_dir / "stale.txt").write_text("left over")

    renderer.render(build_report([ScenarioOutcomeFactory.build(name="Beta")]))

    index = (renderer.output_dir / "index.html").read_text()
    assert "Beta" in index
    assert "Alpha" not in index
    assert not (renderer.output_dir / "stale.txt").exists()
    assert [p.name for p in tmp_path.iterdir()] == [REPORT_DIRNAME]


def test_fallback_report_is_flagged(tmp_path: Path) -> None:
    """Synthesized reports carry a visible banner."""
    report = build_report(
        [ScenarioOutcomeFactory.build(status="SKIPPED")], is_fallback=True
    )

    ReportRenderer(reports_dir=tmp_path).render(report, now=NOW)

    index = (tmp_path / REPORT_DIRNAME / "index.html").read_text()
    assert "Fallback Report" in index


def test_fallback_report_degrades_to_basic_page(tmp_path: Path) -> None:
    """A failing template still yields a page for fallback reports."""
    report = build_report(
        [ScenarioOutcomeFactory.build(status="FAILED")], is_fallback=True
    )
    renderer = ReportRenderer(reports_dir=tmp_path, templates=broken_templates())

    assert renderer.render(report, now=NOW) is True

    index = (renderer.output_dir / "index.html").read_text()
    assert "Basic Report" in index
    assert "Fallback Report" in index


def test_primary_failure_reports_false(tmp_path: Path) -> None:
    """A failing template for a real report is left to the caller."""
    renderer = ReportRenderer(reports_dir=tmp_path, templates=broken_templates())

    assert renderer.render(build_report([ScenarioOutcomeFactory.build()])) is False
    assert not (renderer.output_dir / "index.html").exists()


def test_basic_report_escapes_values(tmp_path: Path) -> None:
    """Metadata values are HTML-escaped."""
    report = build_report([], browser="<script>")

    assert write_basic_report(tmp_path / "out", report, NOW) is True

    index = (tmp_path / "out" / "index.html").read_text()
    assert "&lt;script&gt;" in index
    assert "<script>" not in index
