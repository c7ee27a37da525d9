"""HTML report rendering with a minimal inline fallback page."""

import html
import logging
import platform
import shutil
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError
from pydantic import ValidationError

from bdd_report.formatting import NANOS_PER_MILLI, format_duration, success_rate
from bdd_report.models.report import NormalizedReport

log = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
REPORT_TEMPLATE = "report.html.j2"
REPORT_DIRNAME = "cucumber-html-report"
REPORT_DATA_FILENAME = "report.json"

PROJECT_NAME = "Playwright BDD Framework"
REPORT_TITLE = "Automation Test Execution Report"
PAGE_TITLE = "BDD Test Results"
PAGE_FOOTER = "Generated by the BDD automation framework"
DEVICE = "Local Test Machine"


def create_template_environment() -> Environment:
    """Jinja2 environment for the packaged report templates."""
    environment = Environment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        autoescape=True,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    environment.filters["duration_from_nanos"] = lambda nanos: format_duration(
        nanos // NANOS_PER_MILLI
    )
    return environment


def format_timestamp(value: datetime | None) -> str:
    """Local-time display of an optional timestamp."""
    if value is None:
        return "Unknown"
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def build_template_context(
    report: NormalizedReport, generated_at: datetime
) -> Mapping[str, Any]:
    """Structured input for the report template."""
    metadata = report.metadata
    return {
        "report": report,
        "report_title": (
            f"{REPORT_TITLE} (Fallback)" if report.is_fallback else REPORT_TITLE
        ),
        "page_title": PAGE_TITLE,
        "page_footer": PAGE_FOOTER,
        "success_rate": success_rate(report.stats),
        "generated_at": format_timestamp(generated_at),
        "device": DEVICE,
        "platform": {"name": platform.system(), "version": platform.release()},
        "browser": {"name": metadata.browser, "version": "latest"},
        "custom_data": {
            "title": "Test Execution Summary",
            "data": [
                {"label": "Project", "value": PROJECT_NAME},
                {"label": "Environment", "value": metadata.environment.upper()},
                {"label": "Browser", "value": metadata.browser},
                {
                    "label": "Execution Start Time",
                    "value": format_timestamp(metadata.start_time),
                },
                {
                    "label": "Execution End Time",
                    "value": format_timestamp(metadata.end_time),
                },
                {
                    "label": "Total Duration",
                    "value": format_duration(metadata.total_duration_ms),
                },
                {
                    "label": "Report Type",
                    "value": (
                        "Fallback Report" if report.is_fallback else "Standard Report"
                    ),
                },
            ],
        },
    }


@dataclass(frozen=True, kw_only=True)
class ReportRenderer:
    """Writes the HTML report tree under ``reports_dir``."""

    reports_dir: Path
    templates: Environment = field(
        default_factory=create_template_environment, repr=False
    )

    @property
    def output_dir(self) -> Path:
        """Directory holding ``index.html`` and its data file."""
        return self.reports_dir / REPORT_DIRNAME

    def render(self, report: NormalizedReport, now: datetime | None = None) -> bool:
        """Render the report, replacing any previous artifact tree.

        Returns:
            True if an ``index.html`` was written, False if the primary
            renderer failed for a non-fallback report.

        """
        generated_at = now or datetime.now(timezone.utc)
        log.info("Starting HTML report generation")
        if report.is_fallback:
            log.warning("Rendering fallback report: primary report data unavailable")

        try:
            self._generate(report, generated_at)
        except (TemplateError, OSError, ValidationError, ValueError) as exc:
            log.error("HTML report generation failed: %s", exc, exc_info=exc)
            if report.is_fallback:
                log.info("Writing basic HTML report instead")
                return write_basic_report(self.output_dir, report, generated_at)
            return False

        log.info("HTML report generated: %s", self.output_dir / "index.html")
        log.info(
            "Summary: %d/%d scenarios passed (%s%%)",
            report.stats.passed,
            report.stats.total_scenarios,
            success_rate(report.stats),
        )
        return True

    def _generate(self, report: NormalizedReport, generated_at: datetime) -> None:
        self.reports_dir.mkdir(parents=True, exist_ok=True)

        # Each invocation works in its own scratch directory, removed on exit.
        with tempfile.TemporaryDirectory(
            prefix="report-generation-", dir=self.reports_dir
        ) as scratch:
            scratch_dir = Path(scratch)
            data_path = scratch_dir / REPORT_DATA_FILENAME
            data_path.write_text(report.model_dump_json(indent=2), encoding="utf-8")

            staged = scratch_dir / REPORT_DIRNAME
            staged.mkdir()
            staged_report = NormalizedReport.model_validate_json(data_path.read_bytes())
            template = self.templates.get_template(REPORT_TEMPLATE)
            (staged / "index.html").write_text(
                template.render(**build_template_context(staged_report, generated_at)),
                encoding="utf-8",
            )
            shutil.copyfile(data_path, staged / REPORT_DATA_FILENAME)

            _replace_tree(staged, self.output_dir)


def _replace_tree(source: Path, target: Path) -> None:
    if target.exists():
        shutil.rmtree(target)
    shutil.move(source, target)


def write_basic_report(
    output_dir: Path, report: NormalizedReport, generated_at: datetime
) -> bool:
    """Write a self-contained minimal HTML page; never raises."""
    metadata = report.metadata
    stats = report.stats
    rows = [
        ("Environment", metadata.environment.upper(), ""),
        ("Browser", metadata.browser, ""),
        ("Start Time", format_timestamp(metadata.start_time), ""),
        ("End Time", format_timestamp(metadata.end_time), ""),
        ("Duration", format_duration(metadata.total_duration_ms), ""),
        ("Total Scenarios", str(stats.total_scenarios), ""),
        ("Passed", str(stats.passed), "status-passed"),
        ("Failed", str(stats.failed), "status-failed"),
        ("Skipped", str(stats.skipped), "status-unknown"),
    ]
    table_rows = "\n".join(
        f'<tr><td>{label}</td><td class="{css}">{html.escape(value)}</td></tr>'
        for label, value, css in rows
    )
    banner = ""
    if report.is_fallback:
        banner = """
        <div class="alert alert-warning">
            <strong>Fallback Report</strong><br>
            This is a basic report generated because the primary cucumber JSON
            report was missing or invalid. Test execution may have failed before
            producing proper results.
        </div>"""

    content = f"""<!DOCTYPE html>
<html>
<head>
    <title>{PAGE_TITLE} - Basic Report</title>
    <meta charset="utf-8">
    <style>
        body {{ font-family: Arial, sans-serif; margin: 20px; background-color: #f5f5f5; }}
        .container {{ max-width: 800px; margin: 0 auto; background: white; padding: 20px; border-radius: 8px; }}
        .header {{ text-align: center; margin-bottom: 30px; }}
        .status-failed {{ color: #dc3545; }}
        .status-passed {{ color: #28a745; }}
        .status-unknown {{ color: #ffc107; }}
        .info-table {{ width: 100%; border-collapse: collapse; margin: 20px 0; }}
        .info-table th, .info-table td {{ padding: 10px; text-align: left; border-bottom: 1px solid #ddd; }}
        .alert {{ padding: 15px; margin: 20px 0; border-radius: 4px; }}
        .alert-warning {{ background-color: #fff3cd; border: 1px solid #ffeaa7; color: #856404; }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>{REPORT_TITLE}</h1>
            <h2>Basic Report</h2>
        </div>
{banner}
        <table class="info-table">
            <tr><th>Property</th><th>Value</th></tr>
{table_rows}
        </table>
        <div style="margin-top: 30px; text-align: center; color: #666;">
            <p>{PAGE_FOOTER} - Basic Report Mode</p>
            <p>Report generated at: {format_timestamp(generated_at)}</p>
        </div>
    </div>
</body>
</html>
"""

    try:
        if output_dir.exists():
            shutil.rmtree(output_dir)
        output_dir.mkdir(parents=True)
        (output_dir / "index.html").write_text(content, encoding="utf-8")
    except OSError as exc:
        log.error("Could not write basic HTML report to %s: %s", output_dir, exc)
        return False

    log.info("Basic HTML report created: %s", output_dir / "index.html")
    return True
