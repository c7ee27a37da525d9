"""CLI entry point for report generation and result notification."""

import argparse
import asyncio
import json
import logging
import os
import sys
from collections.abc import Sequence
from contextlib import AsyncExitStack
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic_settings import SettingsError

from bdd_report.checker import check_results
from bdd_report.cleanup import cleanup_reports
from bdd_report.collector import (
    GENERIC_REPORT_FILENAME,
    collect_report,
    find_report_path,
    resolve_browser,
)
from bdd_report.config import CiContext, ReportSettings, resolve_environment_config
from bdd_report.dispatchers.base import DispatchResult, NotificationDispatcher
from bdd_report.dispatchers.loading import (
    ENTRY_POINT_GROUP,
    DispatcherNotFoundError,
    available_dispatchers,
    load_dispatcher_manifest,
)
from bdd_report.formatting import format_duration, success_rate
from bdd_report.metadata import (
    load_sidecar_metadata,
    record_execution_end,
    record_execution_start,
)
from bdd_report.models.report import NormalizedReport
from bdd_report.orchestrator import NotificationOrchestrator
from bdd_report.renderer import ReportRenderer, write_basic_report

# Raised while loading, configuring or opening a dispatcher; pydantic's
# ValidationError and aiohttp's invalid base URL are both ValueErrors.
SETUP_ERRORS = (DispatcherNotFoundError, SettingsError, ValueError)

STATUS_SYMBOLS = {
    "sent": "✓",
    "skipped": "-",
    "error": "✗",
}


def log_results_summary(
    log: logging.Logger,
    report: NormalizedReport,
    dispatch_results: Sequence[DispatchResult],
) -> None:
    """Log a formatted summary of the report and each notification."""
    stats = report.stats
    log.info("=" * 80)
    log.info("Test Results Summary%s:", " (fallback)" if report.is_fallback else "")
    log.info("=" * 80)
    log.info(
        "%d/%d scenarios passed, %d failed, %d skipped (%s%%) in %s",
        stats.passed,
        stats.total_scenarios,
        stats.failed,
        stats.skipped,
        success_rate(stats),
        format_duration(report.metadata.total_duration_ms),
    )

    for result in dispatch_results:
        symbol = STATUS_SYMBOLS.get(result.status, "?")
        log.info("%s %s: %s", symbol, result.dispatcher, result.status)
        if result.message:
            log.info("  Message: %s", result.message)


def format_output(
    report: NormalizedReport,
    rendered: bool,
    dispatch_results: Sequence[DispatchResult],
) -> dict[str, Any]:
    """Format the run outcome for JSON output."""
    return {
        "total": report.stats.total_scenarios,
        "passed": report.stats.passed,
        "failed": report.stats.failed,
        "skipped": report.stats.skipped,
        "duration": format_duration(report.metadata.total_duration_ms),
        "is_fallback": report.is_fallback,
        "rendered": rendered,
        "notifications": [
            {
                "dispatcher": result.dispatcher,
                "status": result.status,
                "message": result.message,
            }
            for result in dispatch_results
        ],
    }


async def dispatch_notifications(
    report: NormalizedReport,
    ci: CiContext,
    dispatcher_keys: Sequence[str],
) -> Sequence[DispatchResult]:
    """Publish the report through every requested dispatcher.

    Dispatchers that cannot be loaded or configured become error results
    instead of stopping the others.
    """
    log = logging.getLogger("bdd_report")
    setup_errors: list[DispatchResult] = []

    async with AsyncExitStack() as stack:
        dispatchers: list[NotificationDispatcher] = []
        for key in dispatcher_keys:
            try:
                manifest = load_dispatcher_manifest(key)
                config = manifest.config_cls()
                dispatcher = await stack.enter_async_context(
                    manifest.dispatcher_factory(config, ci)
                )
            except SETUP_ERRORS as exc:
                log.error("Cannot set up dispatcher %s: %s", key, exc)
                setup_errors.append(
                    DispatchResult(dispatcher=key, status="error", message=str(exc))
                )
                continue
            dispatchers.append(dispatcher)

        orchestrator = NotificationOrchestrator(dispatchers=dispatchers)
        results = await orchestrator.publish(report)

    return [*results, *setup_errors]


async def run(
    settings: ReportSettings,
    ci: CiContext,
    dispatcher_keys: Sequence[str] | None = None,
    notify: bool = True,
) -> int:
    """Collect, render and publish the results of a test run.

    Returns 0 once an HTML report exists, 1 if only the emergency page could
    be written. Notification outcomes never change the exit code.
    """
    log = logging.getLogger("bdd_report")

    sidecar = load_sidecar_metadata(settings.sidecar_path)
    report_path = find_report_path(settings.reports_dir, settings.environment)
    report = collect_report(report_path, settings, sidecar)

    renderer = ReportRenderer(reports_dir=settings.reports_dir)
    rendered = renderer.render(report)
    if not rendered:
        log.error("Report generation failed, writing emergency basic report")
        write_basic_report(renderer.output_dir, report, datetime.now(timezone.utc))

    dispatch_results: Sequence[DispatchResult] = []
    if notify:
        keys = available_dispatchers() if dispatcher_keys is None else dispatcher_keys
        dispatch_results = await dispatch_notifications(report, ci, keys)

    log_results_summary(log, report, dispatch_results)
    print(json.dumps(format_output(report, rendered, dispatch_results), indent=2))

    return 0 if rendered else 1


def run_metadata(settings: ReportSettings, phase: str, scenarios: int) -> int:
    """Record the start or end of a test run in the sidecar file."""
    now = datetime.now(timezone.utc)
    if phase == "start":
        record_execution_start(
            settings.reports_dir,
            browser=resolve_browser(settings, None),
            environment=settings.environment,
            now=now,
        )
        return 0
    return 0 if record_execution_end(settings.reports_dir, scenarios, now) else 1


def run_config(settings: ReportSettings) -> int:
    """Print the resolved environment configuration."""
    config = resolve_environment_config(
        settings.environment, settings.test_data_dir, os.environ
    )
    print(config.model_dump_json(indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Argument parser with one subcommand per pipeline step."""
    parser = argparse.ArgumentParser(
        description="Generate BDD test reports and publish results"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser(
        "generate", help="Build the HTML report and send notifications"
    )
    generate.add_argument(
        "--dispatcher",
        dest="dispatchers",
        action="append",
        help=(
            f"Dispatcher key registered under '{ENTRY_POINT_GROUP}' "
            "(repeatable, default: every registered dispatcher)"
        ),
    )
    generate.add_argument(
        "--skip-notifications",
        action="store_true",
        help="Only build the HTML report",
    )

    check = subparsers.add_parser("check", help="Set the exit code from a report")
    check.add_argument(
        "report_file",
        nargs="?",
        type=Path,
        help=(
            "Cucumber JSON report "
            f"(default: <REPORTS_DIR>/{GENERIC_REPORT_FILENAME})"
        ),
    )

    subparsers.add_parser("cleanup", help="Remove report files of previous runs")

    metadata = subparsers.add_parser(
        "metadata", help="Record execution start or end for the report"
    )
    metadata.add_argument("phase", choices=["start", "end"])
    metadata.add_argument(
        "--scenarios",
        type=int,
        default=0,
        help="Number of executed scenarios (end phase)",
    )

    subparsers.add_parser("config", help="Print the resolved environment config")

    return parser


def main() -> None:
    """CLI entry point."""
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    settings = ReportSettings()
    ci = CiContext()

    if args.command == "generate":
        exit_code = asyncio.run(
            run(
                settings,
                ci,
                dispatcher_keys=args.dispatchers,
                notify=not args.skip_notifications,
            )
        )
    elif args.command == "check":
        report_path = (
            settings.reports_dir / GENERIC_REPORT_FILENAME
            if args.report_file is None
            else args.report_file
        )
        exit_code = check_results(report_path, ci)
    elif args.command == "cleanup":
        cleanup_reports(settings.reports_dir)
        exit_code = 0
    elif args.command == "metadata":
        exit_code = run_metadata(settings, args.phase, args.scenarios)
    else:
        exit_code = run_config(settings)

    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
