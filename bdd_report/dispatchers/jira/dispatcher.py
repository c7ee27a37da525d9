"""Jira dispatcher implementation."""

import logging
import re
from collections.abc import AsyncGenerator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import ClassVar

import aiohttp
from jinja2 import Environment

from bdd_report.config import CiContext
from bdd_report.dispatchers.base import (
    PUBLISH_ERRORS,
    REQUEST_TIMEOUT,
    NotificationDispatcher,
)
from bdd_report.dispatchers.jira.config import JiraConfig
from bdd_report.dispatchers.jira.models import Comment
from bdd_report.dispatchers.jira.templates import (
    CI_SECTION_TEMPLATE,
    FAILURE_TEMPLATE,
    SUCCESS_TEMPLATE,
)
from bdd_report.formatting import format_duration
from bdd_report.models.report import ExecutionStats, NormalizedReport, ScenarioOutcome

log = logging.getLogger(__name__)

TICKET_TAG_PATTERN = re.compile(r"@([A-Z][A-Z0-9]*-\d+)")

_templates = Environment(autoescape=False, trim_blocks=True)


def resolve_ticket(outcome: ScenarioOutcome, mapping: Mapping[str, str]) -> str | None:
    """Ticket tag first, then the static name lookup."""
    for tag in sorted(outcome.tags):
        if match := TICKET_TAG_PATTERN.fullmatch(tag):
            return match.group(1)
    return mapping.get(outcome.name)


def group_by_ticket(
    scenarios: Sequence[ScenarioOutcome], mapping: Mapping[str, str]
) -> Mapping[str, Sequence[ScenarioOutcome]]:
    """Group scenarios by resolved ticket, dropping unresolved ones."""
    groups: dict[str, list[ScenarioOutcome]] = {}
    for outcome in scenarios:
        if (ticket := resolve_ticket(outcome, mapping)) is not None:
            groups.setdefault(ticket, []).append(outcome)
    return groups


def render_ci_section(ci: CiContext) -> str:
    """Pipeline links, or an empty string outside CI."""
    if not ci.pipeline_url:
        return ""
    return _templates.from_string(CI_SECTION_TEMPLATE).render(
        pipeline_url=ci.pipeline_url,
        job_url=ci.job_url,
        project_url=ci.project_url,
    ).strip()


def build_comment(
    report: NormalizedReport,
    scenarios: Sequence[ScenarioOutcome],
    ci: CiContext,
    timestamp: datetime,
) -> str:
    """Render the comment for one ticket's subset of scenarios."""
    stats = ExecutionStats.from_outcomes(scenarios)
    template = FAILURE_TEMPLATE if stats.failed else SUCCESS_TEMPLATE
    return _templates.from_string(template).render(
        environment=report.metadata.environment,
        browser=report.metadata.browser,
        duration=format_duration(report.metadata.total_duration_ms),
        passed_scenarios=stats.passed,
        total_scenarios=stats.total_scenarios,
        test_details="\n".join(f"• {s.name}: {s.status}" for s in scenarios),
        failed_tests="\n".join(
            f"• {s.name}" for s in scenarios if s.status == "FAILED"
        ),
        is_fallback=report.is_fallback,
        ci_section=render_ci_section(ci),
        timestamp=timestamp.isoformat(),
    )


@dataclass(frozen=True, kw_only=True)
class JiraDispatcher(NotificationDispatcher):
    """Posts one aggregated comment per resolved Jira ticket.

    Scenarios with neither a ticket tag nor a mapping entry are not reported.
    """

    name: ClassVar[str] = "jira"

    config: JiraConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: JiraConfig, ci: CiContext
    ) -> AsyncGenerator["JiraDispatcher", None]:
        """Create dispatcher with managed session lifecycle."""
        auth = None
        if config.token is not None:
            auth = aiohttp.BasicAuth(config.email, config.token.get_secret_value())
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Atlassian-Token": "no-check",
        }
        async with aiohttp.ClientSession(
            base_url=config.base_url,
            headers=headers,
            auth=auth,
            timeout=REQUEST_TIMEOUT,
        ) as session:
            yield cls(config=config, ci=ci, session=session)

    def is_enabled(self) -> bool:
        """Enabled when an API token is configured."""
        return self.config.enabled

    async def publish(self, report: NormalizedReport) -> str:
        """Comment on every ticket that has at least one scenario."""
        groups = group_by_ticket(report.scenarios, self.config.ticket_mapping)
        if not groups:
            log.info("No scenarios mapped to Jira tickets")
            return "no scenarios mapped to Jira tickets"

        timestamp = datetime.now(timezone.utc)
        failed_tickets: list[str] = []
        for ticket, scenarios in groups.items():
            comment = build_comment(report, scenarios, self.ci, timestamp)
            try:
                await self.add_comment(ticket, comment)
            except (*PUBLISH_ERRORS, ValueError) as exc:
                failed_tickets.append(ticket)
                log.error("Failed to post to Jira ticket %s: %s", ticket, exc)

        if failed_tickets:
            raise RuntimeError(
                f"Failed to post to Jira ticket(s): {', '.join(failed_tickets)}"
            )
        return f"commented on {', '.join(groups)}"

    async def add_comment(self, ticket: str, body: str) -> Comment:
        """Add a comment to an issue."""
        url = f"rest/api/2/issue/{ticket}/comment"
        async with self.session.post(url, json={"body": body}) as response:
            if response.status != 201:
                text = await response.text()
                raise RuntimeError(
                    f"Failed to comment on {ticket}: {response.status} {text}"
                )
            data = await response.json()

        log.info("Posted test results to Jira ticket %s", ticket)
        return Comment.model_validate(data)
