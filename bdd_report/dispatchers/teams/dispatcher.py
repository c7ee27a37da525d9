"""Microsoft Teams dispatcher implementation."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, ClassVar

import aiohttp

from bdd_report.config import CiContext
from bdd_report.dispatchers.base import REQUEST_TIMEOUT, NotificationDispatcher
from bdd_report.dispatchers.teams.config import TeamsConfig
from bdd_report.dispatchers.teams.models import (
    Fact,
    MessageCard,
    OpenUriAction,
    Section,
    UriTarget,
)
from bdd_report.formatting import format_duration
from bdd_report.models.report import NormalizedReport

log = logging.getLogger(__name__)

SUCCESS_COLOR = "00FF00"
FAILURE_COLOR = "FF0000"

# Incoming webhooks answer 200, Power Automate flows 202.
ACCEPTED_STATUSES: frozenset[int] = frozenset([200, 202])


def build_message_card(report: NormalizedReport, ci: CiContext) -> MessageCard:
    """Summarize the run as a MessageCard."""
    stats = report.stats
    metadata = report.metadata
    environment = metadata.environment.upper()
    duration = format_duration(metadata.total_duration_ms)
    is_success = stats.failed == 0

    sections = [
        Section(
            activity_title=(
                f"🧪 Test Execution {'Passed' if is_success else 'Failed'}"
            ),
            activity_subtitle=(
                f"Environment: {environment} | Browser: {metadata.browser}"
            ),
            facts=[
                Fact(name="Total Scenarios", value=str(stats.total_scenarios)),
                Fact(name="Passed", value=str(stats.passed)),
                Fact(name="Failed", value=str(stats.failed)),
                Fact(name="Skipped", value=str(stats.skipped)),
                Fact(name="Duration", value=duration),
                Fact(name="Environment", value=environment),
                Fact(name="Browser", value=metadata.browser.upper()),
            ],
        )
    ]

    if report.is_fallback:
        sections.append(
            Section(
                activity_title="⚠️ Fallback Report",
                text=(
                    "The primary test report was missing or invalid. "
                    "Results were synthesized from pipeline status."
                ),
            )
        )

    if failed := report.failed_scenarios:
        sections.append(
            Section(
                activity_title="❌ Failed Scenarios",
                text="\n".join(f"• {scenario.name}" for scenario in failed),
            )
        )

    potential_action = None
    if ci.pipeline_url:
        sections.append(
            Section(
                activity_title="🚀 GitLab Pipeline",
                facts=[
                    Fact(name="Branch", value=ci.branch),
                    Fact(name="Commit", value=ci.short_sha),
                ],
            )
        )
        potential_action = [
            OpenUriAction(
                name="View Pipeline", targets=[UriTarget(uri=ci.pipeline_url)]
            )
        ]

    return MessageCard(
        theme_color=SUCCESS_COLOR if is_success else FAILURE_COLOR,
        summary=f"Test Results - {environment}",
        sections=sections,
        potential_action=potential_action,
    )


def card_payload(card: MessageCard) -> dict[str, Any]:
    """JSON body for the webhook."""
    return card.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass(frozen=True, kw_only=True)
class TeamsDispatcher(NotificationDispatcher):
    """Posts a single summary card to a Teams webhook."""

    name: ClassVar[str] = "teams"

    config: TeamsConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: TeamsConfig, ci: CiContext
    ) -> AsyncGenerator["TeamsDispatcher", None]:
        """Create dispatcher with managed session lifecycle."""
        async with aiohttp.ClientSession(
            headers={"Content-Type": "application/json"},
            timeout=REQUEST_TIMEOUT,
        ) as session:
            yield cls(config=config, ci=ci, session=session)

    def is_enabled(self) -> bool:
        """Enabled when a webhook URL is configured."""
        return self.config.enabled

    async def publish(self, report: NormalizedReport) -> str:
        """Post the summary card."""
        if self.config.webhook_url is None:
            raise RuntimeError("Teams webhook URL is not configured")

        card = build_message_card(report, self.ci)
        url = self.config.webhook_url.get_secret_value()
        async with self.session.post(url, json=card_payload(card)) as response:
            if response.status not in ACCEPTED_STATUSES:
                text = await response.text()
                raise RuntimeError(
                    f"Failed to send Teams notification: {response.status} {text}"
                )

        return f"card sent ({card.theme_color})"
