"""Integration tests for the Teams dispatcher."""

from collections.abc import AsyncGenerator

import pytest
from aioresponses import aioresponses as aioresponses_cls
from pydantic import SecretStr
from yarl import URL

from bdd_report.dispatchers.teams import TeamsConfig, TeamsDispatcher
from bdd_report.testing.factories import (
    ScenarioOutcomeFactory,
    build_report,
    ci_context,
)

WEBHOOK_URL = "http://teams.test/webhookb2/abc/IncomingWebhook/def"


@pytest.fixture
async def dispatcher(
    aioresponses: aioresponses_cls,
) -> AsyncGenerator[TeamsDispatcher, None]:
    """Create dispatcher with managed session."""
    config = TeamsConfig(webhook_url=SecretStr(WEBHOOK_URL))
    async with TeamsDispatcher.from_config(config, ci_context()) as impl:
        yield impl


@pytest.mark.parametrize("status", [200, 202])
async def test_posts_card_to_webhook(
    dispatcher: TeamsDispatcher,
    aioresponses: aioresponses_cls,
    status: int,
) -> None:
    """Posts a red card when scenarios failed; 200 and 202 are accepted."""
    aioresponses.post(WEBHOOK_URL, status=status, body="1")
    report = build_report(
        [
            ScenarioOutcomeFactory.build(status="PASSED"),
            ScenarioOutcomeFactory.build(status="FAILED"),
        ]
    )

    result = await dispatcher.dispatch(report)

    assert result.status == "sent"
    (call,) = aioresponses.requests[("POST", URL(WEBHOOK_URL))]
    payload = call.kwargs["json"]
    assert payload["@type"] == "MessageCard"
    assert payload["themeColor"] == "FF0000"


async def test_rejected_webhook_is_an_error_result(
    dispatcher: TeamsDispatcher,
    aioresponses: aioresponses_cls,
) -> None:
    """A rejected post is reported with status and body."""
    aioresponses.post(WEBHOOK_URL, status=400, body="Bad payload")

    result = await dispatcher.dispatch(build_report([]))

    assert result.status == "error"
    assert result.message == "Failed to send Teams notification: 400 Bad payload"


async def test_disabled_without_webhook(aioresponses: aioresponses_cls) -> None:
    """No webhook means the integration is skipped."""
    async with TeamsDispatcher.from_config(
        TeamsConfig(webhook_url=None), ci_context()
    ) as dispatcher:
        result = await dispatcher.dispatch(build_report([]))

    assert result.status == "skipped"
    assert not aioresponses.requests
