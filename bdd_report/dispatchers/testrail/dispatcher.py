"""TestRail dispatcher implementation."""

import logging
import re
from collections.abc import AsyncGenerator, Iterable, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar

import aiohttp

from bdd_report.config import CiContext
from bdd_report.dispatchers.base import (
    PUBLISH_ERRORS,
    REQUEST_TIMEOUT,
    NotificationDispatcher,
)
from bdd_report.dispatchers.testrail.config import TestRailConfig
from bdd_report.dispatchers.testrail.models import TestRun
from bdd_report.models.report import NormalizedReport, ScenarioOutcome, ScenarioStatus

log = logging.getLogger(__name__)

CASE_TAG_PATTERN = re.compile(r"@C(\d+)")

STATUS_IDS: Mapping[str, int] = {
    "PASSED": 1,
    "FAILED": 5,
}


def extract_case_id(tags: Iterable[str]) -> int | None:
    """Return the TestRail case id from a ``@C<digits>`` tag, if any."""
    for tag in sorted(tags):
        if match := CASE_TAG_PATTERN.fullmatch(tag):
            return int(match.group(1))
    return None


def status_id_for(status: ScenarioStatus) -> int:
    """Passed scenarios pass; anything else is reported as failed."""
    return STATUS_IDS["PASSED"] if status == "PASSED" else STATUS_IDS["FAILED"]


def result_comment(outcome: ScenarioOutcome) -> str:
    """Comment attached to a case result."""
    verdict = "passed" if outcome.status == "PASSED" else "failed"
    return f"Test {verdict}: {outcome.name}"


@dataclass(frozen=True, kw_only=True)
class TestRailDispatcher(NotificationDispatcher):
    """Creates a TestRail run and posts a result per tagged scenario.

    Scenarios without a ``@C<digits>`` tag are not reported.
    """

    __test__ = False

    name: ClassVar[str] = "testrail"

    config: TestRailConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: TestRailConfig, ci: CiContext
    ) -> AsyncGenerator["TestRailDispatcher", None]:
        """Create dispatcher with managed session lifecycle."""
        headers = {"Content-Type": "application/json"}
        if config.key is not None:
            headers["Authorization"] = config.key.get_secret_value()
        async with aiohttp.ClientSession(
            base_url=config.url,
            headers=headers,
            timeout=REQUEST_TIMEOUT,
        ) as session:
            yield cls(config=config, ci=ci, session=session)

    def is_enabled(self) -> bool:
        """Enabled when the API key and suite id are configured."""
        return self.config.enabled

    async def publish(self, report: NormalizedReport) -> str:
        """Create a run, then add one result per case-tagged scenario."""
        tagged = [
            (case_id, outcome)
            for outcome in report.scenarios
            if (case_id := extract_case_id(outcome.tags)) is not None
        ]
        log.info(
            "%d of %d scenario(s) carry a TestRail case tag",
            len(tagged),
            len(report.scenarios),
        )

        environment = report.metadata.environment.upper()
        timestamp = datetime.now(timezone.utc).isoformat()
        run = await self.add_run(
            name=f"Automated Test Run - {environment} - {timestamp}",
            description=self.run_description(report),
            case_ids=sorted({case_id for case_id, _ in tagged}),
        )

        failures = 0
        for case_id, outcome in tagged:
            try:
                await self.add_result_for_case(
                    run.id,
                    case_id,
                    status_id=status_id_for(outcome.status),
                    comment=result_comment(outcome),
                )
            except (*PUBLISH_ERRORS, ValueError) as exc:
                failures += 1
                log.error("Failed to add result for case %s: %s", case_id, exc)

        if self.config.close_run:
            await self.close_run(run.id)

        run_url = self.run_url(run.id)
        if failures:
            raise RuntimeError(
                f"Failed to add {failures} of {len(tagged)} result(s) to {run_url}"
            )
        return f"{len(tagged)} result(s) uploaded to {run_url}"

    def run_description(self, report: NormalizedReport) -> str:
        """Run description, flagging synthesized results."""
        stats = report.stats
        lines = [
            f"Environment: {report.metadata.environment.upper()}",
            f"Browser: {report.metadata.browser}",
            f"Scenarios: {stats.passed}/{stats.total_scenarios} passed",
        ]
        if report.is_fallback:
            lines.append(
                "Fallback report: the primary test report was unavailable, "
                "results were synthesized from pipeline status"
            )
        if self.ci.pipeline_url:
            lines.append(f"Pipeline: {self.ci.pipeline_url}")
        return "\n".join(lines)

    def run_url(self, run_id: int) -> str:
        """Browser URL of a run."""
        return f"{self.config.url}index.php?/runs/view/{run_id}"

    async def add_run(
        self, name: str, description: str, case_ids: Sequence[int]
    ) -> TestRun:
        """Create a run in the configured project and suite."""
        url = f"index.php?/api/v2/add_run/{self.config.project_id}"
        payload = {
            "suite_id": self.config.suite_id,
            "name": name,
            "description": description,
            "include_all": False,
            "case_ids": list(case_ids),
        }
        data = await self._post(url, payload, action="create run")
        run = TestRun.model_validate(data)
        log.info("Created TestRail run %s", run.id)
        return run

    async def add_result_for_case(
        self, run_id: int, case_id: int, *, status_id: int, comment: str
    ) -> None:
        """Record a result for one case of a run."""
        url = f"index.php?/api/v2/add_result_for_case/{run_id}/{case_id}"
        await self._post(
            url,
            {"status_id": status_id, "comment": comment},
            action=f"add result for case {case_id}",
        )
        log.info("Added result for case %s in run %s", case_id, run_id)

    async def close_run(self, run_id: int) -> None:
        """Close a run so it can no longer be modified."""
        await self._post(
            f"index.php?/api/v2/close_run/{run_id}", {}, action="close run"
        )
        log.info("Closed TestRail run %s", run_id)

    async def _post(self, url: str, payload: Mapping[str, Any], *, action: str) -> Any:
        async with self.session.post(url, json=payload) as response:
            if response.status != 200:
                text = await response.text()
                raise RuntimeError(f"Failed to {action}: {response.status} {text}")
            return await response.json()
