"""Notification orchestrator fanning a report out to every dispatcher."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from bdd_report.dispatchers.base import DispatchResult, NotificationDispatcher
from bdd_report.models.report import NormalizedReport

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class NotificationOrchestrator:
    """Runs all dispatchers concurrently against the same read-only report."""

    dispatchers: Sequence[NotificationDispatcher]

    async def publish(self, report: NormalizedReport) -> Sequence[DispatchResult]:
        """Dispatch the report everywhere; never raises.

        Args:
            report: Normalized execution results

        Returns:
            One result per dispatcher, in dispatcher order

        """
        if not self.dispatchers:
            log.info("No notification dispatchers configured")
            return []

        log.info("Dispatching results to %d integration(s)...", len(self.dispatchers))
        results = await asyncio.gather(
            *(dispatcher.dispatch(report) for dispatcher in self.dispatchers),
            return_exceptions=True,
        )
        log.info("Notification dispatch completed")

        return self._process_results(results)

    def _process_results(
        self, results: Sequence[DispatchResult | BaseException]
    ) -> Sequence[DispatchResult]:
        """Turn unexpected exceptions into error results."""
        final_results: list[DispatchResult] = []

        for dispatcher, result in zip(self.dispatchers, results, strict=True):
            if isinstance(result, DispatchResult):
                final_results.append(result)
            elif isinstance(result, Exception):
                log.error(
                    "Dispatcher %s failed unexpectedly: %s",
                    dispatcher.name,
                    result,
                    exc_info=result,
                )
                final_results.append(
                    DispatchResult(
                        dispatcher=dispatcher.name, status="error", message=str(result)
                    )
                )
            else:
                raise result

        return final_results
