"""Abstract base class for result notification dispatchers."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Literal

import aiohttp
from pydantic import ValidationError

from bdd_report.config import CiContext
from bdd_report.models.report import NormalizedReport

log = logging.getLogger(__name__)

# Ceiling for every outbound call; there is no retry.
REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=30)

type DispatchStatus = Literal["sent", "skipped", "error"]

PUBLISH_ERRORS = (aiohttp.ClientError, RuntimeError, TimeoutError, ValidationError)


@dataclass(frozen=True, kw_only=True)
class DispatchResult:
    """Outcome of one dispatcher's publish attempt."""

    dispatcher: str
    status: DispatchStatus
    message: str | None = None


@dataclass(frozen=True, kw_only=True)
class NotificationDispatcher(ABC):
    """Abstract base for an external system that receives execution results.

    Dispatchers are independent and best effort: ``dispatch`` never raises,
    so one integration failing cannot affect another or the test run.
    """

    name: ClassVar[str]

    ci: CiContext

    @abstractmethod
    def is_enabled(self) -> bool:
        """Whether the integration is configured; decided by configuration only."""

    @abstractmethod
    async def publish(self, report: NormalizedReport) -> str:
        """Send the report to the external system.

        Args:
            report: Normalized execution results

        Returns:
            A short description of what was published

        Raises:
            RuntimeError: If the external system rejected a request
            aiohttp.ClientError: On connection failures

        """

    async def dispatch(self, report: NormalizedReport) -> DispatchResult:
        """Publish if enabled, converting every failure into a logged result."""
        if not self.is_enabled():
            log.info("%s integration not configured, skipping", self.name)
            return DispatchResult(dispatcher=self.name, status="skipped")

        try:
            message = await self.publish(report)
        except PUBLISH_ERRORS as exc:
            log.error("Failed to publish results to %s: %s", self.name, exc)
            return DispatchResult(
                dispatcher=self.name, status="error", message=str(exc)
            )

        log.info("Published results to %s: %s", self.name, message)
        return DispatchResult(dispatcher=self.name, status="sent", message=message)
