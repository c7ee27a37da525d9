"""Models for normalized test execution results."""

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Literal, Self

from pydantic import Field, model_validator

from bdd_report.models.base import Model

type ScenarioStatus = Literal["PASSED", "FAILED", "SKIPPED"]


class ScenarioOutcome(Model):
    """Outcome of a single scenario, created once while parsing a report."""

    name: str = Field(..., description="Scenario name")
    feature_name: str = Field(..., description="Name of the enclosing feature")
    tags: frozenset[str] = Field(
        default_factory=frozenset, description="Scenario tags, including '@'"
    )
    status: ScenarioStatus = Field(..., description="Classified scenario status")
    duration_nanos: int = Field(default=0, ge=0, description="Summed step duration")


class ExecutionStats(Model):
    """Aggregate counts over an ordered sequence of scenario outcomes."""

    total_scenarios: int = Field(default=0, ge=0)
    passed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_total(self) -> Self:
        if self.total_scenarios != self.passed + self.failed + self.skipped:
            raise ValueError(
                "total_scenarios must equal passed + failed + skipped "
                f"({self.total_scenarios} != "
                f"{self.passed} + {self.failed} + {self.skipped})"
            )
        return self

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[ScenarioOutcome]) -> "ExecutionStats":
        """Count outcomes by status."""
        statuses = [outcome.status for outcome in outcomes]
        return cls(
            total_scenarios=len(statuses),
            passed=statuses.count("PASSED"),
            failed=statuses.count("FAILED"),
            skipped=statuses.count("SKIPPED"),
        )


class ExecutionMetadata(Model):
    """Timing and environment information for one test execution."""

    start_time: datetime | None = None
    end_time: datetime | None = None
    total_duration_ms: int = Field(default=0, ge=0)
    browser: str = "chrome"
    environment: str = "dev"

    @model_validator(mode="after")
    def _check_time_order(self) -> Self:
        if (
            self.start_time is not None
            and self.end_time is not None
            and self.end_time < self.start_time
        ):
            raise ValueError("end_time must not be earlier than start_time")
        return self


class NormalizedReport(Model):
    """The unit handed to the renderer and every notification dispatcher.

    ``is_fallback`` is set when the runner's report could not be used and the
    content was synthesized from secondary signals. Every consumer flags this
    provenance in its output.
    """

    stats: ExecutionStats
    scenarios: Sequence[ScenarioOutcome] = Field(default_factory=tuple)
    metadata: ExecutionMetadata = Field(default_factory=ExecutionMetadata)
    is_fallback: bool = False

    @classmethod
    def from_outcomes(
        cls,
        outcomes: Sequence[ScenarioOutcome],
        metadata: ExecutionMetadata,
        *,
        is_fallback: bool = False,
    ) -> "NormalizedReport":
        """Build a report whose stats are derived from ``outcomes``."""
        return cls(
            stats=ExecutionStats.from_outcomes(outcomes),
            scenarios=tuple(outcomes),
            metadata=metadata,
            is_fallback=is_fallback,
        )

    @property
    def failed_scenarios(self) -> Sequence[ScenarioOutcome]:
        """Scenarios classified as failed, in report order."""
        return [s for s in self.scenarios if s.status == "FAILED"]
