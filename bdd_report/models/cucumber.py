"""Pydantic models for the BDD runner's cucumber JSON report."""

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter, field_validator

type StepStatus = str  # passed, failed, skipped, pending, undefined, ambiguous


class StepResult(BaseModel):
    """Execution result of a single step."""

    status: StepStatus
    duration: int = Field(default=0, ge=0, description="Duration in nanoseconds")

    @field_validator("duration", mode="before")
    @classmethod
    def _round_duration(cls, value: Any) -> Any:
        # Some formatters emit fractional nanoseconds.
        if isinstance(value, float):
            return round(value)
        return value if value is not None else 0


class Step(BaseModel):
    """A step inside a scenario element."""

    keyword: str = ""
    name: str = ""
    result: StepResult | None = None


class Tag(BaseModel):
    """A scenario or feature tag."""

    name: str


class Element(BaseModel):
    """A scenario (or background) inside a feature."""

    id: str = ""
    name: str = ""
    keyword: str = "Scenario"
    type: str = ""
    steps: Sequence[Step] = Field(default_factory=list)
    tags: Sequence[Tag] = Field(default_factory=list)

    @property
    def is_scenario(self) -> bool:
        """Explicitly typed as a scenario."""
        return self.type == "scenario"

    @property
    def is_background(self) -> bool:
        """Backgrounds are reported as elements but are not scenarios."""
        return self.type == "background"


class Feature(BaseModel):
    """A feature entry of the report array."""

    uri: str = ""
    name: str = ""
    elements: Sequence[Element] = Field(default_factory=list)
    tags: Sequence[Tag] = Field(default_factory=list)


CucumberReport = TypeAdapter(list[Feature])
