"""Model for the execution-metadata sidecar file written by lifecycle hooks."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SidecarMetadata(BaseModel):
    """Contents of ``execution-metadata.json``.

    Written at execution start and completed at execution end, so every field
    except the ones known at start may be absent.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    start_time: datetime | None = None
    end_time: datetime | None = None
    total_duration: int | None = Field(default=None, ge=0, description="ms")
    browser: str | None = None
    environment: str | None = None
    total_scenarios: int | None = Field(default=None, ge=0)
    framework: str | None = None
    version: str | None = None

    @property
    def has_complete_timing(self) -> bool:
        """Whether start, end and duration were all recorded."""
        return (
            self.start_time is not None
            and self.end_time is not None
            and self.end_time >= self.start_time
            and bool(self.total_duration)
        )
