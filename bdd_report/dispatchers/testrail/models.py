"""Pydantic models for TestRail API responses."""

from pydantic import BaseModel


class TestRun(BaseModel):
    """A run created through ``add_run``."""

    __test__ = False

    id: int
    name: str = ""
    url: str | None = None
