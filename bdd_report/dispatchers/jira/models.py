"""Pydantic models for Jira REST API responses."""

from pydantic import BaseModel


class Comment(BaseModel):
    """A comment created on an issue."""

    id: str
    body: str = ""
