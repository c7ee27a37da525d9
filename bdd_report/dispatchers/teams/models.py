"""Pydantic models for the Teams MessageCard payload."""

from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class CardModel(BaseModel):
    """Serializes with the ``@type``/``@context`` aliases Teams expects."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Fact(CardModel):
    """A name/value row of a section."""

    name: str
    value: str


class Section(CardModel):
    """A titled block of the card."""

    activity_title: str = Field(..., alias="activityTitle")
    activity_subtitle: str | None = Field(default=None, alias="activitySubtitle")
    text: str | None = None
    facts: Sequence[Fact] | None = None


class UriTarget(CardModel):
    """Target of an OpenUri action."""

    os: Literal["default"] = "default"
    uri: str


class OpenUriAction(CardModel):
    """Clickable button on the card."""

    type: Literal["OpenUri"] = Field(default="OpenUri", alias="@type")
    name: str
    targets: Sequence[UriTarget]


class MessageCard(CardModel):
    """Legacy actionable message card accepted by Teams webhooks."""

    type: Literal["MessageCard"] = Field(default="MessageCard", alias="@type")
    context: str = Field(default="http://schema.org/extensions", alias="@context")
    theme_color: str = Field(..., alias="themeColor")
    summary: str
    sections: Sequence[Section]
    potential_action: Sequence[OpenUriAction] | None = Field(
        default=None, alias="potentialAction"
    )
