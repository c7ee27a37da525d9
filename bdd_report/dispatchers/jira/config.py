"""Configuration for the Jira dispatcher."""

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class JiraConfig(BaseSettings):
    """Configuration for the Jira dispatcher, read from ``JIRA_*``."""

    model_config = SettingsConfigDict(env_prefix="JIRA_", extra="ignore")

    base_url: str = "https://jira.example.com/"
    email: str = ""
    token: SecretStr | None = None
    # Scenario name -> ticket key, for scenarios without a ticket tag.
    # JIRA_TICKET_MAPPING takes a JSON object.
    ticket_mapping: dict[str, str] = Field(default_factory=dict)

    @field_validator("base_url")
    @classmethod
    def _absolute_with_trailing_slash(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"must be an absolute http(s) URL, got {value!r}")
        return value if value.endswith("/") else f"{value}/"

    @property
    def enabled(self) -> bool:
        """An API token is required."""
        return self.token is not None and bool(self.token.get_secret_value())
