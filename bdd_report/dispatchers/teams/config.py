"""Configuration for the Microsoft Teams dispatcher."""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class TeamsConfig(BaseSettings):
    """Configuration for the Teams dispatcher, read from ``TEAMS_*``."""

    model_config = SettingsConfigDict(env_prefix="TEAMS_", extra="ignore")

    # Incoming webhook or Power Automate flow URL; it embeds a signature.
    webhook_url: SecretStr | None = None

    @property
    def enabled(self) -> bool:
        """A webhook URL is required."""
        return self.webhook_url is not None and bool(
            self.webhook_url.get_secret_value()
        )
