"""Configuration for the TestRail dispatcher."""

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TestRailConfig(BaseSettings):
    """Configuration for the TestRail dispatcher, read from ``TESTRAIL_*``."""

    __test__ = False

    model_config = SettingsConfigDict(env_prefix="TESTRAIL_", extra="ignore")

    url: str = "https://testrail.example.com/"
    key: SecretStr | None = Field(
        default=None, description="Value sent as the Authorization header"
    )
    project_id: int = 1
    suite_id: int | None = None
    close_run: bool = False

    @field_validator("url")
    @classmethod
    def _absolute_with_trailing_slash(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"must be an absolute http(s) URL, got {value!r}")
        return value if value.endswith("/") else f"{value}/"

    @property
    def enabled(self) -> bool:
        """Both the API key and the suite are required."""
        has_key = self.key is not None and bool(self.key.get_secret_value())
        return has_key and self.suite_id is not None
