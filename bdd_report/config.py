"""Configuration for report generation and environment-specific test settings."""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from bdd_report.models.base import Model

log = logging.getLogger(__name__)

DEFAULT_ENVIRONMENT_CONFIG: Mapping[str, Any] = {
    "base_url": "https://www.google.com",
    "api_base_url": "https://reqres.in/api",
    "timeouts": {"default": 30000, "api": 10000, "database": 5000},
}

# Environment variable -> dotted key in the environment config.
ENVIRONMENT_OVERRIDES: Mapping[str, str] = {
    "BASE_URL": "base_url",
    "API_BASE_URL": "api_base_url",
    "TIMEOUT_DEFAULT": "timeouts.default",
    "TIMEOUT_API": "timeouts.api",
    "TIMEOUT_DATABASE": "timeouts.database",
}

JSON_KEY_ALIASES: Mapping[str, str] = {
    "baseUrl": "base_url",
    "apiBaseUrl": "api_base_url",
}


class Timeouts(Model):
    """Timeouts in milliseconds."""

    default: int = Field(default=30000, gt=0)
    api: int = Field(default=10000, gt=0)
    database: int = Field(default=5000, gt=0)


class EnvironmentConfig(Model):
    """Settings for one target environment (dev, test, prod...)."""

    environment: str
    base_url: str
    api_base_url: str
    timeouts: Timeouts = Field(default_factory=Timeouts)


class ReportSettings(BaseSettings):
    """Process-level settings, built once at startup and passed down."""

    model_config = SettingsConfigDict(
        frozen=True, extra="ignore", populate_by_name=True
    )

    environment: str = Field(default="dev", validation_alias="ENV")
    browser: str | None = Field(default=None, validation_alias="BROWSER")
    reports_dir: Path = Field(default=Path("reports"), validation_alias="REPORTS_DIR")
    pipeline_results_dir: Path = Field(
        default=Path("pipeline-results"), validation_alias="PIPELINE_RESULTS_DIR"
    )
    test_data_dir: Path = Field(
        default=Path("test-data"), validation_alias="TEST_DATA_DIR"
    )

    @property
    def sidecar_path(self) -> Path:
        """Location of the execution metadata sidecar file."""
        return self.reports_dir / "execution-metadata.json"


class CiContext(BaseSettings):
    """CI pipeline information taken from GitLab-style environment variables."""

    model_config = SettingsConfigDict(
        frozen=True, extra="ignore", populate_by_name=True
    )

    ci: str = Field(default="", validation_alias="CI")
    gitlab_ci: str = Field(default="", validation_alias="GITLAB_CI")
    pipeline_url: str = Field(default="", validation_alias="CI_PIPELINE_URL")
    job_url: str = Field(default="", validation_alias="CI_JOB_URL")
    project_url: str = Field(default="", validation_alias="CI_PROJECT_URL")
    commit_sha: str = Field(default="", validation_alias="CI_COMMIT_SHA")
    branch: str = Field(default="", validation_alias="CI_COMMIT_REF_NAME")

    @property
    def is_ci(self) -> bool:
        """Whether the process runs inside a recognized CI environment."""
        return bool(self.ci or self.gitlab_ci)

    @property
    def short_sha(self) -> str:
        """Abbreviated commit hash."""
        return self.commit_sha[:8]


def resolve_environment_config(
    environment: str,
    config_dir: Path,
    environ: Mapping[str, str],
) -> EnvironmentConfig:
    """Resolve settings for an environment.

    Layers, lowest precedence first: hardcoded defaults, the
    ``<config_dir>/<environment>.json`` file, then environment variables.
    An unreadable or invalid JSON file is logged and skipped.
    """
    data = _deep_merge(DEFAULT_ENVIRONMENT_CONFIG, {})
    data = _deep_merge(data, _load_environment_file(config_dir / f"{environment}.json"))

    for variable, key in ENVIRONMENT_OVERRIDES.items():
        if value := environ.get(variable):
            _set_dotted(data, key, value)

    try:
        return EnvironmentConfig.model_validate({**data, "environment": environment})
    except ValidationError:
        log.warning(
            "Invalid configuration for environment %s, using defaults", environment
        )
        return EnvironmentConfig.model_validate(
            {**DEFAULT_ENVIRONMENT_CONFIG, "environment": environment}
        )


def _load_environment_file(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        log.info("No configuration file at %s, using defaults", path)
        return {}

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log.warning("Failed to load configuration from %s: %s", path, exc)
        return {}

    if not isinstance(raw, dict):
        log.warning("Configuration in %s is not an object, ignoring it", path)
        return {}

    return {JSON_KEY_ALIASES.get(key, key): value for key, value in raw.items()}


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for key, value in base.items():
        merged[key] = _deep_merge(value, {}) if isinstance(value, Mapping) else value
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _set_dotted(data: dict[str, Any], dotted_key: str, value: str) -> None:
    *parents, leaf = dotted_key.split(".")
    target = data
    for parent in parents:
        target = target.setdefault(parent, {})
    target[leaf] = value
