"""Microsoft Teams dispatcher module."""

from bdd_report.dispatchers.teams.config import TeamsConfig
from bdd_report.dispatchers.teams.dispatcher import TeamsDispatcher
from bdd_report.dispatchers.teams.manifest import teams_manifest

__all__ = ["TeamsConfig", "TeamsDispatcher", "teams_manifest"]
