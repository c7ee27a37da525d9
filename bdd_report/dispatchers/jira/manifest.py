"""Jira dispatcher manifest."""

from bdd_report.dispatchers.jira.config import JiraConfig
from bdd_report.dispatchers.jira.dispatcher import JiraDispatcher
from bdd_report.dispatchers.manifest import DispatcherManifest

jira_manifest = DispatcherManifest(
    config_cls=JiraConfig,
    dispatcher_factory=JiraDispatcher.from_config,
)
