"""Jira dispatcher module."""

from bdd_report.dispatchers.jira.config import JiraConfig
from bdd_report.dispatchers.jira.dispatcher import JiraDispatcher
from bdd_report.dispatchers.jira.manifest import jira_manifest

__all__ = ["JiraConfig", "JiraDispatcher", "jira_manifest"]
