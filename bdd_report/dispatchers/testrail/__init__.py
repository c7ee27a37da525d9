"""TestRail dispatcher module."""

from bdd_report.dispatchers.testrail.config import TestRailConfig
from bdd_report.dispatchers.testrail.dispatcher import TestRailDispatcher
from bdd_report.dispatchers.testrail.manifest import testrail_manifest

__all__ = ["TestRailConfig", "TestRailDispatcher", "testrail_manifest"]
