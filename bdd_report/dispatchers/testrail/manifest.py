"""TestRail dispatcher manifest."""

from bdd_report.dispatchers.manifest import DispatcherManifest
from bdd_report.dispatchers.testrail.config import TestRailConfig
from bdd_report.dispatchers.testrail.dispatcher import TestRailDispatcher

testrail_manifest = DispatcherManifest(
    config_cls=TestRailConfig,
    dispatcher_factory=TestRailDispatcher.from_config,
)
