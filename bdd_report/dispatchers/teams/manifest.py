"""Teams dispatcher manifest."""

from bdd_report.dispatchers.manifest import DispatcherManifest
from bdd_report.dispatchers.teams.config import TeamsConfig
from bdd_report.dispatchers.teams.dispatcher import TeamsDispatcher

teams_manifest = DispatcherManifest(
    config_cls=TeamsConfig,
    dispatcher_factory=TeamsDispatcher.from_config,
)
