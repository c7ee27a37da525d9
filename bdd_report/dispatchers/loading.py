"""Loading of dispatchers from entry points."""

from collections.abc import Sequence
from importlib.metadata import entry_points
from typing import Any

from bdd_report.dispatchers.manifest import DispatcherManifest

ENTRY_POINT_GROUP = "bdd_report.dispatchers"


class DispatcherNotFoundError(Exception):
    """Raised when a dispatcher is not found."""


def load_dispatcher_manifest(key: str) -> DispatcherManifest[Any]:
    """Load a dispatcher manifest by key.

    Args:
        key: The dispatcher key as registered in pyproject.toml
             (e.g., "teams", "jira")

    Returns:
        The dispatcher manifest instance

    Raises:
        DispatcherNotFoundError: If no dispatcher with the given key is found

    """
    entries = entry_points(group=ENTRY_POINT_GROUP)

    for entry in entries:
        if entry.name == key:
            manifest: DispatcherManifest[Any] = entry.load()
            return manifest

    raise DispatcherNotFoundError(
        f"Dispatcher '{key}' not found. "
        f"Available dispatchers: {available_dispatchers()}"
    )


def available_dispatchers() -> Sequence[str]:
    """Keys of every registered dispatcher, sorted."""
    return sorted(e.name for e in entry_points(group=ENTRY_POINT_GROUP))
