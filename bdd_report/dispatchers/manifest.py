"""Dispatcher manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from pydantic_settings import BaseSettings

from bdd_report.config import CiContext
from bdd_report.dispatchers.base import NotificationDispatcher


@dataclass(frozen=True, kw_only=True)
class DispatcherManifest[ConfigT: BaseSettings]:
    """Manifest describing a dispatcher plugin.

    The configuration class reads its settings from the environment, so a
    dispatcher with no configuration present is simply disabled.
    """

    config_cls: type[ConfigT]
    dispatcher_factory: Callable[
        [ConfigT, CiContext], AbstractAsyncContextManager[NotificationDispatcher]
    ]
