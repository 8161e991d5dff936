"""
Reload notification types.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ReloadEvent:
    """
    Notification sent to each listener after a successful reload.

    Parameters
    ----------
    source : `object`
        The configuration object that was reloaded.
    """
    source: Any


class ReloadListener(ABC):
    """
    Base class for reload observers. Plain callables taking a
    ReloadEvent are accepted as listeners too.
    """

    @abstractmethod
    def on_reload(self, event: ReloadEvent):
        pass

    def __call__(self, event: ReloadEvent):
        self.on_reload(event)
