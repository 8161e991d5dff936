"""
Hot reload: change detection and background scheduling.
"""

from .hot_reload import HotReloadLogic, WatchableFile
from .scheduler import ReloadScheduler, ScheduledTask

__all__ = [
    'HotReloadLogic',
    'WatchableFile',
    'ReloadScheduler',
    'ScheduledTask'
]
