"""
Hot reload logic: decides when a configuration must be reloaded.

File-backed sources are watched through their modification time. A source
that appears or disappears counts as a change. Network and missing
classpath sources cannot be watched.
"""

import threading
import time
from pathlib import Path
from typing import List

from hotprops.config.descriptor import HotReload
from hotprops.core.enums import HotReloadType
from hotprops.core.exceptions import ConfigLoadError
from hotprops.logger import get_hotprops_logger


class WatchableFile:

    def __init__(self, path: Path):
        self.path = path
        self.last_modified = self._modified_time()

    def _modified_time(self) -> int:
        try:
            return self.path.stat().st_mtime_ns
        except OSError:
            return 0

    def is_changed(self) -> bool:
        current = self._modified_time()
        changed = current != self.last_modified
        self.last_modified = current
        return changed


class HotReloadLogic:
    """
    Checks watched sources and reloads the manager when one changed.

    In SYNC mode the check runs on the reading thread and is throttled to
    once per period. In ASYNC mode a scheduler calls check_and_reload()
    every period.
    """

    def __init__(self, descriptor, resolver, manager):
        self.manager = manager
        settings = descriptor.hot_reload or HotReload()
        self.interval = settings.period_seconds
        self.type = settings.type
        self.logger = get_hotprops_logger().bind(component="HotReloadLogic", config=descriptor.name)
        self._lock = threading.RLock()
        self._last_check_time = time.monotonic()
        self._watchable_files: List[WatchableFile] = []
        for spec in descriptor.specs():
            path = resolver.local_file(spec)
            if path is not None:
                self._watchable_files.append(WatchableFile(path))

    @property
    def watched_paths(self) -> List[Path]:
        return [watched.path for watched in self._watchable_files]

    def is_sync(self) -> bool:
        return self.type is HotReloadType.SYNC

    def is_async(self) -> bool:
        return self.type is HotReloadType.ASYNC

    def check_and_reload(self) -> bool:
        """
        Reload if a watched source changed; return whether it did.

        A reload that fails is logged and the watched timestamps are rolled
        back, so the next check tries again.
        """
        if self.manager.is_loading():
            return False
        with self._lock:
            recorded = [watched.last_modified for watched in self._watchable_files]
            if not self._needs_reload():
                return False
            self.logger.info("Source change detected, reloading")
            try:
                self.manager.reload()
            except ConfigLoadError:
                self.logger.exception("Hot reload failed, keeping current properties")
                for watched, last_modified in zip(self._watchable_files, recorded):
                    watched.last_modified = last_modified
                return False
            return True

    def _needs_reload(self) -> bool:
        if self.manager.is_loading():
            return False

        now = time.monotonic()
        if self.is_sync() and now < self._last_check_time + self.interval:
            return False
        self._last_check_time = now

        # Poll every file so each one records its latest timestamp
        changes = [watched.is_changed() for watched in self._watchable_files]
        return any(changes)
