"""
Properties manager: the live, thread-safe property table of one
configuration.

Every operation runs under a reentrant reader/writer lock. Pure reads take
the read lock; anything that mutates the table takes the write lock.
Reload holds the write lock across load and listener notification, and
the lock lets the reloading thread call back into the manager from a
listener.
"""

import threading
from typing import Callable, List, Mapping, MutableMapping, Optional, Union

from hotprops.config.defaults import compute_defaults
from hotprops.config.descriptor import ConfigDescriptor
from hotprops.core.exceptions import ConfigLoadError, ListenerError, SourceLoadError
from hotprops.logger import get_hotprops_logger
from hotprops.reload.hot_reload import HotReloadLogic
from hotprops.reload.scheduler import ReloadScheduler, ScheduledTask
from hotprops.sources.resolver import SourceResolver
from hotprops.store.events import ReloadEvent, ReloadListener
from hotprops.store.lock import ReentrantReadWriteLock
from hotprops.store.merge import merge
from hotprops.store.properties import PropertyTable

Listener = Union[ReloadListener, Callable[[ReloadEvent], None]]
DefaultsProvider = Callable[[ConfigDescriptor], Mapping[str, str]]


class PropertiesManager:
    """
    Loads the properties of a configuration and manages concurrent access
    to them.

    Parameters
    ----------
    descriptor : `ConfigDescriptor`
        Sources, load policy and hot reload settings.
    imports : `Mapping`
        Read-only overlays with the highest precedence; the first one
        given wins over the later ones.
    resolver : `SourceResolver`, optional
        Loads source locators into tables.
    scheduler : `ReloadScheduler`, optional
        Required for ASYNC hot reload.
    defaults_provider : `callable`, optional
        Computes the defaults table from the descriptor.
    """

    def __init__(self, descriptor: ConfigDescriptor, *imports: Mapping,
                 resolver: Optional[SourceResolver] = None,
                 scheduler: Optional[ReloadScheduler] = None,
                 defaults_provider: Optional[DefaultsProvider] = None):
        self.descriptor = descriptor
        self.resolver = resolver or SourceResolver()
        self.defaults_provider = defaults_provider or compute_defaults
        self.imports = tuple(_normalize(table) for table in imports)
        self.logger = get_hotprops_logger().bind(component="PropertiesManager", config=descriptor.name)

        self._properties = PropertyTable()
        self._lock = ReentrantReadWriteLock()
        self._loading = False

        self._listeners: List[Listener] = []
        self._listeners_lock = threading.Lock()
        self._proxy = None

        self.hot_reload_logic: Optional[HotReloadLogic] = None
        self.reload_task: Optional[ScheduledTask] = None
        self._setup_hot_reload(scheduler)

        self.logger.debug("PropertiesManager created",
                          sources=descriptor.specs(), load_type=descriptor.load_type.value,
                          imports=len(self.imports))

    def _setup_hot_reload(self, scheduler: Optional[ReloadScheduler]):
        hot_reload = self.descriptor.hot_reload
        if not self.descriptor.has_explicit_sources or hot_reload is None:
            return

        self.hot_reload_logic = HotReloadLogic(self.descriptor, self.resolver, self)
        if self.hot_reload_logic.is_async():
            if scheduler is None:
                raise ValueError(f"configuration '{self.descriptor.name}' uses async hot reload "
                                 "but no scheduler was given")
            self.reload_task = scheduler.schedule_at_fixed_rate(
                self.hot_reload_logic.check_and_reload,
                hot_reload.value, hot_reload.value, hot_reload.unit
            )

    def load(self) -> PropertyTable:
        """
        Populate the table from defaults, sources and imports.

        The merged table is built first and swapped in only when every
        source was resolved, so a failure leaves the previous contents.

        Raises:
            ConfigLoadError: If a source could not be loaded
        """
        with self._lock.write():
            was_loading = self._loading
            self._loading = True
            try:
                defaults = self.defaults_provider(self.descriptor)
                loaded = self.resolver.resolve(self.descriptor.specs(), self.descriptor.load_type)
                merged = merge(defaults, loaded, *reversed(self.imports))
                self._properties.clear()
                self._properties.update(merged)
            except SourceLoadError as e:
                self.logger.error("Properties load failed", error=str(e))
                raise ConfigLoadError(self.descriptor.name, e) from e
            finally:
                self._loading = was_loading

            self.logger.debug("Properties loaded", keys=len(self._properties))
            return self._properties.copy()

    def reload(self) -> List[ListenerError]:
        """
        Reload the table and notify every listener in registration order.

        A failing listener is logged and skipped. The isolated failures are
        returned; the list is empty when every listener succeeded.

        Raises:
            ConfigLoadError: If a source could not be loaded; the previous
                contents are kept and no listener is notified
        """
        with self._lock.write():
            self._loading = True
            try:
                self.load()
            finally:
                self._loading = False

            self.logger.info("Configuration reloaded", keys=len(self._properties))
            return self._fire_reload_event()

    def _fire_reload_event(self) -> List[ListenerError]:
        with self._listeners_lock:
            listeners = list(self._listeners)

        failures = []
        for listener in listeners:
            event = ReloadEvent(self._proxy if self._proxy is not None else self)
            try:
                listener(event)
            except Exception as e:
                self.logger.exception("Reload listener failed", listener=repr(listener))
                failures.append(ListenerError(listener, e))
        return failures

    def add_reload_listener(self, listener: Listener):
        with self._listeners_lock:
            self._listeners.append(listener)

    def remove_reload_listener(self, listener: Listener):
        """Remove the first registration of `listener`; unknown listeners are ignored."""
        with self._listeners_lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    def is_loading(self) -> bool:
        return self._loading

    def sync_reload_check(self):
        """Reload on the calling thread if hot reload is SYNC and a source changed."""
        if self.hot_reload_logic is None or not self.hot_reload_logic.is_sync():
            return
        # Inside a write section (e.g. a reload listener) the table is already current
        if self._lock.is_write_locked_by_current_thread():
            return
        self.hot_reload_logic.check_and_reload()

    def set_proxy(self, proxy):
        if self._proxy is None:
            self._proxy = proxy

    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock.read():
            return self._properties.get_property(key, default)

    def set_property(self, key: str, value: Optional[str]) -> Optional[str]:
        """Set a value and return the previous one; None removes the key."""
        with self._lock.write():
            if value is None:
                return self.remove_property(key)
            return self._properties.set_property(key, str(value))

    def remove_property(self, key: str) -> Optional[str]:
        with self._lock.write():
            return self._properties.pop(key, None)

    def clear(self):
        with self._lock.write():
            self._properties.clear()

    def property_names(self) -> List[str]:
        with self._lock.read():
            return list(self._properties)

    def fill(self, target: MutableMapping[str, str]):
        """Copy every property into `target`."""
        with self._lock.read():
            target.update(self._properties)

    def list(self, out):
        with self._lock.read():
            self._properties.list(out)

    def store(self, out, comments: Optional[str] = None):
        with self._lock.read():
            self._properties.store(out, comments)

    def load_from(self, stream):
        """Add the properties read from a text or byte stream."""
        with self._lock.write():
            self._properties.load(stream)

    def shutdown(self):
        """Stop the background reload task, if any."""
        if self.reload_task is not None:
            self.reload_task.cancel()

    def __str__(self):
        with self._lock.read():
            return str(dict(self._properties))

    def __repr__(self):
        return f"PropertiesManager(name={self.descriptor.name!r})"


def _normalize(table: Mapping) -> PropertyTable:
    result = PropertyTable()
    for key, value in table.items():
        if value is not None:
            result[str(key)] = str(value)
    return result

