"""
Typed access to a configuration.

ConfigAccessor is the application-facing side of a PropertiesManager: it
delegates the manager's operations and adds typed getters. Every read runs
the synchronous hot reload check first.
"""

import os
from typing import Callable, List, MutableMapping, Optional, TypeVar

from hotprops.core.exceptions import ConfigurationError
from hotprops.sources.expander import VariablesExpander
from hotprops.store.manager import Listener, PropertiesManager

T = TypeVar('T')

_TRUE = ("true", "yes", "on", "1")
_FALSE = ("false", "no", "off", "0")


class ConfigAccessor:

    def __init__(self, manager: PropertiesManager):
        self._manager = manager
        self._expander = VariablesExpander(manager.get_property, os.environ)
        manager.set_proxy(self)

    @property
    def manager(self) -> PropertiesManager:
        return self._manager

    @property
    def name(self) -> str:
        return self._manager.descriptor.name

    # Reloadable

    def reload(self):
        return self._manager.reload()

    def add_reload_listener(self, listener: Listener):
        self._manager.add_reload_listener(listener)

    def remove_reload_listener(self, listener: Listener):
        self._manager.remove_reload_listener(listener)

    # Accessible

    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        self._manager.sync_reload_check()
        return self._manager.get_property(key, default)

    def property_names(self) -> List[str]:
        self._manager.sync_reload_check()
        return self._manager.property_names()

    def fill(self, target: MutableMapping[str, str]):
        self._manager.sync_reload_check()
        self._manager.fill(target)

    def list(self, out):
        self._manager.sync_reload_check()
        self._manager.list(out)

    def store(self, out, comments: Optional[str] = None):
        self._manager.sync_reload_check()
        self._manager.store(out, comments)

    # Mutable

    def set_property(self, key: str, value: Optional[str]) -> Optional[str]:
        return self._manager.set_property(key, value)

    def remove_property(self, key: str) -> Optional[str]:
        return self._manager.remove_property(key)

    def clear(self):
        self._manager.clear()

    def load(self, stream):
        self._manager.load_from(stream)

    # Typed getters

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Value of `key` with ${...} references expanded."""
        value = self.get_property(key)
        if value is None:
            return default
        return self._expander.expand(value)

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        return self._convert(key, default, int, "an integer")

    def get_float(self, key: str, default: Optional[float] = None) -> Optional[float]:
        return self._convert(key, default, float, "a number")

    def get_bool(self, key: str, default: Optional[bool] = None) -> Optional[bool]:
        return self._convert(key, default, _to_bool, "a boolean")

    def get_list(self, key: str, default: Optional[List[str]] = None, separator: str = ",") -> Optional[List[str]]:
        value = self.get(key)
        if value is None:
            return default
        return [item.strip() for item in value.split(separator) if item.strip()]

    def _convert(self, key: str, default: Optional[T], converter: Callable[[str], T], expected: str) -> Optional[T]:
        value = self.get(key)
        if value is None:
            return default
        try:
            return converter(value.strip())
        except ValueError as e:
            raise ConfigurationError(key, value, f"expected {expected}") from e

    def __str__(self):
        return str(self._manager)

    def __repr__(self):
        return f"ConfigAccessor(name={self.name!r})"


def _to_bool(value: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(value)
