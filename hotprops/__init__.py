"""
hotprops: thread-safe, hot-reloadable key/value configuration.

Typical use::

    from hotprops import ConfigDescriptor, ConfigRegistry, HotReload

    registry = ConfigRegistry()
    config = registry.create(ConfigDescriptor(
        name="server",
        sources=["file:${user.home}/server.properties", "classpath:server.properties"],
        hot_reload=HotReload(value=10),
    ))
    port = config.get_int("server.port", 8080)
"""

from hotprops.core import *
from hotprops.logger import init_logger, setup_logging, get_hotprops_logger
from hotprops.store import PropertyTable, ReloadEvent, ReloadListener, ReentrantReadWriteLock, merge
from hotprops.config import ConfigDescriptor, HotReload, compute_defaults, defaults_from_schema
from hotprops.sources import SourceResolver, VariablesExpander
from hotprops.reload import HotReloadLogic, ReloadScheduler
from hotprops.store.manager import PropertiesManager
from hotprops.accessor import ConfigAccessor
from hotprops.config.registry import ConfigRegistry

__version__ = '0.1.0'
