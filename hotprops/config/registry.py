"""
Configuration registry.

Creates and keeps one loaded configuration per descriptor name, sharing a
source resolver and a reload scheduler between them. A registry is an
explicit object owned by the application; there is no global instance.
"""

import threading
from typing import Dict, List, Mapping, Optional

from hotprops.accessor import ConfigAccessor
from hotprops.config.descriptor import ConfigDescriptor
from hotprops.core.exceptions import NotFoundError
from hotprops.logger import get_hotprops_logger
from hotprops.reload.scheduler import ReloadScheduler
from hotprops.sources.resolver import SourceResolver
from hotprops.store.manager import DefaultsProvider, PropertiesManager


class ConfigRegistry:
    """
    Central registry of loaded configurations.

    Parameters
    ----------
    resolver : `SourceResolver`, optional
        Shared by every configuration created here.
    scheduler : `ReloadScheduler`, optional
        Runs the async hot reload checks.
    """

    def __init__(self, resolver: Optional[SourceResolver] = None,
                 scheduler: Optional[ReloadScheduler] = None):
        self.logger = get_hotprops_logger().bind(component="ConfigRegistry")
        self._lock = threading.RLock()
        self.resolver = resolver or SourceResolver()
        self.scheduler = scheduler or ReloadScheduler()
        self._configs: Dict[str, ConfigAccessor] = {}

        self.logger.info("ConfigRegistry initialized")

    def create(self, descriptor: ConfigDescriptor, *imports: Mapping,
               defaults_provider: Optional[DefaultsProvider] = None) -> ConfigAccessor:
        """
        Create, load and register a configuration. A configuration already
        registered under the same name is shut down and replaced.

        Raises:
            ConfigLoadError: If the sources could not be loaded
        """
        config = self._load(descriptor, imports, defaults_provider)
        with self._lock:
            previous = self._configs.get(descriptor.name)
            self._configs[descriptor.name] = config
        if previous is not None:
            previous.manager.shutdown()

        self.logger.info("Configuration registered", config=descriptor.name,
                         keys=len(config.manager.property_names()))
        return config

    def get_or_create(self, descriptor: ConfigDescriptor, *imports: Mapping) -> ConfigAccessor:
        """
        Return the configuration registered under the descriptor's name,
        creating it if needed. Loading happens outside the registry lock; if
        another thread registers the same name meanwhile, its configuration
        wins and the one just loaded is shut down.
        """
        with self._lock:
            config = self._configs.get(descriptor.name)
        if config is not None:
            return config

        created = self._load(descriptor, imports, None)
        with self._lock:
            config = self._configs.setdefault(descriptor.name, created)
        if config is not created:
            created.manager.shutdown()
            return config

        self.logger.info("Configuration registered", config=descriptor.name,
                         keys=len(created.manager.property_names()))
        return created

    def _load(self, descriptor: ConfigDescriptor, imports, defaults_provider) -> ConfigAccessor:
        manager = PropertiesManager(
            descriptor, *imports,
            resolver=self.resolver,
            scheduler=self.scheduler,
            defaults_provider=defaults_provider
        )
        try:
            manager.load()
        except Exception:
            manager.shutdown()
            raise
        return ConfigAccessor(manager)

    def get(self, name: str) -> ConfigAccessor:
        """
        Raises:
            NotFoundError: If no configuration is registered under `name`
        """
        with self._lock:
            if name not in self._configs:
                raise NotFoundError("Configuration", name)
            return self._configs[name]

    def remove(self, name: str) -> bool:
        with self._lock:
            config = self._configs.pop(name, None)
        if config is None:
            return False
        config.manager.shutdown()
        self.logger.info("Configuration removed", config=name)
        return True

    def list_names(self) -> List[str]:
        with self._lock:
            return list(self._configs.keys())

    def shutdown(self, wait: bool = False):
        """Stop every background reload and forget all configurations."""
        with self._lock:
            configs = list(self._configs.values())
            self._configs.clear()

        for config in configs:
            config.manager.shutdown()
        self.scheduler.shutdown(wait=wait)

        self.logger.info("Registry shut down", configs=len(configs))
