"""
Configuration descriptors.

A descriptor is the explicit record of how one configuration type is
loaded: its sources, the policy used to combine them, optional hot reload
settings and the schema its defaults come from. Descriptors are created
once at startup and passed by reference to the store.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union

import yaml

from hotprops.core.enums import HotReloadType, LoadType, TimeUnit
from hotprops.core.exceptions import ConfigurationError


@dataclass
class HotReload:
    """Hot reload settings: check every `value` `unit`, in `type` mode."""
    value: float = 5
    unit: TimeUnit = TimeUnit.SECONDS
    type: HotReloadType = HotReloadType.SYNC

    def __post_init__(self):
        if self.value <= 0:
            raise ConfigurationError("hot_reload.value", str(self.value), "period must be positive")

    @property
    def period_seconds(self) -> float:
        return self.unit.to_seconds(self.value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'value': self.value,
            'unit': self.unit.name.lower(),
            'type': self.type.value
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HotReload':
        defaults = cls()
        return cls(
            value=_number(data.get('value', defaults.value), 'hot_reload.value'),
            unit=_enum_value(TimeUnit, data.get('unit', defaults.unit), 'hot_reload.unit'),
            type=_enum_value(HotReloadType, data.get('type', defaults.type), 'hot_reload.type')
        )


@dataclass
class ConfigDescriptor:
    """
    Describes one configuration type.

    Parameters
    ----------
    name : `str`
        Logical name of the configuration, used in logs and errors.
    sources : `list[str]`, optional
        Ordered source locators. When omitted, default locators are
        derived from the schema (or the name).
    load_type : `LoadType`
        FIRST uses the first source found, MERGE overlays all of them.
    hot_reload : `HotReload`, optional
        Enables hot reload. Only honoured when sources are explicit.
    schema : `type`, optional
        Class whose attribute defaults provide the lowest precedence layer.
    """
    name: str
    sources: Optional[List[str]] = None
    load_type: LoadType = LoadType.FIRST
    hot_reload: Optional[HotReload] = None
    schema: Optional[Type] = field(default=None, compare=False)

    def __post_init__(self):
        if not self.name:
            raise ConfigurationError("name", reason="descriptor name is required")
        if self.sources is not None:
            self.sources = list(self.sources)

    @property
    def has_explicit_sources(self) -> bool:
        return self.sources is not None

    def specs(self) -> List[str]:
        """Locators to load, in precedence order."""
        if self.sources is not None:
            return list(self.sources)
        return self.default_specs()

    def default_specs(self) -> List[str]:
        if self.schema is not None:
            prefix = self.schema.__module__.replace('.', '/') + '/' + self.schema.__qualname__
        else:
            prefix = self.name.replace('.', '/')
        return [
            f"classpath:{prefix}.properties",
            f"classpath:{prefix}.xml"
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'sources': list(self.sources) if self.sources is not None else None,
            'load_policy': self.load_type.value,
            'hot_reload': self.hot_reload.to_dict() if self.hot_reload else None
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], schema: Optional[Type] = None) -> 'ConfigDescriptor':
        """Create a descriptor from a plain mapping (e.g. a parsed YAML document)."""
        if not isinstance(data, dict):
            raise ConfigurationError(reason=f"descriptor must be a mapping, got {type(data).__name__}")

        sources = data.get('sources')
        if isinstance(sources, str):
            sources = [sources]

        hot_reload = data.get('hot_reload')
        if isinstance(hot_reload, dict):
            hot_reload = HotReload.from_dict(hot_reload)
        elif hot_reload is not None:
            raise ConfigurationError('hot_reload', str(hot_reload), "expected a mapping")

        return cls(
            name=data.get('name') or (schema.__qualname__ if schema else None),
            sources=sources,
            load_type=_enum_value(LoadType, data.get('load_policy', LoadType.FIRST), 'load_policy'),
            hot_reload=hot_reload,
            schema=schema
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path], schema: Optional[Type] = None) -> 'ConfigDescriptor':
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data, schema=schema)


def _number(raw: Any, key: str) -> float:
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return raw
    try:
        return float(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(key, str(raw), "expected a number") from e


def _enum_value(enum_cls: Type[Enum], raw: Any, key: str) -> Enum:
    if isinstance(raw, enum_cls):
        return raw
    if isinstance(raw, str):
        for member in enum_cls:
            if raw.lower() in (member.name.lower(), str(member.value).lower()):
                return member
    choices = ", ".join(member.name.lower() for member in enum_cls)
    raise ConfigurationError(key, str(raw), f"expected one of {choices}")
