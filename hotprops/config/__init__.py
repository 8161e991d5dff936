"""
Configuration descriptors and schema defaults.

The registry lives in hotprops.config.registry.
"""

from .descriptor import ConfigDescriptor, HotReload
from .defaults import compute_defaults, defaults_from_schema

__all__ = [
    'ConfigDescriptor',
    'HotReload',
    'compute_defaults',
    'defaults_from_schema'
]
