"""
Core enums for hotprops.
"""

from .policy import (
    LoadType,
    HotReloadType,
    TimeUnit
)

__all__ = [
    'LoadType',
    'HotReloadType',
    'TimeUnit'
]
