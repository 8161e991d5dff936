"""
Property storage primitives: the table and its text format, the merge
engine, reload events and the reentrant reader/writer lock.

The manager itself lives in hotprops.store.manager.
"""

from .properties import PropertyTable, to_property_value
from .merge import merge
from .events import ReloadEvent, ReloadListener
from .lock import ReentrantReadWriteLock

__all__ = [
    'PropertyTable',
    'to_property_value',
    'merge',
    'ReloadEvent',
    'ReloadListener',
    'ReentrantReadWriteLock'
]
