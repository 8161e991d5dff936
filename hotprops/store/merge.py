"""
Merge engine.

Tables are overlaid in argument order: later tables win on key
collisions. The caller decides precedence by the order it passes
tables in (defaults, then sources, then imports in reverse order).
"""

from typing import Mapping, Optional

from .properties import PropertyTable


def merge(base: Optional[Mapping[str, str]], *tables: Mapping[str, str]) -> PropertyTable:
    """Overlay each table onto a copy of `base` and return the result."""
    result = PropertyTable(base or {})
    for table in tables:
        result.update(table)
    return result
