"""
Core module for hotprops.

This module provides the foundational components used throughout the package:
- Exception classes for loading, reloading and configuration errors
- Enum definitions for load policies, reload modes and time units
"""

from .exceptions import *
from .enums import *

__all__ = []

from .exceptions import __all__ as exceptions_all
from .enums import __all__ as enums_all

__all__.extend(exceptions_all)
__all__.extend(enums_all)
