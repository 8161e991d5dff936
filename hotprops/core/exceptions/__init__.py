"""
Core exceptions for hotprops.

All errors raised by the package derive from HotPropsError.
"""

from .base import (
    HotPropsError,
    ConfigurationError,
    NotFoundError
)

from .loading import (
    SourceLoadError,
    ConfigLoadError,
    ListenerError
)

__all__ = [
    # Base exceptions
    'HotPropsError',
    'ConfigurationError',
    'NotFoundError',

    # Loading exceptions
    'SourceLoadError',
    'ConfigLoadError',
    'ListenerError'
]
