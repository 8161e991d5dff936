"""
Exceptions raised while loading sources and reloading a configuration.
"""

from .base import HotPropsError


class SourceLoadError(HotPropsError):
    """I/O or parse failure while reading a single source."""

    def __init__(self, locator: str, reason: str = None):
        self.locator = locator
        self.reason = reason
        message = f"Failed to load source '{locator}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ConfigLoadError(HotPropsError):
    """
    Raised by load()/reload() when the sources of a configuration
    could not be resolved. The underlying SourceLoadError is kept
    in `cause` and chained as __cause__.
    """

    def __init__(self, config_name: str, cause: Exception = None):
        self.config_name = config_name
        self.cause = cause
        message = f"Properties load failed for configuration '{config_name}'"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class ListenerError(HotPropsError):
    """A reload listener raised while being notified."""

    def __init__(self, listener, cause: Exception):
        self.listener = listener
        self.cause = cause
        super().__init__(f"Reload listener {listener!r} failed: {cause!r}")
