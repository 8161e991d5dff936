"""
${variable} expansion for source locators and property values.
"""

import getpass
import os
import re
import tempfile
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional, Union

Lookup = Union[Mapping[str, str], Callable[[str], Optional[str]]]

_VARIABLE = re.compile(r"\$\{([^}]+)\}")


def system_variables() -> Dict[str, str]:
    """Well-known variables usable in locators, e.g. ``file:${user.home}/app.properties``."""
    try:
        user_name = getpass.getuser()
    except (KeyError, OSError):
        user_name = ""
    return {
        "user.home": str(Path.home()),
        "user.dir": os.getcwd(),
        "user.name": user_name,
        "tmp.dir": tempfile.gettempdir(),
    }


class VariablesExpander:
    """
    Replaces ``${name}`` with the first value found in the lookups, in the
    order they were given. Replacements are expanded again, so variables may
    refer to other variables. Unresolved and self-referencing variables are
    left untouched.
    """

    def __init__(self, *lookups: Lookup):
        self.lookups = lookups

    @classmethod
    def system(cls) -> "VariablesExpander":
        return cls(system_variables(), os.environ)

    def expand(self, text: Optional[str]) -> Optional[str]:
        if not text or "${" not in text:
            return text
        return self._expand(text, frozenset())

    def _expand(self, text: str, resolving: frozenset) -> str:
        def replace(match):
            name = match.group(1)
            if name in resolving:
                return match.group(0)
            value = self._lookup(name)
            if value is None:
                return match.group(0)
            return self._expand(value, resolving | {name})

        return _VARIABLE.sub(replace, text)

    def _lookup(self, name: str) -> Optional[str]:
        for lookup in self.lookups:
            if callable(lookup):
                value = lookup(name)
            else:
                value = lookup.get(name)
            if value is not None:
                return str(value)
        return None
