"""
Property table and its line-oriented ``key=value`` text format.

The format is the classic properties-file syntax:

- ``#`` and ``!`` start a comment line; blank lines are ignored
- the key ends at the first unescaped ``=``, ``:`` or whitespace
- a line ending in an odd number of backslashes continues on the next line
- ``\\t \\n \\r \\f \\uXXXX`` escapes; any other escaped char stands for itself

Byte streams are read and written as ISO-8859-1 with ``\\uXXXX`` escapes
for everything outside printable ASCII. Text streams are read and written
as-is.
"""

import io
import re
import time
from enum import Enum
from typing import Iterable, Iterator, Optional, Tuple

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_WHITESPACE = " \t\f"
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_STORE_ESCAPES = {"\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f"}
_HEX_DIGITS = set("0123456789abcdefABCDEF")

LIST_HEADER = "-- listing properties --"
LIST_VALUE_WIDTH = 40


class PropertyTable(dict):
    """
    Ordered mapping of string keys to string values.

    Insertion order is kept, so listing and storing follow the order in
    which keys were loaded.
    """

    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.get(key, default)

    def set_property(self, key: str, value: str) -> Optional[str]:
        """Store a value and return the previous one, if any."""
        previous = self.get(key)
        self[key] = value
        return previous

    def copy(self) -> "PropertyTable":
        return PropertyTable(self)

    def load(self, stream):
        """Read properties from a text or byte stream and add them to the table."""
        data = stream.read()
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("latin-1")
        for key, value in parse(data):
            self[key] = value

    def store(self, out, comments: Optional[str] = None):
        """Write the table, preceded by the comments and a timestamp line."""
        escape_unicode = _is_binary(out)
        lines = []
        if comments is not None:
            lines.extend(_comment_lines(comments, escape_unicode))
        lines.append("#" + time.strftime("%a %b %d %H:%M:%S %Z %Y"))
        for key, value in self.items():
            key = _escape(key, escape_space=True, escape_unicode=escape_unicode)
            value = _escape(value, escape_space=False, escape_unicode=escape_unicode)
            lines.append(f"{key}={value}")
        _write(out, "".join(line + "\n" for line in lines))

    def list(self, out):
        """Print a human readable listing; long values are truncated."""
        lines = [LIST_HEADER]
        for key, value in self.items():
            if len(value) > LIST_VALUE_WIDTH:
                value = value[:LIST_VALUE_WIDTH - 3] + "..."
            lines.append(f"{key}={value}")
        _write(out, "".join(line + "\n" for line in lines))

    @classmethod
    def from_string(cls, text: str) -> "PropertyTable":
        table = cls()
        for key, value in parse(text):
            table[key] = value
        return table


def to_property_value(value) -> str:
    """Render a Python value the way it is written in a properties file."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (list, tuple)):
        return ",".join(to_property_value(item) for item in value)
    return str(value)


def parse(text: str) -> Iterator[Tuple[str, str]]:
    """Yield (key, value) pairs in document order."""
    for line in _logical_lines(text):
        yield _split(line)


def _logical_lines(text: str) -> Iterator[str]:
    pending = None
    for raw in _LINE_BREAK.split(text):
        line = raw.lstrip(_WHITESPACE)
        if pending is None and (not line or line[0] in "#!"):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending = (pending or "") + line[:-1]
            continue
        yield (pending or "") + line
        pending = None
    if pending is not None:
        yield pending


def _split(line: str) -> Tuple[str, str]:
    size = len(line)
    i = 0
    while i < size:
        char = line[i]
        if char == "\\":
            i += 2
            continue
        if char in "=:" or char in _WHITESPACE:
            break
        i += 1
    key = line[:i]
    j = i
    while j < size and line[j] in _WHITESPACE:
        j += 1
    if j < size and line[j] in "=:":
        j += 1
        while j < size and line[j] in _WHITESPACE:
            j += 1
    return _unescape(key), _unescape(line[j:])


def _unescape(text: str) -> str:
    if "\\" not in text:
        return text
    out = []
    i = 0
    size = len(text)
    while i < size:
        char = text[i]
        if char != "\\":
            out.append(char)
            i += 1
            continue
        i += 1
        if i >= size:
            break
        char = text[i]
        if char == "u":
            digits = text[i + 1:i + 5]
            if len(digits) < 4 or not set(digits) <= _HEX_DIGITS:
                raise ValueError(f"Malformed \\uxxxx encoding in '{text}'")
            out.append(chr(int(digits, 16)))
            i += 5
        else:
            out.append(_ESCAPES.get(char, char))
            i += 1
    result = "".join(out)
    if any("\ud800" <= c <= "\udfff" for c in result):
        # \u escapes of astral characters arrive as surrogate pairs
        result = result.encode("utf-16", "surrogatepass").decode("utf-16")
    return result


def _escape(text: str, escape_space: bool, escape_unicode: bool) -> str:
    out = []
    for index, char in enumerate(text):
        if char == " ":
            out.append("\\ " if index == 0 or escape_space else " ")
        elif char in _STORE_ESCAPES:
            out.append(_STORE_ESCAPES[char])
        elif char in "=:#!\\":
            out.append("\\" + char)
        elif escape_unicode and (ord(char) < 0x20 or ord(char) > 0x7e):
            out.extend(_unicode_escape(char))
        else:
            out.append(char)
    return "".join(out)


def _unicode_escape(char: str) -> Iterable[str]:
    units = char.encode("utf-16-be")
    for offset in range(0, len(units), 2):
        yield "\\u%04X" % int.from_bytes(units[offset:offset + 2], "big")


def _comment_lines(comments: str, escape_unicode: bool) -> Iterator[str]:
    for line in _LINE_BREAK.split(comments):
        if escape_unicode:
            line = "".join("".join(_unicode_escape(c)) if ord(c) > 0xff else c for c in line)
        if line[:1] in ("#", "!"):
            yield line
        else:
            yield "#" + line


def _is_binary(stream) -> bool:
    return isinstance(stream, (io.RawIOBase, io.BufferedIOBase))


def _write(out, text: str):
    if _is_binary(out):
        out.write(text.encode("latin-1"))
    else:
        out.write(text)
