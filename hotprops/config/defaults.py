"""
Default values derived from a schema class.

A schema is either a dataclass, whose field defaults are used (the key can
be overridden with ``field(metadata={"key": "server.port"})``), or a plain
class with annotated attributes and class-level values.
"""

import dataclasses
import inspect
from typing import Iterator, Optional, Tuple, Type

from hotprops.store.properties import PropertyTable, to_property_value


def compute_defaults(descriptor) -> PropertyTable:
    """Defaults table for a ConfigDescriptor."""
    return defaults_from_schema(descriptor.schema)


def defaults_from_schema(schema: Optional[Type]) -> PropertyTable:
    table = PropertyTable()
    if schema is None:
        return table
    for key, value in _schema_defaults(schema):
        if value is not None:
            table[key] = to_property_value(value)
    return table


def _schema_defaults(schema: Type) -> Iterator[Tuple[str, object]]:
    if dataclasses.is_dataclass(schema):
        for f in dataclasses.fields(schema):
            key = f.metadata.get('key', f.name)
            if f.default is not dataclasses.MISSING:
                yield key, f.default
            elif f.default_factory is not dataclasses.MISSING:
                yield key, f.default_factory()
        return

    seen = set()
    for klass in reversed(schema.__mro__):
        for name in inspect.get_annotations(klass):
            if name.startswith('_') or name in seen:
                continue
            seen.add(name)
            if hasattr(schema, name):
                yield name, getattr(schema, name)
