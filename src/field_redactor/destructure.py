"""Destructurer — turns live Python values into trees, and the event that holds them.

    destructurer = Destructurer([RedactorDestructuringPolicy()])
    node = destructurer.create_property_value(person)

Scalars map straight to ScalarValue.  Every other value is offered to the
policies in order; the first one that handles it wins.  Unclaimed values
fall back to generic handling: mappings and objects become structures,
other iterables become sequences.  Nesting deeper than ``max_depth``
becomes ``ScalarValue(None)``, which also stops reference cycles.
"""

from __future__ import annotations
import dataclasses
import datetime as dt
import enum
import functools
import uuid
from collections.abc import Iterable, Mapping
from decimal import Decimal
from pathlib import PurePath
from types import MappingProxyType
from typing import Any, Protocol, Sequence

from .registry import resolve_type_hints
from .types import (
    LogEventProperty,
    LogEventPropertyValue,
    ScalarValue,
    SequenceValue,
    StructureValue,
)

SCALAR_TYPES: tuple[type, ...] = (
    str, bool, int, float, complex, Decimal, bytes,
    dt.datetime, dt.date, dt.time, dt.timedelta,
    uuid.UUID, enum.Enum, PurePath,
)

DEFAULT_MAX_DEPTH = 10


class DestructuringPolicy(Protocol):
    def try_destructure(
        self, value: Any, convert: Any
    ) -> tuple[LogEventPropertyValue | None, bool]: ...


class Destructurer:
    """Builds trees, consulting destructuring policies first."""

    __slots__ = ("policies", "max_depth")

    def __init__(
        self,
        policies: Sequence[DestructuringPolicy] = (),
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.policies = tuple(policies)
        self.max_depth = max_depth

    def create_property_value(self, value: Any, destructure_objects: bool = True) -> LogEventPropertyValue:
        """Convert ``value`` into a tree.

        With ``destructure_objects=False`` a non-scalar value is kept whole
        inside a ScalarValue instead of being taken apart.
        """
        return self._create(value, destructure_objects, 1)

    def _create(self, value: Any, destructure: bool, depth: int) -> LogEventPropertyValue:
        if value is None or isinstance(value, SCALAR_TYPES):
            return ScalarValue(value)
        if depth > self.max_depth:
            return ScalarValue(None)

        def convert(nested: Any) -> LogEventPropertyValue:
            return self._create(nested, True, depth + 1)

        # Policies get a say even when not destructuring, so redacted
        # values never fall through as raw objects
        for policy in self.policies:
            node, handled = policy.try_destructure(value, convert)
            if handled:
                return node

        if not destructure:
            return ScalarValue(value)

        if isinstance(value, Mapping):
            return StructureValue(_mapping_properties(value, convert), None)
        if isinstance(value, Iterable) and not _is_object_like(value):
            return SequenceValue(tuple(convert(v) for v in value))

        return self._destructure_object(value, convert)

    def _destructure_object(self, value: Any, convert) -> LogEventPropertyValue:
        properties: list[LogEventProperty] = []
        for name in _public_fields(value):
            try:
                field_value = getattr(value, name)
            except Exception:
                continue
            if callable(field_value):
                continue
            properties.append(LogEventProperty(name, convert(field_value)))
        return StructureValue(tuple(properties), type(value).__name__)


def _mapping_properties(value: Mapping, convert) -> tuple[LogEventProperty, ...]:
    # Keys such as 1 and "1" share a str(); fall back to repr(), then keep the first
    properties: dict[str, LogEventProperty] = {}
    for key, item in value.items():
        name = key if isinstance(key, str) else str(key)
        if name in properties:
            name = repr(key)
            if name in properties:
                continue
        properties[name] = LogEventProperty(name, convert(item))
    return tuple(properties.values())


def _is_object_like(value: Any) -> bool:
    # Dataclasses that happen to be iterable are still records
    return dataclasses.is_dataclass(value)


@functools.lru_cache(maxsize=None)
def _declared_fields(cls: type) -> tuple[str, ...]:
    names: dict[str, None] = {}
    if dataclasses.is_dataclass(cls):
        names.update((f.name, None) for f in dataclasses.fields(cls))
    for name in resolve_type_hints(cls):
        names.setdefault(name, None)
    for klass in reversed(cls.__mro__):
        slots = getattr(klass, "__slots__", ())
        for name in ((slots,) if isinstance(slots, str) else slots):
            names.setdefault(name, None)
        for name, attr in vars(klass).items():
            if isinstance(attr, property):
                names.setdefault(name, None)
    return tuple(names)


def _public_fields(value: Any) -> list[str]:
    names = dict.fromkeys(_declared_fields(type(value)))
    instance_dict = getattr(value, "__dict__", None)
    if isinstance(instance_dict, (dict, MappingProxyType)):
        for name in instance_dict:
            names.setdefault(name, None)
    return [n for n in names if not n.startswith("_")]


# ----------------------------------------------------------------------
# Log event
# ----------------------------------------------------------------------

class LogEvent:
    """A message plus its named, already-destructured properties."""

    __slots__ = ("event", "_properties")

    def __init__(self, event: str, properties: Iterable[LogEventProperty] = ()) -> None:
        self.event = event
        self._properties: dict[str, LogEventPropertyValue] = {}
        for prop in properties:
            self._properties[prop.name] = prop.value

    @property
    def properties(self) -> Mapping[str, LogEventPropertyValue]:
        """Read-only, insertion-ordered view of the properties."""
        return MappingProxyType(self._properties)

    def add_or_update_property(self, prop: LogEventProperty) -> None:
        """Set ``prop``, replacing any property with the same name in place."""
        self._properties[prop.name] = prop.value

    def __repr__(self) -> str:
        return f"LogEvent({self.event!r}, {list(self._properties)})"
