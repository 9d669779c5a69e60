"""Core types — the tree a logged value is destructured into."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterable, Union


@dataclass(frozen=True, slots=True)
class ScalarValue:
    """A leaf.  ``value`` is a primitive, ``None``, or a raw object kept as-is."""
    value: Any = None


@dataclass(frozen=True, slots=True)
class LogEventProperty:
    """A named node, either inside a structure or at the top of an event."""
    name: str
    value: LogEventPropertyValue


@dataclass(frozen=True, slots=True)
class StructureValue:
    """Named fields plus the tag of the type they came from."""
    properties: tuple[LogEventProperty, ...] = ()
    type_tag: str | None = None

    def __post_init__(self) -> None:
        props = tuple(self.properties)
        names = [p.name for p in props]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate property names in structure {self.type_tag!r}: {names}")
        object.__setattr__(self, "properties", props)

    def get(self, name: str, default: Any = None) -> Any:
        """Look up a field's node by name (case-insensitive)."""
        key = name.casefold()
        for prop in self.properties:
            if prop.name.casefold() == key:
                return prop.value
        return default

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.properties]


@dataclass(frozen=True, slots=True)
class SequenceValue:
    """An ordered run of nodes."""
    elements: tuple[LogEventPropertyValue, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "elements", tuple(self.elements))

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self):
        return iter(self.elements)


LogEventPropertyValue = Union[ScalarValue, StructureValue, SequenceValue]


def structure(type_tag: str | None, items: Iterable[tuple[str, LogEventPropertyValue]]) -> StructureValue:
    """Build a StructureValue from ``(name, node)`` pairs."""
    return StructureValue(tuple(LogEventProperty(n, v) for n, v in items), type_tag)
