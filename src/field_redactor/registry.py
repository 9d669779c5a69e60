"""Sensitivity registry — per-type cache of which fields must be redacted.

Discovery walks static class metadata once per type; the result is never
recomputed.  The cache is shared by every logging thread and filled with
``dict.setdefault``, so concurrent first lookups may both run discovery but
all callers end up seeing the same stored entry.
"""

from __future__ import annotations
import dataclasses
import inspect
import typing
from dataclasses import dataclass
from typing import Callable, Iterable

from .catalog import default_catalog
from .markers import count_markers, is_redacted_property


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """A readable field of a type and whether it is marked sensitive."""
    name: str
    is_sensitive: bool = False
    readable: bool = True      # False for accessors that need arguments


@dataclass(frozen=True, slots=True)
class SensitivityEntry:
    """Cached result of discovery for one type."""
    fields: tuple[FieldDescriptor, ...] = ()
    sensitive_names: frozenset[str] = frozenset()   # casefolded

    @property
    def has_any_sensitive_field(self) -> bool:
        return bool(self.sensitive_names)

    def is_sensitive(self, name: str) -> bool:
        return name.casefold() in self.sensitive_names


# Shared marker for "this type has nothing to redact"
NO_SENSITIVE_FIELDS = SensitivityEntry()

Discover = Callable[[type], Iterable[FieldDescriptor]]


def resolve_type_hints(obj: object) -> dict[str, object]:
    try:
        return typing.get_type_hints(obj, include_extras=True)
    except Exception:
        pass
    if not isinstance(obj, type):
        return dict(getattr(obj, "__annotations__", None) or {})
    # One unresolvable forward ref fails the whole lookup; retry class by
    # class so the others still resolve
    hints: dict[str, object] = {}
    for klass in reversed(obj.__mro__):
        try:
            hints.update(typing.get_type_hints(klass, include_extras=True))
        except Exception:
            for name, ann in inspect.get_annotations(klass).items():
                hints.setdefault(name, ann)
    return hints


def _check_single(cls: type, name: str, count: int) -> bool:
    if count > 1:
        raise TypeError(f"{cls.__qualname__}.{name} is marked as redacted more than once")
    return count == 1


def discover_fields(cls: type) -> list[FieldDescriptor]:
    """Enumerate the readable fields of ``cls`` in declaration order.

    Dataclass fields first, then other annotated attributes, then public
    properties; base classes before subclasses.  Raises TypeError when a
    field carries more than one marker.
    """
    seen: dict[str, FieldDescriptor] = {}
    hints = resolve_type_hints(cls)

    if dataclasses.is_dataclass(cls):
        for f in dataclasses.fields(cls):
            count = count_markers(f.metadata) + count_markers(hints.get(f.name, f.type))
            seen[f.name] = FieldDescriptor(f.name, _check_single(cls, f.name, count))

    for name, hint in hints.items():
        if name in seen or name.startswith("_") or typing.get_origin(hint) is typing.ClassVar:
            continue
        seen[name] = FieldDescriptor(name, _check_single(cls, name, count_markers(hint)))

    for klass in reversed(cls.__mro__):
        for name, attr in vars(klass).items():
            if name.startswith("_") or name in seen:
                continue
            if isinstance(attr, property):
                ret = resolve_type_hints(attr.fget).get("return") if attr.fget else None
                count = int(is_redacted_property(attr)) + count_markers(ret)
                seen[name] = FieldDescriptor(name, _check_single(cls, name, count), attr.fget is not None)

    return list(seen.values())


class SensitivityRegistry:
    """Maps a type to its SensitivityEntry.  Entries live for the process lifetime."""

    __slots__ = ("_entries", "_on_discover")

    def __init__(self, on_discover: Callable[[type], None] | None = None) -> None:
        self._entries: dict[type, SensitivityEntry] = {}
        self._on_discover = on_discover

    def entry(self, cls: type, discover: Discover | None = None) -> SensitivityEntry:
        """Return the cached entry for ``cls``, discovering it on first use."""
        cached = self._entries.get(cls)
        if cached is not None:
            return cached

        found = [d for d in (discover or discover_fields)(cls) if d.readable]
        sensitive = frozenset(d.name.casefold() for d in found if d.is_sensitive)
        if sensitive:
            computed = SensitivityEntry(tuple(found), sensitive)
        else:
            computed = NO_SENSITIVE_FIELDS

        stored = self._entries.setdefault(cls, computed)
        if sensitive and stored is computed and self._on_discover is not None:
            self._on_discover(cls)
        return stored

    def sensitive_fields(self, cls: type, discover: Discover | None = None) -> frozenset[str]:
        """Casefolded names of the sensitive fields of ``cls`` (empty if none)."""
        return self.entry(cls, discover).sensitive_names

    def __contains__(self, cls: object) -> bool:
        return cls in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        """Drop every entry (tests only)."""
        self._entries.clear()


# Every type with sensitive fields becomes resolvable by name for the enricher
default_registry = SensitivityRegistry(on_discover=default_catalog.register)
