"""Type catalog — turns a structure's type tag back into a class.

Used only on the enrichment path, where the tree was built by someone else
and all that is left of the original type is its name.  Resolution order:

  1. classes registered explicitly (or seen by the sensitivity registry)
  2. a scan of every loaded module for a class whose ``module.qualname``,
     ``qualname`` or ``__name__`` equals the tag

Simple names are ambiguous; the first match wins.  Misses are not cached,
so a type imported later can still resolve.
"""

from __future__ import annotations
import sys
from typing import Iterator


class TypeCatalog:
    """Name → class lookup over registered classes and loaded modules."""

    __slots__ = ("_registered", "_resolved", "_scan_modules")

    def __init__(self, *, scan_modules: bool = True) -> None:
        self._registered: dict[str, type] = {}
        self._resolved: dict[str, type] = {}
        self._scan_modules = scan_modules

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, cls: type) -> type:
        """Make ``cls`` resolvable by its full and simple names.  Usable as a decorator."""
        for name in names_of(cls):
            self._registered.setdefault(name, cls)
        return cls

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve(self, type_tag: str | None) -> type | None:
        """Return the class for ``type_tag``, or None when nothing matches."""
        if not type_tag or not type_tag.strip():
            return None

        cls = self._registered.get(type_tag) or self._resolved.get(type_tag)
        if cls is not None:
            return cls
        if not self._scan_modules:
            return None

        for candidate in _loaded_classes():
            if type_tag in names_of(candidate):
                return self._resolved.setdefault(type_tag, candidate)
        return None

    def __len__(self) -> int:
        return len(self._registered)


def names_of(cls: type) -> tuple[str, ...]:
    qualname = getattr(cls, "__qualname__", cls.__name__)
    return (f"{cls.__module__}.{qualname}", qualname, cls.__name__)


def _loaded_classes() -> Iterator[type]:
    # Snapshot: imports on other threads may mutate sys.modules mid-scan
    for module in list(sys.modules.values()):
        namespace = getattr(module, "__dict__", None)
        if not isinstance(namespace, dict):
            continue
        for obj in list(namespace.values()):
            # type() rather than isinstance(): lazy proxies may raise on __class__
            if issubclass(type(obj), type):
                yield obj
                yield from _nested_classes(obj)


def _nested_classes(cls: type, depth: int = 0) -> Iterator[type]:
    if depth > 4:
        return
    for obj in list(vars(cls).values()):
        if isinstance(obj, type) and obj.__qualname__.startswith(cls.__qualname__ + "."):
            yield obj
            yield from _nested_classes(obj, depth + 1)


default_catalog = TypeCatalog()
