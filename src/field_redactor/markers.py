"""Sensitivity markers — how a type declares which of its fields to redact.

Three spellings, all equivalent:

    from typing import Annotated
    from dataclasses import dataclass
    from field_redactor import Redacted, redacted_field, redacted_property

    @dataclass
    class Person:
        name: str
        ssn: Annotated[str | None, Redacted] = None        # annotation
        password: str | None = redacted_field(default=None) # field metadata

        @redacted_property                                  # property
        def token(self) -> str:
            return self._token

A field may carry at most one marker.
"""

from __future__ import annotations
import dataclasses
from collections.abc import Mapping
from typing import Any


class _RedactedMarker:
    """Singleton used inside ``Annotated[...]``."""

    __slots__ = ()
    _instance: "_RedactedMarker | None" = None

    def __new__(cls) -> "_RedactedMarker":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Redacted"

    def __reduce__(self) -> str:
        return "Redacted"


Redacted = _RedactedMarker()

# Key under which redacted_field() stores the marker in dataclass metadata
METADATA_KEY = "field_redactor.redacted"


def redacted_field(**kwargs: Any) -> Any:
    """``dataclasses.field`` that marks the field as sensitive."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    if METADATA_KEY in metadata:
        raise TypeError("field is already marked as redacted")
    metadata[METADATA_KEY] = Redacted
    return dataclasses.field(metadata=metadata, **kwargs)


class redacted_property(property):
    """A ``property`` whose value is sensitive."""

    __redacted__ = True


def count_markers(obj: Any) -> int:
    """Number of ``Redacted`` markers attached to an annotation or metadata mapping."""
    if obj is None:
        return 0
    if isinstance(obj, Mapping):
        return 1 if obj.get(METADATA_KEY) is Redacted else 0
    extras = getattr(obj, "__metadata__", ())
    return sum(1 for m in extras if m is Redacted)


def is_redacted_property(prop: property) -> bool:
    return bool(getattr(prop, "__redacted__", False))
