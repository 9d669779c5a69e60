"""Destructuring policy — redacts while an object is being turned into a tree.

The destructurer offers every non-scalar value to its policies before
falling back to its own object handling.  This policy claims two kinds of
value:

  - ``RedactedValue`` boxes, which become a placeholder scalar
  - instances of types with at least one sensitive field, which become a
    structure with those fields replaced

Everything else is declined and destructured normally.  Nested values are
handed back through ``convert``, so redaction applies at any depth.
"""

from __future__ import annotations
from typing import Any, Callable

import structlog

from .registry import SensitivityRegistry, default_registry
from .types import LogEventProperty, LogEventPropertyValue, ScalarValue, StructureValue
from .value import DEFAULT_REDACTED_TEXT, RedactedValue

log = structlog.get_logger(__name__)

Convert = Callable[[Any], LogEventPropertyValue]


class RedactorDestructuringPolicy:
    """Pre-destructuring redactor."""

    __slots__ = ("redacted_text", "_registry")

    def __init__(
        self,
        redacted_text: str | None = DEFAULT_REDACTED_TEXT,
        registry: SensitivityRegistry | None = None,
    ) -> None:
        self.redacted_text = redacted_text if redacted_text is not None else DEFAULT_REDACTED_TEXT
        self._registry = registry or default_registry

    def try_destructure(
        self, value: Any, convert: Convert
    ) -> tuple[LogEventPropertyValue | None, bool]:
        """Return ``(node, True)`` if this policy handled ``value``, else ``(None, False)``."""
        if value is None:
            return None, False

        if isinstance(value, RedactedValue):
            # Keep genuine absence visible rather than hiding it behind the placeholder
            if value.is_absent:
                return ScalarValue(None), True
            return ScalarValue(self.redacted_text), True

        cls = type(value)
        entry = self._registry.entry(cls)
        if not entry.has_any_sensitive_field:
            return None, False

        properties: list[LogEventProperty] = []
        for descriptor in entry.fields:
            name = descriptor.name
            try:
                field_value = getattr(value, name)
            except Exception as exc:
                log.debug("field_read_failed", type=cls.__qualname__, field=name, error=repr(exc))
                continue

            if entry.is_sensitive(name):
                node = ScalarValue(None) if _is_absent(field_value) else ScalarValue(self.redacted_text)
            else:
                node = convert(field_value)
            properties.append(LogEventProperty(name, node))

        return StructureValue(tuple(properties), cls.__name__), True

    def __repr__(self) -> str:
        return f"RedactorDestructuringPolicy(redacted_text={self.redacted_text!r})"


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, RedactedValue) and value.is_absent)
