"""Enricher — redacts a log event whose properties are already trees.

The trees were built without knowledge of sensitivity, so the only link
back to a type is each structure's ``type_tag``.  Tags are resolved through
the TypeCatalog; an unresolvable tag leaves that structure untouched.
A sensitive field holding a collection is walked element by element, not
replaced, so scalar elements (a list of emails, say) pass through; only the
destructuring policy redacts such a field whole.

Applying the enricher twice gives the same event as applying it once.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

import structlog

from .catalog import TypeCatalog, default_catalog, names_of
from .registry import SensitivityRegistry, default_registry
from .types import (
    LogEventProperty,
    LogEventPropertyValue,
    ScalarValue,
    SequenceValue,
    StructureValue,
)
from .value import DEFAULT_REDACTED_TEXT, RedactedValue

if TYPE_CHECKING:
    from .destructure import LogEvent

log = structlog.get_logger(__name__)

_PRIMITIVES = (str, bytes, bool, int, float, complex)

# Tags under which a generic destructurer may have taken a RedactedValue apart
_WRAPPER_TAGS = frozenset(names_of(RedactedValue))


class RedactorEnricher:
    """Post-destructuring redactor."""

    __slots__ = ("redacted_text", "_registry", "_catalog")

    def __init__(
        self,
        redacted_text: str | None = DEFAULT_REDACTED_TEXT,
        registry: SensitivityRegistry | None = None,
        catalog: TypeCatalog | None = None,
    ) -> None:
        self.redacted_text = redacted_text if redacted_text is not None else DEFAULT_REDACTED_TEXT
        self._registry = registry or default_registry
        self._catalog = catalog or default_catalog

    def enrich(self, event: LogEvent) -> None:
        """Replace every property of ``event`` with its redacted counterpart."""
        for name, node in list(event.properties.items()):
            redacted = self.redact(node)
            if redacted is not node:
                event.add_or_update_property(LogEventProperty(name, redacted))

    # ------------------------------------------------------------------
    # Tree walk
    # ------------------------------------------------------------------

    def redact(self, node: LogEventPropertyValue | None) -> LogEventPropertyValue | None:
        """Redact a top-level node.  Returns ``node`` itself when nothing changed."""
        if node is None:
            return None
        if isinstance(node, ScalarValue):
            return self._redact_scalar(node)
        if isinstance(node, StructureValue):
            if node.type_tag in _WRAPPER_TAGS:
                return self._collapse_wrapper(node)
            cls = self._resolve(node.type_tag)
            if cls is None:
                if node.type_tag is None:
                    return self.redact_structure_fields(node, frozenset())
                return node
            return self.redact_structure_fields(node, self._registry.sensitive_fields(cls))
        if isinstance(node, SequenceValue):
            return self._redact_sequence(node)
        return node

    def redact_structure_fields(
        self, node: StructureValue, sensitive_names: frozenset[str]
    ) -> StructureValue:
        """Rewrite ``node``'s fields; ``sensitive_names`` are casefolded."""
        changed = False
        properties: list[LogEventProperty] = []
        for prop in node.properties:
            new = self._redact_field(prop, sensitive_names)
            changed = changed or new is not prop
            properties.append(new)
        if not changed:
            return node
        return StructureValue(tuple(properties), node.type_tag)

    def _redact_field(self, prop: LogEventProperty, sensitive_names: frozenset[str]) -> LogEventProperty:
        value = prop.value
        # Absence is never obscured
        if value is None or (isinstance(value, ScalarValue) and value.value is None):
            if value is None:
                return LogEventProperty(prop.name, ScalarValue(None))
            return prop

        if isinstance(value, StructureValue):
            if value.type_tag in _WRAPPER_TAGS:
                return LogEventProperty(prop.name, self._collapse_wrapper(value))
            cls = self._resolve(value.type_tag)
            if cls is not None:
                nested = self.redact_structure_fields(value, self._registry.sensitive_fields(cls))
                return prop if nested is value else LogEventProperty(prop.name, nested)
            if value.type_tag is None and prop.name.casefold() not in sensitive_names:
                nested = self.redact_structure_fields(value, frozenset())
                return prop if nested is value else LogEventProperty(prop.name, nested)

        elif isinstance(value, SequenceValue):
            seq = self._redact_sequence(value)
            return prop if seq is value else LogEventProperty(prop.name, seq)

        if prop.name.casefold() in sensitive_names:
            if isinstance(value, ScalarValue) and value.value == self.redacted_text:
                return prop
            return LogEventProperty(prop.name, ScalarValue(self.redacted_text))
        return prop

    def _redact_sequence(self, node: SequenceValue) -> SequenceValue:
        changed = False
        elements: list[LogEventPropertyValue] = []
        for element in node.elements:
            new = element
            if isinstance(element, StructureValue):
                if element.type_tag in _WRAPPER_TAGS:
                    new = self._collapse_wrapper(element)
                elif element.type_tag is None:
                    new = self.redact_structure_fields(element, frozenset())
                else:
                    cls = self._resolve(element.type_tag)
                    if cls is not None:
                        new = self.redact_structure_fields(element, self._registry.sensitive_fields(cls))
            elif isinstance(element, SequenceValue):
                new = self._redact_sequence(element)
            changed = changed or new is not element
            elements.append(new)
        return SequenceValue(tuple(elements)) if changed else node

    def _redact_scalar(self, node: ScalarValue) -> ScalarValue:
        raw = node.value
        if raw is None or isinstance(raw, _PRIMITIVES):
            return node
        if isinstance(raw, RedactedValue):
            return ScalarValue(None) if raw.is_absent else ScalarValue(self.redacted_text)
        if self._registry.sensitive_fields(type(raw)):
            return ScalarValue(self.redacted_text)
        return node

    def _collapse_wrapper(self, node: StructureValue) -> ScalarValue:
        inner = node.get("value")
        if inner is None or inner == ScalarValue(None):
            return ScalarValue(None)
        return ScalarValue(self.redacted_text)

    def _resolve(self, type_tag: str | None) -> type | None:
        if type_tag is None:
            return None
        cls = self._catalog.resolve(type_tag)
        if cls is None:
            log.debug("type_tag_unresolved", type_tag=type_tag)
        return cls

    def __repr__(self) -> str:
        return f"RedactorEnricher(redacted_text={self.redacted_text!r})"
