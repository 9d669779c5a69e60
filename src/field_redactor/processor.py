"""structlog integration — a processor that destructures, redacts and renders.

Usage:

    config = LoggerConfiguration()
    with_redactor(config.destructure)            # redact while destructuring
    with_redactor_enricher(config.enrich)        # and/or after the fact

    structlog.configure(processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        config.create_processor(),
        structlog.processors.JSONRenderer(),
    ])

    log.info("signup", person=person)            # person.ssn → "[REDACTED]"

Keys prefixed with ``$`` are stringified rather than taken apart
(``log.info("x", **{"$user": user})`` logs ``user`` as a single value).
A value no policy claims renders as its type name, never its ``str()``.
"""

from __future__ import annotations
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from .destructure import DEFAULT_MAX_DEPTH, SCALAR_TYPES, Destructurer, DestructuringPolicy, LogEvent
from .types import (
    LogEventProperty,
    LogEventPropertyValue,
    ScalarValue,
    SequenceValue,
    StructureValue,
)
from .value import RedactedValue

# Event-dict keys owned by structlog itself; never destructured
RESERVED_KEYS = frozenset({
    "event", "level", "log_level", "logger", "logger_name",
    "timestamp", "exc_info", "stack_info", "exception",
})

STRINGIFY_PREFIX = "$"
TYPE_KEY = "$type"

_PLAIN = (str, int, float, bool)


class Enricher(Protocol):
    def enrich(self, event: LogEvent) -> None: ...


# ----------------------------------------------------------------------
# Configuration
# ----------------------------------------------------------------------

@dataclass
class DestructuringConfiguration:
    """Holds the destructuring policies of a LoggerConfiguration."""
    parent: LoggerConfiguration = field(repr=False)
    policies: list[DestructuringPolicy] = field(default_factory=list)

    def with_(self, *policies: DestructuringPolicy) -> LoggerConfiguration:
        self.policies.extend(policies)
        return self.parent


@dataclass
class EnrichmentConfiguration:
    """Holds the enrichers of a LoggerConfiguration."""
    parent: LoggerConfiguration = field(repr=False)
    enrichers: list[Enricher] = field(default_factory=list)

    def with_(self, *enrichers: Enricher) -> LoggerConfiguration:
        self.enrichers.extend(enrichers)
        return self.parent


class LoggerConfiguration:
    """Collects policies and enrichers, then builds a RedactingProcessor."""

    def __init__(self, *, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.max_depth = max_depth
        self.destructure = DestructuringConfiguration(self)
        self.enrich = EnrichmentConfiguration(self)

    def create_processor(self) -> RedactingProcessor:
        return RedactingProcessor(
            destructurer=Destructurer(self.destructure.policies, max_depth=self.max_depth),
            enrichers=tuple(self.enrich.enrichers),
        )


# ----------------------------------------------------------------------
# Processor
# ----------------------------------------------------------------------

@dataclass
class RedactingProcessor:
    """structlog processor wrapping a Destructurer and a chain of enrichers."""

    destructurer: Destructurer
    enrichers: tuple[Enricher, ...] = ()

    def __call__(
        self, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> MutableMapping[str, Any]:
        event = self.build_event(event_dict)
        for enricher in self.enrichers:
            enricher.enrich(event)

        rendered: dict[str, Any] = {}
        for key, value in event_dict.items():
            if key in RESERVED_KEYS:
                rendered[key] = value
        for name, node in event.properties.items():
            rendered[name] = to_plain(node)

        event_dict.clear()
        event_dict.update(rendered)
        return event_dict

    def build_event(self, event_dict: MutableMapping[str, Any]) -> LogEvent:
        """Destructure every non-reserved key of ``event_dict`` into a LogEvent."""
        properties: list[LogEventProperty] = []
        for key, value in event_dict.items():
            if key in RESERVED_KEYS:
                continue
            if key.startswith(STRINGIFY_PREFIX) and len(key) > 1:
                node = self.destructurer.create_property_value(value, destructure_objects=False)
                key = key[len(STRINGIFY_PREFIX):]
            else:
                node = self.destructurer.create_property_value(value)
            properties.append(LogEventProperty(key, node))
        return LogEvent(str(event_dict.get("event", "")), properties)


def to_plain(node: LogEventPropertyValue | None) -> Any:
    """Render a tree as JSON-friendly Python values.

    Raw objects kept whole (``$``-prefixed keys) render as their type name.
    """
    if node is None:
        return None
    if isinstance(node, ScalarValue):
        value = node.value
        if value is None or isinstance(value, _PLAIN):
            return value
        if isinstance(value, (SCALAR_TYPES, RedactedValue)):
            return str(value)
        # An object's str() may spell out its fields, sensitive or not
        return type(value).__qualname__
    if isinstance(node, StructureValue):
        out: dict[str, Any] = {}
        if node.type_tag:
            out[TYPE_KEY] = node.type_tag
        for prop in node.properties:
            out[prop.name] = to_plain(prop.value)
        return out
    if isinstance(node, SequenceValue):
        return [to_plain(e) for e in node.elements]
    raise TypeError(f"not a tree node: {node!r}")
