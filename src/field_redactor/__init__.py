"""field-redactor — keep fields marked sensitive out of structured logs."""

from .types import LogEventProperty, ScalarValue, SequenceValue, StructureValue
from .markers import Redacted, redacted_field, redacted_property
from .value import DEFAULT_REDACTED_TEXT, RedactedValue
from .registry import SensitivityRegistry, default_registry, discover_fields
from .catalog import TypeCatalog, default_catalog
from .policy import RedactorDestructuringPolicy
from .enricher import RedactorEnricher
from .destructure import Destructurer, LogEvent
from .processor import LoggerConfiguration, RedactingProcessor, to_plain
from .config import (
    ConfigError,
    create_processor,
    load_config,
    load_from_yaml,
    with_redactor,
    with_redactor_enricher,
)

__all__ = [
    "ScalarValue", "StructureValue", "SequenceValue", "LogEventProperty",
    "Redacted", "redacted_field", "redacted_property",
    "RedactedValue", "DEFAULT_REDACTED_TEXT",
    "SensitivityRegistry", "default_registry", "discover_fields",
    "TypeCatalog", "default_catalog",
    "RedactorDestructuringPolicy", "RedactorEnricher",
    "Destructurer", "LogEvent",
    "LoggerConfiguration", "RedactingProcessor", "to_plain",
    "with_redactor", "with_redactor_enricher",
    "ConfigError", "create_processor", "load_config", "load_from_yaml",
]
__version__ = "0.1.0"
