"""Wiring entry points and the YAML/dict config loader.

Supports loading from a YAML file or a plain dict (for embedding in a
larger application config).

Example YAML:

    field_redactor:
      enabled: true
      redacted_text: "[REDACTED]"
      mode: destructure        # "destructure", "enrich" or "both"
      max_depth: 10
"""

from __future__ import annotations
from pathlib import Path
from typing import Any

import yaml

from .destructure import DEFAULT_MAX_DEPTH
from .enricher import RedactorEnricher
from .policy import RedactorDestructuringPolicy
from .processor import (
    DestructuringConfiguration,
    EnrichmentConfiguration,
    LoggerConfiguration,
    RedactingProcessor,
)
from .value import DEFAULT_REDACTED_TEXT

MODES = ("destructure", "enrich", "both")


class ConfigError(ValueError):
    """Raised for a config dict that cannot be turned into a processor."""


# ----------------------------------------------------------------------
# Entry points
# ----------------------------------------------------------------------

def with_redactor(
    destructuring_configuration: DestructuringConfiguration | None,
    redacted_text: str | None = None,
) -> LoggerConfiguration:
    """Redact sensitive fields while values are destructured.

    ``redacted_text`` replaces every sensitive value; None means
    ``"[REDACTED]"``.  Raises ValueError if no configuration is given.
    """
    if destructuring_configuration is None:
        raise ValueError("destructuring_configuration must not be None")
    return destructuring_configuration.with_(RedactorDestructuringPolicy(redacted_text))


def with_redactor_enricher(
    enrichment_configuration: EnrichmentConfiguration | None,
    redacted_text: str | None = None,
) -> LoggerConfiguration:
    """Redact sensitive fields of already-destructured event properties.

    Raises ValueError if no configuration is given.
    """
    if enrichment_configuration is None:
        raise ValueError("enrichment_configuration must not be None")
    return enrichment_configuration.with_(RedactorEnricher(redacted_text))


# ----------------------------------------------------------------------
# Config loading
# ----------------------------------------------------------------------

def load_config(data: dict[str, Any] | None) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline)."""
    data = data or {}
    # Support nested under "field_redactor" key or flat
    if "field_redactor" in data:
        data = data["field_redactor"] or {}

    mode = data.get("mode", "destructure")
    if mode not in MODES:
        raise ConfigError(f"unknown mode {mode!r}, expected one of {', '.join(MODES)}")

    max_depth = data.get("max_depth", DEFAULT_MAX_DEPTH)
    if not isinstance(max_depth, int) or isinstance(max_depth, bool) or max_depth < 1:
        raise ConfigError(f"max_depth must be a positive integer, got {max_depth!r}")

    enabled = data.get("enabled", True)
    if not isinstance(enabled, bool):
        raise ConfigError(f"enabled must be true or false, got {enabled!r}")

    redacted_text = data.get("redacted_text")
    return {
        "enabled": enabled,
        "redacted_text": DEFAULT_REDACTED_TEXT if redacted_text is None else str(redacted_text),
        "mode": mode,
        "max_depth": max_depth,
    }


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    with open(Path(path).expanduser(), encoding="utf-8") as f:
        return load_config(yaml.safe_load(f))


def create_configuration(config: dict[str, Any]) -> LoggerConfiguration:
    """Build a LoggerConfiguration from a (raw or normalized) config dict."""
    cfg = load_config(config)

    logger_config = LoggerConfiguration(max_depth=cfg["max_depth"])
    if not cfg["enabled"]:
        # Destructure and render only, no redaction
        return logger_config

    if cfg["mode"] in ("destructure", "both"):
        with_redactor(logger_config.destructure, cfg["redacted_text"])
    if cfg["mode"] in ("enrich", "both"):
        with_redactor_enricher(logger_config.enrich, cfg["redacted_text"])
    return logger_config


def create_processor(config: dict[str, Any]) -> RedactingProcessor:
    """Create a fully configured structlog processor from a config dict."""
    return create_configuration(config).create_processor()
