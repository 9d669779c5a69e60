"""RedactedValue — a box around a single value that always prints as a placeholder.

A bare scalar has no field metadata of its own, so wrapping it is the only
way to get it redacted when logged directly:

    password = RedactedValue("P@ssw0rd!")
    log.info("login", password=password)   # password="[REDACTED]"
    check(password.value)                  # the real value
"""

from __future__ import annotations
from typing import Any, Generic, TypeVar

from .markers import redacted_property

T = TypeVar("T")

DEFAULT_REDACTED_TEXT = "[REDACTED]"


class RedactedValue(Generic[T]):
    """Wraps a value of any type; ``str()``/``repr()`` never reveal it."""

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    @classmethod
    def of(cls, value: "T | RedactedValue[T]") -> "RedactedValue[T]":
        """Wrap ``value`` unless it is already wrapped."""
        return value if isinstance(value, RedactedValue) else cls(value)

    @redacted_property
    def value(self) -> T:
        return self._value

    @property
    def is_absent(self) -> bool:
        return self._value is None

    def __str__(self) -> str:
        return DEFAULT_REDACTED_TEXT

    def __repr__(self) -> str:
        return f"RedactedValue({DEFAULT_REDACTED_TEXT})"

    def __format__(self, spec: str) -> str:
        return format(DEFAULT_REDACTED_TEXT, spec)

    # Compare and hash as the wrapped value, so the box can stand in for it
    def __eq__(self, other: Any) -> bool:
        if isinstance(other, RedactedValue):
            other = other._value
        return self._value == other

    def __hash__(self) -> int:
        return hash(self._value)

    def __bool__(self) -> bool:
        return bool(self._value)
