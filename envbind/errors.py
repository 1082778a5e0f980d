"""Exception hierarchy shared by the envbind modules."""
from __future__ import annotations

from typing import Optional


class EnvBindError(RuntimeError):
    """Base class for every error raised or reported by envbind."""


class InvalidSpecificationError(EnvBindError):
    """Raised when the configuration object cannot be bound at all."""


class MissingValueError(EnvBindError):
    """A binding key is absent from the environment and has no default."""

    def __init__(self, key: str) -> None:
        super().__init__(f"environment variable is not set: {key!r}")
        self.key = key


class EmptyBindingKeyError(EnvBindError):
    """A leaf field declares no binding key."""

    def __init__(self, field_name: str, suggestion: str = "") -> None:
        message = f"binding key is empty for field {field_name}"
        if suggestion:
            message += f" (did you mean {suggestion}?)"
        super().__init__(message)
        self.field_name = field_name


class ConversionError(EnvBindError):
    """A raw environment value could not be assigned to its field.

    The underlying exception is kept both as ``cause`` and as ``__cause__`` so
    callers can tell, for example, a timestamp parse failure from a custom
    decoder failure.
    """

    def __init__(
        self,
        key: str,
        value: str,
        field_name: str,
        type_name: str,
        cause: BaseException,
    ) -> None:
        super().__init__(
            f'assigning {key}="{value}" to {field_name} type {type_name}: {cause}'
        )
        self.key = key
        self.value = value
        self.field_name = field_name
        self.type_name = type_name
        self.cause: Optional[BaseException] = cause
        self.__cause__ = cause


class TimestampParseError(ValueError):
    """Raised when a timestamp does not follow the RFC 3339 layout."""


class EmptyPrefixError(EnvBindError, ValueError):
    """Raised when the unknown-variable scan is given an empty prefix."""

    def __init__(self) -> None:
        super().__init__("prefix must be non-empty")


class UsageFormatError(EnvBindError, ValueError):
    """Raised when a usage template references an unknown placeholder."""


__all__ = [
    "ConversionError",
    "EmptyBindingKeyError",
    "EmptyPrefixError",
    "EnvBindError",
    "InvalidSpecificationError",
    "MissingValueError",
    "TimestampParseError",
    "UsageFormatError",
]
