"""Sized numeric aliases and the custom conversion protocols.

Python integers and floats are unbounded, so fixed-width fields are declared
with ``Annotated`` aliases carrying ``annotated_types`` bounds. pydantic
enforces the same bounds when a model is validated, and the converters enforce
them when a value is read from the environment.
"""
from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Annotated, Protocol, runtime_checkable

from annotated_types import Interval


@dataclass(frozen=True)
class TypeLabel:
    """Display name attached to an ``Annotated`` alias."""

    name: str


def _signed(bits: int) -> Interval:
    return Interval(ge=-(2 ** (bits - 1)), le=2 ** (bits - 1) - 1)


def _unsigned(bits: int) -> Interval:
    return Interval(ge=0, le=2**bits - 1)


FLOAT32_MAX = 3.4028234663852886e38

Int8 = Annotated[int, _signed(8), TypeLabel("Int8")]
Int16 = Annotated[int, _signed(16), TypeLabel("Int16")]
Int32 = Annotated[int, _signed(32), TypeLabel("Int32")]
Int64 = Annotated[int, _signed(64), TypeLabel("Int64")]
UInt = Annotated[int, Interval(ge=0), TypeLabel("UInt")]
UInt8 = Annotated[int, _unsigned(8), TypeLabel("UInt8")]
UInt16 = Annotated[int, _unsigned(16), TypeLabel("UInt16")]
UInt32 = Annotated[int, _unsigned(32), TypeLabel("UInt32")]
UInt64 = Annotated[int, _unsigned(64), TypeLabel("UInt64")]
Float32 = Annotated[float, Interval(ge=-FLOAT32_MAX, le=FLOAT32_MAX), TypeLabel("Float32")]
Float64 = Annotated[float, Interval(ge=-sys.float_info.max, le=sys.float_info.max), TypeLabel("Float64")]


@runtime_checkable
class Decoder(Protocol):
    """Types that decode themselves from a raw environment string.

    A decoder always wins over every other conversion, including structural
    decomposition of models and the binary/text protocols below.
    """

    def decode(self, value: str) -> None:
        ...


@runtime_checkable
class Setter(Protocol):
    """Mutating ``set`` in the style of command-line flag values."""

    def set(self, value: str) -> None:
        ...


@runtime_checkable
class TextUnmarshaler(Protocol):
    def unmarshal_text(self, text: str) -> None:
        ...


@runtime_checkable
class BinaryUnmarshaler(Protocol):
    def unmarshal_binary(self, data: bytes) -> None:
        ...


# Method names checked in precedence order.
CAPABILITY_METHODS: tuple[str, ...] = (
    "decode",
    "set",
    "unmarshal_text",
    "unmarshal_binary",
)

# Builtins whose methods share capability names (``bytes.decode``) but do not
# implement the protocols.
_BUILTIN_BASES = (object, str, bytes, bytearray, int, float)


def capability_of(cls: object) -> str | None:
    """Return the first capability method ``cls`` implements, if any."""

    if not isinstance(cls, type):
        return None
    for method in CAPABILITY_METHODS:
        for klass in cls.__mro__:
            if klass in _BUILTIN_BASES:
                continue
            attribute = vars(klass).get(method)
            if callable(attribute) or isinstance(attribute, (classmethod, staticmethod)):
                return method
    return None


__all__ = [
    "BinaryUnmarshaler",
    "CAPABILITY_METHODS",
    "Decoder",
    "FLOAT32_MAX",
    "Float32",
    "Float64",
    "Int16",
    "Int32",
    "Int64",
    "Int8",
    "Setter",
    "TextUnmarshaler",
    "TypeLabel",
    "UInt",
    "UInt16",
    "UInt32",
    "UInt64",
    "UInt8",
    "capability_of",
]
