"""Parsing and formatting of duration expressions such as ``1h30m`` or ``250ms``."""
from __future__ import annotations

import re
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Final

# Nanoseconds per unit.
_UNITS: Final[dict[str, int]] = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # U+00B5 micro sign
    "μs": 1_000,  # U+03BC greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3_600 * 1_000_000_000,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)?")

_MICROS_PER_SECOND: Final[int] = 1_000_000
_MICROS_PER_MINUTE: Final[int] = 60 * _MICROS_PER_SECOND
_MICROS_PER_HOUR: Final[int] = 60 * _MICROS_PER_MINUTE


def parse_duration(text: str) -> timedelta:
    """Parse a signed sequence of decimal numbers with unit suffixes.

    ``"0"`` is the only value accepted without a unit. Precision below one
    microsecond is truncated toward zero.
    """

    original = text
    sign = 1
    if text[:1] in ("-", "+"):
        if text[0] == "-":
            sign = -1
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration {original!r}")

    total_ns = Decimal(0)
    position = 0
    while position < len(text):
        match = _COMPONENT.match(text, position)
        if match is None:
            raise ValueError(f"invalid duration {original!r}")
        number, unit = match.groups()
        if unit is None:
            raise ValueError(f"missing unit in duration {original!r}")
        try:
            total_ns += Decimal(number) * _UNITS[unit]
        except InvalidOperation as exc:
            raise ValueError(f"invalid duration {original!r}") from exc
        position = match.end()

    micros = int(total_ns / 1_000) * sign
    try:
        return timedelta(microseconds=micros)
    except OverflowError as exc:
        raise ValueError(f"duration out of range {original!r}") from exc


def _trim(amount: int, unit: int) -> str:
    whole, fraction = divmod(amount, unit)
    if not fraction:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{fraction:0{digits}d}".rstrip("0")


def format_duration(value: timedelta) -> str:
    """Render ``value`` in the form accepted by :func:`parse_duration`."""

    micros = value // timedelta(microseconds=1)
    if micros == 0:
        return "0s"
    sign = "-" if micros < 0 else ""
    micros = abs(micros)
    if micros < 1_000:
        return f"{sign}{micros}µs"
    if micros < _MICROS_PER_SECOND:
        return f"{sign}{_trim(micros, 1_000)}ms"

    hours, remainder = divmod(micros, _MICROS_PER_HOUR)
    minutes, remainder = divmod(remainder, _MICROS_PER_MINUTE)
    parts = [sign]
    if hours:
        parts.append(f"{hours}h")
    if hours or minutes:
        parts.append(f"{minutes}m")
    parts.append(f"{_trim(remainder, _MICROS_PER_SECOND)}s")
    return "".join(parts)


__all__ = ["format_duration", "parse_duration"]
