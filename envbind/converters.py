"""Type-driven conversion of raw environment strings.

Every field gets one :class:`Converter` when its descriptor is built. The
converter is a closed variant (:class:`ConverterKind`) chosen from the field
annotation, so the per-value work is a table lookup rather than repeated type
inspection. Custom capabilities always win over the builtin kinds.
"""
from __future__ import annotations

import re
import types
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Annotated, Any, Callable, Dict, Optional, Sequence, Union, get_args, get_origin

from dateutil.parser import isoparse
from pydantic import BaseModel

from envbind.durations import format_duration, parse_duration
from envbind.errors import TimestampParseError
from envbind.types import TypeLabel, capability_of


class ConverterKind(str, Enum):
    DECODER = "decoder"
    SETTER = "setter"
    TEXT = "text"
    BINARY = "binary"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    DURATION = "duration"
    TIMESTAMP = "timestamp"
    BYTES = "bytes"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    UNSUPPORTED = "unsupported"


_CAPABILITY_KINDS = {
    "decode": ConverterKind.DECODER,
    "set": ConverterKind.SETTER,
    "unmarshal_text": ConverterKind.TEXT,
    "unmarshal_binary": ConverterKind.BINARY,
}

LIST_SEPARATOR = ","
PAIR_SEPARATOR = ":"

_TRUE_LITERALS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_LITERALS = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_RFC3339 = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:\d{2})",
    re.ASCII,
)


@dataclass(frozen=True)
class Bounds:
    ge: Optional[float] = None
    gt: Optional[float] = None
    le: Optional[float] = None
    lt: Optional[float] = None

    def check(self, value: Any, raw: str, label: str) -> None:
        if (
            (self.ge is not None and value < self.ge)
            or (self.gt is not None and value <= self.gt)
            or (self.le is not None and value > self.le)
            or (self.lt is not None and value >= self.lt)
        ):
            raise ValueError(f"value {raw} out of range for {label}")

    @property
    def unsigned(self) -> bool:
        return (self.ge is not None and self.ge >= 0) or (
            self.gt is not None and self.gt >= -1
        )

    @property
    def is_byte(self) -> bool:
        return self.ge == 0 and self.le == 255


@dataclass(frozen=True)
class Converter:
    """Conversion plan for one annotation."""

    kind: ConverterKind
    target: Any
    label: str
    bounds: Bounds = Bounds()
    element: Optional["Converter"] = None
    key: Optional["Converter"] = None
    container: Any = list
    method: str = ""

    def convert(self, raw: str, current: Any = None) -> Any:
        """Convert ``raw``; ``current`` is reused by custom kinds when not ``None``."""

        return _CONVERT[self.kind](self, raw, current)

    def format(self, value: Any) -> str:
        """Render ``value`` back into its environment representation."""

        return _FORMAT.get(self.kind, _format_str)(self, value)

    def describe(self) -> str:
        """Human readable description used by usage output."""

        return _DESCRIBE[self.kind](self)


def _is_union(origin: Any) -> bool:
    return origin is Union or origin is types.UnionType


def _non_none_args(annotation: Any) -> list[Any]:
    return [arg for arg in get_args(annotation) if arg is not type(None)]


def unwrap_optional(annotation: Any) -> Any:
    """Strip ``Optional[...]`` layers, leaving other unions untouched."""

    while _is_union(get_origin(annotation)):
        args = _non_none_args(annotation)
        if len(args) != 1:
            break
        annotation = args[0]
    return annotation


def type_name(annotation: Any, metadata: Sequence[Any] = ()) -> str:
    """Stable display name for an annotation (``list[str]``, ``UInt32``...)."""

    for item in metadata:
        if isinstance(item, TypeLabel):
            return item.name
    origin = get_origin(annotation)
    if origin is Annotated:
        base, *extra = get_args(annotation)
        return type_name(base, extra)
    if _is_union(origin):
        args = _non_none_args(annotation)
        if len(args) == 1:
            return type_name(args[0])
        return " | ".join(type_name(arg) for arg in get_args(annotation))
    if origin is not None:
        name = getattr(origin, "__name__", str(origin))
        args = get_args(annotation)
        if not args:
            return name
        rendered = ", ".join("..." if arg is Ellipsis else type_name(arg) for arg in args)
        return f"{name}[{rendered}]"
    if annotation is type(None):
        return "None"
    if isinstance(annotation, type):
        return annotation.__name__
    return str(annotation)


def _collect_bounds(metadata: Sequence[Any]) -> Bounds:
    values: Dict[str, Any] = {}
    for item in metadata:
        for attribute in ("ge", "gt", "le", "lt"):
            bound = getattr(item, attribute, None)
            if bound is not None:
                values[attribute] = bound
    return Bounds(**values)


def build_converter(annotation: Any, metadata: Sequence[Any] = ()) -> Converter:
    """Choose the converter for ``annotation``.

    ``metadata`` carries ``Annotated`` extras that pydantic already split off
    the field annotation.
    """

    origin = get_origin(annotation)
    if origin is Annotated:
        base, *extra = get_args(annotation)
        return build_converter(base, (*metadata, *extra))
    if _is_union(origin):
        args = _non_none_args(annotation)
        if len(args) == 1:
            return build_converter(args[0], metadata)
        return Converter(ConverterKind.UNSUPPORTED, annotation, type_name(annotation))

    label = type_name(annotation, metadata)
    capability = capability_of(annotation)
    if capability is not None:
        return Converter(
            _CAPABILITY_KINDS[capability], annotation, label, method=capability
        )

    if origin is not None:
        return _build_generic(annotation, origin, label)

    if not isinstance(annotation, type):
        return Converter(ConverterKind.UNSUPPORTED, annotation, label)
    if issubclass(annotation, bool):
        return Converter(ConverterKind.BOOL, bool, label)
    if issubclass(annotation, int):
        return Converter(ConverterKind.INT, annotation, label, _collect_bounds(metadata))
    if issubclass(annotation, float):
        return Converter(ConverterKind.FLOAT, annotation, label, _collect_bounds(metadata))
    if issubclass(annotation, (bytes, bytearray)):
        return Converter(ConverterKind.BYTES, annotation, label, container=annotation)
    if issubclass(annotation, str):
        return Converter(ConverterKind.STRING, annotation, label)
    if issubclass(annotation, timedelta):
        return Converter(ConverterKind.DURATION, annotation, label)
    if issubclass(annotation, datetime):
        return Converter(ConverterKind.TIMESTAMP, annotation, label)
    if annotation in (list, tuple):
        return Converter(
            ConverterKind.SEQUENCE,
            annotation,
            label,
            element=build_converter(str),
            container=annotation,
        )
    if annotation is dict:
        return Converter(
            ConverterKind.MAPPING,
            annotation,
            label,
            element=build_converter(str),
            key=build_converter(str),
            container=dict,
        )
    return Converter(ConverterKind.UNSUPPORTED, annotation, label)


def _build_generic(annotation: Any, origin: Any, label: str) -> Converter:
    args = get_args(annotation)
    if origin in (list, tuple):
        if origin is tuple and args and not (len(args) == 2 and args[1] is Ellipsis):
            # fixed-size tuples are not supported
            return Converter(ConverterKind.UNSUPPORTED, annotation, label)
        element = build_converter(args[0] if args else str)
        if element.kind is ConverterKind.INT and element.bounds.is_byte:
            return Converter(ConverterKind.BYTES, annotation, label, container=origin)
        return Converter(
            ConverterKind.SEQUENCE, annotation, label, element=element, container=origin
        )
    if origin is dict:
        key_type, value_type = args if args else (str, str)
        return Converter(
            ConverterKind.MAPPING,
            annotation,
            label,
            key=build_converter(key_type),
            element=build_converter(value_type),
            container=dict,
        )
    return Converter(ConverterKind.UNSUPPORTED, annotation, label)


# --------------------------------------------------------------------------- #
# Conversions


def parse_bool(raw: str) -> bool:
    if raw in _TRUE_LITERALS:
        return True
    if raw in _FALSE_LITERALS:
        return False
    raise ValueError(f"invalid boolean literal {raw!r}")


def _reject_padding(raw: str) -> None:
    if raw != raw.strip():
        raise ValueError(f"invalid syntax {raw!r}: surrounding whitespace")


def parse_int(raw: str) -> int:
    _reject_padding(raw)
    try:
        return int(raw, 0)
    except ValueError:
        # base 0 rejects leading zeros such as "0080"
        if raw.lstrip("+-").isdigit():
            return int(raw, 10)
        raise


def parse_timestamp(raw: str) -> datetime:
    if not _RFC3339.fullmatch(raw):
        raise TimestampParseError(
            f"parsing time {raw!r} as RFC 3339: expected YYYY-MM-DDTHH:MM:SS[.frac](Z|±HH:MM)"
        )
    try:
        return isoparse(raw)
    except (ValueError, OverflowError) as exc:
        raise TimestampParseError(f"parsing time {raw!r} as RFC 3339: {exc}") from exc


def _allocate(target: Any) -> Any:
    if isinstance(target, type) and issubclass(target, BaseModel):
        return target.model_construct()
    return target()


def _convert_custom(converter: Converter, raw: str, current: Any) -> Any:
    instance = current if current is not None else _allocate(converter.target)
    payload: Any = raw.encode("utf-8") if converter.kind is ConverterKind.BINARY else raw
    result = getattr(instance, converter.method)(payload)
    # classmethod-style decoders return the new value instead of mutating
    return instance if result is None else result


def _convert_bool(converter: Converter, raw: str, current: Any) -> bool:
    return parse_bool(raw)


def _convert_int(converter: Converter, raw: str, current: Any) -> int:
    value = parse_int(raw)
    converter.bounds.check(value, raw, converter.label)
    return value if converter.target is int else converter.target(value)


def _convert_float(converter: Converter, raw: str, current: Any) -> float:
    _reject_padding(raw)
    value = float(raw)
    converter.bounds.check(value, raw, converter.label)
    return value if converter.target is float else converter.target(value)


def _convert_string(converter: Converter, raw: str, current: Any) -> str:
    return raw if converter.target is str else converter.target(raw)


def _convert_duration(converter: Converter, raw: str, current: Any) -> timedelta:
    return parse_duration(raw)


def _convert_timestamp(converter: Converter, raw: str, current: Any) -> datetime:
    return parse_timestamp(raw)


def _convert_bytes(converter: Converter, raw: str, current: Any) -> Any:
    return converter.container(raw.encode("utf-8"))


def _convert_sequence(converter: Converter, raw: str, current: Any) -> Any:
    assert converter.element is not None
    if raw == "":
        return converter.container()
    return converter.container(
        converter.element.convert(piece) for piece in raw.split(LIST_SEPARATOR)
    )


def _convert_mapping(converter: Converter, raw: str, current: Any) -> Dict[Any, Any]:
    assert converter.key is not None and converter.element is not None
    result: Dict[Any, Any] = {}
    if raw == "":
        return result
    for pair in raw.split(LIST_SEPARATOR):
        key, separator, value = pair.partition(PAIR_SEPARATOR)
        if not separator:
            raise ValueError(f"invalid map item: {pair!r}")
        result[converter.key.convert(key)] = converter.element.convert(value)
    return result


def _convert_unsupported(converter: Converter, raw: str, current: Any) -> Any:
    raise TypeError(f"unsupported type {converter.label}")


_CONVERT: Dict[ConverterKind, Callable[[Converter, str, Any], Any]] = {
    ConverterKind.DECODER: _convert_custom,
    ConverterKind.SETTER: _convert_custom,
    ConverterKind.TEXT: _convert_custom,
    ConverterKind.BINARY: _convert_custom,
    ConverterKind.BOOL: _convert_bool,
    ConverterKind.INT: _convert_int,
    ConverterKind.FLOAT: _convert_float,
    ConverterKind.STRING: _convert_string,
    ConverterKind.DURATION: _convert_duration,
    ConverterKind.TIMESTAMP: _convert_timestamp,
    ConverterKind.BYTES: _convert_bytes,
    ConverterKind.SEQUENCE: _convert_sequence,
    ConverterKind.MAPPING: _convert_mapping,
    ConverterKind.UNSUPPORTED: _convert_unsupported,
}


# --------------------------------------------------------------------------- #
# Formatting


def _format_str(converter: Converter, value: Any) -> str:
    return str(value)


def _format_bool(converter: Converter, value: Any) -> str:
    return "true" if value else "false"


def _format_float(converter: Converter, value: Any) -> str:
    return repr(float(value))


def _format_bytes(converter: Converter, value: Any) -> str:
    return bytes(value).decode("utf-8")


def _format_sequence(converter: Converter, value: Any) -> str:
    assert converter.element is not None
    return LIST_SEPARATOR.join(converter.element.format(item) for item in value)


def _format_mapping(converter: Converter, value: Any) -> str:
    assert converter.key is not None and converter.element is not None
    return LIST_SEPARATOR.join(
        f"{converter.key.format(key)}{PAIR_SEPARATOR}{converter.element.format(item)}"
        for key, item in value.items()
    )


_FORMAT: Dict[ConverterKind, Callable[[Converter, Any], str]] = {
    ConverterKind.BOOL: _format_bool,
    ConverterKind.INT: lambda converter, value: str(int(value)),
    ConverterKind.FLOAT: _format_float,
    ConverterKind.DURATION: lambda converter, value: format_duration(value),
    ConverterKind.TIMESTAMP: lambda converter, value: value.isoformat(),
    ConverterKind.BYTES: _format_bytes,
    ConverterKind.SEQUENCE: _format_sequence,
    ConverterKind.MAPPING: _format_mapping,
}


# --------------------------------------------------------------------------- #
# Descriptions


def _describe_int(converter: Converter) -> str:
    return "Unsigned Integer" if converter.bounds.unsigned else "Integer"


def _describe_string(converter: Converter) -> str:
    return "String" if converter.target is str else converter.label


def _describe_sequence(converter: Converter) -> str:
    assert converter.element is not None
    return f"Comma-separated list of {converter.element.describe()}"


def _describe_mapping(converter: Converter) -> str:
    assert converter.key is not None and converter.element is not None
    return (
        f"Comma-separated list of {converter.key.describe()}:"
        f"{converter.element.describe()} pairs"
    )


_DESCRIBE: Dict[ConverterKind, Callable[[Converter], str]] = {
    ConverterKind.DECODER: lambda converter: converter.label,
    ConverterKind.SETTER: lambda converter: converter.label,
    ConverterKind.TEXT: lambda converter: converter.label,
    ConverterKind.BINARY: lambda converter: converter.label,
    ConverterKind.BOOL: lambda converter: "True or False",
    ConverterKind.INT: _describe_int,
    ConverterKind.FLOAT: lambda converter: "Float",
    ConverterKind.STRING: _describe_string,
    ConverterKind.DURATION: lambda converter: "Duration",
    ConverterKind.TIMESTAMP: lambda converter: "Timestamp",
    ConverterKind.BYTES: lambda converter: "String",
    ConverterKind.SEQUENCE: _describe_sequence,
    ConverterKind.MAPPING: _describe_mapping,
    ConverterKind.UNSUPPORTED: lambda converter: converter.label,
}


def describe_type(annotation: Any) -> str:
    """Describe the accepted environment syntax for ``annotation``."""

    return build_converter(annotation).describe()


__all__ = [
    "LIST_SEPARATOR",
    "PAIR_SEPARATOR",
    "Bounds",
    "Converter",
    "ConverterKind",
    "build_converter",
    "describe_type",
    "parse_bool",
    "parse_int",
    "parse_timestamp",
    "type_name",
    "unwrap_optional",
]
