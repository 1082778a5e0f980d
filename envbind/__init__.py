"""Bind environment variables to the fields of pydantic configuration models."""
from __future__ import annotations

import loguru

from .converters import Converter, ConverterKind, build_converter, describe_type
from .durations import format_duration, parse_duration
from .errors import (
    ConversionError,
    EmptyBindingKeyError,
    EmptyPrefixError,
    EnvBindError,
    InvalidSpecificationError,
    MissingValueError,
    TimestampParseError,
    UsageFormatError,
)
from .fields import EnvModel, FieldDescriptor, env, gather_descriptors, split_words
from .logger import setup_logging
from .resolver import FieldOutcome, Report, find_unknown, resolve, unmarshal
from .types import (
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    UInt,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)
from .usage import pretty_print, print_usage, usagef
from .version import PROJECT_VERSION

loguru.logger.disable(__name__)

__all__ = [
    "ConversionError",
    "Converter",
    "ConverterKind",
    "EmptyBindingKeyError",
    "EmptyPrefixError",
    "EnvBindError",
    "EnvModel",
    "FieldDescriptor",
    "FieldOutcome",
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "InvalidSpecificationError",
    "MissingValueError",
    "Report",
    "TimestampParseError",
    "UInt",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "UsageFormatError",
    "build_converter",
    "describe_type",
    "env",
    "find_unknown",
    "format_duration",
    "gather_descriptors",
    "parse_duration",
    "pretty_print",
    "print_usage",
    "resolve",
    "setup_logging",
    "split_words",
    "unmarshal",
    "usagef",
]

__version__ = PROJECT_VERSION
