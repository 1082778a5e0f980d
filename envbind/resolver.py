"""Resolution of field descriptors against the environment."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Iterator, List, Mapping, Optional

from loguru import logger

from envbind.environment import DEFAULT_LAYER, build_environment, source_of
from envbind.errors import (
    ConversionError,
    EmptyBindingKeyError,
    EmptyPrefixError,
    EnvBindError,
    InvalidSpecificationError,
    MissingValueError,
)
from envbind.fields import FieldDescriptor, gather_descriptors, known_keys


@dataclass
class FieldOutcome:
    """Result of binding one field."""

    key: str
    field_name: str
    type_name: str
    value: str = ""
    error: Optional[EnvBindError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class Report:
    """Ordered outcomes of one resolution pass.

    ``failure`` is set when the model could not be inspected at all, in which
    case ``outcomes`` is empty.
    """

    outcomes: List[FieldOutcome] = field(default_factory=list)
    failure: Optional[EnvBindError] = None

    def __iter__(self) -> Iterator[FieldOutcome]:
        return iter(self.outcomes)

    def __len__(self) -> int:
        return len(self.outcomes)

    @property
    def error(self) -> Optional[EnvBindError]:
        """The structural failure, else the first field error in key order."""

        if self.failure is not None:
            return self.failure
        for outcome in self.outcomes:
            if outcome.error is not None:
                return outcome.error
        return None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def errors(self) -> List[EnvBindError]:
        return [outcome.error for outcome in self.outcomes if outcome.error is not None]

    def raise_for_error(self) -> None:
        error = self.error
        if error is not None:
            raise error

    def pretty_print(self, out: Optional[IO[str]] = None) -> None:
        from envbind.usage import pretty_print

        pretty_print(self, out)


def resolve_field(descriptor: FieldDescriptor, environ: Mapping[str, str]) -> FieldOutcome:
    """Bind one descriptor. Failures are recorded on the outcome, never raised."""

    outcome = FieldOutcome(
        key=descriptor.key,
        field_name=descriptor.name,
        type_name=descriptor.type_name,
    )
    if not descriptor.key:
        outcome.error = EmptyBindingKeyError(descriptor.name, descriptor.suggested_key)
        logger.warning("Field {} has no binding key", descriptor.name)
        return outcome

    raw = environ.get(descriptor.key)
    source = source_of(environ, descriptor.key)
    if raw is None:
        if not descriptor.has_default:
            outcome.error = MissingValueError(descriptor.key)
            logger.warning("{} is not set and has no default", descriptor.key)
            return outcome
        raw = descriptor.default
        source = DEFAULT_LAYER
    outcome.value = raw

    try:
        value = descriptor.converter.convert(raw, descriptor.get())
        descriptor.set(value)
    except Exception as exc:  # converters and custom decoders raise arbitrary errors
        outcome.error = ConversionError(
            descriptor.key, raw, descriptor.name, descriptor.type_name, exc
        )
        logger.warning("Could not assign {} from {}: {}", descriptor.key, source, type(exc).__name__)
        return outcome

    logger.debug("Resolved {} ({}) from {}", descriptor.key, descriptor.type_name, source)
    return outcome


def resolve(
    spec: Any,
    *,
    environ: Optional[Mapping[str, str]] = None,
    env_file: Path | str | None = None,
) -> Report:
    """Bind every field of ``spec`` and report the outcome of each.

    The report is always returned. Inspect ``report.error`` or call
    ``report.raise_for_error()`` to surface the first failure.
    """

    try:
        descriptors = gather_descriptors(spec)
        lookup = build_environment(environ, env_file)
    except EnvBindError as exc:
        logger.warning("Cannot resolve {}: {}", type(spec).__name__, exc)
        return Report(failure=exc)

    report = Report(outcomes=[resolve_field(descriptor, lookup) for descriptor in descriptors])
    logger.debug(
        "Resolved {} of {} fields for {}",
        sum(1 for outcome in report if outcome.ok),
        len(report),
        type(spec).__name__,
    )
    return report


def unmarshal(
    spec: Any,
    *,
    environ: Optional[Mapping[str, str]] = None,
    env_file: Path | str | None = None,
) -> Report:
    """Like :func:`resolve` but raise the first error."""

    report = resolve(spec, environ=environ, env_file=env_file)
    report.raise_for_error()
    return report


def find_unknown(
    prefix: str,
    spec: Any,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """List variables starting with ``prefix`` that ``spec`` does not bind.

    Names are returned in the environment's enumeration order.
    """

    if not prefix:
        raise EmptyPrefixError()
    try:
        keys = known_keys(spec)
    except InvalidSpecificationError as exc:
        raise InvalidSpecificationError(f"gather info: {exc}") from exc

    runtime = build_environment(environ)
    return [name for name in runtime if name.startswith(prefix) and name not in keys]


__all__ = [
    "FieldOutcome",
    "Report",
    "find_unknown",
    "resolve",
    "resolve_field",
    "unmarshal",
]
