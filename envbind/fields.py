"""Field descriptor extraction for pydantic configuration models."""
from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from operator import attrgetter
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.fields import FieldInfo

from envbind.converters import Converter, build_converter, type_name, unwrap_optional
from envbind.errors import InvalidSpecificationError
from envbind.types import capability_of

ENV_TAG = "env"
DEFAULT_TAG = "default"
COMMENT_TAG = "comment"

_UNSET: Any = object()

_WORDS = re.compile(r"([^A-Z]+|[A-Z]+[^A-Z]+|[A-Z]+)")
_ACRONYM = re.compile(r"([A-Z]+)([A-Z][^A-Z]+)")


class EnvModel(BaseModel):
    """Convenience base for configuration models.

    Any ``BaseModel`` works; this one only allows the arbitrary classes that
    custom decoders usually are.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)


def env(
    key: str = "",
    *,
    default: Any = _UNSET,
    comment: str = "",
    initial: Any = None,
    default_factory: Any = None,
    **kwargs: Any,
) -> Any:
    """Declare an environment-bound model field.

    Args:
        key: Environment variable name. May be empty for nested sections.
        default: Raw string used when the variable is absent. Passing ``""``
            declares an empty default, which differs from passing nothing.
        comment: Documentation shown by usage output.
        initial: Value the attribute holds before resolution.
        default_factory: Factory for the initial value, e.g. for sections.
        kwargs: Forwarded to :func:`pydantic.Field`.
    """

    extra: Dict[str, Any] = {ENV_TAG: key, COMMENT_TAG: comment}
    if default is not _UNSET:
        if not isinstance(default, str):
            raise TypeError(f"default for {key or 'field'} must be a string, got {default!r}")
        extra[DEFAULT_TAG] = default
    if default_factory is not None:
        return Field(default_factory=default_factory, json_schema_extra=extra, **kwargs)
    return Field(default=initial, json_schema_extra=extra, **kwargs)


@dataclass
class FieldDescriptor:
    """Binding metadata for one leaf field of a live model instance."""

    name: str
    key: str
    owner: BaseModel
    attribute: str
    annotation: Any
    converter: Converter
    comment: str = ""
    default: str = ""
    has_default: bool = False

    @property
    def type_name(self) -> str:
        return self.converter.label

    @property
    def suggested_key(self) -> str:
        return "_".join(word.upper() for word in split_words(self.name))

    def get(self) -> Any:
        return getattr(self.owner, self.attribute)

    def set(self, value: Any) -> None:
        setattr(self.owner, self.attribute, value)


def split_words(name: str) -> List[str]:
    """Split an identifier on underscores and case transitions.

    ``MultiWordACRWithAutoSplit`` gives ``Multi Word ACR With Auto Split``.
    """

    words: List[str] = []
    for chunk in filter(None, name.split("_")):
        for word in _WORDS.findall(chunk):
            match = _ACRONYM.fullmatch(word)
            if match:
                words.extend(match.groups())
            else:
                words.append(word)
    return words


def field_tags(info: FieldInfo) -> Dict[str, Any]:
    extra = info.json_schema_extra
    return dict(extra) if isinstance(extra, dict) else {}


def _is_section(annotation: Any) -> bool:
    return (
        isinstance(annotation, type)
        and issubclass(annotation, BaseModel)
        and capability_of(annotation) is None
    )


def _resolve_or_allocate(owner: BaseModel, name: str, section_type: type[BaseModel]) -> Any:
    current = getattr(owner, name)
    if current is None:
        current = section_type.model_construct()
        setattr(owner, name, current)
    return current


def _describe(owner: BaseModel, name: str, info: FieldInfo) -> FieldDescriptor:
    tags = field_tags(info)
    has_default = DEFAULT_TAG in tags
    return FieldDescriptor(
        name=name,
        key=str(tags.get(ENV_TAG) or ""),
        owner=owner,
        attribute=name,
        annotation=info.annotation,
        converter=build_converter(info.annotation, info.metadata),
        comment=str(tags.get(COMMENT_TAG) or info.description or ""),
        default=str(tags[DEFAULT_TAG]) if has_default else "",
        has_default=has_default,
    )


def _gather(spec: Any) -> List[FieldDescriptor]:
    if isinstance(spec, type) or not isinstance(spec, BaseModel):
        raise InvalidSpecificationError(
            f"spec must be a pydantic model instance, got {type_name(type(spec))}"
        )
    model_cls = type(spec)
    if model_cls.model_config.get("frozen"):
        raise InvalidSpecificationError(f"spec must not be frozen: {model_cls.__name__}")

    descriptors: List[FieldDescriptor] = []
    for name, info in model_cls.model_fields.items():
        if info.frozen:
            raise InvalidSpecificationError(
                f"spec must not contain frozen fields: {model_cls.__name__}.{name}"
            )
        target = unwrap_optional(info.annotation)
        if _is_section(target):
            section = _resolve_or_allocate(spec, name, target)
            descriptors.extend(_gather(section))
        else:
            descriptors.append(_describe(spec, name, info))
    return descriptors


def _reject_duplicates(descriptors: List[FieldDescriptor]) -> None:
    counts = Counter(descriptor.key for descriptor in descriptors if descriptor.key)
    duplicates = sorted(key for key, count in counts.items() if count > 1)
    if duplicates:
        raise InvalidSpecificationError(
            f"duplicate binding keys: {', '.join(duplicates)}"
        )


def gather_descriptors(spec: Any) -> List[FieldDescriptor]:
    """Return the leaf descriptors of ``spec`` sorted by binding key.

    Nested model fields are recursed into; an unset optional section is
    replaced by a freshly constructed instance so its fields can be bound.

    Raises:
        InvalidSpecificationError: ``spec`` is not a writable model instance
            or two fields share a binding key.
    """

    descriptors = _gather(spec)
    descriptors.sort(key=attrgetter("key"))
    _reject_duplicates(descriptors)
    return descriptors


def known_keys(spec: Any) -> set[str]:
    return {descriptor.key for descriptor in gather_descriptors(spec)}


def find_descriptor(descriptors: List[FieldDescriptor], key: str) -> Optional[FieldDescriptor]:
    for descriptor in descriptors:
        if descriptor.key == key:
            return descriptor
    return None


__all__ = [
    "COMMENT_TAG",
    "DEFAULT_TAG",
    "ENV_TAG",
    "EnvModel",
    "FieldDescriptor",
    "env",
    "field_tags",
    "find_descriptor",
    "gather_descriptors",
    "known_keys",
    "split_words",
]
