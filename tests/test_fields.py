from __future__ import annotations

from typing import Optional

import pytest
from pydantic import BaseModel, ConfigDict, Field

from binding_types import Bracketed, HonorDecodeInModel, SetterModel
from envbind import EnvModel, InvalidSpecificationError, env, gather_descriptors, split_words
from envbind.converters import ConverterKind
from envbind.fields import find_descriptor, known_keys


class Embedded(EnvModel):
    enabled: bool = env("ENV_CONFIG_ENABLED", comment="some embedded value")
    embedded_port: int = env("ENV_CONFIG_EMBEDDED_PORT")


class Inner(EnvModel):
    property: str = env("ENV_CONFIG_INNER")
    property_with_default: str = env(default="fuzzybydefault")


class Spec(EnvModel):
    debug: bool = env("ENV_CONFIG_DEBUG")
    embedded: Embedded = Field(default_factory=Embedded)
    nested: Optional[Inner] = None
    after_nested: str = env("ENV_CONFIG_AFTER_NESTED")
    some_pointer: Optional[str] = env("ENV_CONFIG_SOME_POINTER")
    decode_model: HonorDecodeInModel = env("ENV_CONFIG_HONOR", default_factory=HonorDecodeInModel)
    setter_model: Optional[SetterModel] = env("ENV_CONFIG_SETTER")
    bracketed: Optional[Bracketed] = env("ENV_CONFIG_BRACKETED")


def test_descriptors_are_sorted_by_key() -> None:
    descriptors = gather_descriptors(Spec())
    keys = [descriptor.key for descriptor in descriptors]
    assert keys == sorted(keys)
    assert keys[0] == ""  # the nested default-only field declares no key
    assert "ENV_CONFIG_EMBEDDED_PORT" in keys
    assert "ENV_CONFIG_INNER" in keys


def test_nested_sections_are_flattened_and_allocated() -> None:
    spec = Spec()
    assert spec.nested is None
    descriptors = gather_descriptors(spec)
    assert isinstance(spec.nested, Inner)
    inner = find_descriptor(descriptors, "ENV_CONFIG_INNER")
    assert inner is not None
    assert inner.owner is spec.nested
    assert inner.attribute == "property"


def test_existing_sections_are_preserved() -> None:
    section = Inner(property="kept")
    spec = Spec(nested=section)
    gather_descriptors(spec)
    assert spec.nested is section
    assert spec.nested.property == "kept"


def test_optional_scalars_stay_unset() -> None:
    spec = Spec()
    gather_descriptors(spec)
    assert spec.some_pointer is None
    assert spec.bracketed is None


def test_custom_capabilities_are_not_recursed_into() -> None:
    descriptors = {descriptor.key: descriptor for descriptor in gather_descriptors(Spec())}
    assert descriptors["ENV_CONFIG_HONOR"].converter.kind is ConverterKind.DECODER
    assert descriptors["ENV_CONFIG_SETTER"].converter.kind is ConverterKind.SETTER
    assert descriptors["ENV_CONFIG_BRACKETED"].converter.kind is ConverterKind.SETTER


def test_default_presence_is_tracked_separately() -> None:
    class Defaults(EnvModel):
        blank: str = env("BLANK", default="")
        absent: str = env("ABSENT")

    descriptors = {descriptor.key: descriptor for descriptor in gather_descriptors(Defaults())}
    assert descriptors["BLANK"].has_default is True
    assert descriptors["BLANK"].default == ""
    assert descriptors["ABSENT"].has_default is False


def test_comment_falls_back_to_description() -> None:
    class Documented(EnvModel):
        port: int = env("PORT", description="listening port")
        host: str = env("HOST", comment="bind address", description="ignored")

    descriptors = {descriptor.key: descriptor for descriptor in gather_descriptors(Documented())}
    assert descriptors["PORT"].comment == "listening port"
    assert descriptors["HOST"].comment == "bind address"


def test_plain_pydantic_fields_are_descriptors_without_keys() -> None:
    class Plain(BaseModel):
        name: str = "x"

    (descriptor,) = gather_descriptors(Plain())
    assert descriptor.key == ""
    assert descriptor.name == "name"


@pytest.mark.parametrize("spec", [Spec, {"a": "b"}, "text", None, 3])
def test_rejects_non_model_instances(spec: object) -> None:
    with pytest.raises(InvalidSpecificationError):
        gather_descriptors(spec)


def test_rejects_frozen_models() -> None:
    class Frozen(EnvModel):
        model_config = ConfigDict(frozen=True)

        value: str = env("VALUE")

    with pytest.raises(InvalidSpecificationError):
        gather_descriptors(Frozen())


def test_rejects_frozen_fields() -> None:
    class PartlyFrozen(EnvModel):
        value: str = env("VALUE", frozen=True)

    with pytest.raises(InvalidSpecificationError):
        gather_descriptors(PartlyFrozen())


def test_rejects_duplicate_keys_across_sections() -> None:
    class Section(EnvModel):
        port: int = env("PORT")

    class Duplicated(EnvModel):
        section: Section = Field(default_factory=Section)
        port: int = env("PORT")

    with pytest.raises(InvalidSpecificationError, match="PORT"):
        gather_descriptors(Duplicated())


def test_known_keys() -> None:
    assert "ENV_CONFIG_DEBUG" in known_keys(Spec())


def test_env_rejects_non_string_defaults() -> None:
    with pytest.raises(TypeError):
        env("PORT", default=8080)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("MultiWordACRWithAutoSplit", ["Multi", "Word", "ACR", "With", "Auto", "Split"]),
        ("MultiWordVar", ["Multi", "Word", "Var"]),
        ("multi_word_var", ["multi", "word", "var"]),
        ("TTL", ["TTL"]),
        ("URLValue", ["URL", "Value"]),
    ],
)
def test_split_words(name: str, expected: list[str]) -> None:
    assert split_words(name) == expected


def test_suggested_key_uses_split_words() -> None:
    class Unkeyed(EnvModel):
        multi_word_var: str = env()

    (descriptor,) = gather_descriptors(Unkeyed())
    assert descriptor.suggested_key == "MULTI_WORD_VAR"
