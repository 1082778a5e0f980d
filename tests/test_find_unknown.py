from __future__ import annotations

from typing import Optional

import pytest
from pydantic import Field

from envbind import EmptyPrefixError, EnvModel, InvalidSpecificationError, env, find_unknown


class Section(EnvModel):
    host: str = env("ENV_CONFIG_HOST")


class Extra(EnvModel):
    tags: list[str] = env("ENV_CONFIG_EXTRA_TAGS", default_factory=list)


class Spec(EnvModel):
    debug: bool = env("ENV_CONFIG_DEBUG")
    port: int = env("ENV_CONFIG_PORT")
    section: Section = Field(default_factory=Section)
    extra: Optional[Extra] = None


class PrefixSpec(EnvModel):
    debug: bool = env("PREFIX_DEBUG")


def test_empty_prefix_is_rejected() -> None:
    with pytest.raises(EmptyPrefixError, match="prefix must be non-empty"):
        find_unknown("", Spec(), environ={"ENV_CONFIG_TYPO": "1"})


def test_empty_prefix_is_checked_before_the_spec() -> None:
    with pytest.raises(EmptyPrefixError):
        find_unknown("", object())


def test_only_known_variables() -> None:
    environ = {
        "ENV_CONFIG_DEBUG": "true",
        "ENV_CONFIG_PORT": "80",
        "ENV_CONFIG_HOST": "x",
        "ENV_CONFIG_EXTRA_TAGS": "a,b",
    }
    assert find_unknown("ENV_CONFIG_", Spec(), environ=environ) == []


def test_misspelled_variables_are_reported_in_environment_order() -> None:
    environ = {
        "ENV_CONFIG_PROT": "80",
        "ENV_CONFIG_DEBUG": "true",
        "OTHER_VALUE": "ignored",
        "ENV_CONFIG_HOTS": "x",
    }
    assert find_unknown("ENV_CONFIG_", Spec(), environ=environ) == [
        "ENV_CONFIG_PROT",
        "ENV_CONFIG_HOTS",
    ]


def test_prefix_match_is_case_sensitive() -> None:
    assert find_unknown("ENV_CONFIG_", Spec(), environ={"env_config_typo": "1"}) == []


def test_reads_live_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVBIND_TEST_UNKNOWN_VALUE", "1")
    assert find_unknown("ENVBIND_TEST_UNKNOWN_", Spec()) == ["ENVBIND_TEST_UNKNOWN_VALUE"]


def test_invalid_spec_is_wrapped() -> None:
    with pytest.raises(InvalidSpecificationError, match="^gather info: "):
        find_unknown("ENV_CONFIG_", "text", environ={})


def test_does_not_assign_values() -> None:
    spec = Spec()
    find_unknown("ENV_CONFIG_", spec, environ={"ENV_CONFIG_PORT": "80"})
    assert spec.port is None


def test_declared_prefix_variables_are_not_reported() -> None:
    environ = {"PREFIX_DEBUG": "true", "PREFIX_OTHER": "1", "UNRELATED": "x"}
    assert find_unknown("PREFIX_", PrefixSpec(), environ=environ) == ["PREFIX_OTHER"]


def test_nested_section_keys_are_known() -> None:
    environ = {"ENV_CONFIG_HOST": "x", "ENV_CONFIG_EXTRA_TAGS": "a"}
    assert find_unknown("ENV_CONFIG_", Spec(), environ=environ) == []
