"""Ensure version requirements stay in sync across the project."""

from __future__ import annotations

from pathlib import Path

import pytest

import envbind
from envbind.version import (
    MIN_PYTHON_VERSION,
    MIN_PYTHON_VERSION_STR,
    PROJECT_VERSION,
    PYTHON_REQUIRES_SPECIFIER,
    VERSION_INFO,
    VersionInfo,
)

ROOT_DIR = Path(__file__).resolve().parents[1]


def test_python_version_single_source_of_truth() -> None:
    """setup.py reads the interpreter requirement from envbind/version.py."""

    assert PYTHON_REQUIRES_SPECIFIER == f">={MIN_PYTHON_VERSION_STR}"
    assert MIN_PYTHON_VERSION_STR == ".".join(map(str, MIN_PYTHON_VERSION))

    setup_text = (ROOT_DIR / "setup.py").read_text(encoding="utf-8")
    assert "PYTHON_REQUIRES_SPECIFIER" in setup_text
    assert "PROJECT_VERSION" in setup_text


def test_package_version_matches_metadata() -> None:
    assert envbind.__version__ == PROJECT_VERSION
    assert str(VERSION_INFO) == PROJECT_VERSION


@pytest.mark.parametrize("text", ["1.2", "1.2.3.4", "a.b.c", "1.-2.3"])
def test_version_info_rejects_malformed_versions(text: str) -> None:
    with pytest.raises(ValueError):
        VersionInfo.parse(text)


def test_version_info_orders_numerically() -> None:
    assert VersionInfo.parse("0.10.0") > VersionInfo.parse("0.9.9")
