from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
TESTS_DIR = Path(__file__).resolve().parent
for directory in (ROOT_DIR, TESTS_DIR):
    if str(directory) not in sys.path:
        sys.path.insert(0, str(directory))

from envbind.logger import get_logger


@pytest.fixture(autouse=True)
def _reset_envbind_logging() -> Iterator[None]:
    """Handlers bound to a captured stream must not outlive the test."""

    yield
    get_logger().reset()
