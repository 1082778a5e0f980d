"""Version and interpreter requirements, readable without importing the package."""

from __future__ import annotations

from typing import Final, NamedTuple, Tuple

MIN_PYTHON_VERSION: Final[Tuple[int, int]] = (3, 10)
MIN_PYTHON_VERSION_STR: Final[str] = ".".join(str(part) for part in MIN_PYTHON_VERSION)
PYTHON_REQUIRES_SPECIFIER: Final[str] = f">={MIN_PYTHON_VERSION_STR}"

PROJECT_VERSION: Final[str] = "0.1.0"


class VersionInfo(NamedTuple):
    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> "VersionInfo":
        parts = text.strip().split(".")
        if len(parts) != 3:
            raise ValueError(f"expected MAJOR.MINOR.PATCH, got {text!r}")
        values = [int(part) for part in parts]
        for name, value in zip(cls._fields, values):
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
        return cls(*values)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


VERSION_INFO: Final[VersionInfo] = VersionInfo.parse(PROJECT_VERSION)
__version__: Final[str] = PROJECT_VERSION

__all__ = [
    "MIN_PYTHON_VERSION",
    "MIN_PYTHON_VERSION_STR",
    "PROJECT_VERSION",
    "PYTHON_REQUIRES_SPECIFIER",
    "VERSION_INFO",
    "VersionInfo",
    "__version__",
]
