from __future__ import annotations

from pathlib import Path
from runpy import run_path

from setuptools import setup

_VERSION = run_path(str(Path(__file__).resolve().parent / "envbind" / "version.py"))

if __name__ == "__main__":
    setup(
        name="envbind",
        version=_VERSION["PROJECT_VERSION"],
        description="Bind environment variables to pydantic configuration models",
        python_requires=_VERSION["PYTHON_REQUIRES_SPECIFIER"],
        packages=["envbind"],
        install_requires=[
            "pydantic>=2.5",
            "annotated-types>=0.6",
            "python-dotenv>=1.0",
            "python-dateutil>=2.8",
            "loguru>=0.7",
        ],
        extras_require={
            "test": [
                "pytest>=7.4",
                "hypothesis>=6.90",
            ],
        },
        entry_points={"console_scripts": ["envbind=envbind.cli:main"]},
    )
