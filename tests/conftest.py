"""
Shared fixtures.

Run with:
    python3 -m pytest tests -v
"""

import sys
from pathlib import Path

import pytest

# Allow running the suite from a checkout without installing the package
SRC = Path(__file__).resolve().parent.parent / "src"
if SRC.is_dir() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from anakata.polytope_core import create_24cell, create_pentachoron, create_tesseract  # noqa: E402


@pytest.fixture(scope="module")
def tesseract():
    return create_tesseract()


@pytest.fixture(scope="module")
def pentachoron():
    return create_pentachoron()


@pytest.fixture(scope="module")
def icositetrachoron():
    return create_24cell()
