"""
Puts the project root and this directory on sys.path so the flat modules
and tests/helpers.py import without an install, and provides shared fixtures.
"""
import sys
from pathlib import Path

import pytest

_TESTS = Path(__file__).resolve().parent
_ROOT = _TESTS.parent

for path in (_ROOT, _TESTS):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from helpers import utc  # noqa: E402


@pytest.fixture
def reset_time():
    """Wednesday 2024-06-05 08:00 UTC"""
    return utc(2024, 6, 5, 8, 0)
