"""
Pytest configuration.

Ensures the src directory is on the path for imports.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add src to path so imports work
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


@pytest.fixture
def at():
    """A fixed timestamp so snapshots compare deterministically."""
    return datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
