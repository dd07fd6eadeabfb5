"""
Pytest configuration and shared fixtures for the Merkle tree tests.

Adds offchain/python to sys.path so the flat modules import the same way
the scripts import each other.
"""

import sys
from pathlib import Path

import pytest

_MODULES_ROOT = Path(__file__).resolve().parent.parent / "offchain" / "python"
if str(_MODULES_ROOT) not in sys.path:
    sys.path.insert(0, str(_MODULES_ROOT))

from hash_engine import HashEngine  # noqa: E402
from merkle_config import reset_to_default_config  # noqa: E402


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts and ends with the default global configuration."""
    reset_to_default_config()
    yield
    reset_to_default_config()


@pytest.fixture
def engine():
    return HashEngine()


@pytest.fixture
def leaves():
    return [f"leaf-{i}".encode() for i in range(7)]
