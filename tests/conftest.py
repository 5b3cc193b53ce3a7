"""
Configuration for pytest to set up the import path and shared fixtures.
"""

import sys
from pathlib import Path
import pytest


# Add the repository root to the Python path so lazyranges imports without installation
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

from lazyranges.contracts import RANGE_REGISTRY
from lazyranges.utils import clear_performance_metrics


@pytest.fixture
def counter():
    """Fixture providing a producer that counts its invocations."""
    state = {"calls": 0}

    def produce():
        state["calls"] += 1
        return state["calls"]

    produce.state = state
    return produce


@pytest.fixture(autouse=True)
def reset_metrics():
    """Auto-applied fixture that isolates the global performance store between tests."""
    clear_performance_metrics()
    yield
    clear_performance_metrics()


@pytest.fixture(autouse=True)
def restore_registry():
    """Auto-applied fixture that drops range classes defined inside a test."""
    saved = dict(RANGE_REGISTRY)
    yield
    RANGE_REGISTRY.clear()
    RANGE_REGISTRY.update(saved)
