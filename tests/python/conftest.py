"""
Pytest configuration and shared fixtures for dimmatrix tests.
"""

import pytest
from pathlib import Path
import sys

# Add src to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root / "src"))

import dimmatrix
from dimmatrix import FixedMatrix, VariableMatrix


# =============================================================================
# Traced Elements
# =============================================================================

class TraceError(Exception):
    """Raised by a traced element type or generator on purpose."""


class TraceLog:
    """
    Records element constructions and destructions in order.

    ``element_type(fail_on=k)`` builds an element class whose constructor
    fails for value k; ``finalizer`` records destruction of an element.
    """

    error = TraceError

    def __init__(self):
        self.events = []

    def element_type(self, fail_on=None):
        log = self.events

        class Traced:
            def __init__(self, value=-1):
                if fail_on is not None and value == fail_on:
                    raise TraceError(f"construction of {value} refused")
                self.value = value
                log.append(('construct', value))

            def __eq__(self, other):
                return isinstance(other, Traced) and other.value == self.value

            def __repr__(self):
                return f"Traced({self.value})"

        return Traced

    def finalizer(self, element):
        self.events.append(('destruct', element.value))

    def constructed(self):
        return [value for kind, value in self.events if kind == 'construct']

    def destructed(self):
        return [value for kind, value in self.events if kind == 'destruct']

    def clear(self):
        self.events.clear()


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def trace_log():
    """Fresh construction/destruction log."""
    return TraceLog()


@pytest.fixture(autouse=True)
def clean_config():
    """Restore global configuration after each test."""
    yield dimmatrix.config
    dimmatrix.config.reset()


@pytest.fixture
def fixed23():
    """FixedMatrix[int, 2, 3]:

    [[1, 2, 3],
     [4, 5, 6]]
    """
    return FixedMatrix[int, 2, 3]([[1, 2, 3], [4, 5, 6]])


@pytest.fixture
def variable23():
    """VariableMatrix[int] with the same contents as fixed23."""
    return VariableMatrix[int]([[1, 2, 3], [4, 5, 6]])


@pytest.fixture
def variable34():
    """VariableMatrix[int] 3x4 with element (r, c) == 10 * r + c."""
    return VariableMatrix[int]([[10 * r + c for c in range(4)] for r in range(3)])

