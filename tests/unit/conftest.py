"""Fixtures shared by unit tests."""

import pytest

from run_lifecycle.runtime import LifecycleRuntime
from run_lifecycle.writers.memory import InMemoryWriter


@pytest.fixture
def writer() -> InMemoryWriter:
    """Create an empty in-memory writer."""
    return InMemoryWriter()


@pytest.fixture
def runtime(writer: InMemoryWriter) -> LifecycleRuntime:
    """Create a runtime writing to the in-memory writer."""
    return LifecycleRuntime(writer=writer)
