"""
Shared pytest fixtures for dashtile tests.
"""

from concurrent.futures import Executor, Future

import pytest
from pubsub import pub

from dashtile.engine import GridLayoutEngine
from dashtile.geometry import GridSpec
from dashtile.persistence import MemoryWorkspaceStore, WorkspacePersistence
from dashtile.placement import WindowKind, WindowPlacement


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without I/O")


class ImmediateExecutor(Executor):
    """Runs submitted work inline so saves complete before assertions."""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


@pytest.fixture(autouse=True)
def reset_pubsub():
    """Drop all listeners between tests."""
    yield
    pub.unsubAll()


@pytest.fixture
def executor():
    return ImmediateExecutor()


@pytest.fixture
def memory_store():
    return MemoryWorkspaceStore()


@pytest.fixture
def persistence(memory_store, executor):
    return WorkspacePersistence(memory_store, executor)


@pytest.fixture
def grid():
    """Default 5x2 grid with max width 3."""
    return GridSpec()


@pytest.fixture
def engine(grid):
    return GridLayoutEngine("dashboard-test", grid)


@pytest.fixture
def place():
    """Factory fixture building placements with short ids."""

    def _place(window_id, row, col, width=1, height=1, kind=WindowKind.OFFICE_NOTES):
        return WindowPlacement(
            id=window_id, kind=kind, row=row, anchor_col=col, width=width, height=height
        )

    return _place


@pytest.fixture
def events():
    """Record messages published on a set of topics.

    Usage: recorder = events(topics.LAYOUT_CHANGED); recorder.calls[...]
    """

    class Recorder:
        def __init__(self):
            self.calls = []

        def __call__(self, topic=pub.AUTO_TOPIC, **kwargs):
            self.calls.append((topic.getName(), kwargs))

        def of(self, name):
            return [kwargs for topic, kwargs in self.calls if topic == name]

    recorders = []

    def _events(*topic_names):
        recorder = Recorder()
        recorders.append(recorder)
        for name in topic_names:
            pub.subscribe(recorder, name)
        return recorder

    return _events
