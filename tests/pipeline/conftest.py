import pytest

from rivercast.pipeline.orchestrator import FloodRiskMonitor

from tests.helpers.fake_monitor import FakeComparator, T0, UpdateRecorder


@pytest.fixture
def recorder():
    return UpdateRecorder()


@pytest.fixture
def make_monitor(internal_config, recorder):
    """Factory for a FloodRiskMonitor wired to a FakeComparator and fixed clock."""
    monitors = []

    def _make(result=None, config=None, **kwargs):
        comparator = kwargs.pop("comparator", None) or FakeComparator(result)
        monitor = FloodRiskMonitor(
            config or internal_config,
            on_update=recorder,
            comparator=comparator,
            clock=lambda: T0,
            **kwargs,
        )
        monitors.append(monitor)
        return monitor, comparator

    yield _make

    for monitor in monitors:
        monitor.stop()
