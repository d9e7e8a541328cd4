import threading

import pytest

from rivercast.contracts import ContractViolation, FailurePolicy
from rivercast.pipeline.orchestrator import ACTIVE, IDLE
from rivercast.precip.errors import SamplingError

from tests.helpers.fake_monitor import FakeComparator, T0, make_comparison

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]


def _rainy(path, offset=0):
    """Heavy rain at the first point, registered as a change."""
    intensities = [3.0] + [0.0] * (len(path) - 1)
    return make_comparison(path, intensities, changed=[0], offset=offset)


def test_monitor_starts_idle(make_monitor):
    monitor, _ = make_monitor()

    assert monitor.state == IDLE
    assert not monitor.is_active
    assert monitor.latest_zones is None
    assert monitor.time_offset == 0
    assert monitor.path == ()


def test_cycle_without_path_does_nothing(make_monitor, recorder):
    monitor, comparator = make_monitor()

    assert monitor.run_cycle() is None
    monitor.set_path([(0.0, 0.0)])
    assert monitor.run_cycle() is None

    assert comparator.calls == []
    assert recorder.updates == []


def test_cycle_publishes_static_and_moving_zones(make_monitor, recorder, equator_path):
    monitor, comparator = make_monitor(_rainy(equator_path))
    monitor.set_path(equator_path)

    zones = monitor.run_cycle()

    assert comparator.calls == [(tuple(equator_path), 0)]
    flags = [f["properties"]["isStatic"] for f in zones["features"]]
    assert flags == [True] * 5 + [False]
    moving = zones["features"][-1]["properties"]
    assert moving["parcelId"] == f"{T0!r}-0"
    assert monitor.latest_zones is zones
    assert monitor.last_comparison.changes[0].path_index == 0
    assert recorder.updates == [zones]


def test_parcels_born_at_forecast_offset(make_monitor, equator_path):
    monitor, _ = make_monitor(_rainy(equator_path, offset=6))
    monitor.set_path(equator_path)
    monitor.set_time_offset(6)

    zones = monitor.run_cycle()

    # born six hours ago, long past the end of a 2 km path
    assert all(f["properties"]["isStatic"] for f in zones["features"])
    assert len(monitor.model) == 0


def test_repeated_cycles_do_not_duplicate_parcels(make_monitor, equator_path):
    monitor, _ = make_monitor(_rainy(equator_path))
    monitor.set_path(equator_path)

    monitor.run_cycle()
    monitor.run_cycle()

    assert len(monitor.model) == 1


def test_sampling_failure_keeps_previous_zones(make_monitor, recorder, equator_path):
    monitor, comparator = make_monitor(_rainy(equator_path))
    monitor.set_path(equator_path)
    first = monitor.run_cycle()

    comparator.result = SamplingError("both samplings failed")
    assert monitor.run_cycle() is None

    assert monitor.latest_zones is first
    assert recorder.updates == [first]


def test_overlapping_cycle_is_skipped(make_monitor, equator_path):
    monitor, comparator = make_monitor(_rainy(equator_path))
    monitor.set_path(equator_path)

    monitor._cycle_lock.acquire()
    try:
        assert monitor.run_cycle() is None
    finally:
        monitor._cycle_lock.release()

    assert comparator.calls == []


def test_cycle_finishing_after_restart_is_discarded(make_monitor, recorder, equator_path):
    gate = threading.Event()
    comparator = FakeComparator(_rainy(equator_path), gate=gate)
    monitor, _ = make_monitor(comparator=comparator)
    monitor.set_path(equator_path)

    results = []
    worker = threading.Thread(target=lambda: results.append(monitor.run_cycle()))
    worker.start()
    assert comparator.entered.wait(5)

    # new generation while the cycle is in flight
    monitor.start()
    gate.set()
    worker.join(5)

    assert results == [None]
    assert monitor.latest_zones is None
    assert recorder.updates == []


def test_path_change_during_cycle_reruns_with_new_path(make_monitor, recorder, equator_path, panama_path):
    gate = threading.Event()
    comparator = FakeComparator(lambda path, offset: _rainy(path, offset), gate=gate)
    monitor, _ = make_monitor(comparator=comparator)
    monitor.set_path(equator_path)
    monitor.start()
    assert comparator.entered.wait(5)

    # the cycle triggered here is skipped while the first one holds the lock
    monitor.set_path(panama_path)
    gate.set()
    assert recorder.received.wait(5)

    assert [call[0] for call in comparator.calls] == [tuple(equator_path), tuple(panama_path)]
    assert len(recorder.updates) == 1
    ring = recorder.updates[0]["features"][0]["geometry"]["coordinates"][0]
    assert ring[0][0] == pytest.approx(-79.52, abs=0.1)
    assert monitor.latest_zones is recorder.updates[0]


def test_offset_change_during_cycle_reruns_with_new_offset(make_monitor, recorder, equator_path):
    gate = threading.Event()
    comparator = FakeComparator(lambda path, offset: _rainy(path, offset), gate=gate)
    monitor, _ = make_monitor(comparator=comparator)
    monitor.set_path(equator_path)
    monitor.start()
    assert comparator.entered.wait(5)

    monitor.set_time_offset(6)
    gate.set()
    assert recorder.received.wait(5)

    assert [call[1] for call in comparator.calls] == [0, 6]
    assert len(recorder.updates) == 1
    assert monitor.last_comparison.current_offset == 6


def test_path_change_during_idle_cycle_discards_result(make_monitor, recorder, equator_path, panama_path):
    gate = threading.Event()
    comparator = FakeComparator(lambda path, offset: _rainy(path, offset), gate=gate)
    monitor, _ = make_monitor(comparator=comparator)
    monitor.set_path(equator_path)

    results = []
    worker = threading.Thread(target=lambda: results.append(monitor.run_cycle()))
    worker.start()
    assert comparator.entered.wait(5)

    monitor.set_path(panama_path)
    gate.set()
    worker.join(5)

    assert results == [None]
    assert len(comparator.calls) == 1
    assert monitor.latest_zones is None
    assert recorder.updates == []


def test_contract_violation_propagates_from_run_cycle(make_monitor, equator_path):
    monitor, _ = make_monitor(ContractViolation("bad samples"))
    monitor.set_path(equator_path)

    with pytest.raises(ContractViolation):
        monitor.run_cycle()


def test_set_time_offset_validation(make_monitor):
    monitor, _ = make_monitor()

    for bad in (-1, 1.5):
        with pytest.raises(ValueError):
            monitor.set_time_offset(bad)

    monitor.set_time_offset(12)
    assert monitor.time_offset == 12


def test_set_path_replaces_model(make_monitor, equator_path):
    monitor, _ = make_monitor(_rainy(equator_path))
    monitor.set_path(equator_path)
    monitor.run_cycle()
    old = monitor.model

    monitor.set_path(list(reversed(equator_path)))

    assert monitor.model is not old
    assert len(monitor.model) == 0
    assert monitor.path[0] == (0.02, 0.0)


def test_set_flow_velocity_replaces_model(make_monitor, equator_path):
    monitor, _ = make_monitor()
    monitor.set_path(equator_path)

    monitor.set_flow_velocity(5.0)

    assert monitor.model.flow_velocity == 5.0
    assert monitor.model.path == tuple(equator_path)


def test_start_runs_cycle_and_stop_clears(make_monitor, recorder, equator_path):
    monitor, comparator = make_monitor(_rainy(equator_path))
    monitor.set_path(equator_path)

    monitor.start()
    assert monitor.state == ACTIVE
    assert recorder.received.wait(5)
    assert recorder.updates[0] is not None

    monitor.stop()

    assert monitor.state == IDLE
    assert monitor.latest_zones is None
    assert monitor.last_comparison is None
    assert recorder.updates[-1] is None


def test_stop_is_idempotent(make_monitor, recorder, equator_path):
    monitor, _ = make_monitor(_rainy(equator_path))
    monitor.set_path(equator_path)

    monitor.stop()
    assert recorder.updates == []

    monitor.start()
    assert recorder.received.wait(5)
    monitor.stop()
    monitor.stop()

    assert recorder.updates.count(None) == 1


def test_start_twice_keeps_one_thread(make_monitor, recorder, equator_path):
    monitor, _ = make_monitor(_rainy(equator_path))
    monitor.set_path(equator_path)

    monitor.start()
    thread = monitor._thread
    monitor.start()

    assert monitor._thread is thread


def test_offset_change_while_active_runs_cycle(make_monitor, recorder, equator_path):
    monitor, comparator = make_monitor(lambda path, offset: _rainy(path, offset))
    monitor.set_path(equator_path)
    monitor.start()
    assert recorder.received.wait(5)

    monitor.set_time_offset(6)

    assert comparator.calls[-1] == (tuple(equator_path), 6)
    assert len(recorder.updates) == 2


def test_path_change_while_active_runs_cycle(make_monitor, recorder, equator_path, panama_path):
    monitor, comparator = make_monitor(lambda path, offset: _rainy(path, offset))
    monitor.set_path(equator_path)
    monitor.start()
    assert recorder.received.wait(5)

    monitor.set_path(panama_path)

    assert comparator.calls[-1] == (tuple(panama_path), 0)
    assert len(recorder.updates) == 2


def test_fail_fast_stops_scheduler(make_monitor, equator_path):
    gate = threading.Event()
    comparator = FakeComparator(ContractViolation("broken"), gate=gate)
    monitor, _ = make_monitor(comparator=comparator, failure_policy=FailurePolicy.FAIL_FAST)
    monitor.set_path(equator_path)

    monitor.start()
    thread = monitor._thread
    gate.set()
    thread.join(5)

    assert not thread.is_alive()
    assert monitor.state == IDLE


def test_skip_cycle_keeps_scheduler_running(make_monitor, equator_path):
    monitor, comparator = make_monitor(ContractViolation("broken"))
    monitor.set_path(equator_path)

    monitor.start()
    assert comparator.entered.wait(5)

    assert monitor.state == ACTIVE
    assert monitor._thread.is_alive()


def test_close_stops_and_releases_comparator(make_monitor, recorder, equator_path):
    monitor, comparator = make_monitor(_rainy(equator_path))
    monitor.set_path(equator_path)
    monitor.start()
    assert recorder.received.wait(5)

    monitor.close()

    assert monitor.state == IDLE
    assert comparator.closed
    assert recorder.updates[-1] is None
