"""Flood-risk monitoring loop.

Ties the precipitation comparator, the water parcel model and the zone
renderer together and re-evaluates the traced river on a fixed schedule.
"""

import logging
import threading
import time
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from rivercast.contracts import ContractViolation, FailurePolicy, assert_feature_collection
from rivercast.core.types import ComparisonResult, as_path
from rivercast.precip.comparator import PrecipitationComparator
from rivercast.precip.errors import SamplingError
from rivercast.river.advection import WaterParcelModel
from rivercast.river.risk_zones import RiskZoneRenderer

if TYPE_CHECKING:
    from rivercast.schemas import InternalConfig

__all__ = ['FloodRiskMonitor']

logger = logging.getLogger(__name__)

IDLE = "idle"
ACTIVE = "active"


class FloodRiskMonitor:
    """Periodic flood-risk evaluation along one river path.

    Each cycle:

    1. Compares precipitation at the selected forecast offset against its
       reference offset (two concurrent samplings).
    2. Registers every detected change as a water parcel born at
       ``now - offset`` on the change's segment.
    3. Prunes parcels that have left the path.
    4. Renders static and moving zones into one FeatureCollection.
    5. Stores the collection and hands it to ``on_update``.

    **Lifecycle:** ``idle`` → :meth:`start` → ``active`` → :meth:`stop` →
    ``idle``. While active a daemon thread runs a cycle immediately and then
    every ``interval_sec``. Changing the path or the time offset while active
    triggers an extra cycle right away.

    **Overlap:** at most one cycle runs at a time. A cycle requested while
    another is in flight is skipped, not queued.

    **Stale results:** a cycle that finishes after :meth:`stop`, a restart
    or an input change discards its result instead of publishing it. If the
    monitor is active, the cycle is then re-run with the new inputs.

    **Failures:** if both samplings fail the error is logged and the previous
    zones stay in place. A broken stage contract inside the scheduler thread
    is handled per ``failure_policy``.

    Example usage::

        monitor = FloodRiskMonitor(config, on_update=print)
        monitor.set_path([(-79.52, 9.00), (-79.50, 9.02)])
        monitor.start()
        ...
        monitor.stop()
    """

    def __init__(
        self,
        config: "InternalConfig",
        on_update: Optional[Callable[[Optional[dict]], None]] = None,
        comparator: Optional[PrecipitationComparator] = None,
        renderer: Optional[RiskZoneRenderer] = None,
        clock=None,
        failure_policy: FailurePolicy = FailurePolicy.SKIP_CYCLE,
    ):
        """Initialize monitor.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration.

        on_update : callable, optional
            Called with each new FeatureCollection, and with None on stop.

        comparator : PrecipitationComparator, optional
            If None, creates one from config. Allows injection for testing.

        renderer : RiskZoneRenderer, optional
            If None, creates one from config.

        clock : callable, optional
            Function returning epoch seconds (for testing). If None, uses
            `time.time`.

        failure_policy : FailurePolicy, optional
            What the scheduler thread does on ContractViolation. SKIP_CYCLE
            (default) logs and waits for the next tick; FAIL_FAST logs and
            stops scheduling.
        """
        self.config = config
        self.on_update = on_update
        self.comparator = comparator or PrecipitationComparator(config)
        self.renderer = renderer or RiskZoneRenderer(config)
        self._clock = clock or time.time
        self.failure_policy = FailurePolicy(failure_policy)

        self.interval = config.monitor.interval_sec
        self.join_timeout = config.monitor.join_timeout_sec
        self.ring_points = config.zones.ring_points

        self._path = ()
        self._time_offset = config.monitor.time_offset_hours
        self._flow_velocity = config.advection.flow_velocity_ms
        self._model = WaterParcelModel(self._path, self._flow_velocity)

        self._state = IDLE
        self._generation = 0
        self._rerun_pending = False
        self._state_lock = threading.Lock()
        self._cycle_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self._latest_zones: Optional[dict] = None
        self._last_comparison: Optional[ComparisonResult] = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> str:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == ACTIVE

    @property
    def latest_zones(self) -> Optional[dict]:
        return self._latest_zones

    @property
    def last_comparison(self) -> Optional[ComparisonResult]:
        return self._last_comparison

    @property
    def model(self) -> WaterParcelModel:
        return self._model

    @property
    def path(self):
        return self._path

    @property
    def time_offset(self) -> int:
        return self._time_offset

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def set_path(self, path: Sequence[Sequence[float]]):
        """Replace the monitored path; existing parcels are dropped."""
        path = as_path(path)
        with self._state_lock:
            self._path = path
            self._model = WaterParcelModel(path, self._flow_velocity)
            active = self._input_changed()

        logger.info("Path set: %d points, %.0f m", len(path), self._model.total_distance)
        if active:
            self.run_cycle()

    def set_time_offset(self, hours: int):
        """Select the forecast offset (whole hours, >= 0) to evaluate."""
        if int(hours) != hours or hours < 0:
            raise ValueError(f"time offset must be a whole number of hours >= 0, got {hours}")

        with self._state_lock:
            self._time_offset = int(hours)
            active = self._input_changed()

        logger.info("Time offset set: +%dh", self._time_offset)
        if active:
            self.run_cycle()

    def set_flow_velocity(self, velocity: float):
        """Change the flow velocity (m/s); existing parcels are dropped."""
        with self._state_lock:
            self._model = WaterParcelModel(self._path, velocity)
            self._flow_velocity = float(velocity)
            self._input_changed()

        logger.info("Flow velocity set: %.1f m/s", self._flow_velocity)

    def _input_changed(self) -> bool:
        """Invalidate in-flight cycles. Caller holds ``_state_lock``.

        Returns True when the monitor is active; a cycle is then owed for
        the new inputs even if the one requested now has to be skipped.
        """
        self._generation += 1
        active = self._state == ACTIVE
        if active:
            self._rerun_pending = True
        return active

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self):
        """Begin periodic evaluation. No-op if already active."""
        with self._state_lock:
            if self._state == ACTIVE:
                return
            self._state = ACTIVE
            self._generation += 1
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run_loop, name="FloodRiskMonitor", daemon=True
            )
            thread = self._thread

        logger.info("Monitor started: every %.0f s at +%dh", self.interval, self._time_offset)
        thread.start()

    def stop(self):
        """Stop periodic evaluation and clear the output.

        Safe to call multiple times; subscribers are notified with None
        only on the active → idle transition.
        """
        with self._state_lock:
            if self._state == IDLE:
                return
            self._state = IDLE
            self._generation += 1
            self._stop_event.set()
            thread = self._thread
            self._thread = None

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.join_timeout)
            if thread.is_alive():
                logger.warning("Monitor thread did not stop cleanly")

        self._latest_zones = None
        self._last_comparison = None
        logger.info("Monitor stopped")
        self._notify(None)

    def close(self):
        """Stop the monitor and release the comparator's HTTP resources."""
        self.stop()
        self.comparator.close()

    def run_cycle(self) -> Optional[dict]:
        """Run one evaluation cycle now.

        If the path, offset or velocity changed while the cycle ran, its
        result is discarded; an active monitor then re-runs with the new inputs.

        Returns
        -------
        dict or None
            The published FeatureCollection, or None when the cycle was
            skipped (overlap, no usable path, sampling failure) or its
            result went stale.
        """
        if not self._cycle_lock.acquire(blocking=False):
            logger.warning("Cycle already in progress; skipping")
            return None

        try:
            zones = self._evaluate()
        finally:
            self._cycle_lock.release()

        with self._state_lock:
            rerun = self._rerun_pending and self._state == ACTIVE
        if rerun:
            logger.info("Inputs changed during cycle; re-evaluating")
            return self.run_cycle()

        if zones is not None:
            self._notify(zones)
        return zones

    def _evaluate(self) -> Optional[dict]:
        """Cycle body. Caller holds ``_cycle_lock``."""
        with self._state_lock:
            generation = self._generation
            path = self._path
            model = self._model
            offset = self._time_offset
            self._rerun_pending = False

        if len(path) < 2:
            logger.debug("No usable path (%d points); nothing to evaluate", len(path))
            return None

        try:
            comparison = self.comparator.compare(path, offset)
        except SamplingError as e:
            logger.error("Precipitation sampling failed, keeping previous zones: %s", e)
            return None

        now = self._clock()
        born = now - offset * 3600
        for change in comparison.changes:
            model.register(born, change.current_intensity, [change.path_index])
        pruned = model.prune(now)

        zones = self.renderer.render_combined(model, comparison.current, now)
        assert_feature_collection(zones, self.ring_points)

        with self._state_lock:
            if generation != self._generation:
                logger.info("Discarding stale cycle result")
                return None
            self._latest_zones = zones
            self._last_comparison = comparison

        logger.info("Cycle complete: %d changes, %d parcels (%d pruned), %d zones",
                    len(comparison.changes), len(model), pruned, len(zones["features"]))
        return zones

    def _run_loop(self):
        """Scheduler thread body: cycle now, then every interval until stopped."""
        while not self._stop_event.is_set():
            try:
                self.run_cycle()
            except ContractViolation:
                logger.exception("Contract violation during cycle")
                if self.failure_policy == FailurePolicy.FAIL_FAST:
                    with self._state_lock:
                        self._state = IDLE
                        self._thread = None
                    break
            except Exception:
                logger.exception("Unexpected error during cycle")

            if self._stop_event.wait(self.interval):
                break

    def _notify(self, zones: Optional[dict]):
        if self.on_update is not None:
            self.on_update(zones)
