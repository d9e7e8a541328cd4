"""Water Parcel Advection Model.

Precipitation that fell on a path segment is modelled as a discrete
parcel that travels downstream at a constant flow velocity. A parcel is
never mutated: its position at any instant is the pure function

    position(now) = origin_distance + flow_velocity * (now - birth_time)

and it stops being active once that position passes the end of the path.

This is a kinematic sketch, not a hydrological simulation: slope, soil
absorption, channel capacity and confluences are not modelled.
"""

import logging
import threading
from typing import Dict, Iterable, List, Sequence, Tuple

from rivercast.contracts import assert_distance_table
from rivercast.core.types import Coordinate, ParcelKey, ParcelPosition, WaterParcel, as_path
from rivercast.river.path_geometry import cumulative_distances, interpolate_along, nearest_segment_index

__all__ = ['WaterParcelModel']

logger = logging.getLogger(__name__)


class WaterParcelModel:
    """Track water parcels advecting along one river path.

    The path and its cumulative distance table are fixed for the lifetime
    of the model; a new path means a new model. The parcel set is the only
    mutable state and is guarded by a lock so the monitor thread and
    readers can share one model.

    Example usage::

        model = WaterParcelModel(path, flow_velocity=18.0)
        model.register(time.time(), 2.0, [0])
        for pos in model.active_parcels_at(time.time() + 60):
            print(pos.parcel.parcel_id, model.position_to_coordinates(pos.position))
    """

    def __init__(self, path: Sequence[Sequence[float]], flow_velocity: float = 18.0):
        """Initialize model.

        Parameters
        ----------
        path : sequence of (lng, lat)
            River path in flow order.
        flow_velocity : float, optional
            Downstream velocity in m/s (default 18).

        Raises
        ------
        ValueError
            If ``flow_velocity`` is not positive.
        """
        if flow_velocity <= 0:
            raise ValueError(f"flow_velocity must be > 0, got {flow_velocity}")

        self._path = as_path(path)
        self._distances = cumulative_distances(self._path)
        assert_distance_table(self._distances, len(self._path))
        self.flow_velocity = float(flow_velocity)

        self._parcels: Dict[ParcelKey, WaterParcel] = {}
        self._lock = threading.Lock()

    @property
    def path(self) -> Tuple[Coordinate, ...]:
        return self._path

    @property
    def distances(self):
        return self._distances

    @property
    def total_distance(self) -> float:
        """Path length in meters (0 for degenerate paths)."""
        return float(self._distances[-1]) if len(self._distances) else 0.0

    @property
    def parcels(self) -> Tuple[WaterParcel, ...]:
        """Snapshot of all registered parcels, active or not."""
        with self._lock:
            return tuple(self._parcels.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._parcels)

    def register(self, timestamp: float, intensity: float,
                 affected_segments: Iterable[int]) -> List[WaterParcel]:
        """Create one parcel per affected segment.

        Parameters
        ----------
        timestamp : float
            Birth time in epoch seconds.
        intensity : float
            Precipitation intensity (mm/h) carried by the parcels.
        affected_segments : iterable of int
            Path indices where the precipitation fell. Indices outside the
            path are ignored.

        Returns
        -------
        list of WaterParcel
            Newly created parcels. A (timestamp, segment) pair that is
            already registered is not created again.
        """
        if len(self._distances) == 0:
            return []

        created = []
        with self._lock:
            for segment in affected_segments:
                if segment < 0 or segment >= len(self._path):
                    logger.debug("Ignoring out-of-range segment %d", segment)
                    continue

                key = ParcelKey(timestamp=float(timestamp), segment_index=int(segment))
                if key in self._parcels:
                    continue

                parcel = WaterParcel(
                    parcel_id=key,
                    origin_segment=int(segment),
                    origin_distance=float(self._distances[segment]),
                    intensity=float(intensity),
                    birth_time=float(timestamp),
                )
                self._parcels[key] = parcel
                created.append(parcel)

        return created

    def position_of(self, parcel: WaterParcel, now: float) -> float:
        """Distance in meters along the path at time ``now``."""
        return parcel.origin_distance + self.flow_velocity * (now - parcel.birth_time)

    def active_parcels_at(self, now: float) -> List[ParcelPosition]:
        """Parcels still on the path at ``now``, in registration order."""
        total = self.total_distance
        active = []
        for parcel in self.parcels:
            position = self.position_of(parcel, now)
            if position <= total:
                active.append(ParcelPosition(
                    parcel=parcel,
                    position=position,
                    elapsed=now - parcel.birth_time,
                ))
        return active

    def prune(self, now: float) -> int:
        """Drop parcels that have left the path; returns how many were removed."""
        total = self.total_distance
        with self._lock:
            gone = [key for key, parcel in self._parcels.items()
                    if self.position_of(parcel, now) > total]
            for key in gone:
                del self._parcels[key]

        if gone:
            logger.debug("Pruned %d parcels past %.0f m", len(gone), total)
        return len(gone)

    def position_to_coordinates(self, distance: float) -> Coordinate:
        """Coordinate at ``distance`` meters along the path."""
        return interpolate_along(self._path, self._distances, distance)

    def nearest_segment_index(self, distance: float) -> int:
        """Segment containing ``distance``, else the last segment."""
        return nearest_segment_index(self._distances, distance)
