"""Great-circle distances and along-path interpolation.

Paths are sequences of ``(lng, lat)`` in degrees. Distances are meters on
a sphere of radius 6 371 km.
"""

import math
from typing import Sequence

import numpy as np

from rivercast.core.types import Coordinate

__all__ = [
    'EARTH_RADIUS_M',
    'haversine_m',
    'cumulative_distances',
    'segment_length',
    'interpolate_along',
    'nearest_segment_index',
]

EARTH_RADIUS_M = 6371e3


def haversine_m(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in meters between two ``(lng, lat)`` points."""
    lng1, lat1 = a
    lng2, lat2 = b
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    h = (math.sin(d_phi / 2) ** 2
         + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2)
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def cumulative_distances(path: Sequence[Coordinate]) -> np.ndarray:
    """Cumulative distance table for a path.

    Returns
    -------
    np.ndarray
        ``table[i]`` is the distance in meters from the first point to
        point ``i``. Empty for paths with fewer than 2 points.

    Examples
    --------
    >>> cumulative_distances([(0.0, 0.0)])
    array([], dtype=float64)
    """
    if len(path) < 2:
        return np.array([], dtype=float)

    steps = [haversine_m(path[i - 1], path[i]) for i in range(1, len(path))]
    return np.concatenate(([0.0], np.cumsum(steps)))


def segment_length(path: Sequence[Coordinate], index: int) -> float:
    """Length of segment ``index`` (from point ``index`` to ``index + 1``); 0 if out of range."""
    if index < 0 or index >= len(path) - 1:
        return 0.0
    return haversine_m(path[index], path[index + 1])


def interpolate_along(path: Sequence[Coordinate], table: np.ndarray, distance: float) -> Coordinate:
    """Coordinate at ``distance`` meters along the path.

    Linear in degrees within the bracketing segment. Negative distances
    give the first point, distances at or past the end give the last.
    """
    if len(path) == 0:
        raise ValueError("Cannot interpolate along an empty path")
    if len(table) < 2 or distance <= 0:
        return tuple(path[0])
    if distance >= table[-1]:
        return tuple(path[-1])

    i = nearest_segment_index(table, distance)
    start, end = table[i], table[i + 1]
    span = end - start
    ratio = (distance - start) / span if span > 0 else 0.0

    lng1, lat1 = path[i]
    lng2, lat2 = path[i + 1]
    return (lng1 + (lng2 - lng1) * ratio, lat1 + (lat2 - lat1) * ratio)


def nearest_segment_index(table: np.ndarray, distance: float) -> int:
    """Index of the segment whose span contains ``distance``.

    Falls back to the last segment (0 for degenerate tables) when the
    distance lies outside the path.
    """
    n = len(table)
    for i in range(n - 1):
        if table[i] <= distance <= table[i + 1]:
            return i
    return max(0, n - 2)
