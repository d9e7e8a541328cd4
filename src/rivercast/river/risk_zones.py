"""Risk Zone Renderer.

Turns precipitation intensities into circular GeoJSON risk zones whose
radius is a step function of intensity. Two zone families are produced:

- **static** zones along path segments that currently carry precipitation
- **moving** zones around water parcels travelling downstream

Both are returned as one FeatureCollection, static zones first.
"""

import dataclasses
import logging
import math
from typing import TYPE_CHECKING, Dict, List, Sequence, Tuple

from shapely.geometry import Polygon, mapping

from rivercast.core.types import Coordinate, IntensitySample
from rivercast.river.path_geometry import EARTH_RADIUS_M, segment_length

if TYPE_CHECKING:
    from rivercast.river.advection import WaterParcelModel
    from rivercast.schemas import InternalConfig

__all__ = [
    'RadiusProfile',
    'ADVISORY_PROFILE',
    'ZONE_PROFILE',
    'radius_for',
    'classify_risk',
    'circular_buffer',
    'RiskZoneRenderer',
]

logger = logging.getLogger(__name__)

# Intensities at or below this carry no flood risk
NO_RISK_INTENSITY = 0.2

# Upper bounds (mm/h) of the first seven radius steps; above the last is the eighth
RADIUS_THRESHOLDS = (0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 50.0)

RISK_LEVELS = ((1.0, "low"), (5.0, "moderate"), (20.0, "high"))


@dataclasses.dataclass(frozen=True)
class RadiusProfile:
    """Radius multipliers per intensity step and the clamp applied after."""
    multipliers: Tuple[float, ...]
    min_radius: float
    max_radius: float

    def with_bounds(self, min_radius: float, max_radius: float) -> "RadiusProfile":
        return dataclasses.replace(self, min_radius=min_radius, max_radius=max_radius)


# Advisory radius attached to precipitation changes
ADVISORY_PROFILE = RadiusProfile(
    multipliers=(0.4, 0.7, 1.0, 1.6, 2.8, 4.5, 7.0, 10.0),
    min_radius=50.0,
    max_radius=8000.0,
)

# Radius of rendered static and moving zones
ZONE_PROFILE = RadiusProfile(
    multipliers=(0.3, 0.6, 1.0, 1.5, 2.5, 4.0, 6.0, 8.0),
    min_radius=100.0,
    max_radius=5000.0,
)


def radius_for(intensity: float, base_radius: float = 500.0,
               profile: RadiusProfile = ZONE_PROFILE) -> float:
    """Zone radius in meters for a precipitation intensity.

    Parameters
    ----------
    intensity : float
        Precipitation intensity in mm/h.
    base_radius : float, optional
        Radius for the 1-2 mm/h step (default 500 m).
    profile : RadiusProfile, optional
        Multipliers and clamp bounds (default ZONE_PROFILE).

    Returns
    -------
    float
        0 for intensities at or below 0.2 mm/h, otherwise
        ``base_radius * multiplier`` clamped to the profile bounds.

    Examples
    --------
    >>> radius_for(0.1)
    0.0
    >>> radius_for(1.5)
    500.0
    >>> radius_for(100.0)
    4000.0
    """
    if intensity <= NO_RISK_INTENSITY:
        return 0.0

    step = len(RADIUS_THRESHOLDS)
    for i, upper in enumerate(RADIUS_THRESHOLDS):
        if intensity <= upper:
            step = i
            break

    radius = base_radius * profile.multipliers[step]
    return float(max(profile.min_radius, min(radius, profile.max_radius)))


def classify_risk(intensity: float) -> str:
    """Risk level for an intensity: low, moderate, high or extreme."""
    for upper, level in RISK_LEVELS:
        if intensity < upper:
            return level
    return "extreme"


def circular_buffer(center: Coordinate, radius_m: float, points: int = 32) -> List[Coordinate]:
    """Closed ring of ``points + 1`` vertices approximating a circle.

    Uses a local equirectangular approximation: meters are converted to
    degrees of latitude, and longitude degrees are widened by
    ``1 / cos(latitude)``.
    """
    lng0, lat0 = center
    lat_offset = radius_m / EARTH_RADIUS_M * (180.0 / math.pi)
    lng_offset = lat_offset / math.cos(math.radians(lat0))

    ring = []
    for i in range(points):
        angle = i * 2.0 * math.pi / points
        ring.append((lng0 + lng_offset * math.sin(angle), lat0 + lat_offset * math.cos(angle)))
    ring.append(ring[0])
    return ring


def _feature(center: Coordinate, radius: float, ring_points: int, properties: dict) -> dict:
    polygon = Polygon(circular_buffer(center, radius, ring_points))
    return {
        "type": "Feature",
        "properties": properties,
        "geometry": mapping(polygon),
    }


def _feature_collection(features: List[dict]) -> dict:
    return {"type": "FeatureCollection", "features": features}


def _by_path_index(samples: Sequence[IntensitySample]) -> Dict[int, IntensitySample]:
    return {s.path_index: s for s in samples}


class RiskZoneRenderer:
    """Render static and moving risk zones as GeoJSON.

    Example usage::

        renderer = RiskZoneRenderer(config)
        collection = renderer.render_combined(model, samples, time.time())
    """

    def __init__(self, config: "InternalConfig"):
        zones = config.zones
        self.base_radius = zones.base_radius_m
        self.ring_points = zones.ring_points
        self.segment_spacing = zones.segment_spacing_m
        self.radius_variation = zones.radius_variation
        self.subdivide_segments = zones.subdivide_segments
        self.profile = ZONE_PROFILE.with_bounds(
            zones.zone_radius.min_radius_m, zones.zone_radius.max_radius_m
        )

    def render_static(self, path: Sequence[Coordinate], samples: Sequence[IntensitySample]) -> dict:
        """Zones along every segment whose start point carries precipitation.

        Segments longer than ``segment_spacing_m`` get several zones along
        their length, with radius swelling by up to ``radius_variation``
        towards the middle of the segment.
        """
        by_index = _by_path_index(samples)
        features = []

        for i in range(len(path) - 1):
            sample = by_index.get(i)
            if sample is None or sample.intensity <= NO_RISK_INTENSITY:
                continue

            radius = radius_for(sample.intensity, self.base_radius, self.profile)
            risk = classify_risk(sample.intensity)
            (lng1, lat1), (lng2, lat2) = path[i], path[i + 1]

            length = segment_length(path, i)
            if self.subdivide_segments and length > self.segment_spacing:
                count = max(3, int(length // self.segment_spacing))
            else:
                count = 1

            for j in range(count):
                ratio = j / (count - 1) if count > 1 else 0.0
                center = (lng1 + (lng2 - lng1) * ratio, lat1 + (lat2 - lat1) * ratio)
                # Swelling is applied after the profile clamp, so mid-segment
                # zones may exceed max_radius by up to radius_variation.
                adjusted = radius * (1.0 + math.sin(ratio * math.pi) * self.radius_variation)
                features.append(_feature(center, adjusted, self.ring_points, {
                    "riskLevel": risk,
                    "radius": adjusted,
                    "intensity": sample.intensity,
                    "segmentIndex": i,
                    "pointIndex": j,
                    "isStatic": True,
                }))

        return _feature_collection(features)

    def render_moving(self, model: "WaterParcelModel", samples: Sequence[IntensitySample],
                      now: float) -> dict:
        """One zone per active parcel.

        The effective intensity is the larger of the parcel's own intensity
        and the current intensity at the segment the parcel is in.
        """
        by_index = _by_path_index(samples)
        features = []

        for pos in model.active_parcels_at(now):
            segment = model.nearest_segment_index(pos.position)
            current = by_index[segment].intensity if segment in by_index else 0.0
            historical = pos.parcel.intensity
            effective = max(historical, current)

            radius = radius_for(effective, self.base_radius, self.profile)
            if radius <= 0:
                continue

            center = model.position_to_coordinates(pos.position)
            features.append(_feature(center, radius, self.ring_points, {
                "riskLevel": classify_risk(effective),
                "radius": radius,
                "intensity": effective,
                "parcelId": str(pos.parcel.parcel_id),
                "segmentIndex": segment,
                "currentIntensity": current,
                "historicalIntensity": historical,
                "elapsed": pos.elapsed,
                "isStatic": False,
            }))

        return _feature_collection(features)

    def render_combined(self, model: "WaterParcelModel", samples: Sequence[IntensitySample],
                        now: float) -> dict:
        """Static zones followed by moving zones in one FeatureCollection."""
        static = self.render_static(model.path, samples)["features"]
        moving = self.render_moving(model, samples, now)["features"]
        logger.debug("Rendered %d static and %d moving zones", len(static), len(moving))
        return _feature_collection(static + moving)
