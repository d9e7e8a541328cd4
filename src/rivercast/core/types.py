"""Value types shared by the precipitation and river stages.

All records are frozen: a sample, change or parcel is created once and
never mutated. Coordinates are always ``(lng, lat)`` tuples in degrees.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

Coordinate = Tuple[float, float]
Path = Tuple[Coordinate, ...]


def as_path(points: Sequence[Sequence[float]]) -> Path:
    """Normalise a sequence of ``[lng, lat]`` pairs into an immutable Path."""
    return tuple((float(p[0]), float(p[1])) for p in points)


@dataclass(frozen=True)
class TileAddress:
    """Slippy-map tile address at a zoom level."""
    x: int
    y: int
    zoom: int

    @property
    def key(self) -> Tuple[int, int, int]:
        """Composite cache key ``(zoom, x, y)``."""
        return (self.zoom, self.x, self.y)


@dataclass(frozen=True)
class IntensitySample:
    """Decoded precipitation intensity at one path point."""
    path_index: int
    coordinates: Coordinate
    intensity: float  # mm/h, >= 0
    tile: TileAddress
    pixel: Tuple[int, int]


@dataclass(frozen=True)
class PrecipitationChange:
    """A path point whose precipitation grew materially or is already high."""
    path_index: int
    coordinates: Coordinate
    reference_intensity: float
    current_intensity: float
    delta: float
    risk_level: str
    advisory_radius: float  # meters
    timestamp: float  # epoch seconds
    time_offset: int  # hours

    def to_dict(self) -> dict:
        return {
            "pathIndex": self.path_index,
            "coordinates": list(self.coordinates),
            "referenceIntensity": self.reference_intensity,
            "currentIntensity": self.current_intensity,
            "delta": self.delta,
            "riskLevel": self.risk_level,
            "advisoryRadius": self.advisory_radius,
            "timestamp": self.timestamp,
            "timeOffset": self.time_offset,
        }


@dataclass(frozen=True)
class ComparisonSummary:
    total_points: int
    affected_points: int
    max_intensity: float
    mean_intensity: float


@dataclass(frozen=True)
class ComparisonResult:
    """Outcome of comparing two forecast offsets along one path."""
    current: Tuple[IntensitySample, ...]
    reference: Tuple[IntensitySample, ...]
    changes: Tuple[PrecipitationChange, ...]
    current_offset: int
    reference_offset: int
    summary: ComparisonSummary


@dataclass(frozen=True, order=True)
class ParcelKey:
    """Identity of a water parcel: one per (timestamp, segment) pair."""
    timestamp: float
    segment_index: int

    def __str__(self) -> str:
        return f"{self.timestamp!r}-{self.segment_index}"


@dataclass(frozen=True)
class WaterParcel:
    """A discrete packet of precipitation moving downstream."""
    parcel_id: ParcelKey
    origin_segment: int
    origin_distance: float  # meters from path start
    intensity: float
    birth_time: float  # epoch seconds


@dataclass(frozen=True)
class ParcelPosition:
    """Where a parcel is at a given instant."""
    parcel: WaterParcel
    position: float  # meters from path start
    elapsed: float  # seconds since birth


@dataclass(frozen=True)
class SegmentIntensity:
    """Precipitation summary for one pair of consecutive samples."""
    segment_index: int
    start_coordinates: Coordinate
    end_coordinates: Coordinate
    start_intensity: float
    end_intensity: float
    average_intensity: float
    max_intensity: float
