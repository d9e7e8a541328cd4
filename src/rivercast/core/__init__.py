"""Core value types for the Rivercast monitor."""

from rivercast.core.types import (
    Coordinate,
    Path,
    as_path,
    TileAddress,
    IntensitySample,
    PrecipitationChange,
    ComparisonSummary,
    ComparisonResult,
    ParcelKey,
    WaterParcel,
    ParcelPosition,
    SegmentIntensity,
)

__all__ = [
    'Coordinate',
    'Path',
    'as_path',
    'TileAddress',
    'IntensitySample',
    'PrecipitationChange',
    'ComparisonSummary',
    'ComparisonResult',
    'ParcelKey',
    'WaterParcel',
    'ParcelPosition',
    'SegmentIntensity',
]
