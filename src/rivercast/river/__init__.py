"""River-side modules.

- path_geometry: Distances and interpolation along a path
- advection: Water parcels moving downstream
- risk_zones: Radius scaling and GeoJSON zone rendering
"""

from rivercast.river.advection import WaterParcelModel
from rivercast.river.risk_zones import (
    RiskZoneRenderer,
    RadiusProfile,
    ADVISORY_PROFILE,
    ZONE_PROFILE,
    radius_for,
    classify_risk,
    circular_buffer,
)

__all__ = [
    "WaterParcelModel",
    "RiskZoneRenderer",
    "RadiusProfile",
    "ADVISORY_PROFILE",
    "ZONE_PROFILE",
    "radius_for",
    "classify_risk",
    "circular_buffer",
]
