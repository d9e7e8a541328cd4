"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict
from rivercast.schemas.base import RivercastBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalTileServiceConfig(RivercastBaseModel):
    """Runtime tile service configuration."""
    base_url: str
    zoom: int = Field(ge=0, le=18)
    tile_size: int
    timeout_sec: float
    max_workers: int
    user_agent: str


class InternalDecoderConfig(RivercastBaseModel):
    """Runtime pixel decoding configuration."""
    alpha_threshold: int


class InternalRadiusClampConfig(RivercastBaseModel):
    """Runtime radius bounds."""
    min_radius_m: float
    max_radius_m: float


class InternalComparatorConfig(RivercastBaseModel):
    """Runtime comparison configuration."""
    delta_threshold: float
    high_intensity_threshold: float
    reference_offset_hours: int
    base_radius_m: float
    advisory_radius: InternalRadiusClampConfig


class InternalAdvectionConfig(RivercastBaseModel):
    """Runtime advection configuration."""
    flow_velocity_ms: float = Field(gt=0)


class InternalZoneConfig(RivercastBaseModel):
    """Runtime zone rendering configuration."""
    base_radius_m: float
    ring_points: int
    segment_spacing_m: float
    radius_variation: float
    subdivide_segments: bool
    zone_radius: InternalRadiusClampConfig


class InternalMonitorConfig(RivercastBaseModel):
    """Runtime monitoring loop configuration."""
    interval_sec: float
    time_offset_hours: int = Field(ge=0)
    join_timeout_sec: float


class InternalLoggingConfig(RivercastBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(RivercastBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that runtime code sees.
    It is fully validated, immutable, and contains explicit values for
    all parameters.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.zoom = config.tiles.zoom  # NOT .get()
            self.velocity = config.advection.flow_velocity_ms

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation

    All of that happens during config resolution, not in runtime code.
    """

    base_dir: Optional[str]
    tiles: InternalTileServiceConfig
    decoder: InternalDecoderConfig
    comparator: InternalComparatorConfig
    advection: InternalAdvectionConfig
    zones: InternalZoneConfig
    monitor: InternalMonitorConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
