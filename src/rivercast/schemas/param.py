"""ParamConfig: Expert defaults for the Rivercast monitor.

This module defines the complete default configuration. ALL tunable
parameters must have defaults here. No runtime code should define
fallback values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator, model_validator
from rivercast.schemas.base import RivercastBaseModel


DEFAULT_TILE_BASE_URL = "https://weather.openportguide.de/tiles/actual/precipitation_shaded"


# =============================================================================
# Nested Configuration Models
# =============================================================================

class TileServiceConfig(RivercastBaseModel):
    """Remote precipitation tile service."""
    base_url: str = DEFAULT_TILE_BASE_URL
    zoom: int = Field(10, ge=0, le=18, description="Tile zoom level used for sampling")
    tile_size: int = Field(256, ge=1, description="Tile edge length in pixels")
    timeout_sec: float = Field(5.0, gt=0, description="Per-tile request timeout")
    max_workers: int = Field(4, ge=1, le=32, description="Concurrent tile fetches per sampling")
    user_agent: str = "rivercast/0.1"

    @field_validator("base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        """Tile URLs are built as {base}/{offset}h/..., so drop a trailing '/'."""
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v


class DecoderConfig(RivercastBaseModel):
    """Pixel decoding settings."""
    alpha_threshold: int = Field(128, ge=0, le=255, description="Pixels below this alpha are dry")


class RadiusClampConfig(RivercastBaseModel):
    """Bounds applied to a computed risk radius (meters)."""
    min_radius_m: float = Field(..., gt=0)
    max_radius_m: float = Field(..., gt=0)

    @model_validator(mode="after")
    def check_bounds(self):
        if self.min_radius_m > self.max_radius_m:
            raise ValueError("min_radius_m must not exceed max_radius_m")
        return self


class ComparatorConfig(RivercastBaseModel):
    """Forecast offset comparison configuration."""
    delta_threshold: float = Field(0.5, ge=0, description="Minimum intensity increase (mm/h)")
    high_intensity_threshold: float = Field(1.0, ge=0, description="Intensity always reported (mm/h)")
    reference_offset_hours: int = Field(6, ge=0, description="Reference used when current offset is 0h")
    base_radius_m: float = Field(500.0, gt=0)
    advisory_radius: RadiusClampConfig = Field(
        default_factory=lambda: RadiusClampConfig(min_radius_m=50.0, max_radius_m=8000.0)
    )


class AdvectionConfig(RivercastBaseModel):
    """Water parcel transport configuration."""
    flow_velocity_ms: float = Field(18.0, gt=0, description="Constant downstream velocity in m/s")


class ZoneConfig(RivercastBaseModel):
    """Risk zone rendering configuration."""
    base_radius_m: float = Field(500.0, gt=0)
    ring_points: int = Field(32, ge=3, description="Perimeter vertices per zone polygon")
    segment_spacing_m: float = Field(200.0, gt=0, description="Subdivision spacing along long segments")
    radius_variation: float = Field(0.2, ge=0, le=1.0)
    subdivide_segments: bool = True
    zone_radius: RadiusClampConfig = Field(
        default_factory=lambda: RadiusClampConfig(min_radius_m=100.0, max_radius_m=5000.0)
    )


class MonitorConfig(RivercastBaseModel):
    """Monitoring loop configuration."""
    interval_sec: float = Field(120.0, gt=0, description="Seconds between scheduled cycles")
    time_offset_hours: int = Field(0, ge=0, description="Forecast offset being watched")
    join_timeout_sec: float = Field(5.0, gt=0)


class LoggingConfig(RivercastBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(RivercastBaseModel):
    """Complete expert configuration with all defaults.

    This is the single source of truth for all monitor parameters.
    Every tunable parameter MUST have a default here.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    base_dir: Optional[str] = None
    tiles: TileServiceConfig = Field(default_factory=TileServiceConfig)
    decoder: DecoderConfig = Field(default_factory=DecoderConfig)
    comparator: ComparatorConfig = Field(default_factory=ComparatorConfig)
    advection: AdvectionConfig = Field(default_factory=AdvectionConfig)
    zones: ZoneConfig = Field(default_factory=ZoneConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
