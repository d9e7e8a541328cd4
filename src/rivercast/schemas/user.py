"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., FLOW_VELOCITY → flow_velocity, ZOOM → zoom).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient to accept
both uppercase and lowercase keys, integers where floats are expected, etc.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from rivercast.schemas.base import RivercastBaseModel


class UserTileServiceConfig(RivercastBaseModel):
    """User-facing tile service config."""
    base_url: Optional[str] = None
    zoom: Optional[int] = None
    tile_size: Optional[int] = None
    timeout_sec: Optional[float] = None
    max_workers: Optional[int] = None
    user_agent: Optional[str] = None


class UserComparatorConfig(RivercastBaseModel):
    """User-facing comparator config."""
    delta_threshold: Optional[float] = None
    high_intensity_threshold: Optional[float] = None
    reference_offset_hours: Optional[int] = None
    base_radius_m: Optional[float] = None
    advisory_radius: Optional[dict[str, float]] = None


class UserZoneConfig(RivercastBaseModel):
    """User-facing zone rendering config."""
    base_radius_m: Optional[float] = None
    ring_points: Optional[int] = None
    segment_spacing_m: Optional[float] = None
    radius_variation: Optional[float] = None
    subdivide_segments: Optional[bool] = None
    zone_radius: Optional[dict[str, float]] = None


class UserMonitorConfig(RivercastBaseModel):
    """User-facing monitor config."""
    interval_sec: Optional[float] = None
    time_offset_hours: Optional[int] = None
    join_timeout_sec: Optional[float] = None


class UserConfig(RivercastBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    This config is converted to internal overrides during resolution.

    Usage
    -----
        user_cfg = UserConfig(
            base_dir="/data/rivercast",
            zoom=9,
            flow_velocity=12,
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Top-level operational settings
    base_dir: Optional[str] = Field(None, alias="BASE_DIR")
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(None, alias="LOG_LEVEL")

    # Tile service (flat aliases)
    tile_base_url: Optional[str] = Field(None, alias="TILE_BASE_URL")
    zoom: Optional[int] = Field(None, alias="ZOOM")
    tile_timeout_sec: Optional[float] = Field(None, alias="TILE_TIMEOUT_SEC")
    tile_workers: Optional[int] = Field(None, alias="TILE_WORKERS")

    # Comparison and rendering (flat aliases)
    time_offset_hours: Optional[int] = Field(None, alias="TIME_OFFSET_HOURS")
    reference_offset_hours: Optional[int] = Field(None, alias="REFERENCE_OFFSET_HOURS")
    delta_threshold: Optional[float] = Field(None, alias="DELTA_THRESHOLD")
    base_radius_m: Optional[float] = Field(None, alias="BASE_RADIUS_M")

    # Advection and scheduling (flat aliases)
    flow_velocity: Optional[float] = Field(None, alias="FLOW_VELOCITY")
    interval_sec: Optional[float] = Field(None, alias="INTERVAL_SEC")

    # Nested overrides (advanced users)
    tiles: Optional[UserTileServiceConfig] = None
    comparator: Optional[UserComparatorConfig] = None
    zones: Optional[UserZoneConfig] = None
    monitor: Optional[UserMonitorConfig] = None

    model_config = RivercastBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("flow_velocity", "base_radius_m", "delta_threshold",
                     "interval_sec", "tile_timeout_sec", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept log levels in any case."""
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.base_dir is not None:
            overrides["base_dir"] = str(self.base_dir)

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        # Tiles section
        tiles = {}
        if self.tile_base_url is not None:
            tiles["base_url"] = self.tile_base_url
        if self.zoom is not None:
            tiles["zoom"] = self.zoom
        if self.tile_timeout_sec is not None:
            tiles["timeout_sec"] = self.tile_timeout_sec
        if self.tile_workers is not None:
            tiles["max_workers"] = self.tile_workers

        if self.tiles is not None:
            tiles.update(self.tiles.model_dump(exclude_none=True))

        if tiles:
            overrides["tiles"] = tiles

        # Comparator section
        comparator = {}
        if self.reference_offset_hours is not None:
            comparator["reference_offset_hours"] = self.reference_offset_hours
        if self.delta_threshold is not None:
            comparator["delta_threshold"] = self.delta_threshold
        if self.base_radius_m is not None:
            comparator["base_radius_m"] = self.base_radius_m

        if self.comparator is not None:
            comparator.update(self.comparator.model_dump(exclude_none=True))

        if comparator:
            overrides["comparator"] = comparator

        # Zones section (one base radius drives both advisory and zone radii)
        zones = {}
        if self.base_radius_m is not None:
            zones["base_radius_m"] = self.base_radius_m

        if self.zones is not None:
            zones.update(self.zones.model_dump(exclude_none=True))

        if zones:
            overrides["zones"] = zones

        if self.flow_velocity is not None:
            overrides["advection"] = {"flow_velocity_ms": self.flow_velocity}

        # Monitor section
        monitor = {}
        if self.time_offset_hours is not None:
            monitor["time_offset_hours"] = self.time_offset_hours
        if self.interval_sec is not None:
            monitor["interval_sec"] = self.interval_sec

        if self.monitor is not None:
            monitor.update(self.monitor.model_dump(exclude_none=True))

        if monitor:
            overrides["monitor"] = monitor

        return overrides
