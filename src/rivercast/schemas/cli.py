"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: forecast offset, flow velocity, schedule, output path,
verbosity.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from pydantic import Field
from rivercast.schemas.base import RivercastBaseModel


class CLIConfig(RivercastBaseModel):
    """Command-line configuration overrides.

    Operational-only settings that override user and param configs.
    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(
            time_offset_hours=6,
            base_dir="/scratch/rivercast_output",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    base_dir: Optional[str] = None
    time_offset_hours: Optional[int] = Field(None, ge=0)
    flow_velocity: Optional[float] = Field(None, gt=0)
    interval_sec: Optional[float] = Field(None, gt=0)
    zoom: Optional[int] = Field(None, ge=0, le=18)
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.base_dir is not None:
            overrides["base_dir"] = str(self.base_dir)

        monitor_overrides = {}
        if self.time_offset_hours is not None:
            monitor_overrides["time_offset_hours"] = self.time_offset_hours
        if self.interval_sec is not None:
            monitor_overrides["interval_sec"] = self.interval_sec

        if monitor_overrides:
            overrides["monitor"] = monitor_overrides

        if self.flow_velocity is not None:
            overrides["advection"] = {"flow_velocity_ms": self.flow_velocity}

        if self.zoom is not None:
            overrides["tiles"] = {"zoom": self.zoom}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
