"""Core flood-risk monitor execution logic.

This module contains the actual monitor runner, separated from argument parsing.
Scripts are thin wrappers; this is the real implementation.
"""

import os
import sys
import json
import time
import logging
import argparse
import importlib.util
from pathlib import Path
from typing import Optional, Dict, Any, List, Sequence

from rivercast.core.types import Path as RiverPath, as_path
from rivercast.setup_directories import setup_output_directories, get_zones_path, get_log_path
from rivercast.pipeline.orchestrator import FloodRiskMonitor
from rivercast.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig


logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    # Find CONFIG dict
    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def _line_coordinates(obj: Any) -> List:
    """Pull LineString coordinates out of bare or wrapped GeoJSON."""
    kind = obj.get("type")
    if kind == "LineString":
        return obj["coordinates"]
    if kind == "Feature":
        return _line_coordinates(obj["geometry"])
    if kind == "FeatureCollection":
        for feature in obj["features"]:
            if feature.get("geometry", {}).get("type") == "LineString":
                return feature["geometry"]["coordinates"]
        raise ValueError("FeatureCollection contains no LineString feature")
    raise ValueError(f"Unsupported GeoJSON type for a river path: {kind}")


def load_path_file(path_file: str) -> RiverPath:
    """Load a river path from a JSON file.

    Accepts either a plain list of ``[lng, lat]`` pairs or a GeoJSON
    LineString (bare, as a Feature, or the first LineString of a
    FeatureCollection).

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the content is not a list of coordinate pairs.
    """
    path = Path(path_file)
    if not path.exists():
        raise FileNotFoundError(f"Path file not found: {path}")

    with open(path) as f:
        data = json.load(f)

    coords = _line_coordinates(data) if isinstance(data, dict) else data
    if not isinstance(coords, list):
        raise ValueError(f"Path file {path} does not contain a coordinate list")

    for i, point in enumerate(coords):
        if not isinstance(point, (list, tuple)) or len(point) < 2:
            raise ValueError(f"Path point {i} is not a [lng, lat] pair: {point!r}")
        if not all(isinstance(v, (int, float)) for v in point[:2]):
            raise ValueError(f"Path point {i} has non-numeric coordinates: {point!r}")

    return as_path(coords)


def setup_logging(level: str, log_path: Optional[Path] = None):
    """Configure the root logger with console and optional file handlers."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Clear existing handlers and add new ones
    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if log_path is not None:
        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    logger.info("Logging: level=%s, file=%s", level.upper(), log_path)


def write_zones(zones: dict, out_path: Path):
    """Atomically replace ``out_path`` with the FeatureCollection."""
    tmp_path = out_path.with_suffix(out_path.suffix + ".tmp")
    with open(tmp_path, "w") as f:
        json.dump(zones, f)
    os.replace(tmp_path, out_path)
    logger.debug("Wrote %d zones to %s", len(zones["features"]), out_path)


def run_flood_monitor(
    user_config_path: str,
    path_file: str,
    cli_args: Optional[Dict[str, Any]] = None,
    max_runtime: Optional[float] = None,
    once: bool = False,
    verbose: bool = False,
) -> Optional[dict]:
    """Execute the flood-risk monitor.

    This is the core execution function. It:
    1. Loads and resolves configuration (Param < User < CLI)
    2. Sets up output directories and logging
    3. Loads the river path
    4. Runs one cycle (``once``) or starts the scheduled monitor
    5. Writes every published FeatureCollection to zones/latest_zones.geojson

    Parameters
    ----------
    user_config_path : str
        Path to user config file (Python file with CONFIG dict).

    path_file : str
        JSON file holding the river path.

    cli_args : dict, optional
        CLI argument overrides. Keys: base_dir, time_offset_hours,
        flow_velocity, interval_sec, zoom, log_level. All optional.

    max_runtime : float, optional
        Maximum runtime in minutes. If None, runs until KeyboardInterrupt.

    once : bool, optional
        If True, run a single cycle and return its result.

    verbose : bool, optional
        If True, enable DEBUG logging and print full resolved config.

    Returns
    -------
    dict or None
        The last published FeatureCollection.

    Examples
    --------
    Single evaluation::

        run_flood_monitor("scripts/user_config.py", "river.json", once=True)

    Forecast offset override, one hour of monitoring::

        run_flood_monitor(
            "scripts/user_config.py", "river.json",
            cli_args={"time_offset_hours": 6},
            max_runtime=60,
        )
    """
    param_cfg = ParamConfig()  # Expert defaults

    user_cfg_dict = load_user_config_dict(user_config_path)
    user_cfg = UserConfig.model_validate(user_cfg_dict)

    cli_args = dict(cli_args or {})
    if verbose and cli_args.get("log_level") is None:
        cli_args["log_level"] = "DEBUG"

    # Filter None values
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    # Resolve to internal config (Param < User < CLI)
    config = resolve_config(param_cfg, user_cfg, cli_cfg)

    output_dirs = setup_output_directories(config.base_dir)
    setup_logging(config.logging.level, get_log_path(output_dirs))
    zones_path = get_zones_path(output_dirs)

    river_path = load_path_file(path_file)

    print(f"\n{'='*60}")
    print("Rivercast Flood-Risk Monitor")
    print('='*60)
    print(f"Config:   {user_config_path}")
    print(f"Path:     {path_file} ({len(river_path)} points)")
    print(f"Offset:   +{config.monitor.time_offset_hours}h")
    print(f"Velocity: {config.advection.flow_velocity_ms} m/s")
    print(f"Output:   {zones_path}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(), indent=2))
        print('='*60)

    def on_update(zones):
        if zones is not None:
            write_zones(zones, zones_path)

    monitor = FloodRiskMonitor(config, on_update=on_update)
    try:
        monitor.set_path(river_path)
        if once:
            return monitor.run_cycle()
        return _run_scheduled(monitor, max_runtime)
    finally:
        monitor.close()


def _run_scheduled(monitor: FloodRiskMonitor, max_runtime: Optional[float]) -> Optional[dict]:
    """Run the monitor until ``max_runtime`` minutes pass or Ctrl+C."""
    deadline = time.time() + max_runtime * 60 if max_runtime else None
    monitor.start()
    logger.info("Monitor running. Press Ctrl+C to stop.")

    try:
        while monitor.is_active:
            if deadline is not None and time.time() > deadline:
                logger.info("Max duration reached")
                break
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Shutdown signal received (Ctrl+C)")
    finally:
        last = monitor.latest_zones
        monitor.stop()

    return last


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rivercast-monitor",
        description="Monitor flood risk along a river path from precipitation tiles",
    )
    parser.add_argument("config", help="Path to user config file")
    parser.add_argument("--path", required=True, dest="path_file",
                        help="JSON file with [lng, lat] pairs or a GeoJSON LineString")
    parser.add_argument("--time-offset", type=int, help="Forecast offset in hours (0, 6, 12, 24)")
    parser.add_argument("--flow-velocity", type=float, help="Flow velocity in m/s")
    parser.add_argument("--interval", type=float, help="Seconds between cycles")
    parser.add_argument("--zoom", type=int, help="Tile zoom level")
    parser.add_argument("--base-dir", help="Output directory")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Logging level")
    parser.add_argument("--max-runtime", type=float, help="Max runtime in minutes")
    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    run_flood_monitor(
        args.config,
        args.path_file,
        cli_args={
            "base_dir": args.base_dir,
            "time_offset_hours": args.time_offset,
            "flow_velocity": args.flow_velocity,
            "interval_sec": args.interval,
            "zoom": args.zoom,
            "log_level": args.log_level,
        },
        max_runtime=args.max_runtime,
        once=args.once,
        verbose=args.verbose,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
