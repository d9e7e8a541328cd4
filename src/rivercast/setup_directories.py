"""
Directory setup for the flood-risk monitor.

Layout under the base directory:
- zones/: latest rendered FeatureCollection (GeoJSON)
- logs/: monitor log files
"""

from pathlib import Path
from datetime import datetime, timezone

ZONES_FILENAME = "latest_zones.geojson"


def setup_output_directories(base_output_dir=None):
    """
    Set up the output directory structure.

    Parameters
    ----------
    base_output_dir : str or Path, optional
        Base output directory. If None, uses ./output in the current
        working directory.

    Returns
    -------
    dict
        Dictionary with paths: 'base', 'zones', 'logs'
    """
    if base_output_dir is None:
        base_output_dir = Path.cwd() / "output"

    base_output_dir = Path(base_output_dir).expanduser().resolve()

    directories = {
        "base": base_output_dir,
        "zones": base_output_dir / "zones",
        "logs": base_output_dir / "logs",
    }

    for path in directories.values():
        path.mkdir(parents=True, exist_ok=True)

    print("\nOutput directories created:")
    for key, path in directories.items():
        print(f"  {key:12s}: {path}")
    print("=" * 70 + "\n")

    return directories


def get_zones_path(output_dirs):
    """
    Path of the GeoJSON file rewritten after every cycle.

    Example
    -------
    >>> get_zones_path(dirs)
    Path('output/zones/latest_zones.geojson')
    """
    return output_dirs["zones"] / ZONES_FILENAME


def get_log_path(output_dirs, timestamp=None):
    """
    Get a timestamped log file path.

    Parameters
    ----------
    output_dirs : dict
        Output directories from setup_output_directories()
    timestamp : datetime, optional
        Time used in the filename. If None, uses current UTC time.

    Returns
    -------
    Path
        Full path: logs/monitor_YYYYMMDD_HHMMSS.log
    """
    log_dir = output_dirs["logs"]
    log_dir.mkdir(parents=True, exist_ok=True)

    if timestamp is None:
        timestamp = datetime.now(timezone.utc)

    return log_dir / f"monitor_{timestamp.strftime('%Y%m%d_%H%M%S')}.log"
