"""Rivercast User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the monitor behavior. Advanced settings are in src/rivercast/schemas/param.py

Usage:
    python scripts/run_flood_monitor.py scripts/user_config.py --path scripts/example_path.json
    python scripts/run_flood_monitor.py scripts/user_config.py --path river.json --time-offset 6
"""

CONFIG = {
    # ========================================================================
    # OUTPUT
    # ========================================================================
    "BASE_DIR": "./rivercast_output",  # zones/ and logs/ go here
    "LOG_LEVEL": "INFO",

    # ========================================================================
    # PRECIPITATION TILES
    # ========================================================================
    "TILE_BASE_URL": "https://weather.openportguide.de/tiles/actual/precipitation_shaded",
    "ZOOM": 10,               # Tile zoom level (higher = finer pixels)
    "TILE_TIMEOUT_SEC": 5,    # Per-tile request timeout
    "TILE_WORKERS": 4,        # Concurrent tile downloads

    # ========================================================================
    # FORECAST COMPARISON
    # ========================================================================
    "TIME_OFFSET_HOURS": 0,       # Offset under evaluation: 0, 6, 12 or 24
    "REFERENCE_OFFSET_HOURS": 6,  # Compared against when the offset is 0
    "DELTA_THRESHOLD": 0.5,       # mm/h increase that counts as a change
    "BASE_RADIUS_M": 500,         # Radius of the 1-2 mm/h step

    # ========================================================================
    # RIVER & SCHEDULE
    # ========================================================================
    "FLOW_VELOCITY": 18,      # Downstream velocity in m/s
    "INTERVAL_SEC": 120,      # Seconds between monitor cycles
    # Note: Zone shape (ring points, segment spacing, radius clamps) is
    # configured in src/rivercast/schemas/param.py
}
