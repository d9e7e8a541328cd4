#!/usr/bin/env python3
"""Rivercast Flood-Risk Monitor Runner.

Usage:
    python scripts/run_flood_monitor.py scripts/user_config.py --path scripts/example_path.json
    python scripts/run_flood_monitor.py scripts/user_config.py --path river.json --time-offset 6
    python scripts/run_flood_monitor.py scripts/user_config.py --path river.json --once

Note: User config in scripts/user_config.py, expert defaults in src/rivercast/schemas/param.py
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from rivercast.cli.run_monitor import main


if __name__ == "__main__":
    sys.exit(main())
