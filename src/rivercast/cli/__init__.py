"""Command-line interface modules for Rivercast monitor execution.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from rivercast.cli.run_monitor import run_flood_monitor

__all__ = ['run_flood_monitor']
