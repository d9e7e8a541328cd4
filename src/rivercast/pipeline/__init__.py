"""Pipeline modules.

- orchestrator: Scheduled flood-risk monitor
"""

from rivercast.pipeline.orchestrator import FloodRiskMonitor

__all__ = [
    "FloodRiskMonitor",
]
