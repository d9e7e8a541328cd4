"""Pydantic configuration schemas for the Rivercast monitor.

This module provides strictly typed configuration models for the flood-risk
monitor. All configuration validation, coercion, and normalization happens at
schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from rivercast.schemas.resolve import resolve_config
from rivercast.schemas.internal import InternalConfig
from rivercast.schemas.param import ParamConfig
from rivercast.schemas.user import UserConfig
from rivercast.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
