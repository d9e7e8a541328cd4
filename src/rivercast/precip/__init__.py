"""Precipitation modules.

- tile_mapper: Coordinates to tile/pixel addresses and tile URLs
- color_decoder: Shaded tile pixels to mm/h
- tile_fetcher: HTTP tile retrieval
- sampler: Intensity along a path at one forecast offset
- comparator: Change detection between two offsets
"""

from rivercast.precip.errors import TileError, TileFetchError, TileDecodeError, SamplingError
from rivercast.precip.tile_fetcher import TileFetcher
from rivercast.precip.sampler import PrecipitationSampler
from rivercast.precip.comparator import PrecipitationComparator, reference_offset_for

__all__ = [
    "TileError",
    "TileFetchError",
    "TileDecodeError",
    "SamplingError",
    "TileFetcher",
    "PrecipitationSampler",
    "PrecipitationComparator",
    "reference_offset_for",
]
