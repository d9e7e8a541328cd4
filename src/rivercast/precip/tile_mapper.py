"""Tile Coordinate Mapper.

Converts geographic coordinates into Web Mercator slippy-map tile and
pixel addresses, and builds the precipitation tile URL for a forecast
offset. All functions are pure.
"""

import math
from typing import Tuple

from rivercast.core.types import TileAddress

__all__ = ['lat_lng_to_tile', 'lat_lng_to_pixel', 'tile_url']


def lat_lng_to_tile(lat: float, lng: float, zoom: int) -> TileAddress:
    """Return the tile containing a coordinate at a zoom level.

    Parameters
    ----------
    lat, lng : float
        Coordinate in degrees.
    zoom : int
        Tile zoom level.

    Returns
    -------
    TileAddress

    Examples
    --------
    >>> lat_lng_to_tile(0.0, 0.0, 1)
    TileAddress(x=1, y=1, zoom=1)
    """
    n = 2 ** zoom
    lat_rad = math.radians(lat)
    x = math.floor((lng + 180.0) / 360.0 * n)
    y = math.floor((1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n)
    return TileAddress(x=x, y=y, zoom=zoom)


def lat_lng_to_pixel(lat: float, lng: float, tile: TileAddress, zoom: int,
                     tile_size: int = 256) -> Tuple[int, int]:
    """Return the pixel of a coordinate inside a tile.

    The pixel is computed in world-pixel space at ``tile_size * 2**zoom``
    and offset by the tile origin. A coordinate outside ``tile`` gives a
    pixel outside ``[0, tile_size)``; callers treat that as no data.
    """
    scale = tile_size * 2 ** zoom
    lat_rad = math.radians(lat)
    world_x = (lng + 180.0) / 360.0 * scale
    world_y = (1.0 - math.log(math.tan(lat_rad) + 1.0 / math.cos(lat_rad)) / math.pi) / 2.0 * scale
    px = math.floor(world_x - tile.x * tile_size)
    py = math.floor(world_y - tile.y * tile_size)
    return px, py


def tile_url(base_url: str, time_offset_hours: int, tile: TileAddress) -> str:
    """Build ``{base}/{offset}h/{zoom}/{x}/{y}.png``."""
    return f"{base_url}/{time_offset_hours}h/{tile.zoom}/{tile.x}/{tile.y}.png"
