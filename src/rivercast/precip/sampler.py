"""Sample precipitation intensity at every point of a river path.

For one forecast offset, each path point is mapped to its tile and pixel,
each distinct tile is fetched once, and the pixel under every point is
decoded into mm/h. Points whose tile could not be fetched or decoded are
skipped, so the result may be shorter than the path.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

import numpy as np

from rivercast.core.types import IntensitySample, TileAddress
from rivercast.precip.color_decoder import decode_tile, pixel_intensity
from rivercast.precip.errors import TileError
from rivercast.precip.tile_fetcher import TileFetcher
from rivercast.precip.tile_mapper import lat_lng_to_pixel, lat_lng_to_tile, tile_url
from rivercast.contracts import assert_samples_ordered

if TYPE_CHECKING:
    from rivercast.schemas import InternalConfig

__all__ = ['PrecipitationSampler']

logger = logging.getLogger(__name__)


class PrecipitationSampler:
    """Per-offset precipitation sampling along a path.

    Tiles are fetched concurrently in a bounded thread pool
    (``config.tiles.max_workers``). The tile cache lives only for the
    duration of one :meth:`sample` call, so every call sees fresh data
    for its offset.

    Example usage::

        sampler = PrecipitationSampler(config)
        samples = sampler.sample([(-79.52, 9.00), (-79.50, 9.02)], 0)
    """

    def __init__(self, config: "InternalConfig", fetcher: Optional[TileFetcher] = None):
        self.config = config
        self.fetcher = fetcher or TileFetcher(config)
        self.base_url = config.tiles.base_url
        self.zoom = config.tiles.zoom
        self.tile_size = config.tiles.tile_size
        self.max_workers = config.tiles.max_workers
        self.alpha_threshold = config.decoder.alpha_threshold

    def sample(self, path: Sequence[Sequence[float]], time_offset_hours: int,
               zoom: Optional[int] = None) -> List[IntensitySample]:
        """Sample intensities along ``path`` at one forecast offset.

        Parameters
        ----------
        path : sequence of (lng, lat)
            River path in flow order.
        time_offset_hours : int
            Forecast offset of the tile set.
        zoom : int, optional
            Tile zoom; defaults to ``config.tiles.zoom``.

        Returns
        -------
        list of IntensitySample
            One sample per point whose tile was usable, in path order.
            Empty for paths with fewer than 2 points.
        """
        if len(path) < 2:
            return []

        zoom = self.zoom if zoom is None else zoom
        addresses = [lat_lng_to_tile(lat, lng, zoom) for lng, lat in path]

        tiles = self._load_tiles(addresses, time_offset_hours)

        samples = []
        for i, ((lng, lat), address) in enumerate(zip(path, addresses)):
            rgba = tiles.get(address.key)
            if rgba is None:
                logger.warning("Skipping point %d: tile %s unavailable at +%dh",
                               i, address.key, time_offset_hours)
                continue

            px, py = lat_lng_to_pixel(lat, lng, address, zoom, self.tile_size)
            intensity = pixel_intensity(rgba, px, py, self.alpha_threshold)
            samples.append(IntensitySample(
                path_index=i,
                coordinates=(float(lng), float(lat)),
                intensity=intensity,
                tile=address,
                pixel=(px, py),
            ))

        assert_samples_ordered(samples, len(path))
        logger.debug("Sampled %d/%d points at +%dh from %d tiles",
                     len(samples), len(path), time_offset_hours, len(tiles))
        return samples

    def _load_tiles(self, addresses: List[TileAddress],
                    time_offset_hours: int) -> Dict[Tuple[int, int, int], np.ndarray]:
        """Fetch and decode each distinct tile once; failed tiles are absent."""
        unique = {}
        for address in addresses:
            unique.setdefault(address.key, address)

        cache = {}
        workers = min(self.max_workers, len(unique))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="tile") as pool:
            futures = {
                key: pool.submit(self._load_tile, address, time_offset_hours)
                for key, address in unique.items()
            }
            for key, future in futures.items():
                try:
                    cache[key] = future.result()
                except TileError as e:
                    logger.warning("Tile %s failed: %s", key, e)

        return cache

    def _load_tile(self, address: TileAddress, time_offset_hours: int) -> np.ndarray:
        url = tile_url(self.base_url, time_offset_hours, address)
        return decode_tile(self.fetcher.fetch(url), url)

    def close(self):
        """Release the fetcher's HTTP session."""
        self.fetcher.close()
