"""HTTP retrieval of precipitation tiles.

Wraps a ``requests.Session`` so connections are reused across the tiles
of a sampling call and across monitor cycles.
"""

import logging
from typing import TYPE_CHECKING

import requests

from rivercast.precip.errors import TileFetchError

if TYPE_CHECKING:
    from rivercast.schemas import InternalConfig

__all__ = ['TileFetcher']

logger = logging.getLogger(__name__)


class TileFetcher:
    """Fetch raw tile bytes from the precipitation tile server.

    Example usage::

        fetcher = TileFetcher(config)
        content = fetcher.fetch("https://.../0h/10/284/483.png")
    """

    def __init__(self, config: "InternalConfig", session=None):
        """Initialize fetcher.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration; reads ``config.tiles``.

        session : requests.Session, optional
            HTTP session. If None, creates a new one. Allows injection for
            testing.
        """
        self.timeout = config.tiles.timeout_sec
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": config.tiles.user_agent})

    def fetch(self, url: str) -> bytes:
        """GET one tile.

        Raises
        ------
        TileFetchError
            On connection failure, timeout or a non-2xx status.
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise TileFetchError(url, f"Tile request failed: {e}") from e

        logger.debug("Fetched %s (%d bytes)", url, len(response.content))
        return response.content

    def close(self):
        self.session.close()
