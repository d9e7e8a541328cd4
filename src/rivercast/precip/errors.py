"""Recoverable precipitation-stage errors.

These are expected operational failures (network, corrupt tiles), as
opposed to ContractViolation which signals a monitor bug.
"""


class TileError(Exception):
    """Base class for a tile that could not be turned into pixels."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{message} ({url})")
        self.url = url


class TileFetchError(TileError):
    """Tile request failed: connection error, timeout or non-2xx status."""


class TileDecodeError(TileError):
    """Tile bytes are not a decodable raster image."""


class SamplingError(RuntimeError):
    """Both concurrent samplings of a comparison failed."""
