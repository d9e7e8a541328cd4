"""Decode shaded precipitation tiles into intensities (mm/h).

The precipitation layer encodes intensity as hue. A pixel is converted
to HSL and its hue is looked up in an ordered legend. The magenta band
around 300° is a continuous scale: below 25% luminosity it reads as the
7 mm/h floor, above that it rises linearly to 70 mm/h at full luminosity.

Decoded intensities are approximate by nature of the color encoding.
"""

import logging
import math
from typing import Tuple

import cv2
import numpy as np

from rivercast.precip.errors import TileDecodeError

__all__ = [
    'PRECIPITATION_LEGEND',
    'rgb_to_hsl',
    'intensity_from_hsl',
    'pixel_intensity',
    'decode_tile',
]

logger = logging.getLogger(__name__)

# (min hue, max hue, mm/h); closed intervals, first match wins
PRECIPITATION_LEGEND: Tuple[Tuple[int, int, float], ...] = (
    (0, 179, 0.0),
    (179, 180, 0.2),
    (188, 198, 0.4),
    (199, 210, 0.7),
    (210, 218, 1.0),
    (218, 228, 2.0),
    (229, 239, 5.5),
)

MAGENTA_HUE_RANGE = (295, 305)
MAGENTA_INTENSITY_RANGE = (7.0, 70.0)
MAGENTA_LUMINOSITY_FLOOR = 25


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def rgb_to_hsl(r: int, g: int, b: int) -> Tuple[int, int, int]:
    """Convert 8-bit RGB to integer HSL.

    Parameters
    ----------
    r, g, b : int
        Channel values in [0, 255].

    Returns
    -------
    tuple of int
        ``(h, s, l)`` with h in [0, 360) degrees and s, l in [0, 100]
        percent, each rounded half-up. Achromatic colors have h = s = 0.

    Examples
    --------
    >>> rgb_to_hsl(255, 0, 255)
    (300, 100, 50)
    """
    r, g, b = r / 255.0, g / 255.0, b / 255.0
    high = max(r, g, b)
    low = min(r, g, b)
    light = (high + low) / 2.0

    if high == low:
        hue = sat = 0.0
    else:
        d = high - low
        sat = d / (2.0 - high - low) if light > 0.5 else d / (high + low)
        if high == r:
            hue = (g - b) / d + (6.0 if g < b else 0.0)
        elif high == g:
            hue = (b - r) / d + 2.0
        else:
            hue = (r - g) / d + 4.0
        hue /= 6.0

    # Hues just below 360 round up to 360, which is red again.
    return _round_half_up(hue * 360) % 360, _round_half_up(sat * 100), _round_half_up(light * 100)


def intensity_from_hsl(h: float, s: float, l: float) -> float:
    """Look up precipitation intensity (mm/h) for an HSL triple.

    Saturation does not take part in the lookup; it is accepted so
    callers can pass a full :func:`rgb_to_hsl` result.
    """
    lo, hi = MAGENTA_HUE_RANGE
    if lo <= h <= hi:
        floor_mm, ceil_mm = MAGENTA_INTENSITY_RANGE
        if l < MAGENTA_LUMINOSITY_FLOOR:
            return floor_mm
        factor = max(0.0, (l - MAGENTA_LUMINOSITY_FLOOR) / (100.0 - MAGENTA_LUMINOSITY_FLOOR))
        return floor_mm + (ceil_mm - floor_mm) * factor

    for min_hue, max_hue, intensity in PRECIPITATION_LEGEND:
        if min_hue <= h <= max_hue:
            return intensity

    return 0.0


def pixel_intensity(rgba: np.ndarray, px: int, py: int, alpha_threshold: int = 128) -> float:
    """Intensity at one pixel of a decoded RGBA tile.

    Pixels outside the tile and pixels more transparent than
    ``alpha_threshold`` carry no precipitation.
    """
    height, width = rgba.shape[:2]
    if px < 0 or px >= width or py < 0 or py >= height:
        return 0.0

    r, g, b, a = (int(v) for v in rgba[py, px])
    if a < alpha_threshold:
        return 0.0

    return float(intensity_from_hsl(*rgb_to_hsl(r, g, b)))


def decode_tile(content: bytes, url: str = "<memory>") -> np.ndarray:
    """Decode PNG (or any OpenCV-readable) bytes into an RGBA uint8 array.

    Parameters
    ----------
    content : bytes
        Encoded image bytes.
    url : str, optional
        Source URL, used in error messages.

    Returns
    -------
    np.ndarray
        Array of shape (H, W, 4), channel order R, G, B, A.

    Raises
    ------
    TileDecodeError
        If the bytes are empty or cannot be decoded.
    """
    if not content:
        raise TileDecodeError(url, "Empty tile body")

    buffer = np.frombuffer(content, dtype=np.uint8)
    try:
        image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    except cv2.error as e:
        raise TileDecodeError(url, f"OpenCV could not decode tile: {e}") from e

    if image is None:
        raise TileDecodeError(url, "Tile is not a decodable image")

    if image.dtype != np.uint8:
        # 16-bit PNGs
        image = (image // 257).astype(np.uint8)

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)

    raise TileDecodeError(url, f"Unsupported channel count {image.shape[2]}")
