from __future__ import annotations

from typing import Union

import numpy as np

from .geometry import Vec2
from .raster import Image

# Round-off allowance applied before flooring sampled values.
ROUNDING_EPS = 1e-6

SAMPLE_CHANNELS = 4


def _pixels_of(source: Union[Image, np.ndarray]) -> np.ndarray:
    pixels = source.data if isinstance(source, Image) else np.asarray(source)
    if pixels.ndim == 2:
        pixels = pixels[..., None]
    if pixels.ndim != 3:
        raise ValueError(f"Expected (H, W, C) pixels, got shape {pixels.shape}")
    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise ValueError("Cannot sample an empty image")
    return pixels


def sample_bilinear_map(
    source: Union[Image, np.ndarray], map_x: np.ndarray, map_y: np.ndarray
) -> np.ndarray:
    """Bilinearly sample ``source`` at real-valued (x, y) locations.

    Pixels are centred on integer coordinates. Each of the four neighbours
    is clamped into the raster independently (clamp-to-edge), the per-channel
    value is floored and clamped to [0, 255] before narrowing to uint8.
    Flooring is ``floor(value + ROUNDING_EPS)``, so values within 1e-6 below
    an integer round up to it.
    Returns an array of shape ``map_x.shape + (C,)``.
    """
    pixels = _pixels_of(source)
    h, w = pixels.shape[:2]

    # Anything further than one pixel outside samples the same edge value.
    x = np.clip(np.nan_to_num(np.asarray(map_x, dtype=np.float64)), -1.0, float(w))
    y = np.clip(np.nan_to_num(np.asarray(map_y, dtype=np.float64)), -1.0, float(h))
    if x.shape != y.shape:
        raise ValueError("Coordinate maps must have the same shape")

    col0 = np.floor(x)
    row0 = np.floor(y)
    col1 = col0 + 1
    row1 = row0 + 1

    c0 = np.clip(col0, 0, w - 1).astype(np.intp)
    c1 = np.clip(col1, 0, w - 1).astype(np.intp)
    r0 = np.clip(row0, 0, h - 1).astype(np.intp)
    r1 = np.clip(row1, 0, h - 1).astype(np.intp)

    left = (col1 - x)[..., None]
    right = (x - col0)[..., None]
    top = (row1 - y)[..., None]
    bottom = (y - row0)[..., None]

    value = (
        pixels[r0, c0].astype(np.float64) * left * top
        + pixels[r0, c1].astype(np.float64) * right * top
        + pixels[r1, c0].astype(np.float64) * left * bottom
        + pixels[r1, c1].astype(np.float64) * right * bottom
    )
    return np.clip(np.floor(value + ROUNDING_EPS), 0, 255).astype(np.uint8)


def sample_bilinear(source: Union[Image, np.ndarray], loc: Vec2) -> np.ndarray:
    """Color at one location as four bytes; channels the image lacks are zero."""
    sampled = sample_bilinear_map(source, np.array(loc.x), np.array(loc.y))
    color = np.zeros(SAMPLE_CHANNELS, dtype=np.uint8)
    n = min(sampled.shape[-1], SAMPLE_CHANNELS)
    color[:n] = sampled[:n]
    return color
