"""
Terrain-RGB decoding.

elevation = -10000 + (R*256*256 + G*256 + B) * 0.1

The pixel (0, 0, 0) is reserved as "no data" and decodes to NaN rather than
to -10000 m.
"""

from __future__ import annotations

import math

import numpy as np

from terrain_contours.shared.constants import (
    TERRAIN_RGB_NO_DATA_PIXEL,
    TERRAIN_RGB_OFFSET,
    TERRAIN_RGB_SCALE,
)

NO_DATA = math.nan

# decode(255, 255, 255)
MAX_ELEVATION_M = (255 * 65536 + 255 * 256 + 255) * TERRAIN_RGB_SCALE + TERRAIN_RGB_OFFSET


def is_no_data(value: float) -> bool:
    return math.isnan(value)


def decode(r: int, g: int, b: int) -> float:
    """Decode one terrain-RGB pixel to metres, or NO_DATA for the sentinel pixel."""
    if (r, g, b) == TERRAIN_RGB_NO_DATA_PIXEL:
        return NO_DATA
    return (int(r) * 65536 + int(g) * 256 + int(b)) * TERRAIN_RGB_SCALE + TERRAIN_RGB_OFFSET


def decode_raster(raster: np.ndarray) -> np.ndarray:
    """
    Decode a terrain-RGB raster (HxWx3 or HxWx4, uint8) into metres.

    Returns a float32 array; sentinel pixels hold NaN.
    """
    arr = np.asarray(raster)
    r = arr[:, :, 0].astype(np.float64)
    g = arr[:, :, 1].astype(np.float64)
    b = arr[:, :, 2].astype(np.float64)

    elevation = (r * 65536.0 + g * 256.0 + b) * TERRAIN_RGB_SCALE + TERRAIN_RGB_OFFSET
    no_data = (arr[:, :, 0] == 0) & (arr[:, :, 1] == 0) & (arr[:, :, 2] == 0)
    elevation[no_data] = np.nan
    return elevation.astype(np.float32)
