"""Pytest configuration and fixtures for terrain_contours tests."""

import sys
from io import BytesIO
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from terrain_contours.domain.settings import PipelineSettings  # noqa: E402


def encode_heights(heights: np.ndarray) -> np.ndarray:
    """Encode metres into a terrain-RGB uint8 raster; NaN becomes (0, 0, 0)."""
    h = np.asarray(heights, dtype=np.float64)
    codes = np.rint((np.nan_to_num(h, nan=-10000.0) + 10000.0) / 0.1).astype(np.int64)
    raster = np.stack(
        [(codes >> 16) & 0xFF, (codes >> 8) & 0xFF, codes & 0xFF],
        axis=-1,
    ).astype(np.uint8)
    raster[np.isnan(h)] = 0
    return raster


def png_bytes(raster: np.ndarray) -> bytes:
    """Serialize an RGB raster as PNG bytes."""
    buf = BytesIO()
    Image.fromarray(raster).save(buf, format='PNG')
    return buf.getvalue()


class FakeLoader:
    """Raster loader building tiles from a function of (key, rows, cols)."""

    def __init__(self, tile_size=256, heights_fn=None, fail_keys=()):
        self.tile_size = tile_size
        self.heights_fn = heights_fn or (lambda key, rows, cols: np.full(rows.shape, 100.0))
        self.fail_keys = set(fail_keys)
        self.calls = []

    async def __call__(self, key):
        from terrain_contours.domain.errors import FetchError

        self.calls.append(key)
        if key in self.fail_keys:
            msg = f'HTTP 503 for terrain tile {key.path()}'
            raise FetchError(msg, status=503)
        rows, cols = np.mgrid[0 : self.tile_size, 0 : self.tile_size]
        return encode_heights(self.heights_fn(key, rows, cols))


@pytest.fixture
def settings():
    """Default pipeline settings."""
    return PipelineSettings()


@pytest.fixture
def fake_loader():
    """Loader returning a flat 100 m tile for every key."""
    return FakeLoader()
