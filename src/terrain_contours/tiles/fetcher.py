"""HTTP fetch and PNG decode of terrain-RGB tiles.

TerrainTileFetcher is the default raster loader plugged into TileCache.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from http import HTTPStatus
from io import BytesIO
from typing import TYPE_CHECKING

import aiohttp
import numpy as np
from PIL import Image, UnidentifiedImageError

from terrain_contours.domain.errors import DecodeError, FetchError
from terrain_contours.shared.constants import (
    HTTP_5XX_MAX,
    HTTP_5XX_MIN,
    HTTP_BACKOFF_FACTOR,
    HTTP_RETRIES_DEFAULT,
    HTTP_TIMEOUT_DEFAULT,
    TILE_SIZE,
    URL_PLACEHOLDERS,
)

if TYPE_CHECKING:
    from terrain_contours.domain.models import TileKey

logger = logging.getLogger(__name__)


def build_tile_url(template: str, key: TileKey) -> str:
    """
    Substitute ``{z}/{x}/{y}`` in a tile URL template.

    A template without placeholders is treated as a tile root and gets
    ``/{z}/{x}/{y}`` appended.
    """
    if not any(p in template for p in URL_PLACEHOLDERS):
        template = template.rstrip('/') + '/{z}/{x}/{y}'
    return (
        template.replace('{z}', str(key.zoom))
        .replace('{x}', str(key.x))
        .replace('{y}', str(key.y))
    )


def decode_png(data: bytes, *, tile_size: int = TILE_SIZE) -> np.ndarray:
    """
    Decode image bytes into an (H, W, 3) uint8 RGB array.

    Raises:
        DecodeError: If the bytes are not an image or the size is unexpected.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            rgb = img.convert('RGB')
    except (UnidentifiedImageError, OSError, ValueError) as e:
        msg = f'Unreadable tile image ({len(data)} bytes): {e}'
        raise DecodeError(msg) from e
    if rgb.size != (tile_size, tile_size):
        msg = f'Unexpected tile size {rgb.size}, expected {tile_size}x{tile_size}'
        raise DecodeError(msg)
    return np.asarray(rgb, dtype=np.uint8)


class TerrainTileFetcher:
    """Downloads terrain-RGB tiles and decodes them to pixel arrays.

    401/403/404 fail immediately; 429, 5xx, timeouts and connection errors
    are retried with exponential backoff.

    Usage:
        fetcher = TerrainTileFetcher(session, 'https://host/tiles/{z}/{x}/{y}.png')
        raster = await fetcher(TileKey(14, 13100, 8361))
    """

    def __init__(
        self,
        client: aiohttp.ClientSession,
        url_template: str,
        *,
        tile_size: int = TILE_SIZE,
        timeout_s: float = HTTP_TIMEOUT_DEFAULT,
        retries: int = HTTP_RETRIES_DEFAULT,
        backoff: float = HTTP_BACKOFF_FACTOR,
        base_delay_s: float = 1.0,
    ) -> None:
        self.client = client
        self.url_template = url_template
        self.tile_size = tile_size
        self.timeout_s = timeout_s
        self.retries = max(1, int(retries))
        self.backoff = backoff
        self.base_delay_s = base_delay_s
        self._stats_downloads = 0
        self._stats_errors = 0

    @property
    def stats(self) -> dict[str, int]:
        return {'downloads': self._stats_downloads, 'errors': self._stats_errors}

    async def __call__(self, key: TileKey) -> np.ndarray:
        data = await self.fetch_bytes(key)
        return decode_png(data, tile_size=self.tile_size)

    async def fetch_bytes(self, key: TileKey) -> bytes:
        """Download raw tile bytes with retries."""
        url = build_tile_url(self.url_template, key)
        timeout = aiohttp.ClientTimeout(total=self.timeout_s)

        last_exc: Exception | None = None
        for attempt in range(self.retries):
            try:
                resp = await self.client.get(url, timeout=timeout)
                try:
                    sc = resp.status
                    if sc == HTTPStatus.OK:
                        data = await resp.read()
                        self._stats_downloads += 1
                        return data
                    if sc in (
                        HTTPStatus.UNAUTHORIZED,
                        HTTPStatus.FORBIDDEN,
                        HTTPStatus.NOT_FOUND,
                    ):
                        self._stats_errors += 1
                        msg = f'HTTP {sc} for terrain tile {key.path()} url={url}'
                        raise FetchError(msg, status=sc)
                    is_rate_or_5xx = (sc == HTTPStatus.TOO_MANY_REQUESTS) or (
                        HTTP_5XX_MIN <= sc < HTTP_5XX_MAX
                    )
                    if is_rate_or_5xx:
                        last_exc = FetchError(
                            f'HTTP {sc} for terrain tile {key.path()}', status=sc
                        )
                    else:
                        last_exc = FetchError(
                            f'Unexpected HTTP {sc} for terrain tile {key.path()}',
                            status=sc,
                        )
                finally:
                    with suppress(Exception):
                        resp.release()
            except FetchError:
                raise
            except (aiohttp.ClientError, TimeoutError) as e:
                last_exc = e
            if attempt + 1 < self.retries:
                delay = self.base_delay_s * self.backoff**attempt
                logger.debug(
                    'Retrying tile %s in %.2fs (attempt %d/%d): %s',
                    key.path(),
                    delay,
                    attempt + 1,
                    self.retries,
                    last_exc,
                )
                await asyncio.sleep(delay)
        self._stats_errors += 1
        msg = f'Failed to fetch terrain tile {key.path()}: {last_exc}'
        raise FetchError(msg)
