"""Tests for TerrainTileFetcher."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import aiohttp
import numpy as np
import pytest
from conftest import encode_heights, png_bytes

from terrain_contours.domain.errors import DecodeError, FetchError
from terrain_contours.domain.models import TileKey
from terrain_contours.tiles.fetcher import TerrainTileFetcher, build_tile_url, decode_png

KEY = TileKey(14, 8529, 5826)


def _response(status, body=b''):
    resp = MagicMock()
    resp.status = status
    resp.read = AsyncMock(return_value=body)
    resp.release = MagicMock()
    return resp


def _tile_png(height=250.0, size=4):
    return png_bytes(encode_heights(np.full((size, size), height)))


def _fetcher(*responses, retries=3, tile_size=4):
    client = MagicMock()
    client.get = AsyncMock(side_effect=list(responses))
    fetcher = TerrainTileFetcher(
        client,
        'https://tiles.example.com/terrain/{z}/{x}/{y}.png',
        tile_size=tile_size,
        retries=retries,
        base_delay_s=0,
    )
    return fetcher, client


class TestBuildTileUrl:
    """Tests for build_tile_url."""

    def test_placeholders(self):
        """{z}/{x}/{y} are substituted."""
        url = build_tile_url('https://h/t/{z}/{x}/{y}.png', KEY)
        assert url == 'https://h/t/14/8529/5826.png'

    def test_root_without_placeholders(self):
        """A bare root gets /z/x/y appended."""
        assert build_tile_url('https://h/tiles/', KEY) == 'https://h/tiles/14/8529/5826'


class TestDecodePng:
    """Tests for decode_png."""

    def test_rgb_array(self):
        """PNG bytes become an (H, W, 3) uint8 array."""
        arr = decode_png(_tile_png(size=4), tile_size=4)
        assert arr.shape == (4, 4, 3)
        assert arr.dtype == np.uint8

    def test_garbage_raises(self):
        """Non-image bytes are a DecodeError."""
        with pytest.raises(DecodeError):
            decode_png(b'not a png', tile_size=4)

    def test_wrong_size_raises(self):
        """A tile of unexpected size is a DecodeError."""
        with pytest.raises(DecodeError):
            decode_png(_tile_png(size=8), tile_size=4)


class TestTerrainTileFetcher:
    """Tests for TerrainTileFetcher class."""

    @pytest.mark.asyncio
    async def test_success(self):
        """A 200 response is decoded into a raster."""
        fetcher, client = _fetcher(_response(200, _tile_png()))
        raster = await fetcher(KEY)
        assert raster.shape == (4, 4, 3)
        assert client.get.await_count == 1
        assert client.get.call_args.args[0].endswith('/14/8529/5826.png')
        assert fetcher.stats == {'downloads': 1, 'errors': 0}

    @pytest.mark.asyncio
    async def test_retries_5xx(self):
        """A 503 is retried and the next success returned."""
        first = _response(503)
        fetcher, client = _fetcher(first, _response(200, _tile_png()))
        await fetcher(KEY)
        assert client.get.await_count == 2
        first.release.assert_called_once()

    @pytest.mark.asyncio
    async def test_retries_rate_limit(self):
        """A 429 is retried."""
        fetcher, client = _fetcher(_response(429), _response(200, _tile_png()))
        await fetcher(KEY)
        assert client.get.await_count == 2

    @pytest.mark.asyncio
    async def test_retries_connection_error(self):
        """Connection errors and timeouts are retried."""
        fetcher, client = _fetcher(
            aiohttp.ClientConnectionError('reset'),
            TimeoutError(),
            _response(200, _tile_png()),
        )
        await fetcher(KEY)
        assert client.get.await_count == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize('status', [401, 403, 404])
    async def test_client_errors_not_retried(self, status):
        """401/403/404 fail immediately."""
        fetcher, client = _fetcher(_response(status), _response(200, _tile_png()))
        with pytest.raises(FetchError) as exc_info:
            await fetcher(KEY)
        assert exc_info.value.status == status
        assert exc_info.value.code == 'FETCH_ERROR'
        assert client.get.await_count == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_retries(self):
        """Persistent 5xx ends with a FetchError after the retry budget."""
        fetcher, client = _fetcher(_response(500), _response(502), _response(503))
        with pytest.raises(FetchError):
            await fetcher(KEY)
        assert client.get.await_count == 3
        assert fetcher.stats['errors'] == 1

    @pytest.mark.asyncio
    async def test_undecodable_body(self):
        """A 200 with a non-image body is a DecodeError."""
        fetcher, _ = _fetcher(_response(200, b'<html>oops</html>'))
        with pytest.raises(DecodeError):
            await fetcher(KEY)
