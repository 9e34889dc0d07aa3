"""Terrain session: the explicit context of one visualization run.

A session owns its settings, the HTTP session (unless a raster loader is
injected), the tile cache and the elevation sampler. Nothing is kept at
module level, so independent sessions never share state.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from terrain_contours.contours.buckets import BandScheme, QuartileScheme
from terrain_contours.contours.builder import ContourBuilder, ContourResult, ContourStrategy
from terrain_contours.domain.errors import DomainError
from terrain_contours.domain.settings import PipelineSettings
from terrain_contours.elevation.sampler import ElevationSampler
from terrain_contours.infrastructure.http.client import make_http_session
from terrain_contours.render.emitter import GeometryEmitter
from terrain_contours.tiles.cache import TileCache
from terrain_contours.tiles.fetcher import TerrainTileFetcher
from terrain_contours.tiles.metadata import resolve_tile_metadata

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

    import aiohttp

    from terrain_contours.domain.models import BoundingBox, Contour, RenderBatch, SegmentBatch
    from terrain_contours.render.emitter import Renderer
    from terrain_contours.tiles.cache import RasterLoader

logger = logging.getLogger(__name__)


class TerrainSession:
    """Async context manager wiring fetcher, cache, sampler and builder.

    Usage:
        async with TerrainSession(settings) as session:
            batches = await session.stripes(bbox)
            await session.render(bbox, GeoJSONRenderer(), ContourStrategy.RINGS)
    """

    def __init__(
        self,
        settings: PipelineSettings | None = None,
        *,
        loader: RasterLoader | None = None,
        client: aiohttp.ClientSession | None = None,
        http_cache_dir: Path | None = None,
        scheme: BandScheme | None = None,
        service_root: str | None = None,
    ) -> None:
        """
        Initialize a session.

        Args:
            settings: Pipeline settings; defaults apply when omitted.
            loader: Raster loader replacing the HTTP fetcher (offline use, tests).
            client: HTTP session to reuse; it is not closed by this session.
            http_cache_dir: On-disk HTTP cache used when a client is created here.
            scheme: Colour band scheme of the stripe strategy.
            service_root: TileJSON root resolving the tile URL template on enter.
        """
        self.settings = settings or PipelineSettings()
        self.scheme = scheme or QuartileScheme(self.settings.bucket_count)
        self._client = client
        self._owns_client = False
        self._http_cache_dir = http_cache_dir
        self._loader = loader
        self._service_root = service_root
        self.fetcher: TerrainTileFetcher | None = None
        self.cache: TileCache | None = None
        self.sampler: ElevationSampler | None = None
        self.builder: ContourBuilder | None = None
        self.emitter = GeometryEmitter(self.scheme, layer_offset_m=self.settings.layer_offset_m)

    async def __aenter__(self) -> TerrainSession:
        try:
            if self._service_root and self._loader is None:
                await self.resolve_service(self._service_root)
            self.open()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def _ensure_client(self) -> aiohttp.ClientSession:
        if self._client is None:
            self._client = make_http_session(self._http_cache_dir)
            self._owns_client = True
        return self._client

    async def resolve_service(self, root: str) -> None:
        """Take the tile URL template and zoom range from a TileJSON root."""
        if self.sampler is not None:
            msg = 'Cannot change the tile service of an open session'
            raise DomainError(msg)
        meta = await resolve_tile_metadata(
            self._ensure_client(), root, timeout_s=self.settings.fetch_timeout_s
        )
        zoom = min(max(self.settings.zoom, meta.min_zoom), meta.max_zoom)
        if zoom != self.settings.zoom:
            logger.warning('Zoom %d outside service range, using %d', self.settings.zoom, zoom)
        self.settings = self.settings.model_copy(
            update={'tile_url_template': meta.url_template, 'zoom': zoom}
        )

    def open(self) -> None:
        """Create the loader chain; idempotent."""
        if self.sampler is not None:
            return
        loader = self._loader
        if loader is None:
            if not self.settings.tile_url_template:
                msg = 'tile_url_template is required when no raster loader is given'
                raise DomainError(msg)
            self.fetcher = TerrainTileFetcher(
                self._ensure_client(),
                self.settings.tile_url_template,
                tile_size=self.settings.tile_size,
                timeout_s=self.settings.fetch_timeout_s,
                retries=self.settings.fetch_retries,
            )
            loader = self.fetcher
        self.cache = TileCache(loader, max_tiles=self.settings.cache_max_tiles)
        self.sampler = ElevationSampler(self.cache, self.settings)
        self.builder = ContourBuilder(self.sampler, self.scheme)
        logger.debug('Terrain session opened (zoom %d)', self.settings.zoom)

    async def close(self) -> None:
        if self.cache is not None:
            logger.info('Tile cache stats: %s', self.cache.stats)
        if self.fetcher is not None:
            logger.info('Fetcher stats: %s', self.fetcher.stats)
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None
            self._owns_client = False
        self.fetcher = None
        self.cache = None
        self.sampler = None
        self.builder = None

    def _require_builder(self) -> ContourBuilder:
        if self.builder is None:
            self.open()
        assert self.builder is not None
        return self.builder

    async def build(
        self,
        bbox: BoundingBox,
        strategy: ContourStrategy = ContourStrategy.STRIPES,
        *,
        interval: float | None = None,
    ) -> ContourResult:
        return await self._require_builder().build(bbox, strategy, interval=interval)

    async def stripes(self, bbox: BoundingBox) -> list[SegmentBatch]:
        """Colour-banded stripe batches of bbox."""
        result = await self.build(bbox, ContourStrategy.STRIPES)
        return result.batches

    async def rings(self, bbox: BoundingBox, interval: float | None = None) -> list[Contour]:
        """Iso-height rings of bbox; interval defaults to the configured one."""
        result = await self.build(bbox, ContourStrategy.RINGS, interval=interval)
        return result.rings

    async def render(
        self,
        bbox: BoundingBox,
        renderer: Renderer,
        strategy: ContourStrategy = ContourStrategy.STRIPES,
        *,
        interval: float | None = None,
    ) -> list[RenderBatch]:
        """Build, emit and hand the polylines of bbox to renderer."""
        result = await self.build(bbox, strategy, interval=interval)
        batches = self.emitter.emit(result)
        renderer.draw(batches)
        logger.info(
            'Rendered %d %s polylines (%d tiles failed)',
            len(batches),
            ContourStrategy(strategy).value,
            len(result.failed_tiles),
        )
        return batches
