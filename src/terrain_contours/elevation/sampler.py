"""Elevation sampling over a bounding box.

Two modes:
- grid: every pixel of every tile covering the bbox (dense, unordered)
- steps: one pixel lookup per fixed angular step (coarse, evenly spaced)

A tile that fails to load is logged and skipped; the rest of the bbox is
still sampled.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from terrain_contours.domain.models import BoundingBox, ElevationGrid, GeoPoint, TileKey
from terrain_contours.domain.settings import PipelineSettings
from terrain_contours.elevation.decoder import decode_raster
from terrain_contours.geo.tiling import (
    lon_lat_to_tile,
    pixel_lon_lat_axes,
    tile_bounds,
    tile_to_lon_lat,
    tiles_covering,
)
from terrain_contours.shared.constants import LOG_MEMORY_EVERY_TILES
from terrain_contours.shared.diagnostics import log_memory_usage

if TYPE_CHECKING:
    from collections.abc import Iterable

    from terrain_contours.tiles.cache import TileCache

logger = logging.getLogger(__name__)

# Guards inclusive range counts against float round-off
_RANGE_EPSILON = 1e-9


@dataclass
class SampleResult:
    """Points sampled over a bbox plus the tiles that could not be loaded."""

    points: list[GeoPoint] = field(default_factory=list)
    failed_tiles: list[TileKey] = field(default_factory=list)
    query_count: int = 0


@dataclass
class GridResult:
    """Stitched elevation grid plus the tiles that could not be loaded."""

    grid: ElevationGrid
    failed_tiles: list[TileKey] = field(default_factory=list)


def inclusive_steps(start: float, stop: float, step: float) -> list[float]:
    """``start, start + step, ...`` up to and including stop."""
    if step <= 0:
        msg = f'step must be positive, got {step}'
        raise ValueError(msg)
    count = math.floor((stop - start) / step + _RANGE_EPSILON) + 1
    return [start + i * step for i in range(max(count, 0))]


class ElevationSampler:
    """Drives TileCache and the terrain-RGB decoder over a geographic region.

    Usage:
        sampler = ElevationSampler(cache, settings)
        result = await sampler.sample_steps(bbox)
        for p in result.points: ...
    """

    def __init__(self, cache: TileCache, settings: PipelineSettings | None = None) -> None:
        self.cache = cache
        self.settings = settings or PipelineSettings()
        self._decoded_tiles = 0

    def is_plausible(self, height: float) -> bool:
        """True for heights strictly inside (min_valid, max_valid); NaN is not."""
        return self.settings.min_valid < height < self.settings.max_valid

    async def _load_many(
        self, keys: Iterable[TileKey]
    ) -> tuple[dict[TileKey, np.ndarray], list[TileKey]]:
        """Load tiles concurrently; failures are collected instead of raised."""
        keys = list(keys)
        sem = asyncio.Semaphore(self.settings.concurrency)

        async def _one(key: TileKey) -> np.ndarray:
            async with sem:
                return await self.cache.get(key)

        results = await asyncio.gather(*(_one(k) for k in keys), return_exceptions=True)

        rasters: dict[TileKey, np.ndarray] = {}
        failed: list[TileKey] = []
        for key, res in zip(keys, results, strict=True):
            if isinstance(res, Exception):
                logger.warning('Skipping tile %s: %s', key.path(), res)
                failed.append(key)
            elif isinstance(res, BaseException):
                raise res
            else:
                rasters[key] = res
        return rasters, failed

    def _decode(self, raster: np.ndarray) -> np.ndarray:
        heights = decode_raster(raster)
        self._decoded_tiles += 1
        if self._decoded_tiles % LOG_MEMORY_EVERY_TILES == 0:
            log_memory_usage(f'after {self._decoded_tiles} decoded tiles')
        return heights

    async def sample_grid(self, bbox: BoundingBox) -> SampleResult:
        """
        Decode every pixel of every tile intersecting bbox.

        Each pixel is reprojected to its north-west corner (lon, lat) and kept
        when it has data, is plausible and lies inside bbox.
        """
        zoom = self.settings.zoom
        size = self.settings.tile_size
        keys = tiles_covering(bbox, zoom)
        logger.info('Grid sampling %d tiles at zoom %d', len(keys), zoom)
        rasters, failed = await self._load_many(keys)

        result = SampleResult(failed_tiles=failed)
        for key in keys:
            raster = rasters.get(key)
            if raster is None:
                continue
            heights = self._decode(raster)
            lons, lats = pixel_lon_lat_axes(key, size)
            result.query_count += heights.size

            col_mask = (lons >= bbox.min_lon) & (lons <= bbox.max_lon)
            row_mask = (lats >= bbox.min_lat) & (lats <= bbox.max_lat)
            valid = (
                ~np.isnan(heights)
                & (heights > self.settings.min_valid)
                & (heights < self.settings.max_valid)
                & row_mask[:, None]
                & col_mask[None, :]
            )
            rows, cols = np.nonzero(valid)
            result.points.extend(
                GeoPoint(float(lons[c]), float(lats[r]), float(heights[r, c]))
                for r, c in zip(rows, cols, strict=True)
            )
        logger.info(
            'Grid sampling kept %d of %d pixels (%d tiles failed)',
            len(result.points),
            result.query_count,
            len(failed),
        )
        return result

    async def sample_steps(self, bbox: BoundingBox, step_deg: float | None = None) -> SampleResult:
        """
        Sample one elevation per angular step across bbox.

        Longitude is the outer loop and latitude the inner one, both
        inclusive of the max edge. The step defaults to the configured strip
        spacing converted to degrees.
        """
        zoom = self.settings.zoom
        size = self.settings.tile_size
        step = step_deg if step_deg is not None else self.settings.strip_step_deg
        lons = inclusive_steps(bbox.min_lon, bbox.max_lon, step)
        lats = inclusive_steps(bbox.min_lat, bbox.max_lat, step)

        # x depends only on lon and y only on lat
        center_lon, center_lat = bbox.center
        cols = [lon_lat_to_tile(lon, center_lat, zoom, size) for lon in lons]
        rows = [lon_lat_to_tile(center_lon, lat, zoom, size) for lat in lats]

        keys = sorted(
            {TileKey(zoom, c.tile_x, r.tile_y) for c in cols for r in rows},
            key=lambda k: (k.y, k.x),
        )
        logger.info(
            'Step sampling %d x %d queries over %d tiles (step %.2e deg)',
            len(lons),
            len(lats),
            len(keys),
            step,
        )
        rasters, failed = await self._load_many(keys)
        decoded = {key: self._decode(raster) for key, raster in rasters.items()}

        result = SampleResult(failed_tiles=failed, query_count=len(lons) * len(lats))
        for lon, c in zip(lons, cols, strict=True):
            for lat, r in zip(lats, rows, strict=True):
                heights = decoded.get(TileKey(zoom, c.tile_x, r.tile_y))
                if heights is None:
                    continue
                h = float(heights[r.pixel_y, c.pixel_x])
                if self.is_plausible(h):
                    result.points.append(GeoPoint(lon, lat, h))
        logger.info(
            'Step sampling kept %d of %d queries (%d tiles failed)',
            len(result.points),
            result.query_count,
            len(failed),
        )
        return result

    async def grid_for_tile(self, key: TileKey) -> ElevationGrid:
        """Decoded elevation of one whole tile with its geographic extent."""
        raster = await self.cache.get(key)
        return ElevationGrid(heights=self._decode(raster), bbox=tile_bounds(key))

    async def assemble_grid(self, bbox: BoundingBox) -> GridResult:
        """
        Stitch the tiles covering bbox into one grid cropped to bbox.

        Pixels of failed tiles stay NaN.
        """
        zoom = self.settings.zoom
        size = self.settings.tile_size
        nw = lon_lat_to_tile(bbox.min_lon, bbox.max_lat, zoom, size)
        se = lon_lat_to_tile(bbox.max_lon, bbox.min_lat, zoom, size)
        keys = tiles_covering(bbox, zoom)
        rasters, failed = await self._load_many(keys)

        tiles_x = se.tile_x - nw.tile_x + 1
        tiles_y = se.tile_y - nw.tile_y + 1
        canvas = np.full((tiles_y * size, tiles_x * size), np.nan, dtype=np.float32)
        for key, raster in rasters.items():
            base_y = (key.y - nw.tile_y) * size
            base_x = (key.x - nw.tile_x) * size
            canvas[base_y : base_y + size, base_x : base_x + size] = self._decode(raster)

        y0, x0 = nw.pixel_y, nw.pixel_x
        y1 = (tiles_y - 1) * size + se.pixel_y + 1
        x1 = (tiles_x - 1) * size + se.pixel_x + 1
        cropped = canvas[y0:y1, x0:x1].copy()
        del canvas

        west, north = tile_to_lon_lat(zoom, nw.tile_x, nw.tile_y, nw.pixel_x, nw.pixel_y, size)
        east, south = tile_to_lon_lat(
            zoom, se.tile_x, se.tile_y, se.pixel_x + 1, se.pixel_y + 1, size
        )
        grid = ElevationGrid(
            heights=cropped,
            bbox=BoundingBox(min_lon=west, max_lon=east, min_lat=south, max_lat=north),
        )
        return GridResult(grid=grid, failed_tiles=failed)
