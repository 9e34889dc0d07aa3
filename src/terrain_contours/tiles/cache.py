"""In-memory terrain raster cache with LRU eviction and in-flight de-duplication.

This module provides TileCache, the single shared mutable resource of a
terrain session. Concurrent requests for a tile that is not cached yet are
served by one loader call; every caller awaits the same result.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import TYPE_CHECKING

import numpy as np

from terrain_contours.shared.constants import CACHE_MAX_TILES

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from terrain_contours.domain.models import TileKey

    RasterLoader = Callable[[TileKey], Awaitable[np.ndarray]]

logger = logging.getLogger(__name__)


class TileCache:
    """Memoizes decoded tile rasters keyed by TileKey.

    Features:
    - At most one outstanding load per key; concurrent callers share it
    - The load runs in its own task, so a cancelled caller does not cancel
      it for the other callers
    - Failed loads are not cached, the next get() retries
    - LRU eviction once more than ``max_tiles`` rasters are held
    - Stored rasters are read-only

    Usage:
        cache = TileCache(fetcher, max_tiles=256)
        raster = await cache.get(TileKey(14, 13100, 8361))
    """

    def __init__(
        self,
        loader: RasterLoader,
        *,
        max_tiles: int | None = CACHE_MAX_TILES,
    ) -> None:
        """Initialize tile cache.

        Args:
            loader: Async callable fetching and decoding one tile raster.
            max_tiles: LRU capacity in tiles; None keeps every tile.
        """
        if max_tiles is not None and max_tiles < 1:
            msg = 'max_tiles must be positive or None'
            raise ValueError(msg)
        self._loader = loader
        self._max_tiles = max_tiles
        self._rasters: OrderedDict[TileKey, np.ndarray] = OrderedDict()
        self._inflight: dict[TileKey, asyncio.Task[np.ndarray]] = {}
        self._stats_hits = 0
        self._stats_joins = 0
        self._stats_fetches = 0
        self._stats_errors = 0
        self._stats_evictions = 0

    @property
    def max_tiles(self) -> int | None:
        return self._max_tiles

    @property
    def stats(self) -> dict[str, int]:
        """Counters of cache activity."""
        return {
            'hits': self._stats_hits,
            'joins': self._stats_joins,
            'fetches': self._stats_fetches,
            'errors': self._stats_errors,
            'evictions': self._stats_evictions,
            'size': len(self._rasters),
        }

    def __contains__(self, key: object) -> bool:
        return key in self._rasters

    def __len__(self) -> int:
        return len(self._rasters)

    def peek(self, key: TileKey) -> np.ndarray | None:
        """Return a cached raster without touching LRU order or loading."""
        return self._rasters.get(key)

    async def get(self, key: TileKey) -> np.ndarray:
        """Return the raster for key, loading it once on a miss.

        Raises:
            Whatever the loader raises (FetchError, DecodeError); the cache
            stays unchanged in that case.
        """
        raster = self._rasters.get(key)
        if raster is not None:
            self._rasters.move_to_end(key)
            self._stats_hits += 1
            return raster

        task = self._inflight.get(key)
        if task is not None:
            self._stats_joins += 1
        else:
            self._stats_fetches += 1
            task = asyncio.get_running_loop().create_task(self._load(key))
            task.add_done_callback(_retrieve_exception)
            self._inflight[key] = task
        # a cancelled caller leaves the load running for the others
        return await asyncio.shield(task)

    async def _load(self, key: TileKey) -> np.ndarray:
        try:
            raster = np.asarray(await self._loader(key))
        except Exception as exc:
            self._stats_errors += 1
            logger.warning('Tile %s failed to load: %s', key.path(), exc)
            raise
        finally:
            self._inflight.pop(key, None)
        raster.flags.writeable = False
        self._remember(key, raster)
        return raster

    def _remember(self, key: TileKey, raster: np.ndarray) -> None:
        """Store raster and evict least recently used tiles beyond capacity."""
        self._rasters[key] = raster
        self._rasters.move_to_end(key)
        if self._max_tiles is None:
            return
        while len(self._rasters) > self._max_tiles:
            old, _ = self._rasters.popitem(last=False)
            self._stats_evictions += 1
            logger.debug('Evicted tile %s', old.path())

    def clear(self) -> None:
        """Drop every cached raster; in-flight loads are left alone."""
        self._rasters.clear()
        logger.info('TileCache cleared')


def _retrieve_exception(task: asyncio.Task[np.ndarray]) -> None:
    # every caller may have been cancelled; keep asyncio from reporting it
    if not task.cancelled():
        task.exception()
