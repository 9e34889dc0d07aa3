"""Tile loading and caching.

This module provides:
- TileCache: in-memory raster cache with LRU eviction and de-duplicated loads
- TerrainTileFetcher: HTTP fetcher decoding terrain-RGB PNG tiles
- resolve_tile_metadata: TileJSON lookup of a tile service
"""

from terrain_contours.tiles.cache import TileCache
from terrain_contours.tiles.fetcher import TerrainTileFetcher, build_tile_url, decode_png
from terrain_contours.tiles.metadata import (
    TileMetadata,
    parse_tilejson,
    resolve_tile_metadata,
)

__all__ = [
    'TerrainTileFetcher',
    'TileCache',
    'TileMetadata',
    'build_tile_url',
    'decode_png',
    'parse_tilejson',
    'resolve_tile_metadata',
]
