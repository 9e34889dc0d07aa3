"""Web Mercator slippy-map addressing: lon/lat <-> tile index and pixel offset."""

from __future__ import annotations

import math
from typing import NamedTuple

import numpy as np

from terrain_contours.domain.errors import DomainError
from terrain_contours.domain.models import BoundingBox, TileKey
from terrain_contours.shared.constants import (
    EARTH_RADIUS_M,
    MERCATOR_LAT_LIMIT_DEG,
    TILE_SIZE,
    WORLD_LNG_HALF_SPAN_DEG,
    WORLD_LNG_SPAN_DEG,
)


class TilePixel(NamedTuple):
    """Tile index plus integer pixel offset inside that tile."""

    tile_x: int
    tile_y: int
    pixel_x: int
    pixel_y: int


def validate_lon_lat(lon: float, lat: float) -> None:
    """Raise DomainError when (lon, lat) cannot be projected to Web Mercator."""
    if not (-MERCATOR_LAT_LIMIT_DEG < lat < MERCATOR_LAT_LIMIT_DEG):
        msg = f'Latitude {lat} outside Mercator range (+-{MERCATOR_LAT_LIMIT_DEG})'
        raise DomainError(msg)
    if not (-WORLD_LNG_HALF_SPAN_DEG <= lon <= WORLD_LNG_HALF_SPAN_DEG):
        msg = f'Longitude {lon} outside [-180, 180]'
        raise DomainError(msg)


def lon_lat_to_fractional_tile(lon: float, lat: float, zoom: int) -> tuple[float, float]:
    """Return fractional tile coordinates (xt, yt) of a WGS84 point."""
    validate_lon_lat(lon, lat)
    n = 2**zoom
    xt = n * (lon + WORLD_LNG_HALF_SPAN_DEG) / WORLD_LNG_SPAN_DEG
    lat_rad = math.radians(lat)
    yt = n * (1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0
    return xt, yt


def lon_lat_to_tile(
    lon: float,
    lat: float,
    zoom: int,
    tile_size: int = TILE_SIZE,
) -> TilePixel:
    """
    Locate the tile and pixel containing a WGS84 point.

    Args:
        lon: Longitude in degrees, [-180, 180].
        lat: Latitude in degrees, strictly inside (-85.05, 85.05).
        zoom: Zoom level.
        tile_size: Tile resolution in pixels.

    Returns:
        TilePixel(tile_x, tile_y, pixel_x, pixel_y).

    Raises:
        DomainError: If the point is outside the Mercator domain.
    """
    xt, yt = lon_lat_to_fractional_tile(lon, lat, zoom)
    n = 2**zoom
    tile_x = min(math.floor(xt), n - 1)
    tile_y = min(max(math.floor(yt), 0), n - 1)
    pixel_x = min(math.floor((xt - tile_x) * tile_size), tile_size - 1)
    pixel_y = min(max(math.floor((yt - tile_y) * tile_size), 0), tile_size - 1)
    return TilePixel(tile_x, tile_y, pixel_x, pixel_y)


def tile_to_lon_lat(
    zoom: int,
    tile_x: float,
    tile_y: float,
    pixel_x: float = 0,
    pixel_y: float = 0,
    tile_size: int = TILE_SIZE,
) -> tuple[float, float]:
    """Inverse of lon_lat_to_tile: north-west corner of a pixel as (lon, lat)."""
    n = 2**zoom
    xt = tile_x + pixel_x / tile_size
    yt = tile_y + pixel_y / tile_size
    lon = xt / n * WORLD_LNG_SPAN_DEG - WORLD_LNG_HALF_SPAN_DEG
    lat = math.degrees(math.atan(math.sinh(math.pi * (1.0 - 2.0 * yt / n))))
    return lon, lat


def pixel_lon_lat_axes(key: TileKey, tile_size: int = TILE_SIZE) -> tuple[np.ndarray, np.ndarray]:
    """
    Vectorized tile_to_lon_lat over a whole tile.

    Returns (lons, lats): lons[col] and lats[row] of each pixel's north-west
    corner. Longitude depends only on the column and latitude only on the row.
    """
    n = 2**key.zoom
    offsets = np.arange(tile_size, dtype=np.float64) / tile_size
    lons = (key.x + offsets) / n * WORLD_LNG_SPAN_DEG - WORLD_LNG_HALF_SPAN_DEG
    lats = np.degrees(np.arctan(np.sinh(np.pi * (1.0 - 2.0 * (key.y + offsets) / n))))
    return lons, lats


def tile_bounds(key: TileKey) -> BoundingBox:
    """Geographic extent of a tile."""
    west, north = tile_to_lon_lat(key.zoom, key.x, key.y)
    east, south = tile_to_lon_lat(key.zoom, key.x + 1, key.y + 1)
    return BoundingBox(min_lon=west, max_lon=east, min_lat=south, max_lat=north)


def tiles_covering(bbox: BoundingBox, zoom: int) -> list[TileKey]:
    """Return the tiles intersecting bbox, row by row from the north-west."""
    nw = lon_lat_to_tile(bbox.min_lon, bbox.max_lat, zoom)
    se = lon_lat_to_tile(bbox.max_lon, bbox.min_lat, zoom)
    return [
        TileKey(zoom, x, y)
        for y in range(nw.tile_y, se.tile_y + 1)
        for x in range(nw.tile_x, se.tile_x + 1)
    ]


def pixel_angular_size(zoom: int, lat: float, tile_size: int = TILE_SIZE) -> tuple[float, float]:
    """Approximate (dlon, dlat) in degrees spanned by one pixel at a latitude."""
    dlon = WORLD_LNG_SPAN_DEG / (tile_size * 2**zoom)
    return dlon, dlon * math.cos(math.radians(lat))


def meters_per_pixel(lat_deg: float, zoom: int, tile_size: int = TILE_SIZE) -> float:
    """Ground resolution of one pixel in Web Mercator at a latitude and zoom."""
    lat_rad = math.radians(lat_deg)
    return (math.cos(lat_rad) * 2 * math.pi * EARTH_RADIUS_M) / (tile_size * (2**zoom))
