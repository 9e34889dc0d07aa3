"""Geo module - tile addressing and coordinate conversions."""

from .cartesian import to_cartesian, to_cartesian_many
from .tiling import (
    TilePixel,
    lon_lat_to_tile,
    meters_per_pixel,
    pixel_angular_size,
    pixel_lon_lat_axes,
    tile_bounds,
    tile_to_lon_lat,
    tiles_covering,
)

__all__ = [
    'TilePixel',
    'lon_lat_to_tile',
    'meters_per_pixel',
    'pixel_angular_size',
    'pixel_lon_lat_axes',
    'tile_bounds',
    'tile_to_lon_lat',
    'tiles_covering',
    'to_cartesian',
    'to_cartesian_many',
]
