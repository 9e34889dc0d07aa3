"""Value types flowing through the terrain pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from terrain_contours.domain.errors import DomainError

if TYPE_CHECKING:
    from collections.abc import Sequence

    import numpy as np


@dataclass(frozen=True)
class GeoPoint:
    """Elevation sample; height is NaN when no data is available."""

    lon: float
    lat: float
    height: float

    @property
    def has_data(self) -> bool:
        return not math.isnan(self.height)


@dataclass(frozen=True)
class TileKey:
    """Key for a slippy-map tile in the raster cache."""

    zoom: int
    x: int
    y: int

    def path(self) -> str:
        """Return the ``z/x/y`` path fragment of the tile."""
        return f'{self.zoom}/{self.x}/{self.y}'


@dataclass(frozen=True)
class BoundingBox:
    """Geographic rectangle in degrees; min is strictly below max on both axes."""

    min_lon: float
    max_lon: float
    min_lat: float
    max_lat: float

    def __post_init__(self) -> None:
        if not (self.min_lon < self.max_lon):
            msg = f'Malformed bounding box: min_lon {self.min_lon} >= max_lon {self.max_lon}'
            raise DomainError(msg)
        if not (self.min_lat < self.max_lat):
            msg = f'Malformed bounding box: min_lat {self.min_lat} >= max_lat {self.max_lat}'
            raise DomainError(msg)

    @classmethod
    def from_bounds(cls, bounds: Sequence[float]) -> BoundingBox:
        """Build from a ``[west, south, east, north]`` sequence (TileJSON order)."""
        if len(bounds) != 4:  # noqa: PLR2004
            msg = f'Expected 4 bounds values, got {len(bounds)}'
            raise DomainError(msg)
        west, south, east, north = (float(v) for v in bounds)
        return cls(min_lon=west, max_lon=east, min_lat=south, max_lat=north)

    @property
    def width(self) -> float:
        return self.max_lon - self.min_lon

    @property
    def height(self) -> float:
        return self.max_lat - self.min_lat

    @property
    def center(self) -> tuple[float, float]:
        return (self.min_lon + self.max_lon) / 2.0, (self.min_lat + self.max_lat) / 2.0

    def contains(self, lon: float, lat: float) -> bool:
        return self.min_lon <= lon <= self.max_lon and self.min_lat <= lat <= self.max_lat


@dataclass(frozen=True)
class ElevationGrid:
    """Dense elevation raster covering ``bbox``.

    Row 0 is the northern edge, column 0 the western edge. Cells without
    data hold NaN.
    """

    heights: np.ndarray
    bbox: BoundingBox

    @property
    def rows(self) -> int:
        return int(self.heights.shape[0])

    @property
    def cols(self) -> int:
        return int(self.heights.shape[1])


@dataclass(frozen=True)
class Contour:
    """Closed ring of points sampled around one iso-level."""

    level_height: float
    ring: tuple[GeoPoint, ...]


class HeightBand(Enum):
    """Named bands of the absolute-threshold colour scheme."""

    WATER = 'water'
    LOW = 'low'
    MID = 'mid'
    HIGH = 'high'
    PEAK = 'peak'


# Quartile index or named band
ColorBand = int | HeightBand


@dataclass(frozen=True)
class SegmentBatch:
    """Polyline positions ``(lon, lat, height)`` sharing one colour band."""

    band: ColorBand
    positions: tuple[tuple[float, float, float], ...]


@dataclass(frozen=True)
class RenderBatch:
    """Renderer-ready polyline in geocentric (ECEF) metres."""

    band: ColorBand
    rgba: tuple[float, float, float, float]
    positions: tuple[tuple[float, float, float], ...]
    geographic: tuple[tuple[float, float, float], ...]
    closed: bool = False
