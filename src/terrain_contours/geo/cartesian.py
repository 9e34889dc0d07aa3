"""Geodetic (lon, lat, height) to geocentric ECEF conversion for globe renderers."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

import numpy as np
from pyproj import CRS, Transformer

from terrain_contours.shared.constants import GEOCENTRIC_CODE, GEODETIC_3D_CODE

if TYPE_CHECKING:
    from collections.abc import Sequence


@lru_cache(maxsize=1)
def _geodetic_to_ecef() -> Transformer:
    return Transformer.from_crs(
        CRS.from_epsg(GEODETIC_3D_CODE),
        CRS.from_epsg(GEOCENTRIC_CODE),
        always_xy=True,
    )


def to_cartesian(lon: float, lat: float, height: float = 0.0) -> tuple[float, float, float]:
    """Convert one WGS84 point to ECEF metres."""
    x, y, z = _geodetic_to_ecef().transform(lon, lat, height)
    return float(x), float(y), float(z)


def to_cartesian_many(
    positions: Sequence[tuple[float, float, float]],
) -> tuple[tuple[float, float, float], ...]:
    """Vectorized conversion of ``(lon, lat, height)`` triples to ECEF metres."""
    if not positions:
        return ()
    arr = np.asarray(positions, dtype=np.float64)
    xs, ys, zs = _geodetic_to_ecef().transform(arr[:, 0], arr[:, 1], arr[:, 2])
    return tuple(
        (float(x), float(y), float(z))
        for x, y, z in zip(np.atleast_1d(xs), np.atleast_1d(ys), np.atleast_1d(zs), strict=True)
    )
