"""Iso-height ring extraction by threshold banding.

For each level the grid is scanned for cells within half an interval of the
level. This approximates contour tracing without connecting vertices: points
keep the row-major scan order and the ring is closed by repeating the first
point.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from terrain_contours.domain.models import Contour, ElevationGrid, GeoPoint
from terrain_contours.shared.constants import MIN_POINTS_PER_RING, RING_SCAN_STRIDE

logger = logging.getLogger(__name__)


def contour_levels(max_height: float, interval: float) -> list[float]:
    """Levels ``0, interval, 2*interval, ...`` not exceeding max_height."""
    if interval <= 0:
        msg = f'interval must be positive, got {interval}'
        raise ValueError(msg)
    if math.isnan(max_height) or max_height < 0:
        return []
    return [i * interval for i in range(math.floor(max_height / interval) + 1)]


def build_rings(
    grid: ElevationGrid,
    interval: float,
    *,
    stride: int = RING_SCAN_STRIDE,
    min_points: int = MIN_POINTS_PER_RING,
) -> list[Contour]:
    """
    Build one closed ring per level that matches at least min_points cells.

    Args:
        grid: Elevation grid, row 0 at the northern edge; NaN cells never match.
        interval: Height step between levels (m).
        stride: Scan every stride-th row and column.
        min_points: Minimum matching cells for a level to be kept.

    Returns:
        Contours in ascending level order.
    """
    if stride < 1:
        msg = f'stride must be positive, got {stride}'
        raise ValueError(msg)
    heights = grid.heights
    if heights.size == 0 or np.all(np.isnan(heights)):
        return []
    levels = contour_levels(float(np.nanmax(heights)), interval)

    rows, cols = heights.shape
    bbox = grid.bbox
    sub = heights[::stride, ::stride]
    # geographic position of each scanned row/column
    sub_lons = bbox.min_lon + (np.arange(0, cols, stride) / cols) * bbox.width
    sub_lats = bbox.max_lat - (np.arange(0, rows, stride) / rows) * bbox.height
    half = interval / 2.0

    contours: list[Contour] = []
    with np.errstate(invalid='ignore'):
        for h in levels:
            r_idx, c_idx = np.nonzero(np.abs(sub - h) < half)
            if len(r_idx) < min_points:
                continue
            ring = [
                GeoPoint(float(sub_lons[c]), float(sub_lats[r]), h)
                for r, c in zip(r_idx, c_idx, strict=True)
            ]
            ring.append(ring[0])
            contours.append(Contour(level_height=h, ring=tuple(ring)))
    logger.debug('Built %d rings from %d levels', len(contours), len(levels))
    return contours
