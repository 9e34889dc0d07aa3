"""Moving-average smoothing of point heights along a strip."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from terrain_contours.shared.constants import SMOOTHING_WINDOW

if TYPE_CHECKING:
    from collections.abc import Sequence

    from terrain_contours.domain.models import GeoPoint


def smooth(points: Sequence[GeoPoint], window_radius: int = SMOOTHING_WINDOW) -> list[GeoPoint]:
    """
    Moving average of heights over ``[i - window_radius, i + window_radius]``.

    Indices outside the sequence are skipped, so edge points average over
    fewer neighbours. The input must already be ordered along the smoothing
    axis; it is not sorted here.
    """
    if window_radius < 0:
        msg = f'window_radius must not be negative, got {window_radius}'
        raise ValueError(msg)

    n = len(points)
    out: list[GeoPoint] = []
    for i, p in enumerate(points):
        lo = max(0, i - window_radius)
        hi = min(n, i + window_radius + 1)
        window = points[lo:hi]
        out.append(replace(p, height=sum(q.height for q in window) / len(window)))
    return out
