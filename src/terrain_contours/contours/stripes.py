"""Per-longitude strip banding of a sparse elevation point sequence.

Points are grouped into north-south strips by longitude. Each surviving
strip is sorted by latitude, smoothed and walked pair by pair; every pair
goes to the colour band of its average height. One SegmentBatch is emitted
per non-empty band per strip.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

from terrain_contours.contours.buckets import BandScheme, QuartileScheme
from terrain_contours.domain.models import HeightBand, SegmentBatch
from terrain_contours.domain.settings import PipelineSettings
from terrain_contours.elevation.smoothing import smooth
from terrain_contours.shared.constants import MIN_POINTS_FOR_LINE, MIN_POINTS_PER_STRIP

if TYPE_CHECKING:
    from collections.abc import Iterable

    from terrain_contours.domain.models import ColorBand, GeoPoint

logger = logging.getLogger(__name__)


@dataclass
class StripeStats:
    """Why strips were kept or skipped; skipping is not an error."""

    strips: int = 0
    emitted: int = 0
    too_few_points: int = 0
    mostly_invalid: int = 0
    too_flat: int = 0


def strip_key(lon: float, step: float) -> int:
    """Strip index of a longitude; halves round up."""
    return math.floor(lon / step + 0.5)


def group_strips(points: Iterable[GeoPoint], step: float) -> dict[int, list[GeoPoint]]:
    """Group points by strip index, west to east."""
    strips: dict[int, list[GeoPoint]] = defaultdict(list)
    for p in points:
        strips[strip_key(p.lon, step)].append(p)
    return dict(sorted(strips.items()))


def build_strip_batches(
    points: list[GeoPoint],
    settings: PipelineSettings,
    scheme: BandScheme,
    stats: StripeStats,
) -> list[SegmentBatch]:
    """Band one strip; returns an empty list when the strip is skipped."""
    if len(points) < MIN_POINTS_PER_STRIP:
        stats.too_few_points += 1
        return []

    valid = [p for p in points if settings.min_valid < p.height < settings.max_valid]
    if not valid or len(valid) / len(points) < settings.min_valid_ratio:
        stats.mostly_invalid += 1
        return []

    valid.sort(key=lambda p: p.lat)
    smoothed = smooth(valid, settings.smoothing_window)

    heights = [p.height for p in smoothed]
    min_h = min(heights)
    max_h = max(heights)
    if max_h - min_h < settings.min_relief_m:
        stats.too_flat += 1
        return []

    buckets: dict[ColorBand, list[tuple[float, float, float]]] = {}
    for p1, p2 in zip(smoothed, smoothed[1:], strict=False):
        band = scheme.band_for((p1.height + p2.height) / 2.0, min_h, max_h)
        buckets.setdefault(band, []).extend(
            [(p1.lon, p1.lat, p1.height), (p2.lon, p2.lat, p2.height)]
        )

    stats.emitted += 1
    return [
        SegmentBatch(band=band, positions=tuple(positions))
        for band, positions in sorted(buckets.items(), key=lambda kv: _band_order(kv[0]))
        if len(positions) >= MIN_POINTS_FOR_LINE
    ]


def _band_order(band: ColorBand) -> int:
    if isinstance(band, int):
        return band
    return list(HeightBand).index(band)


def build_stripes(
    points: Iterable[GeoPoint],
    settings: PipelineSettings | None = None,
    *,
    scheme: BandScheme | None = None,
    stats: StripeStats | None = None,
) -> list[SegmentBatch]:
    """
    Turn a step-sampled point sequence into colour-banded segment batches.

    Args:
        points: Samples, typically from ElevationSampler.sample_steps.
        settings: Spacing, validity window, smoothing and relief thresholds.
        scheme: Band scheme; quartiles of each strip's own range by default.
        stats: Optional counters filled with kept/skipped strip reasons.

    Returns:
        Batches ordered by strip (west to east), then by band.
    """
    settings = settings or PipelineSettings()
    scheme = scheme or QuartileScheme(settings.bucket_count)
    stats = stats if stats is not None else StripeStats()

    batches: list[SegmentBatch] = []
    for strip in group_strips(points, settings.strip_step_deg).values():
        stats.strips += 1
        batches.extend(build_strip_batches(strip, settings, scheme, stats))

    logger.info(
        'Stripes: %d strips, %d emitted, skipped %d sparse / %d invalid / %d flat',
        stats.strips,
        stats.emitted,
        stats.too_few_points,
        stats.mostly_invalid,
        stats.too_flat,
    )
    return batches
