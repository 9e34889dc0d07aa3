"""Elevation to colour band mapping.

Two schemes:
- quartile: normalize against a local min/max and split into equal buckets
- absolute thresholds: fixed cut points mapped to named HeightBand values

Comparisons are strict ``<`` in declared order, so a value sitting on a
boundary lands in the upper bucket of the two.
"""

from __future__ import annotations

import colorsys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from terrain_contours.domain.models import HeightBand
from terrain_contours.shared.constants import (
    BUCKET_ALPHA,
    BUCKET_COUNT,
    HEIGHT_THRESHOLDS_M,
    QUARTILE_COLORS,
    RING_ALPHA,
    RING_HUE_SPAN,
    RING_HUE_START,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from terrain_contours.domain.models import ColorBand

RGBA = tuple[float, float, float, float]

NAMED_BAND_COLORS: dict[HeightBand, RGBA] = {
    HeightBand.WATER: (0.0, 0.0, 1.0, BUCKET_ALPHA),
    HeightBand.LOW: (0.0, 1.0, 1.0, BUCKET_ALPHA),
    HeightBand.MID: (0.0, 1.0, 0.0, BUCKET_ALPHA),
    HeightBand.HIGH: (1.0, 1.0, 0.0, BUCKET_ALPHA),
    HeightBand.PEAK: (1.0, 0.0, 0.0, BUCKET_ALPHA),
}


def _clamp(value: float, min_value: float, max_value: float) -> float:
    if value < min_value:
        return min_value
    if value > max_value:
        return max_value
    return value


def quartile_bucket(
    height: float,
    min_h: float,
    max_h: float,
    count: int = BUCKET_COUNT,
) -> int:
    """
    Bucket index in ``[0, count)`` of height normalized against [min_h, max_h].

    A degenerate range (max_h <= min_h) maps everything to bucket 0.
    """
    if count < 1:
        msg = f'count must be positive, got {count}'
        raise ValueError(msg)
    if not (max_h > min_h):
        return 0
    t = _clamp((height - min_h) / (max_h - min_h), 0.0, 1.0)
    for i in range(count - 1):
        if t < (i + 1) / count:
            return i
    return count - 1


def threshold_band(
    height: float,
    thresholds: Sequence[float] = HEIGHT_THRESHOLDS_M,
) -> HeightBand:
    """Named band of an absolute height; thresholds are the ascending cut points."""
    bands = list(HeightBand)
    if len(thresholds) != len(bands) - 1:
        msg = f'Expected {len(bands) - 1} thresholds, got {len(thresholds)}'
        raise ValueError(msg)
    for band, limit in zip(bands, thresholds, strict=False):
        if height < limit:
            return band
    return bands[-1]


class BandScheme(Protocol):
    """Maps a height within a local [min_h, max_h] range to a colour band."""

    def band_for(self, height: float, min_h: float, max_h: float) -> ColorBand: ...

    def color_for(self, band: ColorBand) -> RGBA: ...


@dataclass(frozen=True)
class QuartileScheme:
    count: int = BUCKET_COUNT

    def band_for(self, height: float, min_h: float, max_h: float) -> ColorBand:
        return quartile_bucket(height, min_h, max_h, self.count)

    def color_for(self, band: ColorBand) -> RGBA:
        if not isinstance(band, int):
            msg = f'Quartile scheme expects an int band, got {band!r}'
            raise TypeError(msg)
        if self.count == len(QUARTILE_COLORS):
            return QUARTILE_COLORS[band]
        t = band / (self.count - 1) if self.count > 1 else 0.0
        return hsl_ramp_color(t, alpha=BUCKET_ALPHA)


@dataclass(frozen=True)
class ThresholdScheme:
    thresholds: tuple[float, ...] = HEIGHT_THRESHOLDS_M

    def band_for(self, height: float, min_h: float, max_h: float) -> ColorBand:
        # local range is irrelevant for absolute cut points
        return threshold_band(height, self.thresholds)

    def color_for(self, band: ColorBand) -> RGBA:
        if not isinstance(band, HeightBand):
            msg = f'Threshold scheme expects a HeightBand, got {band!r}'
            raise TypeError(msg)
        return NAMED_BAND_COLORS[band]


def hsl_ramp_color(t: float, *, alpha: float = RING_ALPHA) -> RGBA:
    """Blue (t=0) to red (t=1) ramp: hue = 0.65 - 0.6 * t, full saturation."""
    t = _clamp(t, 0.0, 1.0)
    r, g, b = colorsys.hls_to_rgb(RING_HUE_START - RING_HUE_SPAN * t, 0.5, 1.0)
    return (r, g, b, alpha)
