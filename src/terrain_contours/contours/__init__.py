"""Contours - ring and stripe vectorization with colour banding."""

from .buckets import (
    BandScheme,
    QuartileScheme,
    ThresholdScheme,
    hsl_ramp_color,
    quartile_bucket,
    threshold_band,
)
from .builder import ContourBuilder, ContourResult, ContourStrategy
from .rings import build_rings, contour_levels
from .stripes import StripeStats, build_stripes, group_strips, strip_key

__all__ = [
    'BandScheme',
    'ContourBuilder',
    'ContourResult',
    'ContourStrategy',
    'QuartileScheme',
    'StripeStats',
    'ThresholdScheme',
    'build_rings',
    'build_stripes',
    'contour_levels',
    'group_strips',
    'hsl_ramp_color',
    'quartile_bucket',
    'strip_key',
    'threshold_band',
]
