"""Elevation module - terrain-RGB decoding, sampling and smoothing."""

from .decoder import MAX_ELEVATION_M, NO_DATA, decode, decode_raster, is_no_data
from .sampler import ElevationSampler, GridResult, SampleResult, inclusive_steps
from .smoothing import smooth

__all__ = [
    'MAX_ELEVATION_M',
    'NO_DATA',
    'ElevationSampler',
    'GridResult',
    'SampleResult',
    'decode',
    'decode_raster',
    'inclusive_steps',
    'is_no_data',
    'smooth',
]
