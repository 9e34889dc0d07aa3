"""Terrain-RGB elevation tiles to contour and stripe polylines."""

from terrain_contours.contours.builder import ContourStrategy
from terrain_contours.domain.models import BoundingBox
from terrain_contours.domain.settings import PipelineSettings
from terrain_contours.session import TerrainSession

__version__ = '0.1.0'

__all__ = [
    'BoundingBox',
    'ContourStrategy',
    'PipelineSettings',
    'TerrainSession',
    '__version__',
]
