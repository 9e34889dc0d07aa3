"""Domain layer - value types, settings and profiles."""
from terrain_contours.domain.errors import (
    DecodeError,
    DomainError,
    FetchError,
    TerrainError,
)
from terrain_contours.domain.models import (
    BoundingBox,
    ColorBand,
    Contour,
    ElevationGrid,
    GeoPoint,
    HeightBand,
    RenderBatch,
    SegmentBatch,
    TileKey,
)
from terrain_contours.domain.profiles import load_profile, save_profile
from terrain_contours.domain.settings import PipelineSettings

__all__ = [
    'BoundingBox',
    'ColorBand',
    'Contour',
    'DecodeError',
    'DomainError',
    'ElevationGrid',
    'FetchError',
    'GeoPoint',
    'HeightBand',
    'PipelineSettings',
    'RenderBatch',
    'SegmentBatch',
    'TerrainError',
    'TileKey',
    'load_profile',
    'save_profile',
]
