"""Render - polyline emission and output renderers."""

from .emitter import GeometryEmitter, Renderer
from .geojson import GeoJSONRenderer

__all__ = ['GeoJSONRenderer', 'GeometryEmitter', 'Renderer']
