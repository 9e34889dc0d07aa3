"""Shared constants and helpers."""
from terrain_contours.shared.diagnostics import get_memory_info, log_memory_usage

__all__ = [
    'get_memory_info',
    'log_memory_usage',
]
