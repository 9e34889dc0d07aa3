"""HTTP client infrastructure."""
from terrain_contours.infrastructure.http.client import (
    make_http_session,
    resolve_cache_dir,
)

__all__ = [
    'make_http_session',
    'resolve_cache_dir',
]
