"""Tile service metadata resolution (TileJSON)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

import aiohttp

from terrain_contours.domain.errors import DomainError, FetchError
from terrain_contours.domain.models import BoundingBox
from terrain_contours.shared.constants import (
    HTTP_TIMEOUT_DEFAULT,
    MERCATOR_LAT_LIMIT_DEG,
    URL_PLACEHOLDERS,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

WORLD_BOUNDS = (-180.0, -MERCATOR_LAT_LIMIT_DEG, 180.0, MERCATOR_LAT_LIMIT_DEG)


@dataclass(frozen=True)
class TileMetadata:
    """Extent and URL template of a terrain-RGB tile service."""

    bbox: BoundingBox
    url_template: str
    min_zoom: int = 0
    max_zoom: int = 22


def _clamp_lat(lat: float) -> float:
    # keep strictly inside the Mercator domain
    limit = MERCATOR_LAT_LIMIT_DEG - 1e-9
    return max(-limit, min(limit, lat))


def _bounds(doc: Mapping[str, Any]) -> BoundingBox:
    raw = doc.get('bounds') or WORLD_BOUNDS
    try:
        values = [float(v) for v in raw]
    except (TypeError, ValueError) as e:
        msg = f'Malformed TileJSON bounds {raw!r}: {e}'
        raise DomainError(msg) from e
    if len(values) == 4:  # noqa: PLR2004
        values[1] = _clamp_lat(values[1])
        values[3] = _clamp_lat(values[3])
    return BoundingBox.from_bounds(values)


def _zoom(doc: Mapping[str, Any], key: str, default: int) -> int:
    value = doc.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        msg = f'TileJSON {key} must be an integer, got {value!r}'
        raise DomainError(msg) from e


def parse_tilejson(doc: Mapping[str, Any], *, root: str = '') -> TileMetadata:
    """
    Build TileMetadata from a TileJSON document.

    ``tiles[0]`` is the URL template; relative templates are resolved against
    root. Missing ``bounds`` fall back to the whole Mercator world.

    Raises:
        DomainError: If the template lacks ``{z}``, ``{x}`` or ``{y}``, or
            bounds or zoom levels are malformed.
    """
    tiles = doc.get('tiles') or []
    if not tiles:
        msg = 'TileJSON has no "tiles" entry'
        raise DomainError(msg)
    template = str(tiles[0])
    if root and '://' not in template:
        template = root.rstrip('/') + '/' + template.lstrip('/')
    missing = [p for p in URL_PLACEHOLDERS if p not in template]
    if missing:
        msg = f'Tile URL template {template!r} lacks placeholders {missing}'
        raise DomainError(msg)

    return TileMetadata(
        bbox=_bounds(doc),
        url_template=template,
        min_zoom=_zoom(doc, 'minzoom', 0),
        max_zoom=_zoom(doc, 'maxzoom', 22),
    )


async def resolve_tile_metadata(
    client: aiohttp.ClientSession,
    root: str,
    *,
    timeout_s: float = HTTP_TIMEOUT_DEFAULT,
) -> TileMetadata:
    """
    Fetch and parse the TileJSON document of a tile service root.

    Raises:
        FetchError: On network failure or a non-200 response.
        DomainError: If the document is not usable TileJSON.
    """
    timeout = aiohttp.ClientTimeout(total=timeout_s)
    try:
        resp = await client.get(root, timeout=timeout)
    except (aiohttp.ClientError, TimeoutError) as e:
        msg = f'Tile metadata request failed for {root}: {e}'
        raise FetchError(msg) from e
    try:
        if resp.status != HTTPStatus.OK:
            msg = f'HTTP {resp.status} for tile metadata {root}'
            raise FetchError(msg, status=resp.status)
        try:
            doc = await resp.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError) as e:
            msg = f'Tile metadata at {root} is not JSON: {e}'
            raise DomainError(msg) from e
    finally:
        resp.release()
    if not isinstance(doc, dict):
        msg = f'Tile metadata at {root} is not a JSON object'
        raise DomainError(msg)
    meta = parse_tilejson(doc, root=root)
    logger.info('Resolved tile service %s -> %s', root, meta.url_template)
    return meta
