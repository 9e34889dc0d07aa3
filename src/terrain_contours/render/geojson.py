"""GeoJSON output of render batches."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from terrain_contours.domain.models import HeightBand

if TYPE_CHECKING:
    from collections.abc import Sequence

    from terrain_contours.domain.models import RenderBatch

logger = logging.getLogger(__name__)


class GeoJSONRenderer:
    """Collects batches as LineString features of geographic coordinates.

    Usage:
        renderer = GeoJSONRenderer()
        renderer.draw(batches)
        renderer.save('contours.geojson')
    """

    def __init__(self) -> None:
        self.features: list[dict[str, Any]] = []

    def draw(self, batches: Sequence[RenderBatch]) -> None:
        for batch in batches:
            band = batch.band.value if isinstance(batch.band, HeightBand) else batch.band
            self.features.append(
                {
                    'type': 'Feature',
                    'geometry': {
                        'type': 'LineString',
                        'coordinates': [list(pos) for pos in batch.geographic],
                    },
                    'properties': {
                        'band': band,
                        'rgba': list(batch.rgba),
                        'closed': batch.closed,
                    },
                }
            )

    def to_dict(self) -> dict[str, Any]:
        return {'type': 'FeatureCollection', 'features': self.features}

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict()), encoding='utf-8')
        logger.info('Wrote %d features to %s', len(self.features), path)
        return path
