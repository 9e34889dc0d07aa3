"""Conversion of vectorized contours to renderer-ready polylines."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from terrain_contours.contours.buckets import BandScheme, QuartileScheme, hsl_ramp_color
from terrain_contours.domain.models import RenderBatch
from terrain_contours.geo.cartesian import to_cartesian_many
from terrain_contours.shared.constants import RING_LAYER_OFFSET_M

if TYPE_CHECKING:
    from collections.abc import Sequence

    from terrain_contours.contours.builder import ContourResult
    from terrain_contours.domain.models import Contour, SegmentBatch

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    """Anything that can draw a list of render batches."""

    def draw(self, batches: Sequence[RenderBatch]) -> None: ...


class GeometryEmitter:
    """Turns segment batches and rings into RenderBatch polylines.

    Positions are converted to geocentric metres; the geographic triples
    are kept alongside for 2D outputs.
    """

    def __init__(
        self,
        scheme: BandScheme | None = None,
        *,
        layer_offset_m: float = RING_LAYER_OFFSET_M,
    ) -> None:
        self.scheme = scheme or QuartileScheme()
        self.layer_offset_m = layer_offset_m

    def emit_stripes(self, batches: Sequence[SegmentBatch]) -> list[RenderBatch]:
        """Open polylines, one per batch, coloured by the batch band."""
        out = [
            RenderBatch(
                band=batch.band,
                rgba=self.scheme.color_for(batch.band),
                positions=to_cartesian_many(batch.positions),
                geographic=batch.positions,
                closed=False,
            )
            for batch in batches
        ]
        logger.debug('Emitted %d stripe polylines', len(out))
        return out

    def emit_rings(self, contours: Sequence[Contour]) -> list[RenderBatch]:
        """
        Closed polylines, one per ring.

        Ring i is lifted by ``i * layer_offset_m`` so stacked levels stay
        visible; its colour comes from the HSL ramp at ``level / last_level``.
        """
        if not contours:
            return []
        last_level = contours[-1].level_height
        out: list[RenderBatch] = []
        for i, contour in enumerate(contours):
            lift = i * self.layer_offset_m
            geographic = tuple((p.lon, p.lat, p.height + lift) for p in contour.ring)
            t = contour.level_height / last_level if last_level > 0 else 0.0
            out.append(
                RenderBatch(
                    band=i,
                    rgba=hsl_ramp_color(t),
                    positions=to_cartesian_many(geographic),
                    geographic=geographic,
                    closed=True,
                )
            )
        logger.debug('Emitted %d ring polylines', len(out))
        return out

    def emit(self, result: ContourResult) -> list[RenderBatch]:
        """Emit whatever the builder produced."""
        return self.emit_rings(result.rings) + self.emit_stripes(result.batches)
