from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from terrain_contours.contours.buckets import BandScheme, QuartileScheme
from terrain_contours.contours.rings import build_rings
from terrain_contours.contours.stripes import StripeStats, build_stripes

if TYPE_CHECKING:
    from terrain_contours.domain.models import (
        BoundingBox,
        Contour,
        ElevationGrid,
        GeoPoint,
        SegmentBatch,
        TileKey,
    )
    from terrain_contours.elevation.sampler import ElevationSampler

logger = logging.getLogger(__name__)


class ContourStrategy(str, Enum):
    """Vectorization strategy of a terrain region."""

    RINGS = 'rings'
    STRIPES = 'stripes'


@dataclass
class ContourResult:
    """Output of one ContourBuilder run; only the strategy's field is filled."""

    strategy: ContourStrategy
    rings: list[Contour] = field(default_factory=list)
    batches: list[SegmentBatch] = field(default_factory=list)
    stripe_stats: StripeStats | None = None
    failed_tiles: list[TileKey] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.rings and not self.batches


class ContourBuilder:
    """Samples a region and vectorizes it with the selected strategy.

    RINGS assembles a dense grid and extracts iso-height rings;
    STRIPES step-samples the region and bands latitude strips.
    """

    def __init__(self, sampler: ElevationSampler, scheme: BandScheme | None = None) -> None:
        self.sampler = sampler
        self.settings = sampler.settings
        self.scheme = scheme or QuartileScheme(self.settings.bucket_count)

    def rings_from_grid(self, grid: ElevationGrid, interval: float | None = None) -> list[Contour]:
        return build_rings(
            grid,
            interval if interval is not None else self.settings.contour_interval_m,
            stride=self.settings.ring_stride,
            min_points=self.settings.min_ring_points,
        )

    def stripes_from_points(
        self, points: list[GeoPoint], stats: StripeStats | None = None
    ) -> list[SegmentBatch]:
        return build_stripes(points, self.settings, scheme=self.scheme, stats=stats)

    async def build(
        self,
        bbox: BoundingBox,
        strategy: ContourStrategy = ContourStrategy.STRIPES,
        *,
        interval: float | None = None,
    ) -> ContourResult:
        """Sample bbox and run the chosen strategy over the samples."""
        strategy = ContourStrategy(strategy)
        if strategy is ContourStrategy.RINGS:
            sampled = await self.sampler.assemble_grid(bbox)
            rings = self.rings_from_grid(sampled.grid, interval)
            result = ContourResult(
                strategy=strategy, rings=rings, failed_tiles=sampled.failed_tiles
            )
        else:
            sampled_points = await self.sampler.sample_steps(bbox)
            stats = StripeStats()
            batches = self.stripes_from_points(sampled_points.points, stats)
            result = ContourResult(
                strategy=strategy,
                batches=batches,
                stripe_stats=stats,
                failed_tiles=sampled_points.failed_tiles,
            )
        if result.is_empty:
            logger.warning('No %s produced for %s', strategy.value, bbox)
        return result
