"""Command line entry point: vectorize a region and write GeoJSON."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TYPE_CHECKING

from pydantic import ValidationError

from terrain_contours.contours.buckets import QuartileScheme, ThresholdScheme
from terrain_contours.contours.builder import ContourStrategy
from terrain_contours.domain.errors import TerrainError
from terrain_contours.domain.models import BoundingBox
from terrain_contours.domain.profiles import load_profile
from terrain_contours.domain.settings import PipelineSettings
from terrain_contours.infrastructure.http.client import resolve_cache_dir
from terrain_contours.render.geojson import GeoJSONRenderer
from terrain_contours.session import TerrainSession

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='terrain-contours',
        description='Vectorize terrain-RGB elevation tiles into contour polylines.',
    )
    parser.add_argument(
        'bbox',
        nargs=4,
        type=float,
        metavar=('WEST', 'SOUTH', 'EAST', 'NORTH'),
        help='Region bounds in degrees',
    )
    parser.add_argument('--output', '-o', required=True, help='GeoJSON file to write')
    parser.add_argument(
        '--strategy',
        choices=[s.value for s in ContourStrategy],
        default=ContourStrategy.STRIPES.value,
        help='Vectorization strategy (default: stripes)',
    )
    parser.add_argument('--profile', default=None, help='TOML settings profile')
    parser.add_argument('--url', default=None, help='Tile URL template with {z}/{x}/{y}')
    parser.add_argument(
        '--tilejson',
        default=None,
        help='TileJSON root resolving the tile URL template',
    )
    parser.add_argument('--zoom', type=int, default=None, help='Tile zoom level')
    parser.add_argument(
        '--interval',
        type=float,
        default=None,
        help='Contour interval in metres (rings strategy)',
    )
    parser.add_argument(
        '--bands',
        choices=('quartile', 'threshold'),
        default='quartile',
        help='Stripe colour scheme (default: quartile)',
    )
    parser.add_argument(
        '--http-cache',
        action=argparse.BooleanOptionalAction,
        default=True,
        help='Persist HTTP responses on disk (default: enabled)',
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    return parser


def settings_from_args(args: argparse.Namespace) -> PipelineSettings:
    settings = load_profile(args.profile) if args.profile else PipelineSettings()
    update: dict[str, object] = {}
    if args.url:
        update['tile_url_template'] = args.url
    if args.zoom is not None:
        update['zoom'] = args.zoom
    if update:
        settings = PipelineSettings.model_validate({**settings.model_dump(), **update})
    return settings


async def run(args: argparse.Namespace) -> int:
    settings = settings_from_args(args)
    if args.bands == 'threshold':
        scheme = ThresholdScheme(tuple(settings.height_thresholds))
    else:
        scheme = QuartileScheme(settings.bucket_count)
    cache_dir = resolve_cache_dir() if args.http_cache else None
    renderer = GeoJSONRenderer()

    session = TerrainSession(
        settings,
        http_cache_dir=cache_dir,
        scheme=scheme,
        service_root=args.tilejson,
    )
    async with session:
        batches = await session.render(
            args.bbox, renderer, ContourStrategy(args.strategy), interval=args.interval
        )
    renderer.save(args.output)
    if not batches:
        logger.warning('No contours found in %s', args.bbox)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.bbox = BoundingBox.from_bounds(args.bbox)
    except TerrainError as e:
        parser.error(str(e))
    setup_logging(args.verbose)
    try:
        return asyncio.run(run(args))
    except TerrainError as e:
        logger.error('%s: %s', e.code, e)  # noqa: TRY400
        return 1
    except (ValidationError, FileNotFoundError) as e:
        logger.error('Invalid settings: %s', e)  # noqa: TRY400
        return 2


if __name__ == '__main__':
    raise SystemExit(main())
