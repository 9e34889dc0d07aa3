"""Tests for GeometryEmitter and GeoJSONRenderer."""

import json

import pytest

from terrain_contours.contours.buckets import QuartileScheme, hsl_ramp_color
from terrain_contours.domain.models import Contour, GeoPoint, SegmentBatch
from terrain_contours.geo.cartesian import to_cartesian
from terrain_contours.render.emitter import GeometryEmitter
from terrain_contours.render.geojson import GeoJSONRenderer
from terrain_contours.shared.constants import QUARTILE_COLORS


def _ring(level, n=7):
    pts = [GeoPoint(10.0 + i * 0.001, 45.0, level) for i in range(n)]
    return Contour(level_height=level, ring=(*pts, pts[0]))


class TestGeometryEmitter:
    """Tests for GeometryEmitter."""

    def test_stripes(self):
        """Stripe batches become open, coloured ECEF polylines."""
        batch = SegmentBatch(band=1, positions=((0.0, 0.0, 0.0), (0.0, 0.001, 10.0)))
        out = GeometryEmitter(QuartileScheme()).emit_stripes([batch])
        assert len(out) == 1
        rb = out[0]
        assert rb.closed is False
        assert rb.rgba == QUARTILE_COLORS[1]
        assert rb.geographic == batch.positions
        assert rb.positions[0] == pytest.approx((6378137.0, 0.0, 0.0), abs=1e-3)

    def test_rings_lifted_and_coloured(self):
        """Ring i is lifted by i * offset and coloured by level / last level."""
        contours = [_ring(0.0), _ring(10.0), _ring(20.0)]
        out = GeometryEmitter(layer_offset_m=8.0).emit_rings(contours)
        assert [rb.closed for rb in out] == [True, True, True]
        assert [rb.geographic[0][2] for rb in out] == [0.0, 18.0, 36.0]
        assert out[0].rgba == hsl_ramp_color(0.0)
        assert out[1].rgba == hsl_ramp_color(0.5)
        assert out[2].rgba == hsl_ramp_color(1.0)
        assert out[1].positions[0] == pytest.approx(to_cartesian(10.0, 45.0, 18.0))

    def test_rings_closed_loop_preserved(self):
        """First and last positions stay equal."""
        out = GeometryEmitter().emit_rings([_ring(30.0)])
        assert out[0].positions[0] == out[0].positions[-1]

    def test_single_zero_level(self):
        """A lone 0 m ring does not divide by zero."""
        out = GeometryEmitter().emit_rings([_ring(0.0)])
        assert out[0].rgba == hsl_ramp_color(0.0)

    def test_empty(self):
        """Nothing in, nothing out."""
        assert GeometryEmitter().emit_rings([]) == []
        assert GeometryEmitter().emit_stripes([]) == []


class TestGeoJSONRenderer:
    """Tests for GeoJSONRenderer."""

    def test_features(self, tmp_path):
        """Batches are written as LineString features."""
        batch = SegmentBatch(band=2, positions=((1.0, 2.0, 3.0), (1.0, 2.1, 4.0)))
        renderer = GeoJSONRenderer()
        renderer.draw(GeometryEmitter().emit_stripes([batch]))
        path = renderer.save(tmp_path / 'out' / 'contours.geojson')

        doc = json.loads(path.read_text(encoding='utf-8'))
        assert doc['type'] == 'FeatureCollection'
        feature = doc['features'][0]
        assert feature['geometry'] == {
            'type': 'LineString',
            'coordinates': [[1.0, 2.0, 3.0], [1.0, 2.1, 4.0]],
        }
        assert feature['properties']['band'] == 2
        assert feature['properties']['closed'] is False
