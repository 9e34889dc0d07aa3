"""Tests for colour band mapping."""

import pytest

from terrain_contours.contours.buckets import (
    NAMED_BAND_COLORS,
    QuartileScheme,
    ThresholdScheme,
    hsl_ramp_color,
    quartile_bucket,
    threshold_band,
)
from terrain_contours.domain.models import HeightBand
from terrain_contours.shared.constants import QUARTILE_COLORS


class TestQuartileBucket:
    """Tests for quartile_bucket."""

    @pytest.mark.parametrize(
        ('height', 'expected'),
        [(0.0, 0), (24.0, 0), (25.0, 1), (49.9, 1), (50.0, 2), (75.0, 3), (100.0, 3)],
    )
    def test_boundaries(self, height, expected):
        """Boundary values land in the upper bucket."""
        assert quartile_bucket(height, 0.0, 100.0) == expected

    def test_clamped_outside_range(self):
        """Values outside the range clamp to the end buckets."""
        assert quartile_bucket(-10.0, 0.0, 100.0) == 0
        assert quartile_bucket(500.0, 0.0, 100.0) == 3

    def test_degenerate_range(self):
        """Equal min and max map to bucket 0."""
        assert quartile_bucket(5.0, 5.0, 5.0) == 0

    def test_deterministic(self):
        """Same input, same output."""
        assert {quartile_bucket(37.5, 10.0, 90.0) for _ in range(5)} == {1}


class TestThresholdBand:
    """Tests for threshold_band."""

    @pytest.mark.parametrize(
        ('height', 'expected'),
        [
            (0.05, HeightBand.WATER),
            (0.1, HeightBand.LOW),
            (19.9, HeightBand.LOW),
            (20.0, HeightBand.MID),
            (59.9, HeightBand.HIGH),
            (60.0, HeightBand.PEAK),
            (900.0, HeightBand.PEAK),
        ],
    )
    def test_default_cut_points(self, height, expected):
        """Strict comparisons in declared order."""
        assert threshold_band(height) is expected

    def test_wrong_threshold_count(self):
        """Exactly four cut points are required."""
        with pytest.raises(ValueError):
            threshold_band(1.0, (1.0, 2.0))


class TestSchemes:
    """Tests for QuartileScheme and ThresholdScheme."""

    def test_quartile_colours(self):
        """Four quartiles use the fixed palette."""
        scheme = QuartileScheme()
        band = scheme.band_for(99.0, 0.0, 100.0)
        assert band == 3
        assert scheme.color_for(band) == QUARTILE_COLORS[3]

    def test_quartile_other_count_uses_ramp(self):
        """Other bucket counts spread along the HSL ramp."""
        scheme = QuartileScheme(count=3)
        assert scheme.color_for(0) == hsl_ramp_color(0.0, alpha=0.9)

    def test_threshold_ignores_local_range(self):
        """Absolute bands do not depend on the strip's min/max."""
        scheme = ThresholdScheme()
        assert scheme.band_for(30.0, 0.0, 1.0) is HeightBand.MID
        assert scheme.color_for(HeightBand.MID) == NAMED_BAND_COLORS[HeightBand.MID]

    def test_scheme_band_type_mismatch(self):
        """A scheme rejects bands of the other scheme."""
        with pytest.raises(TypeError):
            QuartileScheme().color_for(HeightBand.LOW)
        with pytest.raises(TypeError):
            ThresholdScheme().color_for(2)


class TestHslRamp:
    """Tests for hsl_ramp_color."""

    def test_ends(self):
        """t=0 is blue-ish, t=1 is red-ish."""
        r0, g0, b0, a0 = hsl_ramp_color(0.0)
        r1, g1, b1, _ = hsl_ramp_color(1.0)
        assert b0 > r0
        assert r1 == pytest.approx(1.0)
        assert b1 == pytest.approx(0.0)
        assert a0 == 0.95
