"""Tests for TOML settings profiles."""

import pytest
from pydantic import ValidationError

from terrain_contours.domain.profiles import load_profile, save_profile
from terrain_contours.domain.settings import PipelineSettings


class TestProfiles:
    """Tests for load_profile and save_profile."""

    def test_round_trip(self, tmp_path):
        """Saved settings load back equal."""
        settings = PipelineSettings(
            zoom=12,
            tile_url_template='https://h/{z}/{x}/{y}.png',
            height_thresholds=[1.0, 10.0, 100.0, 1000.0],
        )
        path = save_profile(tmp_path / 'profiles' / 'alps.toml', settings)
        assert load_profile(path) == settings

    def test_unbounded_cache_saved_as_zero(self, tmp_path):
        """None cannot be written to TOML; 0 stands for unbounded."""
        path = save_profile(tmp_path / 'p.toml', PipelineSettings(cache_max_tiles=None))
        assert 'cache_max_tiles = 0' in path.read_text(encoding='utf-8')
        assert load_profile(path).cache_max_tiles is None

    def test_top_level_keys(self, tmp_path):
        """Keys outside a [pipeline] table are accepted too."""
        path = tmp_path / 'flat.toml'
        path.write_text('zoom = 10\nmin_relief_m = 3.5\n', encoding='utf-8')
        settings = load_profile(path)
        assert settings.zoom == 10
        assert settings.min_relief_m == 3.5

    def test_missing_file(self, tmp_path):
        """A missing profile raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_profile(tmp_path / 'nope.toml')

    def test_invalid_values(self, tmp_path):
        """Profiles go through settings validation."""
        path = tmp_path / 'bad.toml'
        path.write_text('[pipeline]\nzoom = 40\n', encoding='utf-8')
        with pytest.raises(ValidationError):
            load_profile(path)
