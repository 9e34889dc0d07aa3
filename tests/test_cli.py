"""Tests for the command line entry point."""

import json
from unittest.mock import patch

import numpy as np
import pytest
from conftest import FakeLoader

from terrain_contours import cli
from terrain_contours.session import TerrainSession


class TestParser:
    """Tests for argument parsing."""

    def test_bbox(self):
        """bbox is four floats, west south east north."""
        args = cli.build_parser().parse_args(['-5', '45', '-4.5', '46', '-o', 'out.geojson'])
        assert args.bbox == [-5.0, 45.0, -4.5, 46.0]
        assert args.strategy == 'stripes'

    @pytest.mark.parametrize(
        'bbox', [['1', '2', '3'], ['a', 'b', 'c', 'd'], ['6', '45', '5', '46']]
    )
    def test_bad_bbox(self, bbox, tmp_path):
        """Malformed boxes are usage errors."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main([*bbox, '-o', str(tmp_path / 'o.geojson')])
        assert exc_info.value.code == 2

    def test_settings_overrides(self, tmp_path):
        """--url and --zoom override the profile."""
        profile = tmp_path / 'p.toml'
        profile.write_text('[pipeline]\nzoom = 10\nmin_relief_m = 4.0\n', encoding='utf-8')
        args = cli.build_parser().parse_args(
            ['0', '0', '1', '1', '-o', 'x', '--profile', str(profile)]
            + ['--zoom', '13', '--url', 'https://h']
        )
        settings = cli.settings_from_args(args)
        assert settings.zoom == 13
        assert settings.min_relief_m == 4.0
        assert settings.tile_url_template == 'https://h'


class TestMain:
    """Tests for main."""

    def test_missing_url_exits_with_error(self, tmp_path):
        """Without a tile source the run fails cleanly."""
        args = ['0', '0', '1', '1', '-o', str(tmp_path / 'o.geojson'), '--no-http-cache']
        code = cli.main(args)
        assert code == 1

    def test_invalid_profile(self, tmp_path):
        """A missing profile is reported, not raised."""
        code = cli.main(
            ['0', '0', '1', '1', '-o', str(tmp_path / 'o.geojson'), '--profile', str(tmp_path / 'x')]
        )
        assert code == 2

    def test_writes_geojson(self, tmp_path):
        """A full run writes a FeatureCollection."""
        loader = FakeLoader(heights_fn=lambda key, rows, cols: np.full(rows.shape, 50.0))
        out = tmp_path / 'rings.geojson'

        def _session(settings, **kwargs):
            kwargs.pop('http_cache_dir', None)
            kwargs.pop('service_root', None)
            return TerrainSession(settings, loader=loader, **kwargs)

        with patch('terrain_contours.cli.TerrainSession', side_effect=_session):
            code = cli.main(
                ['10', '45', '10.01', '45.01', '-o', str(out), '--strategy', 'rings', '--no-http-cache']
            )
        assert code == 0
        doc = json.loads(out.read_text(encoding='utf-8'))
        assert len(doc['features']) == 1
