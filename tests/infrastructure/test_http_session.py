"""Tests for the HTTP session factory."""

from pathlib import Path
from unittest.mock import patch

import aiohttp
import pytest
from aiohttp_client_cache import CachedSession

from terrain_contours.infrastructure.http.client import make_http_session, resolve_cache_dir


class TestResolveCacheDir:
    """Tests for resolve_cache_dir function."""

    def test_env_override(self, tmp_path):
        """The dedicated variable wins."""
        with patch.dict('os.environ', {'TERRAIN_CONTOURS_CACHE_DIR': str(tmp_path)}):
            assert resolve_cache_dir() == tmp_path.resolve()

    def test_xdg(self, tmp_path):
        """XDG_CACHE_HOME is used when set."""
        env = {'TERRAIN_CONTOURS_CACHE_DIR': '', 'XDG_CACHE_HOME': str(tmp_path)}
        with patch.dict('os.environ', env):
            result = resolve_cache_dir()
        assert result == (tmp_path / 'terrain_contours' / 'http').resolve()

    def test_returns_path(self):
        """Should return a Path object."""
        assert isinstance(resolve_cache_dir(), Path)


class TestMakeHttpSession:
    """Tests for make_http_session function."""

    @pytest.mark.asyncio
    async def test_plain_session(self):
        """No cache dir gives a plain aiohttp session."""
        session = make_http_session()
        try:
            assert isinstance(session, aiohttp.ClientSession)
            assert not isinstance(session, CachedSession)
        finally:
            await session.close()

    @pytest.mark.asyncio
    async def test_cached_session(self, tmp_path):
        """A cache dir gives a SQLite-backed cached session."""
        session = make_http_session(tmp_path / 'http', expire_hours=1)
        try:
            assert isinstance(session, CachedSession)
            assert (tmp_path / 'http').is_dir()
        finally:
            await session.close()
