from __future__ import annotations

import contextlib
import os
import sqlite3
import ssl
from datetime import timedelta
from pathlib import Path

import aiohttp
import certifi
from aiohttp_client_cache import CachedSession, SQLiteBackend

HTTP_CACHE_FILE = 'http_cache.sqlite'
HTTP_CACHE_EXPIRE_HOURS = 168
CACHE_DIR_ENV = 'TERRAIN_CONTOURS_CACHE_DIR'


def resolve_cache_dir() -> Path:
    """Directory of the on-disk HTTP response cache."""
    raw = os.getenv(CACHE_DIR_ENV)
    if raw:
        return Path(raw).expanduser().resolve()
    xdg = os.getenv('XDG_CACHE_HOME')
    base = Path(xdg) if xdg else Path.home() / '.cache'
    return (base / 'terrain_contours' / 'http').resolve()


def make_http_session(
    cache_dir: Path | None = None,
    *,
    expire_hours: int = HTTP_CACHE_EXPIRE_HOURS,
) -> aiohttp.ClientSession:
    """
    Create an aiohttp session verifying TLS with certifi.

    With cache_dir set, responses are persisted in SQLite through
    aiohttp-client-cache so repeated runs skip the network.
    """
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(ssl=ssl_context)

    if cache_dir is None:
        return aiohttp.ClientSession(connector=connector)

    cache_dir.mkdir(parents=True, exist_ok=True)
    cache_path = cache_dir / HTTP_CACHE_FILE
    with contextlib.suppress(sqlite3.Error):
        if not cache_path.exists():
            with sqlite3.connect(cache_path) as conn:
                conn.execute('PRAGMA journal_mode=WAL;')
    expire_td = timedelta(hours=max(0, int(expire_hours)))
    backend = SQLiteBackend(str(cache_path), expire_after=expire_td)
    return CachedSession(
        cache=backend,
        connector=connector,
        expire_after=expire_td,
    )
