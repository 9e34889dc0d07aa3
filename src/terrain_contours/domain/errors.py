"""Exception hierarchy for the terrain pipeline."""

from __future__ import annotations


class TerrainError(Exception):
    """Base exception for the terrain pipeline."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class DomainError(TerrainError, ValueError):
    """Raised when input lies outside the valid domain (latitude, bbox)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code='DOMAIN_ERROR')


class FetchError(TerrainError):
    """Raised when a tile cannot be downloaded."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message, code='FETCH_ERROR')
        self.status = status


class DecodeError(TerrainError):
    """Raised when downloaded tile bytes are not a readable image."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code='DECODE_ERROR')
