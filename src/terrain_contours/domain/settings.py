from pydantic import BaseModel, field_validator, model_validator

from terrain_contours.shared.constants import (
    BUCKET_COUNT,
    CACHE_MAX_TILES,
    CONTOUR_INTERVAL_M,
    DEG_PER_METER,
    DEFAULT_ZOOM,
    DOWNLOAD_CONCURRENCY,
    HEIGHT_THRESHOLDS_M,
    HTTP_RETRIES_DEFAULT,
    HTTP_TIMEOUT_DEFAULT,
    MAX_VALID_HEIGHT_M,
    MIN_HEIGHT_DIFF_M,
    MIN_POINTS_PER_RING,
    MIN_VALID_HEIGHT_M,
    MIN_VALID_RATIO,
    RING_LAYER_OFFSET_M,
    RING_SCAN_STRIDE,
    SMOOTHING_WINDOW,
    STRIP_SPACING_M,
    TILE_SIZE,
)

MAX_ZOOM = 22


class PipelineSettings(BaseModel):
    """Tuning knobs of one terrain visualization session."""

    model_config = {
        'extra': 'ignore',  # unknown keys from older profiles
    }

    # Terrain-RGB source, e.g. https://host/tiles/{z}/{x}/{y}.png
    tile_url_template: str = ''
    zoom: int = DEFAULT_ZOOM
    tile_size: int = TILE_SIZE

    # Plausible elevation window (m), exclusive on both ends
    min_valid: float = MIN_VALID_HEIGHT_M
    max_valid: float = MAX_VALID_HEIGHT_M

    # Stripe strategy
    strip_spacing_m: float = STRIP_SPACING_M
    smoothing_window: int = SMOOTHING_WINDOW
    min_relief_m: float = MIN_HEIGHT_DIFF_M
    min_valid_ratio: float = MIN_VALID_RATIO

    # Ring strategy
    contour_interval_m: float = CONTOUR_INTERVAL_M
    ring_stride: int = RING_SCAN_STRIDE
    min_ring_points: int = MIN_POINTS_PER_RING
    layer_offset_m: float = RING_LAYER_OFFSET_M

    # Colour bands
    bucket_count: int = BUCKET_COUNT
    height_thresholds: list[float] = list(HEIGHT_THRESHOLDS_M)

    # Fetching and caching; None keeps every tile for the session
    cache_max_tiles: int | None = CACHE_MAX_TILES
    concurrency: int = DOWNLOAD_CONCURRENCY
    fetch_timeout_s: float = HTTP_TIMEOUT_DEFAULT
    fetch_retries: int = HTTP_RETRIES_DEFAULT

    @field_validator('zoom')
    @classmethod
    def validate_zoom(cls, v: int) -> int:
        v = int(v)
        if not (0 <= v <= MAX_ZOOM):
            msg = f'zoom must be within [0, {MAX_ZOOM}]'
            raise ValueError(msg)
        return v

    @field_validator('min_valid_ratio')
    @classmethod
    def validate_ratio(cls, v: float) -> float:
        v = float(v)
        if not (0.0 <= v <= 1.0):
            msg = 'min_valid_ratio must be within [0.0, 1.0]'
            raise ValueError(msg)
        return v

    @field_validator(
        'tile_size',
        'strip_spacing_m',
        'contour_interval_m',
        'ring_stride',
        'bucket_count',
        'concurrency',
        'fetch_timeout_s',
        'fetch_retries',
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            msg = 'value must be positive'
            raise ValueError(msg)
        return v

    @field_validator('smoothing_window', 'min_relief_m', 'layer_offset_m')
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            msg = 'value must not be negative'
            raise ValueError(msg)
        return v

    @field_validator('min_ring_points')
    @classmethod
    def validate_min_ring_points(cls, v: int) -> int:
        if v < 3:  # noqa: PLR2004
            msg = 'a ring needs at least 3 points'
            raise ValueError(msg)
        return v

    @field_validator('cache_max_tiles')
    @classmethod
    def validate_cache_size(cls, v: int | None) -> int | None:
        # 0 in a profile means unbounded
        if v is None or v == 0:
            return None
        if v < 0:
            msg = 'cache_max_tiles must not be negative'
            raise ValueError(msg)
        return v

    @field_validator('height_thresholds')
    @classmethod
    def validate_thresholds(cls, v: list[float]) -> list[float]:
        vals = [float(x) for x in v]
        if len(vals) != len(HEIGHT_THRESHOLDS_M):
            msg = f'height_thresholds must hold {len(HEIGHT_THRESHOLDS_M)} cut points'
            raise ValueError(msg)
        if any(b <= a for a, b in zip(vals, vals[1:], strict=False)):
            msg = 'height_thresholds must be strictly ascending'
            raise ValueError(msg)
        return vals

    @model_validator(mode='after')
    def validate_height_window(self) -> 'PipelineSettings':
        if self.min_valid >= self.max_valid:
            msg = 'min_valid must be below max_valid'
            raise ValueError(msg)
        return self

    @property
    def strip_step_deg(self) -> float:
        """Strip spacing converted to degrees."""
        return self.strip_spacing_m * DEG_PER_METER
