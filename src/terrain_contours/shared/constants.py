"""Constants and defaults shared across the terrain pipeline."""

# Base Web Mercator tile size (px)
TILE_SIZE = 256

# Default zoom for terrain-RGB sampling
DEFAULT_ZOOM = 14

# Mercator is singular at the poles; sampling is only valid strictly inside this
MERCATOR_LAT_LIMIT_DEG = 85.05
WORLD_LNG_SPAN_DEG = 360.0
WORLD_LNG_HALF_SPAN_DEG = 180.0

# WGS84 semi-major axis (m)
EARTH_RADIUS_M = 6378137.0

# Rough conversion used for the strip step (1 degree ~ 111 km)
DEG_PER_METER = 1 / 111000

# Terrain-RGB encoding: elevation = (R*65536 + G*256 + B) * SCALE + OFFSET
TERRAIN_RGB_SCALE = 0.1
TERRAIN_RGB_OFFSET = -10000.0
TERRAIN_RGB_NO_DATA_PIXEL = (0, 0, 0)

# Plausible elevation window (m); samples outside are discarded
MIN_VALID_HEIGHT_M = -100.0
MAX_VALID_HEIGHT_M = 3000.0

# Strip banding
STRIP_SPACING_M = 5.0
SMOOTHING_WINDOW = 4
MIN_HEIGHT_DIFF_M = 2.0
MIN_VALID_RATIO = 0.7
MIN_POINTS_PER_STRIP = 3

# Ring contours
CONTOUR_INTERVAL_M = 10.0
RING_SCAN_STRIDE = 2
MIN_POINTS_PER_RING = 7
RING_LAYER_OFFSET_M = 8.0

# Colour bands
BUCKET_COUNT = 4
HEIGHT_THRESHOLDS_M = (0.1, 20.0, 40.0, 60.0)
BUCKET_ALPHA = 0.9

# RGBA (0..1) per quartile bucket: blue, cyan, yellow, red
QUARTILE_COLORS: tuple[tuple[float, float, float, float], ...] = (
    (0.0, 0.0, 1.0, BUCKET_ALPHA),
    (0.0, 1.0, 1.0, BUCKET_ALPHA),
    (1.0, 1.0, 0.0, BUCKET_ALPHA),
    (1.0, 0.0, 0.0, BUCKET_ALPHA),
)

# Ring hue ramp: hue = RING_HUE_START - RING_HUE_SPAN * t
RING_HUE_START = 0.65
RING_HUE_SPAN = 0.6
RING_ALPHA = 0.95

# Minimum vertices for a drawable polyline
MIN_POINTS_FOR_LINE = 2

# In-memory raster cache capacity (tiles); None disables eviction
CACHE_MAX_TILES = 512

# Parallel tile fetches
DOWNLOAD_CONCURRENCY = 8

# HTTP
HTTP_TIMEOUT_DEFAULT = 30.0
HTTP_RETRIES_DEFAULT = 5
HTTP_BACKOFF_FACTOR = 1.6
HTTP_5XX_MIN = 500
HTTP_5XX_MAX = 600

# Log memory usage every N decoded tiles
LOG_MEMORY_EVERY_TILES = 50

# Coordinate reference systems for globe positions
GEODETIC_3D_CODE = 4979
GEOCENTRIC_CODE = 4978

# Tile URL placeholders
URL_PLACEHOLDERS = ('{z}', '{x}', '{y}')
