"""
Constants for chuk-mcp-terrain server.

All magic strings, grid-format defaults, and configuration values live here.
"""

from enum import Enum


class ServerConfig:
    NAME = "chuk-mcp-terrain"
    VERSION = "0.1.0"
    DESCRIPTION = "ASCII Grid DEM Tiling, Terrain Meshing & Raindrop Flow MCP Server"


class StorageProvider:
    MEMORY = "memory"
    S3 = "s3"
    FILESYSTEM = "filesystem"


class SessionProvider:
    MEMORY = "memory"
    REDIS = "redis"


class EnvVar:
    ARTIFACTS_PROVIDER = "CHUK_ARTIFACTS_PROVIDER"
    BUCKET_NAME = "BUCKET_NAME"
    REDIS_URL = "REDIS_URL"
    ARTIFACTS_PATH = "CHUK_ARTIFACTS_PATH"
    AWS_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
    AWS_SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"
    AWS_ENDPOINT_URL_S3 = "AWS_ENDPOINT_URL_S3"
    MCP_STDIO = "MCP_STDIO"
    MAX_POINTS_PER_TILE = "TERRAIN_MAX_POINTS_PER_TILE"
    MAX_PATH_STEPS = "TERRAIN_MAX_PATH_STEPS"


# ASCII Grid header
HEADER_KEYS = ["ncols", "nrows", "xllcorner", "yllcorner", "cellsize", "nodata_value"]
REQUIRED_HEADER_KEYS = ["ncols", "nrows", "cellsize"]
HEADER_SCAN_LIMIT = 10  # lines scanned before a sparse header is rejected

DEFAULT_NODATA_VALUE = -99.0
DEFAULT_XLLCORNER = 0.0
DEFAULT_YLLCORNER = 0.0

# Tiling
MAX_POINTS_PER_TILE = 10_000_000

# Flow simulation
MAX_PATH_STEPS = 2000


class NodataPolicy(str, Enum):
    """How the mesh builder treats NODATA cells."""

    FLATTEN = "flatten"  # vertex drops to the tile minimum
    SKIP = "skip"  # triangles touching a NODATA vertex are omitted


DEFAULT_NODATA_POLICY = NodataPolicy.FLATTEN
NODATA_POLICIES = [p.value for p in NodataPolicy]


class FlowTermination(str, Enum):
    """Why a raindrop path stopped."""

    NO_START = "no_start"
    POOLED = "pooled"
    TRUNCATED = "truncated"
    CONVERSION_ERROR = "conversion_error"


class TerrainEvent(str, Enum):
    TILE_ADDED = "tile-added"
    TILE_REMOVED = "tile-removed"
    TILE_VISIBILITY_CHANGED = "tile-visibility-changed"
    TILE_EXPORT_REQUESTED = "tile-export-requested"
    SESSION_CLEARED = "session-cleared"


# Previews & export
PREVIEW_STYLES = ["terrain", "hillshade"]
DEFAULT_PREVIEW_STYLE = "terrain"
DEFAULT_AZIMUTH = 315.0
DEFAULT_ALTITUDE = 45.0

TERRAIN_TOOLS = [
    "terrain_load_dem",
    "terrain_list_tiles",
    "terrain_describe_tile",
    "terrain_set_visibility",
    "terrain_remove_tile",
    "terrain_clear",
    "terrain_export_tile",
]
FLOW_TOOLS = [
    "terrain_world_to_grid",
    "terrain_grid_to_world",
    "terrain_raindrop_path",
]

# Retry for artifact store I/O
RETRY_ATTEMPTS = 3
RETRY_WAIT_MIN = 1
RETRY_WAIT_MAX = 10


class ErrorMessages:
    MALFORMED_HEADER = "Malformed ASCII Grid header in '{}': {}"
    PARSE_FAILED = "Failed to parse '{}' as an ASCII Grid DEM"
    NO_TILES = "No processable tiles generated for '{}'"
    NO_INPUT = "Provide exactly one of content, path, or artifact_ref"
    FILE_NOT_FOUND = "DEM file not found: {}"
    UNKNOWN_TILE = "Unknown tile '{}'. Loaded: {}"
    MISSING_ORIGIN = "Global origin is not set; load a DEM before mapping coordinates"
    OUT_OF_BOUNDS = "Point ({:.3f}, {:.3f}) is outside tile '{}'"
    INVALID_CELL = "Cell ({}, {}) is outside tile '{}' or has no data"
    INVALID_NODATA_POLICY = "Invalid nodata policy '{}'. Available: {}"
    INVALID_PREVIEW_STYLE = "Invalid preview style '{}'. Available: {}"
    INVALID_MAX_STEPS = "max_steps must be >= 1, got {}"
    NO_ARTIFACT_STORE = (
        "No artifact store available. Configure CHUK_ARTIFACTS_PROVIDER "
        "environment variable (memory, filesystem, or s3)."
    )
    INVALID_ARTIFACT_REF = "Artifact '{}' not found or could not be retrieved"


class SuccessMessages:
    LOAD_COMPLETE = "Loaded '{}' as {} tile(s)"
    TILES_LIST = "{} tile(s) loaded, {} visible"
    TILE_DESCRIBE = "Tile {} ({}x{}, {:.1f}m to {:.1f}m)"
    VISIBILITY = "Tile {} is now {}"
    TILE_REMOVED = "Removed tile {}"
    CLEARED = "Cleared {} tile(s); origin reset"
    EXPORT_COMPLETE = "Exported tile {} ({} + preview)"
    WORLD_TO_GRID = "Point maps to cell ({}, {}) of tile {}"
    GRID_TO_WORLD = "Cell ({}, {}) centre at ({:.3f}, {:.3f}, {:.3f})"
    PATH_COMPLETE = "Raindrop path: {} point(s), {} step(s), {}"
    STATUS = "Terrain MCP Server v{} ({} tile(s), storage: {})"
