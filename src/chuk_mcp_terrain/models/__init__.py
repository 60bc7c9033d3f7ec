"""Response models for chuk-mcp-terrain."""

from .responses import (
    CapabilitiesResponse,
    ClearResponse,
    ErrorResponse,
    ExportResponse,
    FlowPathResponse,
    GridCellResponse,
    LoadResponse,
    StatusResponse,
    TileActionResponse,
    TileDetailResponse,
    TileInfo,
    TilesResponse,
    WorldPointResponse,
    format_response,
)

__all__ = [
    "ErrorResponse",
    "TileInfo",
    "LoadResponse",
    "TilesResponse",
    "TileDetailResponse",
    "TileActionResponse",
    "ClearResponse",
    "ExportResponse",
    "GridCellResponse",
    "WorldPointResponse",
    "FlowPathResponse",
    "StatusResponse",
    "CapabilitiesResponse",
    "format_response",
]
