"""
Response models for chuk-mcp-terrain tools.

All tool responses are Pydantic models for type safety and consistent API.
"""

from pydantic import BaseModel, ConfigDict, Field


def format_response(model: BaseModel, output_mode: str = "json") -> str:
    """Format a response model as JSON or human-readable text.

    Args:
        model: Pydantic response model instance
        output_mode: "json" (default) or "text"

    Returns:
        Formatted string
    """
    if output_mode == "text" and hasattr(model, "to_text"):
        return str(model.to_text())
    return str(model.model_dump_json())


class ErrorResponse(BaseModel):
    """Error response model for tool failures."""

    model_config = ConfigDict(extra="forbid")

    error: str = Field(..., description="Error message describing what went wrong")

    def to_text(self) -> str:
        return f"Error: {self.error}"


# ---------------------------------------------------------------------------
# Tile responses
# ---------------------------------------------------------------------------


class TileInfo(BaseModel):
    """Summary information about one loaded tile."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., description="Session tile identifier (e.g., dem-1)")
    name: str = Field(..., description="Tile name (source name, with _partR_C when split)")
    ncols: int = Field(..., description="Grid columns", ge=1)
    nrows: int = Field(..., description="Grid rows", ge=1)
    xllcorner: float = Field(..., description="Absolute x of the tile's lower-left corner")
    yllcorner: float = Field(..., description="Absolute y of the tile's lower-left corner")
    cellsize: float = Field(..., description="Cell size in map units", gt=0)
    elevation_range: list[float] = Field(..., description="[min, max] valid elevation")
    is_visible: bool = Field(..., description="Whether the tile's mesh is shown")
    vertex_count: int = Field(..., description="Mesh vertex count", ge=0)
    triangle_count: int = Field(..., description="Mesh triangle count", ge=0)

    def to_text(self) -> str:
        elev_min, elev_max = self.elevation_range
        shown = "visible" if self.is_visible else "hidden"
        return (
            f"{self.id}: {self.name} ({self.ncols}x{self.nrows}, "
            f"{elev_min:.1f}m to {elev_max:.1f}m, {shown})"
        )


class LoadResponse(BaseModel):
    """Response model for loading a DEM file."""

    model_config = ConfigDict(extra="forbid")

    source_name: str = Field(..., description="Name of the loaded DEM")
    split: bool = Field(..., description="Whether the DEM was split into several tiles")
    tiles: list[TileInfo] = Field(..., description="Tiles added to the session, in order")
    origin: list[float] = Field(..., description="Session origin [x, y] in absolute units")
    nodata_policy: str = Field(..., description="NODATA meshing policy applied")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        lines = [
            self.message,
            f"Origin: ({self.origin[0]:.3f}, {self.origin[1]:.3f})",
            f"NODATA policy: {self.nodata_policy}",
            "",
        ]
        for t in self.tiles:
            lines.append(f"  {t.to_text()}")
        return "\n".join(lines)


class TilesResponse(BaseModel):
    """Response model for listing loaded tiles."""

    model_config = ConfigDict(extra="forbid")

    tiles: list[TileInfo] = Field(..., description="Loaded tiles, in load order")
    origin: list[float] | None = Field(None, description="Session origin [x, y], if set")
    scene_bounds: list[list[float]] | None = Field(
        None, description="Scene-space [[min x,y,z], [max x,y,z]] over visible tiles"
    )
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        lines = [self.message]
        if self.origin is not None:
            lines.append(f"Origin: ({self.origin[0]:.3f}, {self.origin[1]:.3f})")
        for t in self.tiles:
            lines.append(f"  {t.to_text()}")
        return "\n".join(lines)


class TileDetailResponse(BaseModel):
    """Response model for a detailed tile description."""

    model_config = ConfigDict(extra="forbid")

    tile: TileInfo = Field(..., description="Tile summary")
    nodata_value: float = Field(..., description="NODATA sentinel declared in the header")
    valid_cells: int = Field(..., description="Cells with elevation", ge=0)
    nodata_cells: int = Field(..., description="NODATA cells", ge=0)
    offset: list[float] = Field(..., description="Mesh position [x, y] relative to origin")
    world_bounds: list[list[float]] = Field(
        ..., description="Scene-space [[min x,y,z], [max x,y,z]] of the mesh"
    )
    nodata_policy: str = Field(..., description="NODATA meshing policy used")
    description_prompt: str = Field(
        ..., description="Prompt for generating a short landscape description"
    )
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        lo, hi = self.world_bounds
        lines = [
            self.message,
            f"Name: {self.tile.name}",
            f"Corner: ({self.tile.xllcorner:.3f}, {self.tile.yllcorner:.3f}), "
            f"cellsize {self.tile.cellsize}",
            f"NODATA: {self.nodata_value} ({self.nodata_cells} cells, policy {self.nodata_policy})",
            f"Valid cells: {self.valid_cells}",
            f"Offset: ({self.offset[0]:.3f}, {self.offset[1]:.3f})",
            f"Bounds: x {lo[0]:.1f}..{hi[0]:.1f}, y {lo[1]:.1f}..{hi[1]:.1f}, "
            f"z {lo[2]:.1f}..{hi[2]:.1f}",
            f"Mesh: {self.tile.vertex_count} vertices, {self.tile.triangle_count} triangles",
            f"Prompt: {self.description_prompt}",
        ]
        return "\n".join(lines)


class TileActionResponse(BaseModel):
    """Response model for visibility changes and removals."""

    model_config = ConfigDict(extra="forbid")

    action: str = Field(..., description="Action performed (visibility or remove)")
    tile: TileInfo = Field(..., description="Tile the action applied to")
    remaining: int = Field(..., description="Tiles still loaded", ge=0)
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        return f"{self.message}\n{self.remaining} tile(s) loaded"


class ClearResponse(BaseModel):
    """Response model for clearing the session."""

    model_config = ConfigDict(extra="forbid")

    removed: int = Field(..., description="Number of tiles removed", ge=0)
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        return self.message


class ExportResponse(BaseModel):
    """Response model for exporting a tile to the artifact store."""

    model_config = ConfigDict(extra="forbid")

    tile_id: str = Field(..., description="Exported tile identifier")
    artifact_ref: str = Field(..., description="Artifact reference of the .asc text")
    preview_ref: str | None = Field(None, description="PNG preview artifact reference")
    preview_style: str = Field(..., description="Preview style (terrain or hillshade)")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        lines = [self.message, f"Artifact: {self.artifact_ref}"]
        if self.preview_ref:
            lines.append(f"Preview ({self.preview_style}): {self.preview_ref}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Coordinate & flow responses
# ---------------------------------------------------------------------------


class GridCellResponse(BaseModel):
    """Response model for scene point -> grid cell mapping."""

    model_config = ConfigDict(extra="forbid")

    tile_id: str = Field(..., description="Tile queried")
    x: float = Field(..., description="Scene-relative x of the query point")
    y: float = Field(..., description="Scene-relative y of the query point")
    col: int = Field(..., description="Column index (0 = west)", ge=0)
    row: int = Field(..., description="Row index (0 = south)", ge=0)
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        return self.message


class WorldPointResponse(BaseModel):
    """Response model for grid cell -> scene point mapping."""

    model_config = ConfigDict(extra="forbid")

    tile_id: str = Field(..., description="Tile queried")
    col: int = Field(..., description="Column index", ge=0)
    row: int = Field(..., description="Row index", ge=0)
    point: list[float] = Field(..., description="Cell centre [x, y, z] relative to origin")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        return self.message


class FlowPathResponse(BaseModel):
    """Response model for a raindrop path simulation."""

    model_config = ConfigDict(extra="forbid")

    tile_id: str = Field(..., description="Tile the path was traced on")
    start: list[float] = Field(..., description="Requested start point [x, y]")
    points: list[list[float]] = Field(..., description="Path points [x, y, z], start first")
    cells: list[list[int]] = Field(..., description="Visited cells [col, row]")
    steps: int = Field(..., description="Moves made", ge=0)
    termination: str = Field(
        ..., description="Why the path stopped (pooled, truncated, no_start, conversion_error)"
    )
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        lines = [self.message]
        for p in self.points[:20]:
            lines.append(f"  ({p[0]:.2f}, {p[1]:.2f}, {p[2]:.2f})")
        if len(self.points) > 20:
            lines.append(f"  ... and {len(self.points) - 20} more")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Discovery responses
# ---------------------------------------------------------------------------


class StatusResponse(BaseModel):
    """Response model for server status queries."""

    model_config = ConfigDict(extra="forbid")

    server: str = Field(default="chuk-mcp-terrain", description="Server name")
    version: str = Field(default="0.1.0", description="Server version")
    tile_count: int = Field(default=0, description="Tiles currently loaded", ge=0)
    visible_count: int = Field(default=0, description="Tiles currently visible", ge=0)
    origin: list[float] | None = Field(None, description="Session origin [x, y], if set")
    storage_provider: str = Field(..., description="Active storage provider (memory/filesystem/s3)")
    artifact_store_available: bool = Field(
        default=False, description="Whether artifact store is available"
    )

    def to_text(self) -> str:
        store_status = "available" if self.artifact_store_available else "not available"
        origin = (
            f"({self.origin[0]:.3f}, {self.origin[1]:.3f})" if self.origin is not None else "unset"
        )
        lines = [
            f"{self.server} v{self.version}",
            f"Tiles: {self.tile_count} ({self.visible_count} visible)",
            f"Origin: {origin}",
            f"Storage: {self.storage_provider}",
            f"Artifact store: {store_status}",
        ]
        return "\n".join(lines)


class CapabilitiesResponse(BaseModel):
    """Response model for server capabilities listing."""

    model_config = ConfigDict(extra="forbid")

    server: str = Field(..., description="Server name")
    version: str = Field(..., description="Server version")
    input_formats: list[str] = Field(..., description="Accepted DEM formats")
    nodata_policies: list[str] = Field(..., description="Available NODATA meshing policies")
    preview_styles: list[str] = Field(..., description="Available export preview styles")
    terrain_tools: list[str] = Field(..., description="Tile management tools")
    flow_tools: list[str] = Field(..., description="Coordinate and flow tools")
    max_points_per_tile: int = Field(..., description="Split threshold in grid points", ge=1)
    max_path_steps: int = Field(..., description="Default raindrop step cap", ge=1)
    tool_count: int = Field(..., description="Number of available tools", ge=0)
    llm_guidance: str = Field(..., description="LLM-friendly usage guidance for the server")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        lines = [
            f"{self.server} v{self.version}",
            f"Tools: {self.tool_count}",
            f"Input formats: {', '.join(self.input_formats)}",
            f"NODATA policies: {', '.join(self.nodata_policies)}",
            f"Preview styles: {', '.join(self.preview_styles)}",
            f"Terrain tools: {', '.join(self.terrain_tools)}",
            f"Flow tools: {', '.join(self.flow_tools)}",
            f"Max points per tile: {self.max_points_per_tile:,}",
            f"Max path steps: {self.max_path_steps}",
            f"Guidance: {self.llm_guidance}",
        ]
        return "\n".join(lines)
