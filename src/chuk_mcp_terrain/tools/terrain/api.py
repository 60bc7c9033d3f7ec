"""
Terrain tools - load DEMs, inspect and manage tiles, export.

Loading parses an ESRI ASCII Grid, splits it into tiles when it exceeds
the point budget, and meshes each tile relative to the session origin.
"""

import logging
from dataclasses import asdict

from ...constants import DEFAULT_NODATA_POLICY, DEFAULT_PREVIEW_STYLE, SuccessMessages
from ...models.responses import (
    ClearResponse,
    ErrorResponse,
    ExportResponse,
    LoadResponse,
    TileActionResponse,
    TileDetailResponse,
    TileInfo,
    TilesResponse,
    format_response,
)

logger = logging.getLogger(__name__)


def _tile_info(summary) -> TileInfo:
    return TileInfo(**asdict(summary))


def register_terrain_tools(mcp, manager):
    """Register terrain tools with the MCP server."""

    @mcp.tool()
    async def terrain_load_dem(
        content: str | None = None,
        path: str | None = None,
        artifact_ref: str | None = None,
        name: str | None = None,
        nodata_policy: str = DEFAULT_NODATA_POLICY.value,
        output_mode: str = "json",
    ) -> str:
        """Load an ESRI ASCII Grid (.asc) DEM into the terrain session.

        Grids larger than the point budget are split into name_partR_C tiles.
        The first tile ever loaded fixes the session origin.

        Args:
            content: ASCII Grid text
            path: Path to a local .asc file
            artifact_ref: Artifact store reference holding ASCII Grid text
            name: Display name (defaults to the file name)
            nodata_policy: "flatten" (NODATA drops to the tile minimum) or
                "skip" (triangles touching NODATA are omitted)
            output_mode: "json" or "text"

        Returns:
            Loaded tiles with ids, extents, and elevation ranges
        """
        try:
            result = await manager.load_dem(
                content=content,
                path=path,
                artifact_ref=artifact_ref,
                name=name,
                nodata_policy=nodata_policy,
            )
            response = LoadResponse(
                source_name=result.source_name,
                split=result.split,
                tiles=[_tile_info(t) for t in result.tiles],
                origin=result.origin,
                nodata_policy=result.nodata_policy,
                message=SuccessMessages.LOAD_COMPLETE.format(
                    result.source_name, len(result.tiles)
                ),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"terrain_load_dem failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def terrain_list_tiles(output_mode: str = "json") -> str:
        """List loaded tiles in load order with visibility and scene bounds.

        Args:
            output_mode: "json" or "text"

        Returns:
            Loaded tiles, session origin, and scene bounding box
        """
        try:
            tiles = [_tile_info(t) for t in manager.list_tiles()]
            session = manager.session
            origin = session.origin
            bounds = session.bounds()
            visible = sum(1 for t in tiles if t.is_visible)

            response = TilesResponse(
                tiles=tiles,
                origin=[origin.x, origin.y] if origin is not None else None,
                scene_bounds=list(bounds) if bounds is not None else None,
                message=SuccessMessages.TILES_LIST.format(len(tiles), visible),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"terrain_list_tiles failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def terrain_describe_tile(tile_id: str, output_mode: str = "json") -> str:
        """Describe one tile: header, NODATA counts, mesh placement, and a prompt
        for writing a short landscape description.

        Args:
            tile_id: Tile id from terrain_list_tiles (e.g., dem-1)
            output_mode: "json" or "text"

        Returns:
            Detailed tile information
        """
        try:
            detail = manager.describe_tile(tile_id)
            info = _tile_info(detail.summary)
            elev_min, elev_max = info.elevation_range

            response = TileDetailResponse(
                tile=info,
                nodata_value=detail.nodata_value,
                valid_cells=detail.valid_cells,
                nodata_cells=detail.nodata_cells,
                offset=detail.offset,
                world_bounds=detail.world_bounds,
                nodata_policy=detail.nodata_policy,
                description_prompt=detail.description_prompt,
                message=SuccessMessages.TILE_DESCRIBE.format(
                    info.id, info.ncols, info.nrows, elev_min, elev_max
                ),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"terrain_describe_tile failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def terrain_set_visibility(
        tile_id: str, visible: bool, output_mode: str = "json"
    ) -> str:
        """Show or hide a tile's mesh. Hidden tiles are excluded from scene bounds.

        Args:
            tile_id: Tile id
            visible: True to show, False to hide
            output_mode: "json" or "text"

        Returns:
            Updated tile summary
        """
        try:
            summary = manager.set_visibility(tile_id, visible)
            response = TileActionResponse(
                action="visibility",
                tile=_tile_info(summary),
                remaining=len(manager.session),
                message=SuccessMessages.VISIBILITY.format(
                    tile_id, "visible" if visible else "hidden"
                ),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"terrain_set_visibility failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def terrain_remove_tile(tile_id: str, output_mode: str = "json") -> str:
        """Remove one tile from the session. The session origin is kept.

        Args:
            tile_id: Tile id
            output_mode: "json" or "text"

        Returns:
            Summary of the removed tile
        """
        try:
            summary = manager.remove_tile(tile_id)
            response = TileActionResponse(
                action="remove",
                tile=_tile_info(summary),
                remaining=len(manager.session),
                message=SuccessMessages.TILE_REMOVED.format(tile_id),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"terrain_remove_tile failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def terrain_clear(output_mode: str = "json") -> str:
        """Remove every tile and reset the session origin.

        Args:
            output_mode: "json" or "text"

        Returns:
            Number of tiles removed
        """
        try:
            removed = manager.clear()
            response = ClearResponse(
                removed=removed,
                message=SuccessMessages.CLEARED.format(removed),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"terrain_clear failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def terrain_export_tile(
        tile_id: str,
        preview_style: str = DEFAULT_PREVIEW_STYLE,
        output_mode: str = "json",
    ) -> str:
        """Export a tile as ASCII Grid text plus a PNG preview to the artifact store.

        Split tiles are written with their own corner coordinates, so an exported
        part reloads in the same place.

        Args:
            tile_id: Tile id
            preview_style: "terrain" (colour ramp) or "hillshade"
            output_mode: "json" or "text"

        Returns:
            Artifact references for the grid text and preview
        """
        try:
            result = await manager.export_tile(tile_id, preview_style=preview_style)
            response = ExportResponse(
                tile_id=result.tile_id,
                artifact_ref=result.grid_ref,
                preview_ref=result.preview_ref,
                preview_style=result.preview_style,
                message=SuccessMessages.EXPORT_COMPLETE.format(tile_id, result.grid_ref),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"terrain_export_tile failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)
