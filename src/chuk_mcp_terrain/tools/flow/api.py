"""
Flow tools - scene/grid coordinate conversion and raindrop paths.

Scene coordinates are relative to the session origin (the lower-left
corner of the first tile loaded).
"""

import logging

from ...constants import SuccessMessages
from ...models.responses import (
    ErrorResponse,
    FlowPathResponse,
    GridCellResponse,
    WorldPointResponse,
    format_response,
)

logger = logging.getLogger(__name__)


def register_flow_tools(mcp, manager):
    """Register flow tools with the MCP server."""

    @mcp.tool()
    async def terrain_world_to_grid(
        tile_id: str, x: float, y: float, output_mode: str = "json"
    ) -> str:
        """Map a scene point to the grid cell of a tile that contains it.

        Args:
            tile_id: Tile id
            x: Scene x (relative to the session origin)
            y: Scene y (relative to the session origin)
            output_mode: "json" or "text"

        Returns:
            Column and row of the containing cell (row 0 = south)
        """
        try:
            cell = manager.world_to_grid(tile_id, x, y)
            response = GridCellResponse(
                tile_id=tile_id,
                x=x,
                y=y,
                col=cell.col,
                row=cell.row,
                message=SuccessMessages.WORLD_TO_GRID.format(cell.col, cell.row, tile_id),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"terrain_world_to_grid failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def terrain_grid_to_world(
        tile_id: str, col: int, row: int, output_mode: str = "json"
    ) -> str:
        """Get the scene position and elevation of a cell centre.

        Args:
            tile_id: Tile id
            col: Column index (0 = west)
            row: Row index (0 = south)
            output_mode: "json" or "text"

        Returns:
            Cell centre [x, y, z]; fails for NODATA or out-of-range cells
        """
        try:
            point = manager.grid_to_world(tile_id, col, row)
            response = WorldPointResponse(
                tile_id=tile_id,
                col=col,
                row=row,
                point=point.as_list(),
                message=SuccessMessages.GRID_TO_WORLD.format(col, row, point.x, point.y, point.z),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"terrain_grid_to_world failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def terrain_raindrop_path(
        tile_id: str,
        x: float,
        y: float,
        max_steps: int | None = None,
        output_mode: str = "json",
    ) -> str:
        """Trace where a raindrop landing at a scene point flows, following the
        steepest downhill neighbour until it pools or hits the step cap.

        Paths stay on the starting tile. An empty path means the start was off
        the tile or on NODATA; a single point means the start is a pit or flat.

        Args:
            tile_id: Tile id
            x: Scene x of the drop
            y: Scene y of the drop
            max_steps: Step cap (default from server configuration)
            output_mode: "json" or "text"

        Returns:
            Path points [x, y, z], visited cells, and termination reason
        """
        try:
            result = await manager.raindrop_path(tile_id, x, y, max_steps=max_steps)
            response = FlowPathResponse(
                tile_id=tile_id,
                start=[x, y],
                points=result.points,
                cells=result.cells,
                steps=result.steps,
                termination=result.termination,
                message=SuccessMessages.PATH_COMPLETE.format(
                    len(result.points), result.steps, result.termination
                ),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"terrain_raindrop_path failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)
