"""
Discovery tools - server status and capabilities.

These tools perform no I/O and report on the terrain session and
server configuration.
"""

import logging
import os

from ...constants import (
    FLOW_TOOLS,
    NODATA_POLICIES,
    PREVIEW_STYLES,
    TERRAIN_TOOLS,
    EnvVar,
    ServerConfig,
    StorageProvider,
)
from ...models.responses import (
    CapabilitiesResponse,
    ErrorResponse,
    StatusResponse,
    format_response,
)

logger = logging.getLogger(__name__)

# Discovery tools registered here
DISCOVERY_TOOL_COUNT = 2


def register_discovery_tools(mcp, manager):
    """Register discovery tools with the MCP server."""

    @mcp.tool()
    async def terrain_status(output_mode: str = "json") -> str:
        """Get server status including loaded tile count, session origin, and storage
        configuration.

        Args:
            output_mode: "json" for structured data, "text" for human-readable summary

        Returns:
            Server status information
        """
        try:
            provider = os.environ.get(EnvVar.ARTIFACTS_PROVIDER, StorageProvider.MEMORY)

            store_available = False
            try:
                manager._get_store()
                store_available = True
            except Exception:
                pass

            session = manager.session
            origin = session.origin
            response = StatusResponse(
                server=ServerConfig.NAME,
                version=ServerConfig.VERSION,
                tile_count=len(session),
                visible_count=len(session.visible_entries()),
                origin=[origin.x, origin.y] if origin is not None else None,
                storage_provider=provider,
                artifact_store_available=store_available,
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"terrain_status failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def terrain_capabilities(output_mode: str = "json") -> str:
        """Get full server capabilities including input formats, NODATA policies,
        preview styles, and the available tools.

        Args:
            output_mode: "json" for structured data, "text" for human-readable summary

        Returns:
            Complete server capabilities
        """
        try:
            response = CapabilitiesResponse(
                server=ServerConfig.NAME,
                version=ServerConfig.VERSION,
                input_formats=["asc"],
                nodata_policies=NODATA_POLICIES,
                preview_styles=PREVIEW_STYLES,
                terrain_tools=TERRAIN_TOOLS,
                flow_tools=FLOW_TOOLS,
                max_points_per_tile=manager.max_points_per_tile,
                max_path_steps=manager.max_path_steps,
                tool_count=DISCOVERY_TOOL_COUNT + len(TERRAIN_TOOLS) + len(FLOW_TOOLS),
                llm_guidance=(
                    "Use terrain_load_dem to load an ESRI ASCII Grid (.asc) from text, a file "
                    "path, or an artifact. The first tile loaded fixes the scene origin; all "
                    "scene coordinates are relative to it. Large grids are split into "
                    "name_partR_C tiles. Use terrain_list_tiles to get tile ids, then "
                    "terrain_raindrop_path with a scene point to trace downhill flow. "
                    "Use terrain_world_to_grid / terrain_grid_to_world to convert between "
                    "scene points and cells. terrain_clear resets the origin."
                ),
                message=f"{ServerConfig.NAME} v{ServerConfig.VERSION} capabilities",
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"terrain_capabilities failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)
