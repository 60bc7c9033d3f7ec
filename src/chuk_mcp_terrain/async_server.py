#!/usr/bin/env python3
"""
Async Terrain MCP Server using chuk-mcp-server

Loads ESRI ASCII Grid DEMs into a shared-origin terrain session, meshes
them, and traces raindrop flow paths. Exports go to chuk-artifacts.

Storage is managed through chuk-mcp-server's built-in artifact store context.
"""

import logging

from chuk_mcp_server import ChukMCPServer

from .constants import ServerConfig
from .core.terrain_manager import TerrainManager
from .tools.discovery import register_discovery_tools
from .tools.flow import register_flow_tools
from .tools.terrain import register_terrain_tools

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
mcp = ChukMCPServer(ServerConfig.NAME)

# Create terrain manager instance (one session per server process)
manager = TerrainManager()

# Register all tool modules
register_discovery_tools(mcp, manager)
register_terrain_tools(mcp, manager)
register_flow_tools(mcp, manager)

# Run the server
if __name__ == "__main__":
    logger.info("Starting Terrain MCP Server...")
    logger.info("Storage: Using chuk-mcp-server artifact store context")
    mcp.run(stdio=True)
