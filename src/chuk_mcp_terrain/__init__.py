"""
chuk-mcp-terrain: ASCII Grid DEM Tiling, Terrain Meshing & Raindrop Flow MCP Server

Loads ESRI ASCII Grid elevation files, splits large grids into tiles that
share one scene origin, builds height-field meshes, and traces
steepest-descent raindrop paths over the loaded terrain.
"""
