"""
Shared helper for running chuk-mcp-terrain MCP tools directly from Python.

Provides a ToolRunner class that registers all MCP tools and sets up
an in-memory artifact store, without requiring a full MCP transport layer.
Demo scripts use this to call tools as plain async functions.

Usage:
    from tool_runner import ToolRunner

    async def main():
        runner = ToolRunner()
        result = await runner.run("terrain_load_dem", content=asc_text)
        print(result)
"""

from __future__ import annotations

import json
import os
from typing import Any

from chuk_mcp_terrain.core.terrain_manager import TerrainManager
from chuk_mcp_terrain.tools.discovery import register_discovery_tools
from chuk_mcp_terrain.tools.flow import register_flow_tools
from chuk_mcp_terrain.tools.terrain import register_terrain_tools


class _MiniMCP:
    """Minimal MCP server that captures tools registered via @mcp.tool."""

    def __init__(self) -> None:
        self._tools: dict[str, Any] = {}

    def tool(self) -> Any:
        """Decorator factory matching @mcp.tool() usage."""

        def decorator(fn: Any) -> Any:
            self._tools[fn.__name__] = fn
            return fn

        return decorator

    def get_tool(self, name: str) -> Any:
        return self._tools[name]


def _init_artifact_store() -> None:
    """Initialize an in-memory artifact store for demo use."""
    os.environ.setdefault("CHUK_ARTIFACTS_PROVIDER", "memory")
    try:
        from chuk_artifacts import ArtifactStore
        from chuk_mcp_server import set_global_artifact_store

        store = ArtifactStore(storage_provider="memory", session_provider="memory")
        set_global_artifact_store(store)
    except ImportError as e:
        print(f"Warning: could not init artifact store: {e}")
        print("  Exports will fail. Install chuk-artifacts and chuk-mcp-server.")


class ToolRunner:
    """
    Run chuk-mcp-terrain MCP tools directly from Python.

    All tools are registered and callable via run(tool_name, **kwargs).
    Returns parsed JSON by default. Use run_text() for human-readable output.
    """

    def __init__(self, **manager_kwargs: Any) -> None:
        _init_artifact_store()
        self._mcp = _MiniMCP()
        self.manager = TerrainManager(**manager_kwargs)
        register_discovery_tools(self._mcp, self.manager)
        register_terrain_tools(self._mcp, self.manager)
        register_flow_tools(self._mcp, self.manager)

    @property
    def tool_names(self) -> list[str]:
        return list(self._mcp._tools.keys())

    async def run(self, tool_name: str, **kwargs: Any) -> dict[str, Any]:
        """Call a tool by name and return parsed JSON."""
        fn = self._mcp.get_tool(tool_name)
        raw = await fn(**kwargs)
        return json.loads(raw)

    async def run_text(self, tool_name: str, **kwargs: Any) -> str:
        """Call a tool by name with output_mode='text' and return plaintext."""
        fn = self._mcp.get_tool(tool_name)
        return await fn(output_mode="text", **kwargs)
