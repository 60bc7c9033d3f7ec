"""Tests for chuk_mcp_terrain.tools.flow.api module."""

import json

import pytest

from chuk_mcp_terrain.constants import FLOW_TOOLS
from chuk_mcp_terrain.tools.flow.api import register_flow_tools


@pytest.fixture
def flow_tools(capture_tools, mock_manager):
    return capture_tools(register_flow_tools, mock_manager)


@pytest.fixture
async def loaded(flow_tools, mock_manager, simple_asc):
    """Flow tools with simple.asc loaded as dem-1 (origin at its corner)."""
    await mock_manager.load_dem(content=simple_asc, name="simple.asc")
    return flow_tools


class TestRegistration:
    def test_registers_all_flow_tools(self, flow_tools):
        assert sorted(flow_tools) == sorted(FLOW_TOOLS)


# ── terrain_world_to_grid ──────────────────────────────────────────


class TestWorldToGrid:
    async def test_centre_cell(self, loaded):
        data = json.loads(await loaded["terrain_world_to_grid"](tile_id="dem-1", x=0.0, y=0.0))
        assert (data["col"], data["row"]) == (1, 1)
        assert data["message"] == "Point maps to cell (1, 1) of tile dem-1"

    async def test_south_west_cell(self, loaded):
        data = json.loads(await loaded["terrain_world_to_grid"](tile_id="dem-1", x=-8.0, y=-6.0))
        assert (data["col"], data["row"]) == (0, 0)

    async def test_outside(self, loaded):
        data = json.loads(await loaded["terrain_world_to_grid"](tile_id="dem-1", x=100.0, y=0.0))
        assert "outside tile 'dem-1'" in data["error"]

    async def test_no_tiles(self, flow_tools):
        data = json.loads(await flow_tools["terrain_world_to_grid"](tile_id="dem-1", x=0, y=0))
        assert "Unknown tile" in data["error"]

    async def test_text_mode(self, loaded):
        result = await loaded["terrain_world_to_grid"](
            tile_id="dem-1", x=0.0, y=0.0, output_mode="text"
        )
        assert result == "Point maps to cell (1, 1) of tile dem-1"


# ── terrain_grid_to_world ──────────────────────────────────────────


class TestGridToWorld:
    async def test_corner_cell(self, loaded):
        data = json.loads(await loaded["terrain_grid_to_world"](tile_id="dem-1", col=2, row=2))
        assert data["point"] == [15.0, 15.0, 9.0]

    async def test_out_of_range(self, loaded):
        data = json.loads(await loaded["terrain_grid_to_world"](tile_id="dem-1", col=3, row=0))
        assert "Cell (3, 0)" in data["error"]

    async def test_text_mode(self, loaded):
        result = await loaded["terrain_grid_to_world"](
            tile_id="dem-1", col=1, row=1, output_mode="text"
        )
        assert result == "Cell (1, 1) centre at (5.000, 5.000, 1.000)"


# ── terrain_raindrop_path ──────────────────────────────────────────


class TestRaindropPath:
    async def test_flows_into_pit(self, loaded):
        result = await loaded["terrain_raindrop_path"](tile_id="dem-1", x=-10.0, y=-10.0)
        data = json.loads(result)
        assert data["start"] == [-10.0, -10.0]
        assert data["points"] == [[-5.0, -5.0, 5.0], [5.0, 5.0, 1.0]]
        assert data["cells"] == [[0, 0], [1, 1]]
        assert data["steps"] == 1
        assert data["termination"] == "pooled"

    async def test_start_in_pit(self, loaded):
        data = json.loads(await loaded["terrain_raindrop_path"](tile_id="dem-1", x=0.0, y=0.0))
        assert data["points"] == [[5.0, 5.0, 1.0]]
        assert data["steps"] == 0

    async def test_off_tile(self, loaded):
        data = json.loads(await loaded["terrain_raindrop_path"](tile_id="dem-1", x=500.0, y=0.0))
        assert data["points"] == []
        assert data["termination"] == "no_start"

    async def test_step_cap(self, loaded):
        data = json.loads(
            await loaded["terrain_raindrop_path"](tile_id="dem-1", x=10.0, y=10.0, max_steps=1)
        )
        assert data["steps"] == 1
        assert data["termination"] == "truncated"

    async def test_invalid_step_cap(self, loaded):
        data = json.loads(
            await loaded["terrain_raindrop_path"](tile_id="dem-1", x=0.0, y=0.0, max_steps=0)
        )
        assert "max_steps must be >= 1" in data["error"]

    async def test_text_mode(self, loaded):
        result = await loaded["terrain_raindrop_path"](
            tile_id="dem-1", x=-10.0, y=-10.0, output_mode="text"
        )
        assert result.splitlines()[0] == "Raindrop path: 2 point(s), 1 step(s), pooled"
        assert "(5.00, 5.00, 1.00)" in result

    async def test_manager_failure(self, flow_tools, mock_manager):
        from unittest.mock import AsyncMock

        mock_manager.raindrop_path = AsyncMock(side_effect=RuntimeError("boom"))
        data = json.loads(await flow_tools["terrain_raindrop_path"](tile_id="dem-1", x=0, y=0))
        assert data["error"] == "boom"
