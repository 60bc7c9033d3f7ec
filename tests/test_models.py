"""
Tests for chuk-mcp-terrain response models.

Tests the Pydantic models in chuk_mcp_terrain.models.responses for:
- Valid creation
- extra="forbid" rejects unknown fields
- to_text() output contains expected strings
- format_response() in json/text modes
"""

import json

import pytest
from pydantic import ValidationError

from chuk_mcp_terrain.models.responses import (
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


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_tile_info(**overrides) -> TileInfo:
    defaults = dict(
        id="dem-1",
        name="valley.asc",
        ncols=3,
        nrows=2,
        xllcorner=100.0,
        yllcorner=200.0,
        cellsize=10.0,
        elevation_range=[12.5, 88.0],
        is_visible=True,
        vertex_count=6,
        triangle_count=4,
    )
    defaults.update(overrides)
    return TileInfo(**defaults)


def _make_path(n_points: int) -> FlowPathResponse:
    return FlowPathResponse(
        tile_id="dem-1",
        start=[0.0, 0.0],
        points=[[float(i), 0.0, 100.0 - i] for i in range(n_points)],
        cells=[[i, 0] for i in range(n_points)],
        steps=max(0, n_points - 1),
        termination="pooled",
        message=f"Raindrop path: {n_points} point(s)",
    )


# ===========================================================================
# ErrorResponse
# ===========================================================================


class TestErrorResponse:
    def test_creation(self):
        assert ErrorResponse(error="boom").error == "boom"

    def test_to_text(self):
        assert ErrorResponse(error="boom").to_text() == "Error: boom"

    def test_extra_fields_rejected(self):
        with pytest.raises(ValidationError):
            ErrorResponse(error="boom", code=1)

    def test_missing_required_field(self):
        with pytest.raises(ValidationError):
            ErrorResponse()


# ===========================================================================
# Tile models
# ===========================================================================


class TestTileInfo:
    def test_to_text_visible(self):
        assert _make_tile_info().to_text() == "dem-1: valley.asc (3x2, 12.5m to 88.0m, visible)"

    def test_to_text_hidden(self):
        assert "hidden" in _make_tile_info(is_visible=False).to_text()

    def test_extra_fields_rejected(self):
        with pytest.raises(ValidationError):
            _make_tile_info(crs="EPSG:27700")

    def test_cellsize_must_be_positive(self):
        with pytest.raises(ValidationError):
            _make_tile_info(cellsize=0.0)

    def test_ncols_at_least_one(self):
        with pytest.raises(ValidationError):
            _make_tile_info(ncols=0)


class TestLoadResponse:
    def test_to_text_lists_tiles(self):
        response = LoadResponse(
            source_name="big.asc",
            split=True,
            tiles=[_make_tile_info(id="dem-1"), _make_tile_info(id="dem-2")],
            origin=[100.0, 200.0],
            nodata_policy="skip",
            message="Loaded 'big.asc' as 2 tile(s)",
        )
        text = response.to_text()
        assert text.startswith("Loaded 'big.asc' as 2 tile(s)")
        assert "Origin: (100.000, 200.000)" in text
        assert "NODATA policy: skip" in text
        assert "  dem-2: valley.asc" in text


class TestTilesResponse:
    def test_defaults(self):
        response = TilesResponse(tiles=[], message="0 tile(s) loaded, 0 visible")
        assert response.origin is None
        assert response.scene_bounds is None
        assert response.to_text() == "0 tile(s) loaded, 0 visible"

    def test_to_text_with_origin(self):
        response = TilesResponse(
            tiles=[_make_tile_info()], origin=[1.0, 2.0], message="1 tile(s) loaded, 1 visible"
        )
        assert "Origin: (1.000, 2.000)" in response.to_text()


class TestTileDetailResponse:
    def test_to_text(self):
        response = TileDetailResponse(
            tile=_make_tile_info(),
            nodata_value=-9999.0,
            valid_cells=5,
            nodata_cells=1,
            offset=[0.0, 0.0],
            world_bounds=[[-10.0, -5.0, 12.5], [10.0, 5.0, 88.0]],
            nodata_policy="flatten",
            description_prompt="Describe this terrain: valley.asc",
            message="Tile dem-1 (3x2, 12.5m to 88.0m)",
        )
        text = response.to_text()
        assert "NODATA: -9999.0 (1 cells, policy flatten)" in text
        assert "Bounds: x -10.0..10.0, y -5.0..5.0, z 12.5..88.0" in text
        assert "Mesh: 6 vertices, 4 triangles" in text
        assert "Prompt: Describe this terrain" in text

    def test_negative_counts_rejected(self):
        with pytest.raises(ValidationError):
            TileDetailResponse(
                tile=_make_tile_info(),
                nodata_value=-9999.0,
                valid_cells=-1,
                nodata_cells=0,
                offset=[0.0, 0.0],
                world_bounds=[[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]],
                nodata_policy="flatten",
                description_prompt="",
                message="",
            )


class TestActionResponses:
    def test_tile_action_to_text(self):
        response = TileActionResponse(
            action="remove", tile=_make_tile_info(), remaining=2, message="Removed tile dem-1"
        )
        assert response.to_text() == "Removed tile dem-1\n2 tile(s) loaded"

    def test_clear_to_text(self):
        assert ClearResponse(removed=3, message="Cleared").to_text() == "Cleared"

    def test_export_to_text_with_preview(self):
        response = ExportResponse(
            tile_id="dem-1",
            artifact_ref="terrain/abc.asc",
            preview_ref="terrain/def_hillshade.png",
            preview_style="hillshade",
            message="Exported tile dem-1",
        )
        text = response.to_text()
        assert "Artifact: terrain/abc.asc" in text
        assert "Preview (hillshade): terrain/def_hillshade.png" in text

    def test_export_to_text_without_preview(self):
        response = ExportResponse(
            tile_id="dem-1",
            artifact_ref="terrain/abc.asc",
            preview_style="terrain",
            message="Exported tile dem-1",
        )
        assert "Preview" not in response.to_text()


# ===========================================================================
# Coordinate & flow models
# ===========================================================================


class TestCoordinateResponses:
    def test_grid_cell_rejects_negative_index(self):
        with pytest.raises(ValidationError):
            GridCellResponse(tile_id="dem-1", x=0.0, y=0.0, col=-1, row=0, message="")

    def test_world_point_to_text(self):
        response = WorldPointResponse(
            tile_id="dem-1", col=0, row=0, point=[1.0, 2.0, 3.0], message="Cell (0, 0)"
        )
        assert response.to_text() == "Cell (0, 0)"


class TestFlowPathResponse:
    def test_to_text_lists_points(self):
        text = _make_path(3).to_text()
        assert text.splitlines()[1] == "  (0.00, 0.00, 100.00)"
        assert "more" not in text

    def test_to_text_truncates_long_paths(self):
        text = _make_path(25).to_text()
        assert len(text.splitlines()) == 1 + 20 + 1
        assert text.endswith("... and 5 more")

    def test_empty_path(self):
        assert _make_path(0).to_text() == "Raindrop path: 0 point(s)"


# ===========================================================================
# Discovery models
# ===========================================================================


class TestStatusResponse:
    def test_defaults(self):
        response = StatusResponse(storage_provider="memory")
        assert response.server == "chuk-mcp-terrain"
        assert response.tile_count == 0
        assert response.origin is None

    def test_to_text(self):
        response = StatusResponse(
            tile_count=2,
            visible_count=1,
            origin=[10.0, 20.0],
            storage_provider="s3",
            artifact_store_available=True,
        )
        text = response.to_text()
        assert "Tiles: 2 (1 visible)" in text
        assert "Origin: (10.000, 20.000)" in text
        assert "Artifact store: available" in text


class TestCapabilitiesResponse:
    def test_to_text(self):
        response = CapabilitiesResponse(
            server="chuk-mcp-terrain",
            version="0.1.0",
            input_formats=["asc"],
            nodata_policies=["flatten", "skip"],
            preview_styles=["terrain", "hillshade"],
            terrain_tools=["terrain_load_dem"],
            flow_tools=["terrain_raindrop_path"],
            max_points_per_tile=100,
            max_path_steps=50,
            tool_count=4,
            llm_guidance="Load first.",
            message="capabilities",
        )
        text = response.to_text()
        assert "NODATA policies: flatten, skip" in text
        assert "Guidance: Load first." in text


# ===========================================================================
# format_response
# ===========================================================================


class TestFormatResponse:
    def test_json_mode(self):
        data = json.loads(format_response(_make_tile_info()))
        assert data["id"] == "dem-1"
        assert data["elevation_range"] == [12.5, 88.0]

    def test_text_mode(self):
        assert format_response(ErrorResponse(error="x"), "text") == "Error: x"

    def test_unknown_mode_falls_back_to_json(self):
        data = json.loads(format_response(ErrorResponse(error="x"), "yaml"))
        assert data == {"error": "x"}
