"""Shared test fixtures for chuk-mcp-terrain."""

import numpy as np
import pytest
from unittest.mock import AsyncMock, MagicMock


def make_asc(
    elevation,
    xllcorner=0.0,
    yllcorner=0.0,
    cellsize=1.0,
    nodata_value=-9999.0,
) -> str:
    """Build ASCII Grid text from a 2-D list/array (row 0 first)."""
    arr = np.asarray(elevation, dtype=float)
    nrows, ncols = arr.shape
    lines = [
        f"ncols {ncols}",
        f"nrows {nrows}",
        f"xllcorner {xllcorner}",
        f"yllcorner {yllcorner}",
        f"cellsize {cellsize}",
        f"NODATA_value {nodata_value}",
    ]
    for row in arr:
        lines.append(" ".join(f"{v:g}" for v in row))
    return "\n".join(lines) + "\n"


@pytest.fixture
def simple_asc():
    """3x3 grid with a pit at the centre, anchored at (100, 200), cellsize 10."""
    return make_asc(
        [[5, 4, 3], [6, 1, 2], [7, 8, 9]],
        xllcorner=100.0,
        yllcorner=200.0,
        cellsize=10.0,
    )


@pytest.fixture
def funnel_elevation():
    """5x5 funnel: elevation = 100 + 10 * Chebyshev distance to the centre cell."""
    cols, rows = np.meshgrid(np.arange(5), np.arange(5))
    cheb = np.maximum(np.abs(cols - 2), np.abs(rows - 2))
    return 100.0 + 10.0 * cheb


@pytest.fixture
def funnel_asc(funnel_elevation):
    return make_asc(funnel_elevation, xllcorner=1000.0, yllcorner=2000.0, cellsize=2.0)


@pytest.fixture
def nodata_asc():
    """3x3 grid whose every cell is NODATA."""
    return make_asc([[-9999] * 3] * 3)


@pytest.fixture
def simple_dem(simple_asc):
    from chuk_mcp_terrain.core.ascii_grid import read_ascii_grid

    return read_ascii_grid(simple_asc, "simple.asc")


@pytest.fixture
def funnel_dem(funnel_asc):
    from chuk_mcp_terrain.core.ascii_grid import read_ascii_grid

    return read_ascii_grid(funnel_asc, "funnel.asc")


@pytest.fixture
def mock_artifact_store():
    """Mock artifact store."""
    store = AsyncMock()
    store.store = AsyncMock(return_value=None)
    store.retrieve = AsyncMock(return_value=b"")
    return store


@pytest.fixture
def mock_manager(mock_artifact_store):
    """TerrainManager with mocked store."""
    from chuk_mcp_terrain.core.terrain_manager import TerrainManager

    manager = TerrainManager()
    manager._get_store = MagicMock(return_value=mock_artifact_store)
    return manager


@pytest.fixture
def mock_mcp():
    """Mock ChukMCPServer."""
    mcp = MagicMock()
    mcp.tool = MagicMock(return_value=lambda fn: fn)
    return mcp


@pytest.fixture
def capture_tools():
    """Return a function that registers tools on a capturing mcp and returns them by name."""

    def _capture(register, manager):
        tools = {}
        mcp = MagicMock()

        def capture_tool(**kwargs):
            def decorator(fn):
                tools[fn.__name__] = fn
                return fn

            return decorator

        mcp.tool = capture_tool
        register(mcp, manager)
        return tools

    return _capture
