"""
Height-field mesh construction for a single tile.

The mesh is a regular ``ncols x nrows`` vertex grid spaced ``cellsize``
apart and centred on the tile's placement point, which sits at
``(xllcorner, yllcorner)`` relative to the session origin. Vertex row ``j``
is grid row ``j`` (row 0 = south), matching the splitter's yllcorner
convention so adjacent tiles line up.
"""

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from ..constants import DEFAULT_NODATA_POLICY, NodataPolicy
from .coords import Origin
from .tiling import DEMTile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TerrainMesh:
    """Vertex positions (local frame), triangle indices, and scene placement."""

    vertices: NDArray[np.floating[Any]]  # (ncols * nrows, 3)
    triangles: NDArray[np.int64]  # (n, 3), indices into vertices
    offset: tuple[float, float]
    policy: NodataPolicy

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.triangles.shape[0])

    def world_bounds(self) -> tuple[list[float], list[float]]:
        """``([min_x, min_y, min_z], [max_x, max_y, max_z])`` in scene space."""
        placed = self.vertices + np.array([self.offset[0], self.offset[1], 0.0])
        return placed.min(axis=0).tolist(), placed.max(axis=0).tolist()


def _grid_triangles(ncols: int, nrows: int) -> NDArray[np.int64]:
    """Two counter-clockwise triangles per grid quad."""
    if ncols < 2 or nrows < 2:
        return np.empty((0, 3), dtype=np.int64)

    cols, rows = np.meshgrid(np.arange(ncols - 1), np.arange(nrows - 1))
    a = (rows * ncols + cols).ravel()
    b = a + 1
    c = a + ncols
    d = c + 1
    return np.concatenate(
        [np.stack([a, b, c], axis=1), np.stack([b, d, c], axis=1)]
    ).astype(np.int64)


def build_terrain_mesh(
    tile: DEMTile,
    origin: Origin,
    policy: NodataPolicy = DEFAULT_NODATA_POLICY,
) -> TerrainMesh:
    """
    Build the renderable surface for one tile.

    Args:
        tile: Tile to mesh
        origin: Session origin the tile is placed relative to
        policy: FLATTEN drops NODATA vertices to the tile minimum;
            SKIP does the same for positions but omits every triangle
            touching a NODATA vertex

    Returns:
        TerrainMesh
    """
    dem = tile.dem
    header = dem.header
    ncols, nrows, cellsize = header.ncols, header.nrows, header.cellsize

    xs = np.arange(ncols) * cellsize - header.plane_width / 2
    ys = np.arange(nrows) * cellsize - header.plane_height / 2
    grid_x, grid_y = np.meshgrid(xs, ys)

    nodata = np.isnan(dem.elevation)
    heights = np.where(nodata, dem.min_elevation, dem.elevation)

    vertices = np.column_stack([grid_x.ravel(), grid_y.ravel(), heights.ravel()])
    triangles = _grid_triangles(ncols, nrows)

    if policy == NodataPolicy.SKIP and triangles.size:
        touches_nodata = nodata.ravel()[triangles].any(axis=1)
        triangles = triangles[~touches_nodata]

    offset = (header.xllcorner - origin.x, header.yllcorner - origin.y)
    logger.debug(
        f"[{tile.name}] Mesh: {len(vertices)} vertices, {len(triangles)} triangles, "
        f"offset=({offset[0]:.2f}, {offset[1]:.2f}), policy={policy.value}"
    )
    return TerrainMesh(vertices=vertices, triangles=triangles, offset=offset, policy=policy)
