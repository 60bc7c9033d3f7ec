"""
Single-raindrop steepest-descent flow over one tile.

The drop snaps to the centre of the cell it lands in, then repeatedly moves
to the 8-neighbour with the greatest downhill slope until it pools in a
local minimum, runs out of steps, or a centre lookup fails. Paths never
leave the tile they start on.
"""

import logging
import math
from dataclasses import dataclass, field

from ..constants import MAX_PATH_STEPS, FlowTermination
from .coords import CoordinateMapper, GridCell, Origin, WorldPoint, elevation_at
from .tiling import DEMTile

logger = logging.getLogger(__name__)

# (dcol, drow, distance in cells); row 0 is south, so drow=-1 is south.
# Order is load-bearing: equal slopes keep the first neighbour listed.
NEIGHBOURS_8 = [
    (-1, 0, 1.0),  # W
    (1, 0, 1.0),  # E
    (0, -1, 1.0),  # S
    (0, 1, 1.0),  # N
    (-1, -1, math.sqrt(2)),  # SW
    (1, -1, math.sqrt(2)),  # SE
    (-1, 1, math.sqrt(2)),  # NW
    (1, 1, math.sqrt(2)),  # NE
]


@dataclass
class FlowPath:
    """World-space path of a raindrop and why it stopped."""

    points: list[WorldPoint] = field(default_factory=list)
    cells: list[GridCell] = field(default_factory=list)
    termination: FlowTermination = FlowTermination.NO_START

    @property
    def steps(self) -> int:
        return max(0, len(self.points) - 1)

    @property
    def moved(self) -> bool:
        return len(self.points) > 1


def steepest_neighbour(
    cell: GridCell, elevation: float, tile: DEMTile
) -> tuple[GridCell, float] | None:
    """Steepest downhill neighbour of ``cell`` as ``(neighbour, its elevation)``, or None."""
    cellsize = tile.dem.header.cellsize
    best: tuple[GridCell, float] | None = None
    steepest = 0.0

    for dc, dr, dist in NEIGHBOURS_8:
        ncol, nrow = cell.col + dc, cell.row + dr
        n_elev = elevation_at(ncol, nrow, tile.dem)
        if n_elev is None or n_elev >= elevation:
            continue
        slope = (elevation - n_elev) / (dist * cellsize)
        if slope > steepest:
            steepest = slope
            best = (GridCell(col=ncol, row=nrow), n_elev)

    return best


def simulate_raindrop(
    x: float,
    y: float,
    tile: DEMTile,
    origin: Origin | None,
    max_steps: int = MAX_PATH_STEPS,
) -> FlowPath:
    """
    Trace a raindrop from a scene-relative point down a tile.

    Args:
        x, y: Scene-relative start point
        tile: Tile to trace over
        origin: Session origin (MissingOriginError if None)
        max_steps: Step cap

    Returns:
        FlowPath. An empty path means the start was off-tile or NODATA;
        a single point means the drop could not move.
    """
    mapper = CoordinateMapper(origin)
    path = FlowPath()

    cell = mapper.world_to_grid(x, y, tile.dem.header)
    if cell is None:
        logger.warning(f"[{tile.name}] Start point ({x:.2f}, {y:.2f}) is outside the tile.")
        return path

    start = mapper.grid_to_world(cell.col, cell.row, tile.dem)
    if start is None:
        logger.warning(f"[{tile.name}] No elevation at start cell ({cell.col}, {cell.row}).")
        return path

    path.points.append(start)
    path.cells.append(cell)
    elevation = start.z
    path.termination = FlowTermination.TRUNCATED

    for _ in range(max_steps):
        chosen = steepest_neighbour(cell, elevation, tile)
        if chosen is None:
            path.termination = FlowTermination.POOLED
            break

        cell, elevation = chosen
        point = mapper.grid_to_world(cell.col, cell.row, tile.dem)
        if point is None:
            logger.warning(f"[{tile.name}] Could not convert cell ({cell.col}, {cell.row}).")
            path.termination = FlowTermination.CONVERSION_ERROR
            break
        path.points.append(point)
        path.cells.append(cell)
    else:
        # Out of steps: a drop that has just reached a pit is pooled, not truncated.
        if steepest_neighbour(cell, elevation, tile) is None:
            path.termination = FlowTermination.POOLED

    logger.info(
        f"[{tile.name}] Raindrop path: {len(path.points)} point(s), {path.termination.value}"
    )
    return path


def calculate_raindrop_path(
    x: float,
    y: float,
    tile: DEMTile,
    origin: Origin | None,
    max_steps: int = MAX_PATH_STEPS,
) -> list[WorldPoint]:
    """Just the points of :func:`simulate_raindrop`."""
    return simulate_raindrop(x, y, tile, origin, max_steps).points
