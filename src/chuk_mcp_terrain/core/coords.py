"""
World <-> grid coordinate mapping for a single tile.

World coordinates are scene-relative: absolute geographic coordinates minus
the session origin. A tile's mesh is centred on its ``(xllcorner, yllcorner)``
placement point, so the tile's cell grid starts half a plane-width to the
left of (and half a plane-height below) that point. Row 0 is the south edge.
"""

import logging
import math
from dataclasses import dataclass

from ..constants import ErrorMessages
from .ascii_grid import GridHeader, ParsedDEM

logger = logging.getLogger(__name__)


class MissingOriginError(RuntimeError):
    """Coordinate mapping was attempted before the session origin was set."""


@dataclass(frozen=True)
class Origin:
    """Absolute coordinates that map to the scene's (0, 0)."""

    x: float
    y: float


@dataclass(frozen=True)
class GridCell:
    col: int
    row: int


@dataclass(frozen=True)
class WorldPoint:
    x: float
    y: float
    z: float

    def as_list(self) -> list[float]:
        return [self.x, self.y, self.z]


def elevation_at(col: int, row: int, dem: ParsedDEM) -> float | None:
    """Elevation of a cell, or None if it is out of bounds or NODATA."""
    header = dem.header
    if not (0 <= col < header.ncols and 0 <= row < header.nrows):
        return None
    value = float(dem.elevation[row, col])
    if math.isnan(value):
        return None
    return value


class CoordinateMapper:
    """Bidirectional world/grid transform anchored to a session origin."""

    def __init__(self, origin: Origin | None) -> None:
        self.origin = origin

    def _require_origin(self) -> Origin:
        if self.origin is None:
            raise MissingOriginError(ErrorMessages.MISSING_ORIGIN)
        return self.origin

    def world_to_grid(self, x: float, y: float, header: GridHeader) -> GridCell | None:
        """Cell containing a scene-relative point, or None if outside the tile."""
        origin = self._require_origin()

        abs_x = x + origin.x
        abs_y = y + origin.y
        extent_left = header.xllcorner - header.plane_width / 2
        extent_bottom = header.yllcorner - header.plane_height / 2
        offset_x = (abs_x - extent_left) / header.cellsize
        offset_y = (abs_y - extent_bottom) / header.cellsize
        if not (math.isfinite(offset_x) and math.isfinite(offset_y)):
            return None

        col = math.floor(offset_x)
        row = math.floor(offset_y)

        if not (0 <= col < header.ncols and 0 <= row < header.nrows):
            return None
        return GridCell(col=col, row=row)

    def grid_to_world(self, col: int, row: int, dem: ParsedDEM) -> WorldPoint | None:
        """Scene-relative centre of a cell at its elevation, or None if unusable."""
        elevation = elevation_at(col, row, dem)
        if elevation is None:
            return None
        origin = self._require_origin()

        header = dem.header
        abs_x = header.xllcorner + (col + 0.5) * header.cellsize - header.plane_width / 2
        abs_y = header.yllcorner + (row + 0.5) * header.cellsize - header.plane_height / 2
        return WorldPoint(x=abs_x - origin.x, y=abs_y - origin.y, z=elevation)
