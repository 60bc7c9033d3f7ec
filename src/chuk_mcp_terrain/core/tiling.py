"""
Splitting oversized grids into bounded-size tiles.

Tiles keep absolute geographic alignment: each derived header carries the
tile's own lower-left corner, with grid row 0 treated as the south edge.
"""

import logging
import math
from dataclasses import dataclass, replace

import numpy as np

from ..constants import MAX_POINTS_PER_TILE
from .ascii_grid import ParsedDEM, elevation_range

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DEMTile:
    """A named grid produced by the splitter."""

    name: str
    dem: ParsedDEM


def choose_partition(ncols: int, nrows: int, max_points: int) -> tuple[int, int] | None:
    """
    Pick ``(num_tiles_x, num_tiles_y)`` so every tile holds at most max_points.

    Grows the axis whose tiles are currently longer, to keep tiles close to
    square. Returns None if the partition cannot converge.
    """
    tiles_x, tiles_y = 1, 1
    while math.ceil(ncols / tiles_x) * math.ceil(nrows / tiles_y) > max_points:
        if tiles_x * nrows > tiles_y * ncols:
            tiles_y += 1
        else:
            tiles_x += 1
        if tiles_x > ncols and tiles_y > nrows:
            return None
    return tiles_x, tiles_y


def tile_bounds(index: int, count: int, extent: int) -> tuple[int, int]:
    """Half-open ``[start, end)`` range of tile ``index`` out of ``count`` over ``extent``."""
    return (index * extent) // count, ((index + 1) * extent) // count


def split_dem(
    dem: ParsedDEM,
    name: str,
    max_points: int = MAX_POINTS_PER_TILE,
) -> list[DEMTile]:
    """
    Split a parsed grid into tiles of at most ``max_points`` cells.

    Args:
        dem: Parsed grid
        name: Original name; tiles are named ``{name}_part{cy}_{cx}``
        max_points: Point budget per tile

    Returns:
        Tiles in row-major order. A grid within budget (or one that cannot
        be partitioned) comes back as a single tile wrapping the same object.
    """
    header = dem.header
    total = header.point_count

    if total <= max_points:
        logger.info(f"[{name}] Within size limit ({total} points). Not splitting.")
        return [DEMTile(name=name, dem=dem)]

    partition = choose_partition(header.ncols, header.nrows, max_points)
    if partition is None:
        logger.error(
            f"[{name}] Cannot split {header.ncols}x{header.nrows} grid to meet "
            f"{max_points} points per tile. Using the unsplit grid."
        )
        return [DEMTile(name=name, dem=dem)]

    tiles_x, tiles_y = partition
    logger.info(f"[{name}] Too large ({total} points). Splitting into {tiles_x}x{tiles_y} tiles.")

    tiles = []
    for cy in range(tiles_y):
        start_row, end_row = tile_bounds(cy, tiles_y, header.nrows)
        for cx in range(tiles_x):
            start_col, end_col = tile_bounds(cx, tiles_x, header.ncols)
            tile_name = f"{name}_part{cy}_{cx}"

            if end_row <= start_row or end_col <= start_col:
                logger.warning(f"[{name}] Skipping empty tile at [{cy},{cx}].")
                continue

            elevation = dem.elevation[start_row:end_row, start_col:end_col].copy()
            tile_header = replace(
                header,
                ncols=end_col - start_col,
                nrows=end_row - start_row,
                xllcorner=header.xllcorner + start_col * header.cellsize,
                yllcorner=header.yllcorner + (header.nrows - end_row) * header.cellsize,
            )
            min_elev, max_elev = elevation_range(elevation)
            if np.all(np.isnan(elevation)):
                logger.warning(f"[{tile_name}] No valid data points in this tile.")

            tiles.append(
                DEMTile(
                    name=tile_name,
                    dem=ParsedDEM(
                        header=tile_header,
                        elevation=elevation,
                        min_elevation=min_elev,
                        max_elevation=max_elev,
                    ),
                )
            )
            logger.debug(
                f"[{tile_name}] {tile_header.ncols}x{tile_header.nrows}, "
                f"xll={tile_header.xllcorner:.2f}, yll={tile_header.yllcorner:.2f}"
            )

    return tiles
