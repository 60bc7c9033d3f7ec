"""
ASCII Grid (.asc) reading and writing.

The parser is lenient in the same places a desktop GIS is: missing corner
coordinates and nodata sentinels fall back to defaults, short or missing
data rows are padded with NODATA, and non-numeric or infinite tokens become
NaN. Only a broken header (no usable ncols/nrows/cellsize) is fatal.

NODATA is normalised at this boundary: every cell equal to the header's
``nodata_value`` is stored as NaN, so downstream code never compares
against the sentinel.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from ..constants import (
    DEFAULT_NODATA_VALUE,
    DEFAULT_XLLCORNER,
    DEFAULT_YLLCORNER,
    HEADER_KEYS,
    HEADER_SCAN_LIMIT,
    REQUIRED_HEADER_KEYS,
    ErrorMessages,
)

logger = logging.getLogger(__name__)

FloatArray = NDArray[np.floating[Any]]


class MalformedHeaderError(ValueError):
    """The ASCII Grid header is missing or has invalid required fields."""


@dataclass(frozen=True)
class GridHeader:
    """Metadata for one grid or tile (absolute, not scene-relative)."""

    ncols: int
    nrows: int
    xllcorner: float
    yllcorner: float
    cellsize: float
    nodata_value: float

    @property
    def point_count(self) -> int:
        return self.ncols * self.nrows

    @property
    def plane_width(self) -> float:
        """Width spanned by the vertex grid, ``(ncols - 1) * cellsize``."""
        return (self.ncols - 1) * self.cellsize

    @property
    def plane_height(self) -> float:
        return (self.nrows - 1) * self.cellsize


@dataclass(frozen=True)
class ParsedDEM:
    """A parsed grid: header, elevation array (NaN = NODATA), and value range."""

    header: GridHeader
    elevation: FloatArray
    min_elevation: float
    max_elevation: float

    @property
    def valid_mask(self) -> NDArray[np.bool_]:
        return ~np.isnan(self.elevation)

    @property
    def valid_count(self) -> int:
        return int(np.count_nonzero(self.valid_mask))

    @property
    def nodata_count(self) -> int:
        return self.header.point_count - self.valid_count


def elevation_range(elevation: FloatArray) -> tuple[float, float]:
    """Min/max over finite cells; ``(0.0, 0.0)`` when none are finite."""
    valid = elevation[np.isfinite(elevation)]
    if valid.size == 0:
        return 0.0, 0.0
    return float(np.min(valid)), float(np.max(valid))


def _to_float(token: str) -> float:
    try:
        return float(token)
    except ValueError:
        return float("nan")


def _is_numeric_line(tokens: list[str]) -> bool:
    return all(not math.isnan(_to_float(t)) for t in tokens)


def _header_complete(header: dict[str, float]) -> bool:
    """True once every key except the optional ``nodata_value`` has been seen."""
    return all(key in header for key in HEADER_KEYS if key != "nodata_value")


def _scan_header(lines: list[str], name: str) -> tuple[dict[str, float], int]:
    """Collect header key/values and return them with the data start index."""
    header: dict[str, float] = {}
    scanned = 0

    for i, raw in enumerate(lines):
        tokens = raw.split()
        if not tokens:
            continue
        scanned += 1

        key = tokens[0].lower()
        if key in HEADER_KEYS and len(tokens) >= 2:
            header[key] = _to_float(tokens[1])
        elif _header_complete(header) or _is_numeric_line(tokens):
            logger.debug(f"[{name}] Header complete, data starts at line {i}")
            return header, i
        else:
            logger.warning(f"[{name}] Ignoring unrecognised header line {i}: {raw.strip()!r}")

        if scanned > HEADER_SCAN_LIMIT and len(header) < len(REQUIRED_HEADER_KEYS):
            raise MalformedHeaderError(
                f"too few header keys found after {HEADER_SCAN_LIMIT} lines"
            )

    raise MalformedHeaderError("reached end of file without finding a data section")


def _build_header(values: dict[str, float], name: str) -> GridHeader:
    for key in REQUIRED_HEADER_KEYS:
        value = values.get(key)
        if value is None or math.isnan(value):
            raise MalformedHeaderError(f"missing or invalid required field '{key}'")

    ncols = math.floor(values["ncols"])
    nrows = math.floor(values["nrows"])
    if ncols < 1 or nrows < 1:
        raise MalformedHeaderError(f"grid dimensions must be positive, got {ncols}x{nrows}")
    if values["cellsize"] <= 0:
        raise MalformedHeaderError(f"cellsize must be > 0, got {values['cellsize']}")

    defaults = {
        "xllcorner": DEFAULT_XLLCORNER,
        "yllcorner": DEFAULT_YLLCORNER,
        "nodata_value": DEFAULT_NODATA_VALUE,
    }
    resolved = {}
    for key, default in defaults.items():
        value = values.get(key)
        if value is None or math.isnan(value):
            logger.warning(f"[{name}] Missing or invalid '{key}'. Using default: {default}")
            value = default
        resolved[key] = value

    return GridHeader(
        ncols=ncols,
        nrows=nrows,
        xllcorner=resolved["xllcorner"],
        yllcorner=resolved["yllcorner"],
        cellsize=values["cellsize"],
        nodata_value=resolved["nodata_value"],
    )


def read_ascii_grid(content: str, name: str = "Unknown File") -> ParsedDEM:
    """
    Parse ASCII Grid text, raising on a malformed header.

    Args:
        content: Full text of the .asc file
        name: Label used in log messages

    Returns:
        ParsedDEM with NODATA cells stored as NaN

    Raises:
        MalformedHeaderError: if ncols/nrows/cellsize are missing or invalid
    """
    lines = content.splitlines()
    values, data_start = _scan_header(lines, name)
    header = _build_header(values, name)

    ncols, nrows = header.ncols, header.nrows
    elevation = np.full((nrows, ncols), np.nan, dtype=np.float64)

    for row in range(nrows):
        line_index = data_start + row
        if line_index >= len(lines):
            logger.warning(
                f"[{name}] Expected {nrows} data rows, file ended at row {row}. "
                "Filling remaining rows with NODATA."
            )
            break

        tokens = lines[line_index].split()
        if not tokens:
            logger.warning(f"[{name}] Missing data line for row {row}. Filling with NODATA.")
            continue
        if len(tokens) != ncols:
            logger.warning(
                f"[{name}] Row {row} has {len(tokens)} values, expected {ncols}. Adjusting row."
            )

        count = min(len(tokens), ncols)
        elevation[row, :count] = [_to_float(t) for t in tokens[:count]]

    elevation[elevation == header.nodata_value] = np.nan
    # inf and overflowing tokens such as 1e400 are treated as NODATA
    elevation[~np.isfinite(elevation)] = np.nan

    min_elev, max_elev = elevation_range(elevation)
    if np.all(np.isnan(elevation)):
        logger.warning(f"[{name}] No valid data points found (all NODATA or empty).")

    logger.info(
        f"[{name}] Parsed {ncols}x{nrows} grid, cellsize={header.cellsize}, "
        f"elevation {min_elev} to {max_elev}"
    )
    return ParsedDEM(
        header=header,
        elevation=elevation,
        min_elevation=min_elev,
        max_elevation=max_elev,
    )


def parse_ascii_grid(content: str, name: str = "Unknown File") -> ParsedDEM | None:
    """Parse ASCII Grid text, returning None (and logging why) on failure."""
    try:
        return read_ascii_grid(content, name)
    except MalformedHeaderError as e:
        logger.error(ErrorMessages.MALFORMED_HEADER.format(name, e))
        return None


def write_ascii_grid(dem: ParsedDEM) -> str:
    """Serialise a grid back to ASCII Grid text, writing NaN as ``nodata_value``."""
    header = dem.header
    lines = [
        f"ncols {header.ncols}",
        f"nrows {header.nrows}",
        f"xllcorner {header.xllcorner!r}",
        f"yllcorner {header.yllcorner!r}",
        f"cellsize {header.cellsize!r}",
        f"NODATA_value {header.nodata_value!r}",
    ]
    filled = np.where(np.isnan(dem.elevation), header.nodata_value, dem.elevation)
    for row in filled:
        lines.append(" ".join(repr(float(v)) for v in row))
    return "\n".join(lines) + "\n"
