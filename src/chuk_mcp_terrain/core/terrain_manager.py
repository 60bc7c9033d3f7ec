"""
Terrain Manager - central orchestrator for DEM tiles and flow queries.

Owns the terrain session (loaded tiles + shared origin), runs the
parse -> split -> mesh pipeline, and stores exports in the artifact store.
Heavy synchronous work is wrapped in asyncio.to_thread().
"""

import asyncio
import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..constants import (
    DEFAULT_NODATA_POLICY,
    DEFAULT_PREVIEW_STYLE,
    MAX_PATH_STEPS,
    MAX_POINTS_PER_TILE,
    NODATA_POLICIES,
    PREVIEW_STYLES,
    RETRY_ATTEMPTS,
    RETRY_WAIT_MAX,
    RETRY_WAIT_MIN,
    EnvVar,
    ErrorMessages,
    NodataPolicy,
)
from .ascii_grid import parse_ascii_grid, write_ascii_grid
from .coords import GridCell, MissingOriginError, WorldPoint
from .flow import FlowPath, simulate_raindrop
from .mesh import build_terrain_mesh
from .session import SceneRenderer, StatusCallback, TerrainEntry, TerrainSession
from .tiling import split_dem

logger = logging.getLogger(__name__)

_retry_storage = retry(
    stop=stop_after_attempt(RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=1, min=RETRY_WAIT_MIN, max=RETRY_WAIT_MAX),
    retry=retry_if_exception_type((ConnectionError, TimeoutError, OSError)),
    reraise=True,
)

DESCRIPTION_PROMPT = (
    "Describe this terrain: {name}, Columns: {ncols}, Rows: {nrows}, "
    "Cell Size: {cellsize}, Min Elev: {min_elev:.2f}, Max Elev: {max_elev:.2f}. "
    "Provide a brief, engaging geographical description (1-3 sentences). "
    "Focus on the general landscape type and elevation changes. Be descriptive."
)


@dataclass
class TileSummary:
    """Listing view of one loaded tile."""

    id: str
    name: str
    ncols: int
    nrows: int
    xllcorner: float
    yllcorner: float
    cellsize: float
    elevation_range: list[float]
    is_visible: bool
    vertex_count: int
    triangle_count: int


@dataclass
class LoadResult:
    """Result of loading one DEM file."""

    source_name: str
    split: bool
    tiles: list[TileSummary]
    origin: list[float]
    nodata_policy: str


@dataclass
class TileDetail:
    """Full description of one loaded tile."""

    summary: TileSummary
    nodata_value: float
    valid_cells: int
    nodata_cells: int
    offset: list[float]
    world_bounds: list[list[float]]
    nodata_policy: str
    description_prompt: str


@dataclass
class FlowResult:
    """Result of a raindrop path simulation."""

    tile_id: str
    points: list[list[float]]
    cells: list[list[int]]
    termination: str
    steps: int


@dataclass
class ExportResult:
    """Artifact references for an exported tile."""

    tile_id: str
    grid_ref: str
    preview_ref: str | None
    preview_style: str


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}; using {default}")
        return default


class TerrainManager:
    """Central manager for DEM tiles, meshes, and flow simulation."""

    def __init__(
        self,
        max_points_per_tile: int | None = None,
        max_path_steps: int | None = None,
        renderer: SceneRenderer | None = None,
        status_callback: StatusCallback | None = None,
    ) -> None:
        self.max_points_per_tile = max_points_per_tile or _env_int(
            EnvVar.MAX_POINTS_PER_TILE, MAX_POINTS_PER_TILE
        )
        self.max_path_steps = max_path_steps or _env_int(EnvVar.MAX_PATH_STEPS, MAX_PATH_STEPS)
        self.session = TerrainSession(renderer=renderer, status_callback=status_callback)
        self._load_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_dem(
        self,
        content: str | None = None,
        path: str | None = None,
        artifact_ref: str | None = None,
        name: str | None = None,
        nodata_policy: str = DEFAULT_NODATA_POLICY.value,
    ) -> LoadResult:
        """Parse, split, and mesh one ASCII Grid DEM into the session."""
        policy = self._get_policy(nodata_policy)

        if sum(x is not None for x in (content, path, artifact_ref)) != 1:
            raise ValueError(ErrorMessages.NO_INPUT)

        if path is not None:
            file_path = Path(path)
            if not file_path.is_file():
                raise ValueError(ErrorMessages.FILE_NOT_FOUND.format(path))
            content = await asyncio.to_thread(file_path.read_text)
            name = name or file_path.name
        elif artifact_ref is not None:
            data = await self._retrieve_artifact(artifact_ref)
            content = data.decode("utf-8") if isinstance(data, bytes) else str(data)
            name = name or artifact_ref.rsplit("/", 1)[-1]

        name = name or "inline.asc"
        if content is None:
            raise ValueError(ErrorMessages.NO_INPUT)

        parsed = await asyncio.to_thread(parse_ascii_grid, content, name)
        if parsed is None:
            raise ValueError(ErrorMessages.PARSE_FAILED.format(name))

        tiles = await asyncio.to_thread(split_dem, parsed, name, self.max_points_per_tile)
        if not tiles:
            raise ValueError(ErrorMessages.NO_TILES.format(name))

        # Loads are serialised; anchoring and registering stay on the event loop.
        async with self._load_lock:
            if len(self.session) == 0:
                self.session.reset_origin()

            entries = []
            for tile in tiles:
                origin = self.session.anchor_origin(tile)
                mesh = await asyncio.to_thread(build_terrain_mesh, tile, origin, policy)
                entries.append(self.session.register_tile(tile, mesh))

            origin = self.session.origin
            if origin is None:
                raise MissingOriginError(ErrorMessages.MISSING_ORIGIN)
        logger.info(f"[{name}] Loaded {len(entries)} tile(s)")

        return LoadResult(
            source_name=name,
            split=len(tiles) > 1 or tiles[0].dem is not parsed,
            tiles=[self._summarize(e) for e in entries],
            origin=[origin.x, origin.y],
            nodata_policy=policy.value,
        )

    # ------------------------------------------------------------------
    # Session queries & mutation (sync, no I/O)
    # ------------------------------------------------------------------

    def list_tiles(self) -> list[TileSummary]:
        return [self._summarize(e) for e in self.session.entries]

    def describe_tile(self, tile_id: str) -> TileDetail:
        entry = self._get_entry(tile_id)
        dem = entry.tile.dem
        header = dem.header
        low, high = entry.mesh.world_bounds()
        return TileDetail(
            summary=self._summarize(entry),
            nodata_value=header.nodata_value,
            valid_cells=dem.valid_count,
            nodata_cells=dem.nodata_count,
            offset=list(entry.mesh.offset),
            world_bounds=[low, high],
            nodata_policy=entry.mesh.policy.value,
            description_prompt=DESCRIPTION_PROMPT.format(
                name=entry.name,
                ncols=header.ncols,
                nrows=header.nrows,
                cellsize=header.cellsize,
                min_elev=dem.min_elevation,
                max_elev=dem.max_elevation,
            ),
        )

    def set_visibility(self, tile_id: str, visible: bool) -> TileSummary:
        self._get_entry(tile_id)
        return self._summarize(self.session.set_visibility(tile_id, visible))

    def remove_tile(self, tile_id: str) -> TileSummary:
        self._get_entry(tile_id)
        return self._summarize(self.session.remove_tile(tile_id))

    def clear(self) -> int:
        return self.session.clear()

    # ------------------------------------------------------------------
    # Coordinates & flow
    # ------------------------------------------------------------------

    def world_to_grid(self, tile_id: str, x: float, y: float) -> GridCell:
        entry = self._get_entry(tile_id)
        cell = self._mapper().world_to_grid(x, y, entry.tile.dem.header)
        if cell is None:
            raise ValueError(ErrorMessages.OUT_OF_BOUNDS.format(x, y, tile_id))
        return cell

    def grid_to_world(self, tile_id: str, col: int, row: int) -> WorldPoint:
        entry = self._get_entry(tile_id)
        point = self._mapper().grid_to_world(col, row, entry.tile.dem)
        if point is None:
            raise ValueError(ErrorMessages.INVALID_CELL.format(col, row, tile_id))
        return point

    async def raindrop_path(
        self,
        tile_id: str,
        x: float,
        y: float,
        max_steps: int | None = None,
    ) -> FlowResult:
        """Trace a steepest-descent raindrop path from a scene point on a tile."""
        entry = self._get_entry(tile_id)
        steps = max_steps if max_steps is not None else self.max_path_steps
        if steps < 1:
            raise ValueError(ErrorMessages.INVALID_MAX_STEPS.format(steps))
        if self.session.origin is None:
            raise MissingOriginError(ErrorMessages.MISSING_ORIGIN)

        path: FlowPath = await asyncio.to_thread(
            simulate_raindrop, x, y, entry.tile, self.session.origin, steps
        )
        return FlowResult(
            tile_id=tile_id,
            points=[p.as_list() for p in path.points],
            cells=[[c.col, c.row] for c in path.cells],
            termination=path.termination.value,
            steps=path.steps,
        )

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    async def export_tile(
        self,
        tile_id: str,
        preview_style: str = DEFAULT_PREVIEW_STYLE,
    ) -> ExportResult:
        """Store a tile's ASCII Grid text and a PNG preview as artifacts."""
        from . import previews

        if preview_style not in PREVIEW_STYLES:
            raise ValueError(
                ErrorMessages.INVALID_PREVIEW_STYLE.format(preview_style, ", ".join(PREVIEW_STYLES))
            )
        entry = self._get_entry(tile_id)
        self.session.request_export(tile_id)
        dem = entry.tile.dem
        header = dem.header

        text = await asyncio.to_thread(write_ascii_grid, dem)
        metadata = {
            "schema_version": "1.0",
            "type": "dem_tile",
            "tile_id": tile_id,
            "name": entry.name,
            "ncols": header.ncols,
            "nrows": header.nrows,
            "xllcorner": header.xllcorner,
            "yllcorner": header.yllcorner,
            "cellsize": header.cellsize,
            "nodata_value": header.nodata_value,
            "elevation_range": [dem.min_elevation, dem.max_elevation],
        }
        grid_ref = await self._store_artifact(text.encode("utf-8"), metadata, suffix=".asc")

        preview_ref = None
        try:
            if preview_style == "hillshade":
                png = await asyncio.to_thread(
                    previews.elevation_to_hillshade_png, dem.elevation, header.cellsize
                )
            else:
                png = await asyncio.to_thread(previews.elevation_to_terrain_png, dem.elevation)
            preview_ref = await self._store_artifact(
                png,
                {"type": "dem_tile_preview", "tile_id": tile_id, "style": preview_style},
                suffix=f"_{preview_style}.png",
            )
        except Exception as e:
            logger.warning(f"Failed to generate {preview_style} preview for {tile_id}: {e}")

        return ExportResult(
            tile_id=tile_id,
            grid_ref=grid_ref,
            preview_ref=preview_ref,
            preview_style=preview_style,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_entry(self, tile_id: str) -> TerrainEntry:
        try:
            return self.session.get(tile_id)
        except KeyError:
            loaded = ", ".join(e.id for e in self.session.entries) or "none"
            raise ValueError(ErrorMessages.UNKNOWN_TILE.format(tile_id, loaded)) from None

    def _get_policy(self, nodata_policy: str) -> NodataPolicy:
        if nodata_policy not in NODATA_POLICIES:
            raise ValueError(
                ErrorMessages.INVALID_NODATA_POLICY.format(
                    nodata_policy, ", ".join(NODATA_POLICIES)
                )
            )
        return NodataPolicy(nodata_policy)

    def _mapper(self):
        if self.session.origin is None:
            raise MissingOriginError(ErrorMessages.MISSING_ORIGIN)
        return self.session.mapper

    def _summarize(self, entry: TerrainEntry) -> TileSummary:
        header = entry.tile.dem.header
        return TileSummary(
            id=entry.id,
            name=entry.name,
            ncols=header.ncols,
            nrows=header.nrows,
            xllcorner=header.xllcorner,
            yllcorner=header.yllcorner,
            cellsize=header.cellsize,
            elevation_range=[entry.min_elevation, entry.max_elevation],
            is_visible=entry.is_visible,
            vertex_count=entry.mesh.vertex_count,
            triangle_count=entry.mesh.triangle_count,
        )

    def _get_store(self) -> Any:
        """Get the artifact store instance."""
        from chuk_mcp_server import get_artifact_store

        store = get_artifact_store()
        if store is None:
            raise RuntimeError(ErrorMessages.NO_ARTIFACT_STORE)
        return store

    @_retry_storage
    async def _store_artifact(
        self,
        data: bytes,
        metadata: dict,
        suffix: str = ".asc",
    ) -> str:
        """Store export data in the artifact store."""
        try:
            store = self._get_store()
            ref = f"terrain/{uuid.uuid4().hex[:12]}{suffix}"
            mime = "image/png" if suffix.endswith(".png") else "text/plain"

            await store.store(
                ref,
                data,
                mime_type=mime,
                metadata=metadata,
                summary=f"Terrain export ({metadata.get('type', 'unknown')})",
            )
            return ref
        except Exception as e:
            logger.error(f"Failed to store artifact: {e}")
            raise

    @_retry_storage
    async def _retrieve_artifact(self, artifact_ref: str) -> bytes:
        store = self._get_store()
        data = await store.retrieve(artifact_ref)
        if data is None:
            raise ValueError(ErrorMessages.INVALID_ARTIFACT_REF.format(artifact_ref))
        return data
