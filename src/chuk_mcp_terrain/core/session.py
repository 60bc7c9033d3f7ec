"""
Terrain session: the set of loaded tiles and the origin they share.

The first tile added anchors the session origin; every later tile is
placed relative to it until the session is cleared. Rendering is delegated
to a ``SceneRenderer`` that only borrows each entry's mesh, and interested
parties observe changes through ``subscribe``.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Protocol

import numpy as np

from ..constants import DEFAULT_NODATA_POLICY, NodataPolicy, TerrainEvent
from .coords import CoordinateMapper, Origin
from .mesh import TerrainMesh, build_terrain_mesh
from .tiling import DEMTile

logger = logging.getLogger(__name__)

StatusCallback = Callable[[str, bool], None]
EventHandler = Callable[["TerrainEntry | None"], None]


@dataclass
class TerrainEntry:
    """One loaded tile with the mesh it owns."""

    id: str
    name: str
    tile: DEMTile
    mesh: TerrainMesh
    is_visible: bool = True

    @property
    def min_elevation(self) -> float:
        return self.tile.dem.min_elevation

    @property
    def max_elevation(self) -> float:
        return self.tile.dem.max_elevation


class SceneRenderer(Protocol):
    def add_mesh(self, entry: TerrainEntry) -> None: ...

    def remove_mesh(self, entry: TerrainEntry) -> None: ...


class NullRenderer:
    """Renderer that displays nothing; used when no scene is attached."""

    def add_mesh(self, entry: TerrainEntry) -> None:
        pass

    def remove_mesh(self, entry: TerrainEntry) -> None:
        pass


class TerrainSession:
    """Loaded tiles, their shared origin, and change notifications."""

    def __init__(
        self,
        renderer: SceneRenderer | None = None,
        status_callback: StatusCallback | None = None,
    ) -> None:
        self.renderer: SceneRenderer = renderer or NullRenderer()
        self.status_callback = status_callback
        self.origin: Origin | None = None
        self._entries: dict[str, TerrainEntry] = {}
        self._id_counter = 0
        self._handlers: dict[TerrainEvent, list[EventHandler]] = {e: [] for e in TerrainEvent}

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(self, event: TerrainEvent, handler: EventHandler) -> Callable[[], None]:
        """Register a handler; returns a callable that unregisters it."""
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event]:
                self._handlers[event].remove(handler)

        return unsubscribe

    def _emit(self, event: TerrainEvent, entry: TerrainEntry | None) -> None:
        for handler in list(self._handlers[event]):
            try:
                handler(entry)
            except Exception as e:
                logger.error(f"Handler for {event.value} failed: {e}")

    def _status(self, message: str, is_error: bool = False) -> None:
        if self.status_callback is not None:
            self.status_callback(message, is_error)

    # ------------------------------------------------------------------
    # Origin
    # ------------------------------------------------------------------

    def anchor_origin(self, tile: DEMTile) -> Origin:
        """Set the origin from ``tile`` if unset; return the (fixed) origin."""
        if self.origin is None:
            header = tile.dem.header
            self.origin = Origin(x=header.xllcorner, y=header.yllcorner)
            logger.info(
                f"Session origin anchored at ({self.origin.x}, {self.origin.y}) by {tile.name}"
            )
        return self.origin

    def reset_origin(self) -> None:
        self.origin = None

    @property
    def mapper(self) -> CoordinateMapper:
        return CoordinateMapper(self.origin)

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def add_tile(
        self,
        tile: DEMTile,
        policy: NodataPolicy = DEFAULT_NODATA_POLICY,
    ) -> TerrainEntry:
        """Mesh a tile, register it, and hand its mesh to the renderer."""
        origin = self.anchor_origin(tile)
        return self.register_tile(tile, build_terrain_mesh(tile, origin, policy))

    def register_tile(self, tile: DEMTile, mesh: TerrainMesh) -> TerrainEntry:
        """Store an already meshed tile under the next ``dem-<n>`` id."""
        self._id_counter += 1
        entry = TerrainEntry(id=f"dem-{self._id_counter}", name=tile.name, tile=tile, mesh=mesh)
        self._entries[entry.id] = entry

        self.renderer.add_mesh(entry)
        self._emit(TerrainEvent.TILE_ADDED, entry)
        return entry

    def get(self, entry_id: str) -> TerrainEntry:
        """Entry by id; KeyError if unknown."""
        return self._entries[entry_id]

    def remove_tile(self, entry_id: str) -> TerrainEntry:
        entry = self._entries.pop(entry_id)
        self.renderer.remove_mesh(entry)
        self._emit(TerrainEvent.TILE_REMOVED, entry)
        self._status(f"Removed {entry.name}")
        return entry

    def clear(self) -> int:
        """Remove every entry and reset the origin; returns how many were removed."""
        count = len(self._entries)
        for entry in list(self._entries.values()):
            self.renderer.remove_mesh(entry)
        self._entries.clear()
        self._id_counter = 0
        self.reset_origin()
        self._emit(TerrainEvent.SESSION_CLEARED, None)
        logger.info(f"Cleared {count} tile(s) from session")
        return count

    def set_visibility(self, entry_id: str, visible: bool) -> TerrainEntry:
        entry = self._entries[entry_id]
        entry.is_visible = visible
        self._emit(TerrainEvent.TILE_VISIBILITY_CHANGED, entry)
        return entry

    def request_export(self, entry_id: str) -> TerrainEntry:
        entry = self._entries[entry_id]
        self._emit(TerrainEvent.TILE_EXPORT_REQUESTED, entry)
        return entry

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def entries(self) -> list[TerrainEntry]:
        return list(self._entries.values())

    def visible_entries(self) -> list[TerrainEntry]:
        return [e for e in self._entries.values() if e.is_visible]

    def latest_visible(self) -> TerrainEntry | None:
        """Most recently added visible entry."""
        visible = self.visible_entries()
        return visible[-1] if visible else None

    def bounds(self) -> tuple[list[float], list[float]] | None:
        """Scene-space bounding box over all visible meshes, or None."""
        boxes = [e.mesh.world_bounds() for e in self.visible_entries() if e.mesh.vertex_count]
        if not boxes:
            return None
        lows = np.array([lo for lo, _ in boxes])
        highs = np.array([hi for _, hi in boxes])
        return lows.min(axis=0).tolist(), highs.max(axis=0).tolist()

    def __len__(self) -> int:
        return len(self._entries)
