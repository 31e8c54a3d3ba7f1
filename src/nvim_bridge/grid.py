"""Per-grid cursor state and the adapter onto the rendering surface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional, Tuple

from nvim_bridge.runtime import telemetry
from nvim_bridge.runtime.config import PRIMARY_GRID_ID

from .highlights import HighlightAttr, RGB
from .surface import Cell, ColorSlot, Surface

SurfaceFactory = Callable[[int, int, int], Surface]


@dataclass(slots=True)
class GridState:
    """Dimensions and the editor-visible cursor of one grid."""

    grid_id: int
    width: int
    height: int
    cursor_row: int = 0
    cursor_col: int = 0
    destroyed: bool = False


class GridHandle:
    """Typed per-grid context: its state plus the surface it draws on.

    Mutating calls are only made while the sync gate is held; the handle
    does not check that itself.
    """

    def __init__(self, state: GridState, surface: Surface) -> None:
        self.state = state
        self.surface = surface

    @property
    def grid_id(self) -> int:
        return self.state.grid_id

    def move_to(self, col: int, row: int) -> None:
        self.surface.move_to(col, row)

    def goto(self, row: int, col: int) -> None:
        """Move the logical cursor and the drawing position together."""

        self.state.cursor_row = row
        self.state.cursor_col = col
        self.surface.move_to(col, row)

    def restore_cursor(self) -> None:
        self.surface.move_to(self.state.cursor_col, self.state.cursor_row)

    def write(self, text: str, attr: HighlightAttr) -> None:
        self.surface.write(text, attr)

    def erase(self, region: Optional[Tuple[int, int, int, int]] = None) -> None:
        self.surface.erase(region)

    def read_cell(self, col: int, row: int) -> Cell:
        return self.surface.read_cell(col, row)

    def get_default_attr(self) -> HighlightAttr:
        return self.surface.get_default_attr()

    def set_default_attr(self, attr: HighlightAttr) -> None:
        self.surface.set_default_attr(attr)

    def set_default_color(self, slot: ColorSlot, fg: RGB, bg: RGB) -> None:
        self.surface.set_color(slot, fg=fg, bg=bg)

    def set_ident(self, ident: str) -> None:
        self.surface.set_ident(ident)

    def resize(self, cols: int, rows: int) -> None:
        self.state.width = cols
        self.state.height = rows
        self.surface.resize(cols, rows)


class GridModel:
    """Owns every live grid, keyed by the editor's grid id.

    The primary grid always exists. Other ids map onto it unless multigrid
    is enabled and a ``surface_factory`` can create surfaces on demand.
    """

    def __init__(
        self,
        primary: Surface,
        *,
        primary_id: int = PRIMARY_GRID_ID,
        multigrid: bool = False,
        surface_factory: Optional[SurfaceFactory] = None,
    ) -> None:
        self.primary_id = primary_id
        self.multigrid = multigrid
        self._factory = surface_factory
        self._grids: Dict[int, GridHandle] = {
            primary_id: GridHandle(
                GridState(primary_id, primary.width, primary.height), primary
            )
        }

    @property
    def primary(self) -> GridHandle:
        return self._grids[self.primary_id]

    def __iter__(self) -> Iterator[GridHandle]:
        return iter(list(self._grids.values()))

    def __len__(self) -> int:
        return len(self._grids)

    def __contains__(self, grid_id: object) -> bool:
        return grid_id in self._grids

    def get(self, grid_id: int) -> GridHandle:
        handle = self._grids.get(grid_id)
        if handle is not None:
            return handle
        if not self.multigrid or self._factory is None:
            return self.primary
        primary = self.primary.state
        surface = self._factory(grid_id, primary.width, primary.height)
        handle = GridHandle(
            GridState(grid_id, surface.width, surface.height), surface
        )
        self._grids[grid_id] = handle
        telemetry.record_event("grid.created", data={"grid": grid_id})
        return handle

    def destroy(self, grid_id: int) -> bool:
        if grid_id == self.primary_id:
            return False
        handle = self._grids.pop(grid_id, None)
        if handle is None:
            return False
        handle.state.destroyed = True
        telemetry.record_event("grid.destroyed", data={"grid": grid_id})
        return True


__all__ = ["GridState", "GridHandle", "GridModel", "SurfaceFactory"]
