"""Rendering surface primitives and the in-memory cell surface."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional, Protocol, Tuple

from .highlights import (
    DEFAULT_BACKGROUND,
    DEFAULT_FOREGROUND,
    HighlightAttr,
    RGB,
)


class ColorSlot(str, Enum):
    PRIMARY = "primary"
    TEXT = "text"
    BACKGROUND = "background"


@dataclass(frozen=True, slots=True)
class Cell:
    """One rendered cell; ``ch == ""`` means the cell was never written."""

    ch: str
    attr: HighlightAttr


class Surface(Protocol):
    """Primitives the grid model drives; implemented by the host renderer."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def move_to(self, col: int, row: int) -> None: ...

    def write(self, text: str, attr: HighlightAttr) -> None: ...

    def erase(
        self, region: Optional[Tuple[int, int, int, int]] = None
    ) -> None: ...

    def read_cell(self, col: int, row: int) -> Cell: ...

    def get_default_attr(self) -> HighlightAttr: ...

    def set_default_attr(self, attr: HighlightAttr) -> None: ...

    def set_color(
        self, slot: ColorSlot, fg: Optional[RGB] = None, bg: Optional[RGB] = None
    ) -> None: ...

    def set_ident(self, ident: str) -> None: ...

    def resize(self, cols: int, rows: int) -> None: ...


class CellSurface:
    """Plain cell matrix implementing ``Surface``.

    Writes land at the drawing cursor and advance it one column; anything
    past the right edge is clipped. Hosts paint from ``snapshot()``.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        default_attr: Optional[HighlightAttr] = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("surface dimensions must be positive")
        self._width = width
        self._height = height
        self._default = default_attr or HighlightAttr(
            0, fg=DEFAULT_FOREGROUND, bg=DEFAULT_BACKGROUND
        )
        self._cells: List[List[Cell]] = [
            self._blank_row(width, "") for _ in range(height)
        ]
        self.cursor: Tuple[int, int] = (0, 0)
        self.colors: Dict[ColorSlot, Tuple[Optional[RGB], Optional[RGB]]] = {}
        self.ident = ""
        self.size_hint: Optional[Tuple[int, int]] = None
        self.version = 0

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def _blank_row(self, width: int, ch: str = " ") -> List[Cell]:
        attr = replace(self._default)
        return [Cell(ch, attr) for _ in range(width)]

    def _touch(self) -> None:
        self.version += 1

    def move_to(self, col: int, row: int) -> None:
        self.cursor = (max(0, col), max(0, row))

    def write(self, text: str, attr: HighlightAttr) -> None:
        col, row = self.cursor
        if 0 <= row < self._height and 0 <= col < self._width:
            self._cells[row][col] = Cell(text, replace(attr))
            self._touch()
        self.cursor = (col + 1, row)

    def erase(self, region: Optional[Tuple[int, int, int, int]] = None) -> None:
        """Blank ``(left, top, right, bottom)`` (exclusive), or everything."""

        left, top, right, bottom = region or (0, 0, self._width, self._height)
        blank = Cell(" ", replace(self._default))
        for row in range(max(0, top), min(bottom, self._height)):
            cells = self._cells[row]
            for col in range(max(0, left), min(right, self._width)):
                cells[col] = blank
        self._touch()

    def read_cell(self, col: int, row: int) -> Cell:
        if not (0 <= row < self._height and 0 <= col < self._width):
            return Cell("", replace(self._default))
        return self._cells[row][col]

    def get_default_attr(self) -> HighlightAttr:
        return replace(self._default)

    def set_default_attr(self, attr: HighlightAttr) -> None:
        self._default = replace(attr)
        self._touch()

    def set_color(
        self, slot: ColorSlot, fg: Optional[RGB] = None, bg: Optional[RGB] = None
    ) -> None:
        current_fg, current_bg = self.colors.get(slot, (None, None))
        self.colors[slot] = (
            fg if fg is not None else current_fg,
            bg if bg is not None else current_bg,
        )
        self._touch()

    def set_ident(self, ident: str) -> None:
        self.ident = ident
        self._touch()

    def resize(self, cols: int, rows: int) -> None:
        if cols <= 0 or rows <= 0:
            return
        self.size_hint = (cols, rows)
        resized: List[List[Cell]] = []
        for row in range(rows):
            if row < self._height:
                existing = self._cells[row][:cols]
                existing.extend(self._blank_row(cols - len(existing), ""))
                resized.append(existing)
            else:
                resized.append(self._blank_row(cols, ""))
        self._cells = resized
        self._width = cols
        self._height = rows
        self._touch()

    def snapshot(self) -> Tuple[Tuple[Cell, ...], ...]:
        return tuple(tuple(row) for row in self._cells)

    def row_text(self, row: int) -> str:
        return "".join(cell.ch or " " for cell in self._cells[row])


__all__ = ["ColorSlot", "Cell", "Surface", "CellSurface"]
