"""Handlers for each redraw sub-command.

Every handler takes the ``RedrawContext`` and the argument tuple of a
single call. A call with the wrong shape raises ``RedrawArgumentError``;
the dispatcher reports it and moves on to the next call.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from nvim_bridge.errors import RedrawArgumentError
from nvim_bridge.grid import GridHandle
from nvim_bridge.highlights import DEFAULT_ID, HighlightAttr
from nvim_bridge.runtime import telemetry
from nvim_bridge.surface import ColorSlot

from .context import RedrawContext

_LOGGER = "nvim_bridge.redraw"


def _int(command: str, value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise RedrawArgumentError(command, f"{what} must be an integer, got {value!r}")
    return value


def _uint(command: str, value: Any, what: str) -> int:
    number = _int(command, value, what)
    if number < 0:
        raise RedrawArgumentError(command, f"{what} must not be negative")
    return number


def _str(command: str, value: Any, what: str) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if not isinstance(value, str):
        raise RedrawArgumentError(command, f"{what} must be a string")
    return value


def _seq(command: str, value: Any, what: str) -> Sequence[Any]:
    if not isinstance(value, (list, tuple)):
        raise RedrawArgumentError(command, f"{what} must be an array")
    return value


def _arity(command: str, args: Sequence[Any], minimum: int) -> None:
    if len(args) < minimum:
        raise RedrawArgumentError(
            command, f"expected at least {minimum} arguments, got {len(args)}"
        )


def grid_resize(ctx: RedrawContext, args: Sequence[Any]) -> None:
    # a size hint only; a bad one is noted and ignored
    if len(args) < 3 or not all(
        isinstance(value, int) and not isinstance(value, bool) and value >= minimum
        for value, minimum in zip(args[:3], (0, 1, 1))
    ):
        telemetry.trace(f"grid_resize: ignoring {args!r}", logger_name=_LOGGER)
        return
    grid_id, width, height = args[0], args[1], args[2]
    ctx.grids.get(grid_id).resize(width, height)


def _parse_cells(
    ctx: RedrawContext, cells: Sequence[Any]
) -> list[tuple[str, HighlightAttr, int]]:
    runs: list[tuple[str, HighlightAttr, int]] = []
    attr = ctx.highlights.resolve(DEFAULT_ID)
    for index, raw in enumerate(cells):
        cell = _seq("grid_line", raw, f"cell {index}")
        if not cell:
            raise RedrawArgumentError("grid_line", f"cell {index} is empty")
        text = _str("grid_line", cell[0], "cell text")
        if len(cell) > 1:
            attr = ctx.highlights.resolve(_uint("grid_line", cell[1], "hl_id"))
        repeat = _uint("grid_line", cell[2], "repeat") if len(cell) > 2 else 1
        runs.append((text, attr, repeat))
    return runs


def grid_line(ctx: RedrawContext, args: Sequence[Any]) -> None:
    """``[grid, row, col_start, cells, ...]``; cells are ``[text, hl?, repeat?]``."""

    _arity("grid_line", args, 4)
    grid_id = _uint("grid_line", args[0], "grid")
    row = _uint("grid_line", args[1], "row")
    col = _uint("grid_line", args[2], "col_start")
    cells = _seq("grid_line", args[3], "cells")
    runs = _parse_cells(ctx, cells)

    handle = ctx.grids.get(grid_id)
    handle.move_to(col, row)
    for text, attr, repeat in runs:
        for _ in range(repeat):
            handle.write(text, attr)
    # the drawing cursor ends at the line's end; put the visible one back
    handle.restore_cursor()


def grid_clear(ctx: RedrawContext, args: Sequence[Any]) -> None:
    _arity("grid_clear", args, 1)
    ctx.grids.get(_uint("grid_clear", args[0], "grid")).erase()


def grid_destroy(ctx: RedrawContext, args: Sequence[Any]) -> None:
    _arity("grid_destroy", args, 1)
    ctx.grids.destroy(_uint("grid_destroy", args[0], "grid"))


def grid_cursor_goto(ctx: RedrawContext, args: Sequence[Any]) -> None:
    _arity("grid_cursor_goto", args, 3)
    grid_id = _uint("grid_cursor_goto", args[0], "grid")
    row = _uint("grid_cursor_goto", args[1], "row")
    col = _uint("grid_cursor_goto", args[2], "col")
    ctx.grids.get(grid_id).goto(row, col)


def hl_attr_define(ctx: RedrawContext, args: Sequence[Any]) -> None:
    """``[id, rgb_attrs, cterm_attrs, info]``; only ``rgb_attrs`` is used."""

    _arity("hl_attr_define", args, 2)
    attr_id = _uint("hl_attr_define", args[0], "attr_id")
    rgb_map = args[1]
    if not isinstance(rgb_map, Mapping):
        raise RedrawArgumentError("hl_attr_define", "rgb_attrs is not a map")
    ctx.highlights.define(attr_id, rgb_map)


def default_colors_set(ctx: RedrawContext, args: Sequence[Any]) -> None:
    """``[rgb_fg, rgb_bg, rgb_sp, cterm_fg, cterm_bg]``; pushed to every grid now."""

    _arity("default_colors_set", args, 2)
    fg = _int("default_colors_set", args[0], "rgb_fg")
    bg = _int("default_colors_set", args[1], "rgb_bg")
    ctx.highlights.set_defaults(fg, bg)
    default = ctx.highlights.resolve(DEFAULT_ID)
    assert default.fg is not None and default.bg is not None
    for handle in ctx.grids:
        handle.set_default_color(ColorSlot.PRIMARY, default.fg, default.bg)
        handle.set_default_color(ColorSlot.TEXT, default.fg, default.bg)
        handle.set_default_color(ColorSlot.BACKGROUND, default.bg, default.bg)
        handle.set_default_attr(default)


def _copy_row(handle: GridHandle, left: int, right: int, src: int, dst: int) -> None:
    handle.move_to(left, dst)
    for col in range(left, right):
        cell = handle.read_cell(col, src)
        # cells that were never written must not be copied as empty, the
        # renderer would otherwise keep stale content at the destination
        handle.write(cell.ch or " ", cell.attr)


def grid_scroll(ctx: RedrawContext, args: Sequence[Any]) -> None:
    """``[grid, top, bot, left, right, rows, cols]``.

    ``rows > 0`` moves content up: destinations run top-down, each reading
    ``dst + rows``. ``rows < 0`` moves content down: destinations run
    bottom-up. Rows with no in-region source keep what they had.
    """

    _arity("grid_scroll", args, 7)
    grid_id = _uint("grid_scroll", args[0], "grid")
    top = _uint("grid_scroll", args[1], "top")
    bottom = _uint("grid_scroll", args[2], "bot")
    left = _uint("grid_scroll", args[3], "left")
    right = _uint("grid_scroll", args[4], "right")
    rows = _int("grid_scroll", args[5], "rows")
    cols = _int("grid_scroll", args[6], "cols")

    if cols != 0:
        telemetry.record_event(
            "redraw.unexpected_scroll_cols",
            level="warning",
            data={"cols": cols},
            logger_name=_LOGGER,
        )

    handle = ctx.grids.get(grid_id)
    if rows > 0:
        for dst in range(top, bottom - rows):
            _copy_row(handle, left, right, dst + rows, dst)
    elif rows < 0:
        for dst in range(bottom - 1, top - rows - 1, -1):
            _copy_row(handle, left, right, dst + rows, dst)
    handle.restore_cursor()


def option_set(ctx: RedrawContext, args: Sequence[Any]) -> None:
    if len(args) >= 2:
        try:
            ctx.options[_str("option_set", args[0], "name")] = args[1]
        except RedrawArgumentError:
            telemetry.trace(f"option_set: ignoring {args!r}", logger_name=_LOGGER)


def set_icon(ctx: RedrawContext, args: Sequence[Any]) -> None:
    del ctx, args  # no iconified identity on this surface


def set_title(ctx: RedrawContext, args: Sequence[Any]) -> None:
    if len(args) != 1:
        raise RedrawArgumentError("set_title", "expected [title]")
    title = _str("set_title", args[0], "title")
    ctx.grids.primary.set_ident(title)


def flush(ctx: RedrawContext, args: Sequence[Any]) -> None:
    del args
    if not ctx.gate.release_batch():
        telemetry.trace("flush: gate was not held", logger_name=_LOGGER)


__all__ = [
    "grid_resize",
    "grid_line",
    "grid_clear",
    "grid_destroy",
    "grid_cursor_goto",
    "hl_attr_define",
    "default_colors_set",
    "grid_scroll",
    "option_set",
    "set_icon",
    "set_title",
    "flush",
]
