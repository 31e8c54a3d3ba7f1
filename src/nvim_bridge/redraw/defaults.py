"""Built-in handlers that seed the redraw command table."""

from __future__ import annotations

from typing import Iterable

from . import handlers
from .commands import RedrawCommandName
from .table import RedrawCommandTable, RedrawHandler

DEFAULT_HANDLERS: tuple[RedrawHandler, ...] = (
    RedrawHandler(
        name=RedrawCommandName.GRID_RESIZE,
        handler=handlers.grid_resize,
        description="Resize hint for a grid",
    ),
    RedrawHandler(
        name=RedrawCommandName.GRID_LINE,
        handler=handlers.grid_line,
        description="Write runs of cells on one row",
    ),
    RedrawHandler(
        name=RedrawCommandName.GRID_DESTROY,
        handler=handlers.grid_destroy,
        description="Forget a secondary grid",
    ),
    RedrawHandler(
        name=RedrawCommandName.GRID_CLEAR,
        handler=handlers.grid_clear,
        description="Erase the visible region of a grid",
    ),
    RedrawHandler(
        name=RedrawCommandName.GRID_CURSOR_GOTO,
        handler=handlers.grid_cursor_goto,
        description="Move the visible cursor",
    ),
    RedrawHandler(
        name=RedrawCommandName.HL_ATTR_DEFINE,
        handler=handlers.hl_attr_define,
        description="Define a highlight attribute",
    ),
    RedrawHandler(
        name=RedrawCommandName.DEFAULT_COLORS_SET,
        handler=handlers.default_colors_set,
        description="Change default colours on every grid",
    ),
    RedrawHandler(
        name=RedrawCommandName.GRID_SCROLL,
        handler=handlers.grid_scroll,
        description="Scroll a region of a grid",
    ),
    RedrawHandler(
        name=RedrawCommandName.OPTION_SET,
        handler=handlers.option_set,
        description="Record a UI option",
    ),
    RedrawHandler(
        name=RedrawCommandName.SET_ICON,
        handler=handlers.set_icon,
        description="Iconified title (unused)",
    ),
    RedrawHandler(
        name=RedrawCommandName.SET_TITLE,
        handler=handlers.set_title,
        description="Window title",
    ),
    RedrawHandler(
        name=RedrawCommandName.FLUSH,
        handler=handlers.flush,
        description="End of a consistent frame; releases the sync gate",
    ),
)


def load_default_commands(
    table: RedrawCommandTable,
    *,
    entries: Iterable[RedrawHandler] = DEFAULT_HANDLERS,
    replace: bool = False,
) -> RedrawCommandTable:
    for entry in entries:
        table.register(entry, replace=replace)
    return table


__all__ = ["DEFAULT_HANDLERS", "load_default_commands"]
