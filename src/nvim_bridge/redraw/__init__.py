"""Redraw batch parsing and the command table applied to the grid model."""

from .commands import RedrawCommand, RedrawCommandName, parse_batch, parse_command
from .context import RedrawContext
from .defaults import DEFAULT_HANDLERS, load_default_commands
from .table import RedrawCommandTable, RedrawHandler, TableStats

__all__ = [
    "RedrawCommand",
    "RedrawCommandName",
    "parse_batch",
    "parse_command",
    "RedrawContext",
    "RedrawCommandTable",
    "RedrawHandler",
    "TableStats",
    "DEFAULT_HANDLERS",
    "load_default_commands",
]
