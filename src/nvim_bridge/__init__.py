"""Neovim UI protocol bridge for cell-based terminal surfaces."""

__all__ = [
    "adapters",
    "dispatcher",
    "grid",
    "highlights",
    "input",
    "redraw",
    "rpc",
    "runtime",
    "session",
    "surface",
    "sync",
]

__version__ = "0.1.0"
