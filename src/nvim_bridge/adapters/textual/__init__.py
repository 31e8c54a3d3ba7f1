"""Textual host: renders the primary grid and feeds input back."""

from .controller import FrameSnapshot, TextualBridgeAdapter, TextualUIHooks

__all__ = ["FrameSnapshot", "TextualBridgeAdapter", "TextualUIHooks"]
