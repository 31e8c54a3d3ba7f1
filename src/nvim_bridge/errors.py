"""Exception hierarchy shared by the decode, redraw and setup layers."""

from __future__ import annotations

from typing import Any


class BridgeError(RuntimeError):
    """Base class for every error raised by the bridge."""


class MalformedMessageError(BridgeError):
    """Raised when a decoded object is not a valid RPC message."""

    def __init__(self, message: str, *, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload


class RedrawArgumentError(BridgeError):
    """Raised by redraw handlers when a sub-command has the wrong shape."""

    def __init__(self, command: str, message: str) -> None:
        super().__init__(f"{command}: {message}")
        self.command = command


class SetupError(BridgeError):
    """Fatal failure before the main loop starts."""


class EditorSpawnError(SetupError):
    """Raised when the editor subprocess cannot be launched."""


__all__ = [
    "BridgeError",
    "MalformedMessageError",
    "RedrawArgumentError",
    "SetupError",
    "EditorSpawnError",
]
