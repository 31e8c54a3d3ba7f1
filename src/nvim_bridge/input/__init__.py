"""Translation of host input (keys, mouse, paste) into editor requests."""

from .keys import (
    KeyChord,
    Modifier,
    SPECIAL_KEYS,
    decode_key,
    encode_key,
    encode_text,
)
from .mouse import MouseAction, MouseButton, MouseEvent, MouseTracker
from .paste import PasteChunk, PastePhase, PasteSession, PasteStateMachine

__all__ = [
    "KeyChord",
    "Modifier",
    "SPECIAL_KEYS",
    "decode_key",
    "encode_key",
    "encode_text",
    "MouseAction",
    "MouseButton",
    "MouseEvent",
    "MouseTracker",
    "PasteChunk",
    "PastePhase",
    "PasteSession",
    "PasteStateMachine",
]
