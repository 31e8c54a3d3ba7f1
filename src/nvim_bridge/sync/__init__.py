"""Decode/render thread coordination."""

from .channel import WAKE_LOCK, WAKE_QUIT, WakeChannel
from .gate import LockLevel, SyncGate

__all__ = ["WakeChannel", "WAKE_LOCK", "WAKE_QUIT", "SyncGate", "LockLevel"]
