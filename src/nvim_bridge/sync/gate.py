"""Two-mutex lock escalation guarding the grid model between frames.

The decode thread applies redraw batches; the render thread emits frames.
Neither may observe the other half-way through. The decode thread first
tries ``primary`` without blocking. If the render thread has it, the decode
thread takes ``hold``, posts a wake byte and then blocks on ``primary``.
After its frame the render thread sees the wake byte and parks on ``hold``
until the batch has been flushed, so it cannot grab ``primary`` again in
between.
"""

from __future__ import annotations

import threading
from enum import IntEnum
from typing import Any, Callable, Optional

from nvim_bridge.runtime import telemetry

from .channel import WAKE_LOCK, WAKE_QUIT, WakeChannel


class LockLevel(IntEnum):
    IDLE = 0
    FAST = 1
    ESCALATED = 2


class SyncGate:
    """Owns ``primary``, ``hold`` and the wake channel."""

    def __init__(
        self,
        *,
        primary: Optional[Any] = None,
        hold: Optional[Any] = None,
        channel: Optional[WakeChannel] = None,
    ) -> None:
        self.primary = primary if primary is not None else threading.Lock()
        self.hold = hold if hold is not None else threading.Lock()
        self.channel = channel if channel is not None else WakeChannel()
        self.lock_level = LockLevel.IDLE
        self.escalations = 0

    @property
    def held(self) -> bool:
        return self.lock_level is not LockLevel.IDLE

    # decode thread -----------------------------------------------------

    def enter_batch(self) -> LockLevel:
        """Take the grid for a redraw batch; a no-op while already held."""

        if self.lock_level is not LockLevel.IDLE:
            return self.lock_level

        self.lock_level = LockLevel.FAST
        if not self.primary.acquire(blocking=False):
            self.hold.acquire()
            self.lock_level = LockLevel.ESCALATED
            self.channel.post(WAKE_LOCK)
            self.primary.acquire()
            self.escalations += 1
            telemetry.trace("gate: escalated", logger_name="nvim_bridge.sync")
        return self.lock_level

    def release_batch(self) -> bool:
        """Give the grid back after ``flush``; ``False`` if nothing was held."""

        level = self.lock_level
        if level is LockLevel.IDLE:
            return False
        self.primary.release()
        if level is LockLevel.ESCALATED:
            self.hold.release()
        self.lock_level = LockLevel.IDLE
        return True

    def shutdown(self) -> None:
        """End of stream: drop anything still held and ask the renderer to quit."""

        if self.release_batch():
            telemetry.record_event(
                "gate.released_on_shutdown", level="warning", data={}
            )
        self.channel.post(WAKE_QUIT)

    # render thread -----------------------------------------------------

    def render_frame(self, emit: Callable[[], None]) -> bool:
        """Emit one frame under ``primary``, then service pending wakes.

        Returns ``False`` once the decode thread has asked the loop to stop.
        """

        with self.primary:
            emit()

        while True:
            code = self.channel.poll()
            if code is None:
                return True
            if code == WAKE_QUIT:
                return False
            if code == WAKE_LOCK:
                # lets the waiting decode thread through, then wait it out
                with self.hold:
                    telemetry.trace("gate: synch", logger_name="nvim_bridge.sync")


__all__ = ["SyncGate", "LockLevel"]
