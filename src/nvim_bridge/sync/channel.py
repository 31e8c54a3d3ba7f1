"""One-byte wake channel between the decode and render threads."""

from __future__ import annotations

import os
import threading
from typing import Optional

WAKE_LOCK = b"l"
WAKE_QUIT = b"q"


class WakeChannel:
    """``os.pipe`` pair: writers post single bytes, the reader polls them.

    The read end is non-blocking so the render thread can check for a
    pending wake after every frame without stalling. ``fileno()`` exposes
    the read end for hosts that want to wait on it with a selector.
    """

    def __init__(self) -> None:
        self._read_fd, self._write_fd = os.pipe()
        os.set_blocking(self._read_fd, False)
        self._closed = False
        # close() may run on another thread than post()
        self._lock = threading.Lock()

    def fileno(self) -> int:
        return self._read_fd

    @property
    def closed(self) -> bool:
        return self._closed

    def post(self, code: bytes) -> None:
        if len(code) != 1:
            raise ValueError("wake codes are single bytes")
        with self._lock:
            if self._closed:
                return
            os.write(self._write_fd, code)

    def poll(self) -> Optional[bytes]:
        with self._lock:
            if self._closed:
                return None
            try:
                data = os.read(self._read_fd, 1)
            except BlockingIOError:
                return None
        return data or None

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            os.close(self._read_fd)
            os.close(self._write_fd)

    def __enter__(self) -> "WakeChannel":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False


__all__ = ["WakeChannel", "WAKE_LOCK", "WAKE_QUIT"]
