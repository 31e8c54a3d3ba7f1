"""Reassembly of multi-chunk clipboard pastes into ``nvim_paste`` phases."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Optional

from nvim_bridge.runtime import telemetry


class PastePhase(IntEnum):
    """Wire values of the ``phase`` argument of ``nvim_paste``."""

    NONE = 0
    SINGLE = -1
    FIRST = 1
    MIDDLE = 2
    LAST = 3


@dataclass(frozen=True, slots=True)
class PasteChunk:
    data: str
    phase: PastePhase


@dataclass(slots=True)
class PasteSession:
    owner_grid: Optional[int] = None
    phase: PastePhase = PastePhase.NONE

    @property
    def active(self) -> bool:
        return self.owner_grid is not None


class PasteStateMachine:
    """Owns the single process-wide paste session.

    Paste chunks carry no grid id on the wire, so while one grid is
    mid-paste every chunk from another grid is dropped.
    """

    def __init__(self) -> None:
        self.session = PasteSession()

    @property
    def owner(self) -> Optional[int]:
        return self.session.owner_grid

    def submit(
        self, grid_id: int, chunk: str, continuation: bool
    ) -> Optional[PasteChunk]:
        session = self.session
        if not session.active:
            if not continuation:
                return PasteChunk(chunk, PastePhase.SINGLE)
            session.owner_grid = grid_id
            session.phase = PastePhase.FIRST
            return PasteChunk(chunk, PastePhase.FIRST)

        if session.owner_grid != grid_id:
            telemetry.record_event(
                "paste.dropped",
                level="warning",
                data={"grid": grid_id, "owner": session.owner_grid},
            )
            return None

        if continuation:
            session.phase = PastePhase.MIDDLE
            return PasteChunk(chunk, PastePhase.MIDDLE)

        self.session = PasteSession()
        return PasteChunk(chunk, PastePhase.LAST)


def split_paste(text: str, chunk_size: int) -> Iterator[tuple[str, bool]]:
    """Yield ``(chunk, continuation)`` pairs; only the last has no continuation."""

    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if len(text) <= chunk_size:
        yield text, False
        return
    for start in range(0, len(text), chunk_size):
        end = start + chunk_size
        yield text[start:end], end < len(text)


__all__ = [
    "PastePhase",
    "PasteChunk",
    "PasteSession",
    "PasteStateMachine",
    "split_paste",
]
