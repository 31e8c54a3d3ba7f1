"""Mouse button/motion classification for ``nvim_input_mouse``."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Iterable, Optional

from nvim_bridge.runtime import telemetry

from .keys import Modifier, modifier_prefix, normalize_modifiers


class HostButton(IntEnum):
    """Button indices reported by the rendering surface."""

    LEFT = 1
    MIDDLE = 2
    RIGHT = 3
    WHEEL_UP = 4
    WHEEL_DOWN = 5


class MouseButton(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    MIDDLE = "middle"
    WHEEL = "wheel"


class MouseAction(str, Enum):
    PRESS = "press"
    RELEASE = "release"
    DRAG = "drag"
    UP = "up"
    DOWN = "down"


_HELD_BUTTONS: Dict[HostButton, MouseButton] = {
    HostButton.LEFT: MouseButton.LEFT,
    HostButton.RIGHT: MouseButton.RIGHT,
    HostButton.MIDDLE: MouseButton.MIDDLE,
}


@dataclass(frozen=True, slots=True)
class MouseEvent:
    button: MouseButton
    action: MouseAction
    modifier: str
    grid: int
    row: int
    col: int


def _bit(button: HostButton) -> int:
    return 1 << int(button)


class MouseTracker:
    """Tracks held buttons per grid so motion can be classified as drag."""

    def __init__(self) -> None:
        self._masks: Dict[int, int] = {}

    def mask(self, grid: int) -> int:
        return self._masks.get(grid, 0)

    def button(
        self,
        grid: int,
        button: int,
        pressed: bool,
        row: int,
        col: int,
        modifiers: Iterable[str | Modifier] = (),
    ) -> Optional[MouseEvent]:
        try:
            host = HostButton(button)
        except ValueError:
            telemetry.record_event(
                "input.dropped", level="debug", data={"button": button}
            )
            return None
        modifier = modifier_prefix(normalize_modifiers(modifiers))

        if host in (HostButton.WHEEL_UP, HostButton.WHEEL_DOWN):
            # wheel releases carry no information
            if not pressed:
                return None
            action = MouseAction.UP if host is HostButton.WHEEL_UP else MouseAction.DOWN
            return MouseEvent(MouseButton.WHEEL, action, modifier, grid, row, col)

        mask = self._masks.get(grid, 0)
        if pressed:
            self._masks[grid] = mask | _bit(host)
            action = MouseAction.PRESS
        else:
            self._masks[grid] = mask & ~_bit(host)
            action = MouseAction.RELEASE
        return MouseEvent(_HELD_BUTTONS[host], action, modifier, grid, row, col)

    def motion(
        self,
        grid: int,
        row: int,
        col: int,
        *,
        relative: bool = False,
        modifiers: Iterable[str | Modifier] = (),
    ) -> Optional[MouseEvent]:
        mask = self._masks.get(grid, 0)
        if not mask or relative:
            return None
        for host, held in _HELD_BUTTONS.items():
            if mask & _bit(host):
                modifier = modifier_prefix(normalize_modifiers(modifiers))
                return MouseEvent(held, MouseAction.DRAG, modifier, grid, row, col)
        return None

    def reset(self, grid: Optional[int] = None) -> None:
        if grid is None:
            self._masks.clear()
        else:
            self._masks.pop(grid, None)


__all__ = [
    "HostButton",
    "MouseButton",
    "MouseAction",
    "MouseEvent",
    "MouseTracker",
]
