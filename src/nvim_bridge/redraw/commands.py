"""Redraw command names and the parsed shape of a redraw batch."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence

from nvim_bridge.errors import MalformedMessageError
from nvim_bridge.rpc.messages import decode_name
from nvim_bridge.runtime import telemetry


class RedrawCommandName(str, Enum):
    GRID_RESIZE = "grid_resize"
    GRID_LINE = "grid_line"
    GRID_DESTROY = "grid_destroy"
    GRID_CLEAR = "grid_clear"
    GRID_CURSOR_GOTO = "grid_cursor_goto"
    HL_ATTR_DEFINE = "hl_attr_define"
    DEFAULT_COLORS_SET = "default_colors_set"
    GRID_SCROLL = "grid_scroll"
    OPTION_SET = "option_set"
    SET_ICON = "set_icon"
    SET_TITLE = "set_title"
    FLUSH = "flush"

    @classmethod
    def lookup(cls, raw: str) -> Optional["RedrawCommandName"]:
        try:
            return cls(raw)
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class RedrawCommand:
    """One ``[name, call, call, ...]`` entry of a batch.

    ``name`` is ``None`` for commands this bridge does not know; those are
    carried through so they can be reported, never applied.
    """

    raw_name: str
    name: Optional[RedrawCommandName]
    calls: tuple[tuple[Any, ...], ...]

    @property
    def known(self) -> bool:
        return self.name is not None

    def iter_calls(self) -> tuple[tuple[Any, ...], ...]:
        # an argument-less command still runs once
        return self.calls or ((),)


def _is_grouped(call: Any) -> bool:
    return bool(call) and all(isinstance(inner, (list, tuple)) for inner in call)


def parse_command(entry: Any) -> RedrawCommand:
    """``[name, call, ...]``; a call may also be an array of calls."""

    if not isinstance(entry, (list, tuple)) or not entry:
        raise MalformedMessageError("redraw entry is not a non-empty array", payload=entry)
    raw_name = decode_name(entry[0])
    calls: list[tuple[Any, ...]] = []
    for call in entry[1:]:
        if not isinstance(call, (list, tuple)):
            calls.append((call,))
        elif _is_grouped(call):
            calls.extend(tuple(inner) for inner in call)
        else:
            calls.append(tuple(call))
    return RedrawCommand(
        raw_name=raw_name,
        name=RedrawCommandName.lookup(raw_name),
        calls=tuple(calls),
    )


def parse_batch(params: Sequence[Any]) -> list[RedrawCommand]:
    """Parse the params of a ``redraw`` notification, skipping bad entries."""

    batch: list[RedrawCommand] = []
    for entry in params:
        try:
            batch.append(parse_command(entry))
        except MalformedMessageError as exc:
            telemetry.record_event(
                "redraw.bad_entry", level="warning", data={"reason": str(exc)}
            )
    return batch


__all__ = [
    "RedrawCommandName",
    "RedrawCommand",
    "parse_command",
    "parse_batch",
]
