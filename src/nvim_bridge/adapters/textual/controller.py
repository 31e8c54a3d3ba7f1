"""Textual-facing controller that wires host events into a BridgeSession."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple

from nvim_bridge.highlights import HighlightAttr
from nvim_bridge.input.mouse import HostButton
from nvim_bridge.session import BridgeSession
from nvim_bridge.surface import Cell


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(frozen=True, slots=True)
class FrameSnapshot:
    """Copy of the primary grid taken while the sync gate's primary lock is held."""

    lines: Tuple[Tuple[Cell, ...], ...]
    cursor: Tuple[int, int]  # (col, row)
    title: str
    default_attr: HighlightAttr


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    present: Callable[[FrameSnapshot], None]
    log: Callable[[str], None] = _noop
    quit: Callable[[], None] = _noop


_MODIFIER_NAMES = {"ctrl": "C", "alt": "A", "shift": "S", "meta": "M"}

# key names Textual uses for printable characters it also spells out
_PRINTABLE_ALIASES = {"space": " ", "less_than_sign": "<", "minus": "-"}


def split_textual_key(
    key: str, character: Optional[str] = None
) -> Tuple[str, Tuple[str, ...]]:
    """``"ctrl+shift+left"`` -> ``("left", ("C", "S"))``."""

    parts = key.split("+")
    # "ctrl++" style names leave an empty trailing part for the plus key
    if len(parts) > 1 and parts[-1] == "" and parts[-2] == "":
        parts = parts[:-2] + ["+"]
    name = parts[-1]
    modifiers = tuple(
        _MODIFIER_NAMES[part] for part in parts[:-1] if part in _MODIFIER_NAMES
    )
    if name in _PRINTABLE_ALIASES:
        name = _PRINTABLE_ALIASES[name]
    elif len(name) > 1 and character and len(character) == 1 and character.isprintable():
        name = character
    return name, modifiers


class TextualBridgeAdapter:
    """Bridges Textual events and frame ticks onto a ``BridgeSession``."""

    def __init__(self, session: BridgeSession, hooks: TextualUIHooks) -> None:
        self.session = session
        self.hooks = hooks
        self.frames = 0

    @property
    def grid_id(self) -> int:
        return self.session.grids.primary_id

    def handle_textual_key(self, key: str, *, character: Optional[str] = None) -> Optional[int]:
        name, modifiers = split_textual_key(key, character)
        self._log_state("key ->", key=key, name=name, mods=modifiers)
        printable = len(name) == 1 and name.isprintable()
        # plain typing (shift included) goes out as text, like the host's utf8 input
        if printable and not (set(modifiers) - {"S"}):
            return self.session.send_text(character or name)
        return self.session.send_key(name, modifiers)

    def handle_mouse_button(
        self,
        x: int,
        y: int,
        button: int,
        pressed: bool,
        *,
        modifiers: Iterable[str] = (),
    ) -> Optional[int]:
        return self.session.send_mouse_button(
            self.grid_id, button, pressed, y, x, modifiers
        )

    def handle_mouse_move(
        self, x: int, y: int, *, modifiers: Iterable[str] = ()
    ) -> Optional[int]:
        return self.session.send_mouse_motion(
            self.grid_id, y, x, modifiers=modifiers
        )

    def handle_scroll(self, x: int, y: int, *, up: bool) -> Optional[int]:
        button = HostButton.WHEEL_UP if up else HostButton.WHEEL_DOWN
        return self.session.send_mouse_button(self.grid_id, button, True, y, x)

    def handle_paste(self, text: str) -> int:
        chunks = self.session.paste_text(self.grid_id, text)
        self._log_state("paste ->", chunks=len(chunks))
        return len(chunks)

    def handle_resize(self, cols: int, rows: int) -> Optional[int]:
        if cols <= 0 or rows <= 0:
            return None
        return self.session.resize(self.grid_id, cols, rows)

    def render_tick(self) -> bool:
        """Run one frame; returns ``False`` once the editor stream has ended."""

        running = self.session.render_frame(self._emit)
        if not running:
            self._log_state("quit <-")
            self.hooks.quit()
        return running

    def _emit(self) -> None:
        primary = self.session.grids.primary
        surface = primary.surface
        snapshot = getattr(surface, "snapshot", None)
        lines = snapshot() if callable(snapshot) else ()
        frame = FrameSnapshot(
            lines=lines,
            cursor=(primary.state.cursor_col, primary.state.cursor_row),
            title=str(getattr(surface, "ident", "")),
            default_attr=primary.get_default_attr(),
        )
        self.frames += 1
        self.hooks.present(frame)

    def _log_state(self, prefix: str, **fields: object) -> None:
        parts = [prefix]
        for key, value in fields.items():
            if value is not None:
                parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))


__all__ = [
    "FrameSnapshot",
    "TextualUIHooks",
    "TextualBridgeAdapter",
    "split_textual_key",
]
