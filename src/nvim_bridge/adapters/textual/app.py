"""Executable Textual app that hosts an embedded editor."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

try:  # pragma: no cover - imported only when the host is run
    from rich.cells import cell_len
    from rich.color import Color
    from rich.segment import Segment
    from rich.style import Style
    from textual import events
    from textual.app import App, ComposeResult
    from textual.strip import Strip
    from textual.widget import Widget
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use nvim_bridge.adapters.textual.app"
    ) from exc

from nvim_bridge.highlights import HighlightAttr
from nvim_bridge.runtime import telemetry
from nvim_bridge.session import BridgeSession
from nvim_bridge.surface import Cell

from .controller import FrameSnapshot, TextualBridgeAdapter, TextualUIHooks

_log = telemetry.get_logger("nvim_bridge.textual")

_RGB = Optional[Tuple[int, int, int]]


@lru_cache(maxsize=1024)
def _style(
    fg: _RGB,
    bg: _RGB,
    flags: Tuple[bool, bool, bool, bool, bool],
    cursor: bool = False,
) -> Style:
    bold, italic, underline, strike, reverse = flags
    return Style(
        color=Color.from_rgb(*fg) if fg else None,
        bgcolor=Color.from_rgb(*bg) if bg else None,
        bold=bold,
        italic=italic,
        underline=underline,
        strike=strike,
        reverse=reverse != cursor,
    )


def style_for(attr: HighlightAttr, default: HighlightAttr, *, cursor: bool = False) -> Style:
    flags = (
        attr.bold,
        attr.italic,
        attr.underline,
        attr.strikethrough,
        attr.reverse,
    )
    return _style(attr.fg or default.fg, attr.bg or default.bg, flags, cursor)


def row_segments(
    cells: Sequence[Cell],
    default: HighlightAttr,
    cursor_col: Optional[int] = None,
) -> List[Segment]:
    """Segments for one grid row.

    The editor leaves an empty cell after a double-width glyph; that cell
    is skipped so later columns stay aligned.
    """

    segments: List[Segment] = []
    previous = ""
    for col, cell in enumerate(cells):
        if cell.ch == "" and cell_len(previous) > 1:
            previous = ""
            continue
        style = style_for(cell.attr, default, cursor=col == cursor_col)
        segments.append(Segment(cell.ch or " ", style))
        previous = cell.ch
    return segments


class GridView(Widget):
    """Paints the latest ``FrameSnapshot`` of the primary grid."""

    can_focus = True

    DEFAULT_CSS = """
    GridView {
        width: 1fr;
        height: 1fr;
    }
    """

    def __init__(self, *, id: Optional[str] = None) -> None:
        super().__init__(id=id)
        self.frame: Optional[FrameSnapshot] = None
        self.adapter: Optional[TextualBridgeAdapter] = None

    def present(self, frame: FrameSnapshot) -> None:
        self.frame = frame
        self.refresh()

    def render_line(self, y: int) -> Strip:
        frame = self.frame
        if frame is None or y >= len(frame.lines):
            return Strip.blank(self.size.width)
        cursor_col, cursor_row = frame.cursor
        on_cursor = y == cursor_row and self.has_focus
        segments = row_segments(
            frame.lines[y], frame.default_attr, cursor_col if on_cursor else None
        )
        return Strip(segments).simplify()

    # mouse -------------------------------------------------------------

    @staticmethod
    def _modifiers(event: events.MouseEvent) -> Tuple[str, ...]:
        modifiers = []
        if event.ctrl:
            modifiers.append("C")
        if event.meta:
            modifiers.append("A")
        if event.shift:
            modifiers.append("S")
        return tuple(modifiers)

    def on_mouse_down(self, event: events.MouseDown) -> None:
        if self.adapter:
            self.adapter.handle_mouse_button(
                event.x, event.y, event.button, True, modifiers=self._modifiers(event)
            )
            self.capture_mouse()
            event.stop()

    def on_mouse_up(self, event: events.MouseUp) -> None:
        if self.adapter:
            self.adapter.handle_mouse_button(
                event.x, event.y, event.button, False, modifiers=self._modifiers(event)
            )
            self.release_mouse()
            event.stop()

    def on_mouse_move(self, event: events.MouseMove) -> None:
        if self.adapter:
            self.adapter.handle_mouse_move(
                event.x, event.y, modifiers=self._modifiers(event)
            )

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        if self.adapter:
            self.adapter.handle_scroll(event.x, event.y, up=True)
            event.stop()

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        if self.adapter:
            self.adapter.handle_scroll(event.x, event.y, up=False)
            event.stop()

    def on_resize(self, event: events.Resize) -> None:
        if self.adapter:
            self.adapter.handle_resize(event.size.width, event.size.height)


class NvimBridgeApp(App[None]):
    """Full-screen Textual host for one ``BridgeSession``.

    The session must already be attached with its decode thread running;
    the app only drives frames and forwards input.
    """

    CSS = """
	Screen {
		layout: vertical;
	}
	"""

    def __init__(self, session: BridgeSession) -> None:
        super().__init__()
        self.session = session
        self.adapter: TextualBridgeAdapter | None = None
        self._view: GridView | None = None

    def compose(self) -> ComposeResult:
        self._view = GridView(id="grid-view")
        yield self._view

    def on_mount(self) -> None:
        assert self._view is not None
        hooks = TextualUIHooks(
            present=self._present,
            log=self._log_line,
            quit=self.exit,
        )
        self.adapter = TextualBridgeAdapter(self.session, hooks)
        self._view.adapter = self.adapter
        self._view.focus()
        self.set_interval(self.session.config.frame_interval, self._tick)

    def _tick(self) -> None:
        if self.adapter:
            self.adapter.render_tick()

    def _present(self, frame: FrameSnapshot) -> None:
        if frame.title and frame.title != self.title:
            self.title = frame.title
        if self._view:
            self._view.present(frame)

    def _log_line(self, line: str) -> None:
        _log.debug(line)

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter:
            return
        self.adapter.handle_textual_key(event.key, character=event.character)
        event.stop()
        event.prevent_default()

    def on_paste(self, event: events.Paste) -> None:
        if self.adapter and event.text:
            self.adapter.handle_paste(event.text)
            event.stop()


__all__ = ["GridView", "NvimBridgeApp", "row_segments", "style_for"]
