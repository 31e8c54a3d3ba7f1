"""The bridge's context object, shared by the decode and render threads."""

from __future__ import annotations

import threading
from typing import IO, Any, Callable, Iterable, Optional

from nvim_bridge.dispatcher import NotificationDispatcher
from nvim_bridge.grid import GridModel, SurfaceFactory
from nvim_bridge.highlights import HighlightCache
from nvim_bridge.input.keys import Modifier, encode_key, encode_text
from nvim_bridge.input.mouse import MouseTracker
from nvim_bridge.input.paste import PasteChunk, PasteStateMachine, split_paste
from nvim_bridge.redraw import RedrawCommandTable, RedrawContext, load_default_commands
from nvim_bridge.rpc.client import NvimClient
from nvim_bridge.rpc.decoder import StreamDecoder
from nvim_bridge.rpc.writer import RpcWriter
from nvim_bridge.runtime import telemetry
from nvim_bridge.runtime.config import BridgeConfig
from nvim_bridge.surface import Surface
from nvim_bridge.sync import SyncGate


class BridgeSession:
    """Owns every piece of bridge state for one editor connection.

    The decode thread only calls ``run_decoder``; everything else is
    called from the render/event thread.
    """

    def __init__(
        self,
        config: BridgeConfig,
        surface: Surface,
        *,
        surface_factory: Optional[SurfaceFactory] = None,
        gate: Optional[SyncGate] = None,
        table: Optional[RedrawCommandTable] = None,
    ) -> None:
        self.config = config
        default = surface.get_default_attr()
        self.highlights = HighlightCache(
            foreground=default.fg or (255, 255, 255),
            background=default.bg or (0, 0, 0),
        )
        self.grids = GridModel(
            surface,
            multigrid=config.multigrid,
            surface_factory=surface_factory,
        )
        self.gate = gate or SyncGate()
        self.table = table or load_default_commands(
            RedrawCommandTable(logger_name="nvim_bridge.redraw")
        )
        self.context = RedrawContext(
            highlights=self.highlights, grids=self.grids, gate=self.gate
        )
        self.dispatcher = NotificationDispatcher(self.table, self.context)
        self.client = NvimClient()
        self.paste = PasteStateMachine()
        self.mouse = MouseTracker()
        self._decoder_thread: Optional[threading.Thread] = None

    # wiring ------------------------------------------------------------

    def attach(self, editor_stdin: IO[bytes]) -> Optional[int]:
        """Connect the outbound channel and send ``nvim_ui_attach``."""

        writer = RpcWriter(editor_stdin)
        self.client.connect(writer)
        self.dispatcher.writer = writer
        primary = self.grids.primary.state
        return self.client.ui_attach(
            primary.width, primary.height, self.config.ui_options()
        )

    def run_decoder(self, source: Any) -> None:
        """Decode thread body: apply every message until the stream ends."""

        decoder = StreamDecoder(source, on_close=self.gate.shutdown)
        with telemetry.span("session::decode_loop", component="decoder"):
            for message in decoder:
                self.dispatcher.dispatch(message)

    def start_decoder(self, source: Any) -> threading.Thread:
        thread = threading.Thread(
            target=self.run_decoder,
            args=(source,),
            name="nvim-bridge-decode",
            daemon=True,
        )
        self._decoder_thread = thread
        thread.start()
        return thread

    def render_frame(self, emit: Callable[[], None]) -> bool:
        return self.gate.render_frame(emit)

    def close(self) -> None:
        if self.client.writer is not None:
            self.client.writer.close()
        self.gate.channel.close()

    # input -------------------------------------------------------------

    def send_key(
        self, key: str, modifiers: Iterable[str | Modifier] = ()
    ) -> Optional[int]:
        token = encode_key(key, modifiers)
        if token is None:
            telemetry.record_event(
                "input.missing_key", level="debug", data={"key": key}
            )
            return None
        return self.client.input(token)

    def send_text(self, text: str) -> Optional[int]:
        if not text:
            return None
        return self.client.input(encode_text(text))

    def send_mouse_button(
        self,
        grid_id: int,
        button: int,
        pressed: bool,
        row: int,
        col: int,
        modifiers: Iterable[str | Modifier] = (),
    ) -> Optional[int]:
        event = self.mouse.button(grid_id, button, pressed, row, col, modifiers)
        if event is None:
            return None
        return self.client.input_mouse(event)

    def send_mouse_motion(
        self,
        grid_id: int,
        row: int,
        col: int,
        *,
        relative: bool = False,
        modifiers: Iterable[str | Modifier] = (),
    ) -> Optional[int]:
        event = self.mouse.motion(
            grid_id, row, col, relative=relative, modifiers=modifiers
        )
        if event is None:
            return None
        return self.client.input_mouse(event)

    def paste_chunk(
        self, grid_id: int, chunk: str, continuation: bool
    ) -> Optional[PasteChunk]:
        accepted = self.paste.submit(grid_id, chunk, continuation)
        if accepted is not None:
            self.client.paste(accepted)
        return accepted

    def paste_text(self, grid_id: int, text: str) -> list[PasteChunk]:
        sent: list[PasteChunk] = []
        for chunk, continuation in split_paste(text, self.config.paste_chunk_size):
            accepted = self.paste_chunk(grid_id, chunk, continuation)
            if accepted is not None:
                sent.append(accepted)
        return sent

    def resize(self, grid_id: int, cols: int, rows: int) -> Optional[int]:
        if not self.client.connected:
            return None
        return self.client.try_resize_grid(grid_id, cols, rows)


__all__ = ["BridgeSession"]
