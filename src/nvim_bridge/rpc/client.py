"""Outbound editor API calls issued by the bridge."""

from __future__ import annotations

from typing import Mapping, Optional

from nvim_bridge.input.mouse import MouseEvent
from nvim_bridge.input.paste import PasteChunk

from .writer import RpcWriter


class NvimClient:
    """Thin typed wrapper over ``RpcWriter`` for the calls the UI makes."""

    def __init__(self, writer: Optional[RpcWriter] = None) -> None:
        self._writer = writer

    @property
    def connected(self) -> bool:
        return self._writer is not None and not self._writer.closed

    @property
    def writer(self) -> Optional[RpcWriter]:
        return self._writer

    def connect(self, writer: RpcWriter) -> None:
        self._writer = writer

    def _call(self, method: str, *params: object) -> Optional[int]:
        if not self.connected:
            return None
        assert self._writer is not None
        try:
            return self._writer.request(method, params)
        except (BrokenPipeError, ValueError):
            # the editor went away; the decode thread drives shutdown
            return None

    def ui_attach(
        self, width: int, height: int, options: Mapping[str, bool]
    ) -> Optional[int]:
        return self._call("nvim_ui_attach", width, height, dict(options))

    def try_resize_grid(self, grid_id: int, cols: int, rows: int) -> Optional[int]:
        return self._call("nvim_ui_try_resize_grid", grid_id, cols, rows)

    def input(self, keys: str) -> Optional[int]:
        return self._call("nvim_input", keys)

    def input_mouse(self, event: MouseEvent) -> Optional[int]:
        return self._call(
            "nvim_input_mouse",
            event.button.value,
            event.action.value,
            event.modifier,
            event.grid,
            event.row,
            event.col,
        )

    def paste(self, chunk: PasteChunk, *, crlf: bool = True) -> Optional[int]:
        return self._call("nvim_paste", chunk.data, crlf, int(chunk.phase))


__all__ = ["NvimClient"]
