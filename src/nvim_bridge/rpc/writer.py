"""Serialized outbound msgpack-rpc channel with a pending-call ledger."""

from __future__ import annotations

import threading
from typing import IO, Any, Dict, Optional, Sequence

import msgpack

from nvim_bridge.runtime import telemetry

from .messages import MessageKind, Response


class RpcWriter:
    """Packs requests onto the editor's input pipe.

    Ids are assigned sequentially from zero. Requests are fire-and-forget;
    the ledger only remembers which method an id belonged to so a late
    response (usually an error) can be reported meaningfully.
    """

    def __init__(self, stream: IO[bytes], *, method_as_bin: bool = True) -> None:
        self._stream = stream
        self._packer = msgpack.Packer(use_bin_type=True)
        self._lock = threading.Lock()
        self._next_id = 0
        self._pending: Dict[int, str] = {}
        self._method_as_bin = method_as_bin
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> Dict[int, str]:
        with self._lock:
            return dict(self._pending)

    def request(self, method: str, params: Sequence[Any]) -> int:
        with self._lock:
            if self._closed:
                raise BrokenPipeError("outbound channel is closed")
            msgid = self._next_id
            self._next_id += 1
            name: Any = method.encode("utf-8") if self._method_as_bin else method
            payload = self._packer.pack(
                [int(MessageKind.REQUEST), msgid, name, list(params)]
            )
            self._stream.write(payload)
            self._stream.flush()
            self._pending[msgid] = method
        telemetry.trace(f"rpc -> request[{msgid}] {method}", logger_name="nvim_bridge.rpc")
        return msgid

    def resolve(self, response: Response) -> Optional[str]:
        """Match a response against the ledger and report errors."""

        with self._lock:
            method = self._pending.pop(response.msgid, None)
        if method is None:
            telemetry.trace(
                f"rpc <- response[{response.msgid}] for unknown request",
                logger_name="nvim_bridge.rpc",
            )
            return None
        if response.error is not None:
            telemetry.record_event(
                "rpc.request_failed",
                level="warning",
                data={
                    "msgid": response.msgid,
                    "method": method,
                    "error": response.error,
                },
            )
        return method

    def close(self) -> None:
        with self._lock:
            self._closed = True
            try:
                self._stream.close()
            except OSError:
                pass


__all__ = ["RpcWriter"]
