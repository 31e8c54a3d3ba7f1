"""Incremental decoding of the editor's output pipe into RPC messages."""

from __future__ import annotations

from typing import Any, Callable, Iterator, Optional, Protocol

import msgpack

from nvim_bridge.errors import MalformedMessageError
from nvim_bridge.runtime import telemetry

from .messages import RpcMessage, describe, parse_message

MIN_SLACK = 64 * 1024

_log = telemetry.get_logger("nvim_bridge.rpc")


class ByteSource(Protocol):
    def read(self, size: int = -1, /) -> Optional[bytes]: ...


class StreamDecoder:
    """Frames an unbounded byte stream into ``RpcMessage`` values.

    Iterating the decoder blocks on the source, hands out every complete
    message contained in the bytes read so far, then reads again. A read of
    zero bytes, or an ``OSError`` other than would-block/interrupted, ends
    iteration and fires ``on_close`` once.
    """

    def __init__(
        self,
        source: Any,
        *,
        on_close: Optional[Callable[[], None]] = None,
        min_slack: int = MIN_SLACK,
    ) -> None:
        if min_slack <= 0:
            raise ValueError("min_slack must be positive")
        self._source = source
        self._on_close = on_close
        self._min_slack = min_slack
        self._buffer = bytearray(min_slack)
        self._unpacker = msgpack.Unpacker(
            raw=False,
            strict_map_key=False,
            unicode_errors="replace",
        )
        self._closed = False
        self.messages_decoded = 0
        self.malformed = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def capacity(self) -> int:
        return len(self._buffer)

    def __iter__(self) -> Iterator[RpcMessage]:
        try:
            while not self._closed:
                count = self._fill()
                if count is None:
                    continue
                if count == 0:
                    telemetry.record_event("rpc.stream_closed", data={"reason": "eof"})
                    break
                yield from self._drain()
        except OSError as exc:
            telemetry.record_event(
                "rpc.stream_closed",
                level="warning",
                data={"reason": "read_error", "error": str(exc)},
            )
        except (msgpack.exceptions.UnpackException, ValueError, TypeError) as exc:
            # framing is lost once the byte stream itself is corrupt
            telemetry.record_event(
                "rpc.stream_closed",
                level="error",
                data={"reason": "corrupt_stream", "error": str(exc)},
            )
        finally:
            self._close()

    def _reserve(self) -> memoryview:
        # the unpacker keeps its own copy, so the scratch buffer only needs
        # to hold one read worth of bytes
        if len(self._buffer) < self._min_slack:
            self._buffer.extend(bytes(self._min_slack - len(self._buffer)))
        return memoryview(self._buffer)

    def _fill(self) -> Optional[int]:
        """Read once into the scratch buffer; ``None`` means try again."""

        view = self._reserve()
        try:
            readinto = getattr(self._source, "readinto", None)
            if readinto is not None:
                count = readinto(view)
                if count is None:
                    return None
            else:
                chunk = self._source.read(len(view))
                if chunk is None:
                    return None
                count = len(chunk)
                view[:count] = chunk
        except (BlockingIOError, InterruptedError):
            return None
        finally:
            view.release()

        if count:
            self._unpacker.feed(self._buffer[:count])
        return count

    def _drain(self) -> Iterator[RpcMessage]:
        for obj in self._unpacker:
            try:
                message = parse_message(obj)
            except MalformedMessageError as exc:
                self.malformed += 1
                telemetry.record_event(
                    "rpc.malformed",
                    level="warning",
                    data={"reason": str(exc)},
                )
                continue
            self.messages_decoded += 1
            _log.debug(f"rpc <- {describe(message)}")
            yield message

    def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close()


__all__ = ["StreamDecoder", "MIN_SLACK", "ByteSource"]
