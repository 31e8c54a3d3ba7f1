from __future__ import annotations

import io
from typing import List, Optional

import msgpack
import pytest

from nvim_bridge.errors import MalformedMessageError
from nvim_bridge.rpc import (
    MessageKind,
    Notification,
    Request,
    Response,
    StreamDecoder,
    parse_message,
)


class ChunkedReader:
    """Hands out pre-cut chunks, then end-of-stream."""

    def __init__(self, chunks: List[object]) -> None:
        self._chunks = list(chunks)
        self.reads = 0

    def read(self, size: int = -1) -> Optional[bytes]:
        self.reads += 1
        if not self._chunks:
            return b""
        chunk = self._chunks.pop(0)
        if isinstance(chunk, BaseException):
            raise chunk
        assert isinstance(chunk, (bytes, type(None)))
        return chunk


def pack(obj: object) -> bytes:
    return msgpack.packb(obj, use_bin_type=True)


def test_message_split_across_reads_is_reassembled() -> None:
    payload = pack([2, "redraw", [["flush"]]])
    reader = ChunkedReader([payload[:3], payload[3:7], payload[7:]])

    messages = list(StreamDecoder(reader))

    assert messages == [Notification(method="redraw", params=(["flush"],))]


def test_several_messages_in_one_read_are_all_drained() -> None:
    data = pack([2, "redraw", []]) + pack([1, 4, None, 7]) + pack([0, 9, b"ping", []])
    messages = list(StreamDecoder(ChunkedReader([data])))

    assert [message.kind for message in messages] == [
        MessageKind.NOTIFICATION,
        MessageKind.RESPONSE,
        MessageKind.REQUEST,
    ]
    assert messages[1] == Response(msgid=4, error=None, result=7)
    assert messages[2] == Request(msgid=9, method="ping", params=())


def test_end_of_stream_fires_on_close_once() -> None:
    closed: List[str] = []
    decoder = StreamDecoder(
        ChunkedReader([pack([2, "redraw", []])]),
        on_close=lambda: closed.append("closed"),
    )

    assert len(list(decoder)) == 1
    assert list(decoder) == []
    assert closed == ["closed"]
    assert decoder.closed


def test_readinto_sources_are_supported() -> None:
    stream = io.BytesIO(pack([2, "redraw", [["flush"]]]) * 3)
    decoder = StreamDecoder(stream)

    assert len(list(decoder)) == 3
    assert decoder.messages_decoded == 3


def test_would_block_and_empty_reads_are_retried() -> None:
    payload = pack([2, "redraw", []])
    reader = ChunkedReader([BlockingIOError(), None, InterruptedError(), payload])

    messages = list(StreamDecoder(reader))

    assert len(messages) == 1
    assert reader.reads == 5


def test_read_error_ends_the_stream() -> None:
    closed: List[bool] = []
    reader = ChunkedReader([pack([2, "redraw", []]), OSError("pipe gone")])

    messages = list(StreamDecoder(reader, on_close=lambda: closed.append(True)))

    assert len(messages) == 1
    assert closed == [True]


def test_malformed_messages_are_skipped() -> None:
    data = (
        pack("not an array")
        + pack([7, "bogus", []])
        + pack([2, "redraw", [], "extra"])
        + pack([2, "redraw", [["flush"]]])
    )
    decoder = StreamDecoder(ChunkedReader([data]))

    messages = list(decoder)

    assert messages == [Notification(method="redraw", params=(["flush"],))]
    assert decoder.malformed == 3


def test_scratch_buffer_keeps_minimum_slack() -> None:
    decoder = StreamDecoder(ChunkedReader([]), min_slack=128)
    assert decoder.capacity >= 128
    with pytest.raises(ValueError):
        StreamDecoder(ChunkedReader([]), min_slack=0)


def test_parse_message_accepts_binary_method_names() -> None:
    message = parse_message([0, 1, b"nvim_input", ["x"]])
    assert isinstance(message, Request)
    assert message.method == "nvim_input"
    assert message.to_wire() == [0, 1, "nvim_input", ["x"]]


@pytest.mark.parametrize(
    "obj",
    [
        [],
        [2, "redraw"],
        [1, 2, 3],
        [0, -1, "m", []],
        [True, "redraw", []],
        [2, "redraw", "params"],
        [2, 42, []],
    ],
)
def test_parse_message_rejects_bad_shapes(obj: object) -> None:
    with pytest.raises(MalformedMessageError):
        parse_message(obj)


def test_unhashable_map_key_ends_the_stream() -> None:
    closed: List[bool] = []
    # [2, "redraw", [{[1]: 1}]]
    bad = b"\x93\x02\xa6redraw\x91\x81\x91\x01\x01"
    good = pack([2, "redraw", [["flush"]]])
    decoder = StreamDecoder(io.BytesIO(bad + good), on_close=lambda: closed.append(True))

    assert list(decoder) == []
    assert closed == [True]
    assert decoder.closed
