"""Typed views over the three msgpack-rpc message shapes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Sequence, Union

from nvim_bridge.errors import MalformedMessageError


class MessageKind(IntEnum):
    REQUEST = 0
    RESPONSE = 1
    NOTIFICATION = 2


@dataclass(frozen=True, slots=True)
class Request:
    msgid: int
    method: str
    params: tuple[Any, ...]

    kind = MessageKind.REQUEST

    def to_wire(self) -> list[Any]:
        return [int(self.kind), self.msgid, self.method, list(self.params)]


@dataclass(frozen=True, slots=True)
class Response:
    msgid: int
    error: Any
    result: Any

    kind = MessageKind.RESPONSE

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_wire(self) -> list[Any]:
        return [int(self.kind), self.msgid, self.error, self.result]


@dataclass(frozen=True, slots=True)
class Notification:
    method: str
    params: tuple[Any, ...]

    kind = MessageKind.NOTIFICATION

    def to_wire(self) -> list[Any]:
        return [int(self.kind), self.method, list(self.params)]


RpcMessage = Union[Request, Response, Notification]


def decode_name(value: Any) -> str:
    """Method and command names arrive as msgpack ``str`` or ``bin``."""

    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    raise MalformedMessageError(f"expected a name, got {type(value).__name__}")


def _expect_id(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise MalformedMessageError(f"invalid message id {value!r}", payload=value)
    return value


def _expect_params(value: Any) -> tuple[Any, ...]:
    if not isinstance(value, (list, tuple)):
        raise MalformedMessageError("params must be an array", payload=value)
    return tuple(value)


def parse_message(obj: Any) -> RpcMessage:
    """Validate a decoded msgpack object and wrap it in its message type."""

    if not isinstance(obj, (list, tuple)):
        raise MalformedMessageError("message is not an array", payload=obj)
    size = len(obj)
    if size not in (3, 4):
        raise MalformedMessageError(f"invalid message size {size}", payload=obj)

    tag = obj[0]
    if isinstance(tag, bool) or not isinstance(tag, int):
        raise MalformedMessageError(f"invalid message tag {tag!r}", payload=obj)
    try:
        kind = MessageKind(tag)
    except ValueError as exc:
        raise MalformedMessageError(f"unknown identifier {tag}", payload=obj) from exc

    expected = 3 if kind is MessageKind.NOTIFICATION else 4
    if size != expected:
        raise MalformedMessageError(
            f"{kind.name.lower()} expects {expected} elements, got {size}",
            payload=obj,
        )

    if kind is MessageKind.REQUEST:
        return Request(
            msgid=_expect_id(obj[1]),
            method=decode_name(obj[2]),
            params=_expect_params(obj[3]),
        )
    if kind is MessageKind.RESPONSE:
        return Response(msgid=_expect_id(obj[1]), error=obj[2], result=obj[3])
    return Notification(method=decode_name(obj[1]), params=_expect_params(obj[2]))


def describe(message: RpcMessage) -> str:
    if isinstance(message, Request):
        return f"request[{message.msgid}] {message.method}"
    if isinstance(message, Response):
        return f"response[{message.msgid}]"
    return f"notification {message.method}"


__all__ = [
    "MessageKind",
    "Request",
    "Response",
    "Notification",
    "RpcMessage",
    "decode_name",
    "parse_message",
    "describe",
]
