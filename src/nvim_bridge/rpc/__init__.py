"""msgpack-rpc framing, decoding and the outbound request channel."""

from .client import NvimClient
from .decoder import MIN_SLACK, StreamDecoder
from .messages import (
    MessageKind,
    Notification,
    Request,
    Response,
    RpcMessage,
    parse_message,
)
from .writer import RpcWriter

__all__ = [
    "MessageKind",
    "Notification",
    "Request",
    "Response",
    "RpcMessage",
    "parse_message",
    "StreamDecoder",
    "MIN_SLACK",
    "RpcWriter",
    "NvimClient",
]
