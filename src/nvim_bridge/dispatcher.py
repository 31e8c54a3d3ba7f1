"""Routes decoded RPC messages; ``redraw`` batches go to the command table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from nvim_bridge.errors import RedrawArgumentError
from nvim_bridge.redraw import (
    RedrawCommand,
    RedrawCommandName,
    RedrawCommandTable,
    RedrawContext,
    parse_batch,
)
from nvim_bridge.rpc.messages import Notification, Request, Response, RpcMessage
from nvim_bridge.rpc.writer import RpcWriter
from nvim_bridge.runtime import telemetry

REDRAW_METHOD = "redraw"

_LOGGER = "nvim_bridge.dispatch"


@dataclass(slots=True)
class DispatchStats:
    batches: int = 0
    applied: int = 0
    failed: int = 0
    unknown: int = 0
    dropped_notifications: int = 0


class NotificationDispatcher:
    """Applies redraw batches in order under the sync gate.

    Nothing raised by a single sub-command escapes: it is logged and the
    batch continues with the next call.
    """

    def __init__(
        self,
        table: RedrawCommandTable,
        context: RedrawContext,
        *,
        writer: Optional[RpcWriter] = None,
    ) -> None:
        self.table = table
        self.context = context
        self.writer = writer
        self.stats = DispatchStats()

    def dispatch(self, message: RpcMessage) -> None:
        if isinstance(message, Notification):
            self.on_notification(message.method, message.params)
        elif isinstance(message, Response):
            if self.writer is not None:
                self.writer.resolve(message)
            else:
                telemetry.trace(f"response[{message.msgid}]", logger_name=_LOGGER)
        elif isinstance(message, Request):
            telemetry.trace(
                f"request[{message.msgid}] {message.method}", logger_name=_LOGGER
            )

    def on_notification(self, method: str, params: Sequence[Any]) -> None:
        if method != REDRAW_METHOD:
            self.stats.dropped_notifications += 1
            telemetry.record_event(
                "rpc.unhandled_notification",
                level="debug",
                data={"method": method},
                logger_name=_LOGGER,
            )
            return
        self.apply_redraw(params)

    def apply_redraw(self, params: Sequence[Any]) -> None:
        batch = parse_batch(params)
        self.stats.batches += 1
        self.context.gate.enter_batch()
        with telemetry.span(
            "redraw::batch",
            logger_name=_LOGGER,
            component="redraw",
            metadata={"commands": len(batch)},
        ):
            for command in batch:
                self._apply(command)

    def _apply(self, command: RedrawCommand) -> None:
        entry = self.table.get(command.name)
        if entry is None:
            self.stats.unknown += 1
            telemetry.record_event(
                "redraw.unknown_command",
                level="debug",
                data={"command": command.raw_name},
                logger_name=_LOGGER,
            )
            return

        if command.name is not RedrawCommandName.FLUSH:
            # commands after a mid-batch flush still mutate under the gate
            self.context.gate.enter_batch()

        for args in command.iter_calls():
            try:
                entry(self.context, args)
            except (RedrawArgumentError, TypeError, ValueError, IndexError) as exc:
                self.stats.failed += 1
                telemetry.record_event(
                    "redraw.command_failed",
                    level="warning",
                    data={"command": command.raw_name, "reason": str(exc)},
                    logger_name=_LOGGER,
                )
            else:
                self.stats.applied += 1


__all__ = ["NotificationDispatcher", "DispatchStats", "REDRAW_METHOD"]
