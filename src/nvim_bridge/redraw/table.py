"""Registry mapping redraw command names to their handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Sequence

from .commands import RedrawCommandName
from .context import RedrawContext

HandlerFn = Callable[[RedrawContext, Sequence[Any]], None]


@dataclass(frozen=True, slots=True)
class RedrawHandler:
    """Callable metadata for one redraw sub-command."""

    name: RedrawCommandName
    handler: HandlerFn
    description: str = ""
    telemetry_name: str | None = None
    metadata: Mapping[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not callable(self.handler):
            raise TypeError("handler must be callable")
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))
        if self.telemetry_name is None:
            object.__setattr__(self, "telemetry_name", f"redraw::{self.name.value}")

    def __call__(self, context: RedrawContext, args: Sequence[Any]) -> None:
        self.handler(context, args)


@dataclass(slots=True)
class TableStats:
    """Lightweight snapshot describing table contents."""

    handler_count: int
    names: tuple[str, ...]


class RedrawCommandTable:
    """Fixed set of handlers looked up by parsed command tag."""

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._handlers: Dict[RedrawCommandName, RedrawHandler] = {}
        self._logger_name = logger_name

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def register(self, entry: RedrawHandler, *, replace: bool = False) -> RedrawHandler:
        if not replace and entry.name in self._handlers:
            raise ValueError(f"Redraw command '{entry.name.value}' already registered")
        self._handlers[entry.name] = entry
        return entry

    def unregister(self, name: RedrawCommandName) -> Optional[RedrawHandler]:
        return self._handlers.pop(name, None)

    def get(self, name: Optional[RedrawCommandName]) -> Optional[RedrawHandler]:
        if name is None:
            return None
        return self._handlers.get(name)

    def iter_handlers(self) -> Iterator[RedrawHandler]:
        yield from self._handlers.values()

    def stats(self) -> TableStats:
        return TableStats(
            handler_count=len(self._handlers),
            names=tuple(sorted(name.value for name in self._handlers)),
        )


__all__ = ["RedrawHandler", "RedrawCommandTable", "TableStats", "HandlerFn"]
