"""State a redraw handler is allowed to touch."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from nvim_bridge.grid import GridModel
from nvim_bridge.highlights import HighlightCache
from nvim_bridge.sync import SyncGate


@dataclass(slots=True)
class RedrawContext:
    highlights: HighlightCache
    grids: GridModel
    gate: SyncGate
    options: Dict[str, Any] = field(default_factory=dict)
