"""Bridge configuration sourced from the environment and the command line."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional

ENV_PREFIX = "NVIM_BRIDGE_"

DEFAULT_WIDTH = 128
DEFAULT_HEIGHT = 32
PRIMARY_GRID_ID = 1


def _env_flag(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = env.get(f"{ENV_PREFIX}{name}")
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _env_int(env: Mapping[str, str], name: str, fallback: int) -> int:
    raw = env.get(f"{ENV_PREFIX}{name}")
    if raw is None:
        return fallback
    try:
        return int(raw)
    except ValueError:
        return fallback


@dataclass(slots=True)
class BridgeConfig:
    """Everything the bridge needs to attach to an editor instance."""

    nvim_binary: str = "nvim"
    editor_args: tuple[str, ...] = ()
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    multigrid: bool = False
    popups: bool = False
    messages: bool = False
    trace: Optional[str] = None
    paste_chunk_size: int = 4096
    frame_interval: float = 1 / 60
    extra_ui_options: dict[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("grid dimensions must be positive")
        if self.paste_chunk_size <= 0:
            raise ValueError("paste_chunk_size must be positive")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "BridgeConfig":
        source = os.environ if env is None else env
        return cls(
            nvim_binary=source.get(f"{ENV_PREFIX}NVIM", "nvim"),
            width=_env_int(source, "WIDTH", DEFAULT_WIDTH),
            height=_env_int(source, "HEIGHT", DEFAULT_HEIGHT),
            multigrid=_env_flag(source, "MULTIGRID"),
            popups=_env_flag(source, "POPUP"),
            messages=_env_flag(source, "MESSAGES"),
            trace=source.get(f"{ENV_PREFIX}TRACE") or None,
            paste_chunk_size=_env_int(source, "PASTE_CHUNK", 4096),
        )

    def with_overrides(self, **changes: object) -> "BridgeConfig":
        return replace(self, **changes)

    def ui_options(self) -> dict[str, bool]:
        """Options map sent with ``nvim_ui_attach``."""

        options = {"rgb": True, "ext_linegrid": True}
        if self.multigrid:
            options["ext_multigrid"] = True
        if self.messages:
            options["ext_messages"] = True
        if self.popups:
            options["ext_popupmenu"] = True
        options.update(self.extra_ui_options)
        return options


__all__ = ["BridgeConfig", "PRIMARY_GRID_ID", "DEFAULT_WIDTH", "DEFAULT_HEIGHT"]
