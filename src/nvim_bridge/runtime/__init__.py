"""Process-level services: telemetry, configuration and editor spawning."""

from .config import BridgeConfig
from .process import EditorProcess, spawn_editor

__all__ = ["BridgeConfig", "EditorProcess", "spawn_editor"]
