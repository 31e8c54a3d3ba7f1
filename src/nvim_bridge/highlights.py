"""Highlight attribute cache with dynamic default-colour fallback."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from nvim_bridge.runtime import telemetry

RGB = Tuple[int, int, int]

DEFAULT_ID = 0
DEFAULT_FOREGROUND: RGB = (255, 255, 255)
DEFAULT_BACKGROUND: RGB = (0, 0, 0)

_UNSET_VALUES = {-1, 2**64 - 1}

_FLAG_KEYS = ("bold", "italic", "underline", "strikethrough", "reverse")


def unpack_rgb(value: Any) -> Optional[RGB]:
    """Decode a packed ``0xRRGGBB`` colour; ``None`` for the unset sentinel."""

    if value is None or isinstance(value, bool) or not isinstance(value, int):
        return None
    if value in _UNSET_VALUES or value < 0:
        return None
    return ((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)


def pack_rgb(rgb: RGB) -> int:
    red, green, blue = rgb
    return (red << 16) | (green << 8) | blue


@dataclass(slots=True)
class HighlightAttr:
    """Colours and style flags for one highlight id.

    ``fg``/``bg`` of ``None`` defer to whatever the id-0 default is when the
    attribute gets resolved, not when it was defined.
    """

    id: int
    fg: Optional[RGB] = None
    bg: Optional[RGB] = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    reverse: bool = False

    @property
    def flags(self) -> Tuple[bool, ...]:
        return tuple(getattr(self, key) for key in _FLAG_KEYS)


class HighlightCache:
    """Maps highlight ids to attributes; id 0 is the live default."""

    def __init__(
        self,
        *,
        foreground: RGB = DEFAULT_FOREGROUND,
        background: RGB = DEFAULT_BACKGROUND,
    ) -> None:
        self._entries: Dict[int, HighlightAttr] = {
            DEFAULT_ID: HighlightAttr(DEFAULT_ID, fg=foreground, bg=background)
        }

    def __contains__(self, attr_id: object) -> bool:
        return attr_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def default(self) -> HighlightAttr:
        return self._entries[DEFAULT_ID]

    def get(self, attr_id: int) -> Optional[HighlightAttr]:
        """Raw entry as defined, unset colours still ``None``."""

        return self._entries.get(attr_id)

    def resolve(self, attr_id: int) -> HighlightAttr:
        """Concrete attribute with unset colours taken from the current default."""

        default = self.default
        entry = self._entries.get(attr_id)
        if entry is None:
            return replace(default)
        return replace(
            entry,
            fg=entry.fg if entry.fg is not None else default.fg,
            bg=entry.bg if entry.bg is not None else default.bg,
        )

    def define(self, attr_id: int, rgb_map: Mapping[Any, Any]) -> HighlightAttr:
        """(Re)define ``attr_id`` from an ``hl_attr_define`` rgb map.

        Each call fully re-specifies the entry: it is reseeded from the current
        default (colours unset, default flags) before the map is overlaid.
        Unknown keys are ignored.
        """

        is_default = attr_id == DEFAULT_ID
        entry = self._entries.get(attr_id)
        if entry is None:
            entry = self._entries[attr_id] = HighlightAttr(attr_id)
        seed = self.default
        if not is_default:
            entry.fg = None
            entry.bg = None
        for key, value in zip(_FLAG_KEYS, seed.flags):
            setattr(entry, key, value if not is_default else False)

        for raw_key, value in rgb_map.items():
            key = raw_key.decode("utf-8", "replace") if isinstance(raw_key, bytes) else raw_key
            if key == "foreground":
                color = unpack_rgb(value)
                if color is not None or not is_default:
                    entry.fg = color
            elif key == "background":
                color = unpack_rgb(value)
                if color is not None or not is_default:
                    entry.bg = color
            elif key in _FLAG_KEYS:
                # flags accumulate within one definition
                setattr(entry, key, getattr(entry, key) or bool(value))
        return entry

    def set_defaults(self, fg: Any, bg: Any) -> HighlightAttr:
        """Update id 0 in place; an unset colour keeps the previous default."""

        default = self.default
        foreground = unpack_rgb(fg)
        background = unpack_rgb(bg)
        if foreground is not None:
            default.fg = foreground
        if background is not None:
            default.bg = background
        telemetry.record_event(
            "highlight.defaults",
            level="debug",
            data={"fg": default.fg, "bg": default.bg},
        )
        return default


__all__ = [
    "RGB",
    "DEFAULT_ID",
    "DEFAULT_FOREGROUND",
    "DEFAULT_BACKGROUND",
    "HighlightAttr",
    "HighlightCache",
    "pack_rgb",
    "unpack_rgb",
]
