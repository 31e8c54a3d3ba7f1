"""Key notation used by ``nvim_input``: ``<C-A-S-M-name>`` tokens."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional


class Modifier(str, Enum):
    CTRL = "C"
    ALT = "A"
    SHIFT = "S"
    META = "M"


MODIFIER_ORDER: tuple[Modifier, ...] = (
    Modifier.CTRL,
    Modifier.ALT,
    Modifier.SHIFT,
    Modifier.META,
)

_MODIFIER_ALIASES: Mapping[str, Modifier] = MappingProxyType(
    {
        "c": Modifier.CTRL,
        "ctrl": Modifier.CTRL,
        "control": Modifier.CTRL,
        "a": Modifier.ALT,
        "alt": Modifier.ALT,
        "s": Modifier.SHIFT,
        "shift": Modifier.SHIFT,
        "m": Modifier.META,
        "meta": Modifier.META,
    }
)

# host key name -> editor key name
SPECIAL_KEYS: Mapping[str, str] = MappingProxyType(
    {
        **{f"f{index}": f"F{index}" for index in range(1, 13)},
        "escape": "Esc",
        "left": "Left",
        "right": "Right",
        "up": "Up",
        "down": "Down",
        "pagedown": "PageDown",
        "pageup": "PageUp",
        "home": "Home",
        "end": "End",
        "insert": "Insert",
        "delete": "Del",
        "backspace": "BS",
        "tab": "Tab",
        "enter": "CR",
    }
)

_EDITOR_TO_HOST: Mapping[str, str] = MappingProxyType(
    {name.lower(): key for key, name in SPECIAL_KEYS.items()}
)

# printable characters that need a name inside ``<...>``
_BRACKET_NAMES: Mapping[str, str] = MappingProxyType({"<": "lt", " ": "Space"})
_BRACKET_CHARS: Mapping[str, str] = MappingProxyType({"lt": "<", "Space": " "})


@dataclass(frozen=True, slots=True)
class KeyChord:
    """A host key (special name or single printable char) plus modifiers."""

    key: str
    modifiers: frozenset[Modifier] = frozenset()

    @classmethod
    def of(cls, key: str, modifiers: Iterable[str | Modifier] = ()) -> "KeyChord":
        return cls(key=key, modifiers=normalize_modifiers(modifiers))


def normalize_modifiers(modifiers: Iterable[str | Modifier]) -> frozenset[Modifier]:
    result: set[Modifier] = set()
    for modifier in modifiers:
        if isinstance(modifier, Modifier):
            result.add(modifier)
            continue
        alias = _MODIFIER_ALIASES.get(str(modifier).strip().lower())
        if alias is None:
            raise ValueError(f"unknown modifier '{modifier}'")
        result.add(alias)
    return frozenset(result)


def _is_printable(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


def modifier_prefix(modifiers: Iterable[Modifier]) -> str:
    present = set(modifiers)
    return "".join(f"{mod.value}-" for mod in MODIFIER_ORDER if mod in present)


def encode_key(
    key: str, modifiers: Iterable[str | Modifier] = ()
) -> Optional[str]:
    """Return the ``nvim_input`` token for a key, or ``None`` if unknown.

    Special keys are looked up in ``SPECIAL_KEYS`` and always bracketed.
    Printable characters are bracketed when modifiers are present and sent
    as escaped literal text otherwise.
    """

    mods = normalize_modifiers(modifiers)
    prefix = modifier_prefix(mods)
    name = SPECIAL_KEYS.get(key.lower()) if not _is_printable(key) else None
    if name is not None:
        return f"<{prefix}{name}>"
    if not _is_printable(key):
        return None
    if not prefix:
        return encode_text(key)
    return f"<{prefix}{_BRACKET_NAMES.get(key, key)}>"


def encode_text(text: str) -> str:
    """Escape literal text so the editor does not parse key notation."""

    return text.replace("<", "<LT>")


def decode_key(token: str) -> KeyChord:
    """Inverse of ``encode_key`` over the same naming table."""

    if token == "<LT>":
        return KeyChord("<")
    if not (token.startswith("<") and token.endswith(">") and len(token) > 2):
        if _is_printable(token):
            return KeyChord(token)
        raise ValueError(f"not a key token: {token!r}")

    body = token[1:-1]
    modifiers: set[Modifier] = set()
    # a trailing '-' is the key itself, e.g. <C-->
    while len(body) > 2 and body[1] == "-":
        alias = _MODIFIER_ALIASES.get(body[0].lower())
        if alias is None:
            break
        modifiers.add(alias)
        body = body[2:]

    host_key = _EDITOR_TO_HOST.get(body.lower())
    if host_key is not None and len(body) > 1:
        key = host_key
    elif body in _BRACKET_CHARS:
        key = _BRACKET_CHARS[body]
    elif _is_printable(body):
        key = body
    else:
        raise ValueError(f"unknown key name in {token!r}")
    return KeyChord(key=key, modifiers=frozenset(modifiers))


__all__ = [
    "Modifier",
    "MODIFIER_ORDER",
    "SPECIAL_KEYS",
    "KeyChord",
    "normalize_modifiers",
    "modifier_prefix",
    "encode_key",
    "encode_text",
    "decode_key",
]
