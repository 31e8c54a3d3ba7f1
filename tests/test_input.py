from __future__ import annotations

import pytest

from nvim_bridge.input import (
    KeyChord,
    Modifier,
    MouseAction,
    MouseButton,
    MouseTracker,
    PastePhase,
    PasteStateMachine,
    decode_key,
    encode_key,
    encode_text,
)
from nvim_bridge.input.mouse import HostButton
from nvim_bridge.input.paste import split_paste


@pytest.mark.parametrize(
    "key, modifiers, token",
    [
        ("enter", (), "<CR>"),
        ("escape", (), "<Esc>"),
        ("f5", ("shift",), "<S-F5>"),
        ("left", ("ctrl", "alt"), "<C-A-Left>"),
        ("a", ("ctrl",), "<C-a>"),
        ("x", ("meta", "shift", "alt", "ctrl"), "<C-A-S-M-x>"),
        ("<", ("ctrl",), "<C-lt>"),
        (" ", ("ctrl",), "<C-Space>"),
        ("-", ("alt",), "<A-->"),
        ("backspace", (), "<BS>"),
        ("delete", ("shift",), "<S-Del>"),
    ],
)
def test_key_round_trip(key: str, modifiers: tuple[str, ...], token: str) -> None:
    assert encode_key(key, modifiers) == token
    assert decode_key(token) == KeyChord.of(key, modifiers)


def test_plain_printable_keys_are_sent_as_text() -> None:
    assert encode_key("a") == "a"
    assert encode_key("<") == "<LT>"
    assert decode_key("<LT>") == KeyChord("<")
    assert decode_key("a") == KeyChord("a")


def test_text_escapes_key_notation() -> None:
    assert encode_text("a<b>") == "a<LT>b>"


def test_unknown_keys_and_modifiers() -> None:
    assert encode_key("hyperspace") is None
    with pytest.raises(ValueError):
        encode_key("a", ["hyper"])
    with pytest.raises(ValueError):
        decode_key("<C-nonsense>")


def test_modifier_enum_values_are_accepted() -> None:
    assert encode_key("tab", [Modifier.SHIFT]) == "<S-Tab>"


def test_press_motion_release_classifies_drag() -> None:
    tracker = MouseTracker()

    press = tracker.button(1, HostButton.LEFT, True, 2, 3)
    drag = tracker.motion(1, 4, 5, modifiers=["ctrl"])
    release = tracker.button(1, HostButton.LEFT, False, 4, 5)

    assert press is not None and press.action is MouseAction.PRESS
    assert drag is not None
    assert (drag.button, drag.action, drag.modifier) == (
        MouseButton.LEFT,
        MouseAction.DRAG,
        "C-",
    )
    assert (drag.grid, drag.row, drag.col) == (1, 4, 5)
    assert release is not None and release.action is MouseAction.RELEASE
    assert tracker.mask(1) == 0


def test_motion_without_held_button_is_a_no_op() -> None:
    tracker = MouseTracker()
    assert tracker.motion(1, 0, 0) is None

    tracker.button(1, HostButton.RIGHT, True, 0, 0)
    assert tracker.motion(1, 1, 1, relative=True) is None
    # held buttons are tracked per grid
    assert tracker.motion(2, 1, 1) is None
    drag = tracker.motion(1, 1, 1)
    assert drag is not None and drag.button is MouseButton.RIGHT


def test_wheel_maps_to_up_and_down() -> None:
    tracker = MouseTracker()

    up = tracker.button(1, HostButton.WHEEL_UP, True, 0, 0, ["shift"])
    down = tracker.button(1, HostButton.WHEEL_DOWN, True, 0, 0)

    assert up is not None and (up.button, up.action, up.modifier) == (
        MouseButton.WHEEL,
        MouseAction.UP,
        "S-",
    )
    assert down is not None and down.action is MouseAction.DOWN
    assert tracker.button(1, HostButton.WHEEL_DOWN, False, 0, 0) is None
    assert tracker.mask(1) == 0


def test_single_chunk_paste_needs_no_session() -> None:
    machine = PasteStateMachine()
    chunk = machine.submit(1, "hello", False)

    assert chunk is not None and chunk.phase is PastePhase.SINGLE
    assert machine.owner is None


def test_multi_chunk_paste_phases() -> None:
    machine = PasteStateMachine()

    phases = [
        machine.submit(1, "a", True),
        machine.submit(1, "b", True),
        machine.submit(1, "c", False),
    ]

    assert [chunk.phase for chunk in phases if chunk] == [
        PastePhase.FIRST,
        PastePhase.MIDDLE,
        PastePhase.LAST,
    ]
    assert [int(chunk.phase) for chunk in phases if chunk] == [1, 2, 3]
    assert machine.owner is None


def test_second_grid_cannot_interleave_a_paste() -> None:
    machine = PasteStateMachine()

    first = machine.submit(1, "a", True)
    intruder = machine.submit(2, "x", True)
    intruder_end = machine.submit(2, "y", False)

    assert first is not None and first.phase is PastePhase.FIRST
    assert intruder is None and intruder_end is None
    assert machine.owner == 1

    middle = machine.submit(1, "b", True)
    last = machine.submit(1, "c", False)
    assert middle is not None and middle.phase is PastePhase.MIDDLE
    assert last is not None and last.phase is PastePhase.LAST


def test_split_paste_marks_continuations() -> None:
    assert list(split_paste("abc", 8)) == [("abc", False)]
    assert list(split_paste("abcdefg", 3)) == [
        ("abc", True),
        ("def", True),
        ("g", False),
    ]
    with pytest.raises(ValueError):
        list(split_paste("abc", 0))


def test_unknown_buttons_are_dropped() -> None:
    tracker = MouseTracker()

    assert tracker.button(1, 0, False, 0, 0) is None
    assert tracker.button(1, 9, True, 0, 0) is None
    assert tracker.mask(1) == 0
