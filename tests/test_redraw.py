from __future__ import annotations

from typing import Any, List, Tuple

import msgpack
import pytest

from nvim_bridge.dispatcher import NotificationDispatcher
from nvim_bridge.grid import GridModel
from nvim_bridge.highlights import DEFAULT_BACKGROUND, HighlightAttr, HighlightCache
from nvim_bridge.redraw import (
    RedrawCommandName,
    RedrawCommandTable,
    RedrawContext,
    RedrawHandler,
    load_default_commands,
    parse_batch,
)
from nvim_bridge.rpc import StreamDecoder
from nvim_bridge.surface import CellSurface, ColorSlot
from nvim_bridge.sync import LockLevel, SyncGate


class RecordingSurface(CellSurface):
    """CellSurface that remembers every write."""

    def __init__(self, width: int, height: int) -> None:
        super().__init__(width, height)
        self.writes: List[Tuple[str, HighlightAttr]] = []

    def write(self, text: str, attr: HighlightAttr) -> None:
        self.writes.append((text, attr))
        super().write(text, attr)


class ByteReader:
    def __init__(self, data: bytes) -> None:
        self._data = data

    def read(self, size: int = -1) -> bytes:
        chunk, self._data = self._data[:size], self._data[size:]
        return chunk


def make_dispatcher(
    width: int = 5,
    height: int = 3,
    *,
    multigrid: bool = False,
) -> Tuple[NotificationDispatcher, RecordingSurface]:
    surface = RecordingSurface(width, height)
    context = RedrawContext(
        highlights=HighlightCache(),
        grids=GridModel(
            surface,
            multigrid=multigrid,
            surface_factory=lambda grid_id, w, h: CellSurface(w, h),
        ),
        gate=SyncGate(),
    )
    table = load_default_commands(RedrawCommandTable(logger_name="tests.redraw"))
    return NotificationDispatcher(table, context), surface


def redraw(dispatcher: NotificationDispatcher, *commands: List[Any]) -> None:
    dispatcher.on_notification("redraw", list(commands))


def line(row: int, text: str, grid: int = 1) -> List[Any]:
    return [grid, row, 0, [[ch] for ch in text]]


def fill(dispatcher: NotificationDispatcher, *rows: str) -> None:
    redraw(dispatcher, ["grid_line", *(line(index, text) for index, text in enumerate(rows))])


def test_default_table_covers_every_command() -> None:
    dispatcher, _ = make_dispatcher()
    assert len(dispatcher.table) == len(RedrawCommandName)
    assert dispatcher.table.stats().names == tuple(
        sorted(name.value for name in RedrawCommandName)
    )
    with pytest.raises(ValueError):
        dispatcher.table.register(
            RedrawHandler(name=RedrawCommandName.FLUSH, handler=lambda ctx, args: None)
        )


def test_commands_apply_in_received_order() -> None:
    dispatcher, surface = make_dispatcher()
    redraw(
        dispatcher,
        ["grid_line", [1, 0, 0, [["a"]]]],
        ["grid_line", [1, 0, 0, [["b"]]], [1, 0, 0, [["c"]]]],
        ["flush"],
    )

    assert surface.row_text(0)[0] == "c"
    assert [text for text, _ in surface.writes] == ["a", "b", "c"]


def test_grid_line_repeat_and_attribute_carry_over() -> None:
    dispatcher, surface = make_dispatcher()
    redraw(
        dispatcher,
        ["hl_attr_define", [1, {"bold": True}, {}, []]],
        ["grid_line", [1, 0, 0, [["a", 1], ["b"], ["c", 0, 2]]]],
    )

    assert surface.row_text(0) == "abcc "
    bold = [surface.read_cell(col, 0).attr.bold for col in range(4)]
    assert bold == [True, True, False, False]


def test_attribute_resets_at_the_start_of_each_line() -> None:
    dispatcher, surface = make_dispatcher()
    redraw(
        dispatcher,
        ["hl_attr_define", [1, {"italic": True}, {}, []]],
        ["grid_line", [1, 0, 0, [["a", 1]]], [1, 1, 0, [["b"]]]],
    )

    assert surface.read_cell(0, 0).attr.italic
    assert not surface.read_cell(0, 1).attr.italic


def test_grid_line_restores_the_logical_cursor() -> None:
    dispatcher, surface = make_dispatcher()
    redraw(
        dispatcher,
        ["grid_cursor_goto", [1, 2, 3]],
        ["grid_line", [1, 0, 0, [["x", 0, 4]]]],
    )

    assert surface.cursor == (3, 2)
    state = dispatcher.context.grids.primary.state
    assert (state.cursor_row, state.cursor_col) == (2, 3)


def test_scroll_up_moves_rows_and_leaves_the_last_row() -> None:
    dispatcher, surface = make_dispatcher()
    fill(dispatcher, "abcde", "fghij", "klmno")

    redraw(dispatcher, ["grid_scroll", [1, 0, 3, 0, 5, 1, 0]])

    assert [surface.row_text(row) for row in range(3)] == ["fghij", "klmno", "klmno"]


def test_scroll_down_copies_bottom_up() -> None:
    dispatcher, surface = make_dispatcher()
    fill(dispatcher, "abcde", "fghij", "klmno")

    redraw(dispatcher, ["grid_scroll", [1, 0, 3, 0, 5, -1, 0]])

    assert [surface.row_text(row) for row in range(3)] == ["abcde", "abcde", "fghij"]


def test_scroll_only_touches_the_region_columns() -> None:
    dispatcher, surface = make_dispatcher()
    fill(dispatcher, "abcde", "fghij", "klmno")

    redraw(dispatcher, ["grid_scroll", [1, 0, 3, 1, 3, 2, 0]])

    assert [surface.row_text(row) for row in range(3)] == ["almde", "fghij", "klmno"]


def test_scroll_writes_blanks_for_unwritten_cells() -> None:
    dispatcher, surface = make_dispatcher()
    redraw(dispatcher, ["grid_line", line(1, "ab")])
    assert surface.read_cell(3, 1).ch == ""

    redraw(dispatcher, ["grid_scroll", [1, 0, 2, 0, 5, 1, 0]])

    assert surface.read_cell(3, 0).ch == " "
    assert surface.row_text(0) == "ab   "


def test_default_colors_are_pushed_to_every_grid() -> None:
    dispatcher, surface = make_dispatcher(multigrid=True)
    redraw(dispatcher, ["grid_line", [2, 0, 0, [["z"]]]])
    secondary = dispatcher.context.grids.get(2).surface
    assert isinstance(secondary, CellSurface)

    redraw(dispatcher, ["default_colors_set", [0x00FF00, 0x0000FF, -1, 0, 0]])

    for target in (surface, secondary):
        assert target.colors[ColorSlot.PRIMARY] == ((0, 255, 0), (0, 0, 255))
        assert target.colors[ColorSlot.TEXT] == ((0, 255, 0), (0, 0, 255))
        assert target.colors[ColorSlot.BACKGROUND] == ((0, 0, 255), (0, 0, 255))
        assert target.get_default_attr().bg == (0, 0, 255)


def test_highlight_defined_before_defaults_picks_up_new_colours() -> None:
    dispatcher, surface = make_dispatcher()
    redraw(
        dispatcher,
        ["hl_attr_define", [4, {"underline": True}, {}, []]],
        ["default_colors_set", [0x00FF00, 0x0000FF, -1, 0, 0]],
        ["grid_line", [1, 0, 0, [["u", 4]]]],
    )

    attr = surface.read_cell(0, 0).attr
    assert attr.fg == (0, 255, 0)
    assert attr.bg == (0, 0, 255)
    assert attr.underline


def test_clear_resize_and_title() -> None:
    dispatcher, surface = make_dispatcher()
    fill(dispatcher, "abcde")
    redraw(
        dispatcher,
        ["grid_clear", [1]],
        ["grid_resize", [1, 8, 4]],
        ["set_title", ["notes.txt - NVIM"]],
        ["set_icon", ["nvim"]],
        ["option_set", ["guifont", "Mono"], ["linespace", 0]],
    )

    assert surface.row_text(0) == "        "
    assert (surface.width, surface.height) == (8, 4)
    assert surface.ident == "notes.txt - NVIM"
    assert dispatcher.context.options == {"guifont": "Mono", "linespace": 0}

    redraw(dispatcher, ["set_title", [""]])
    assert surface.ident == ""


def test_bad_resize_is_ignored() -> None:
    dispatcher, surface = make_dispatcher()
    redraw(dispatcher, ["grid_resize", [1, 0, -2]], ["grid_resize", ["x"]])

    assert (surface.width, surface.height) == (5, 3)
    assert dispatcher.stats.failed == 0


def test_malformed_command_does_not_abort_the_batch() -> None:
    dispatcher, surface = make_dispatcher()
    redraw(
        dispatcher,
        ["grid_line", [1, 0, 0, "cells?"], [1, 0, 0, [["x"]]]],
        ["no_such_command", [1, 2]],
        ["grid_cursor_goto", [1, "row", 0]],
        ["set_title", ["ok"]],
        "not even an array",
    )

    assert surface.row_text(0)[0] == "x"
    assert surface.ident == "ok"
    assert dispatcher.stats.failed == 2
    assert dispatcher.stats.unknown == 1


def test_other_notifications_are_dropped() -> None:
    dispatcher, surface = make_dispatcher()
    dispatcher.on_notification("nvim_buf_lines_event", [1, 2])

    assert dispatcher.stats.dropped_notifications == 1
    assert dispatcher.stats.batches == 0
    assert surface.writes == []


def test_grids_share_the_primary_without_multigrid() -> None:
    dispatcher, surface = make_dispatcher()
    redraw(dispatcher, ["grid_line", [4, 0, 0, [["q"]]]], ["grid_destroy", [1]])

    assert surface.row_text(0)[0] == "q"
    assert 1 in dispatcher.context.grids
    assert len(dispatcher.context.grids) == 1


def test_multigrid_creates_and_destroys_secondary_grids() -> None:
    dispatcher, surface = make_dispatcher(multigrid=True)
    redraw(dispatcher, ["grid_line", [2, 0, 0, [["q"]]]])
    grids = dispatcher.context.grids

    assert 2 in grids
    assert surface.writes == []

    redraw(dispatcher, ["grid_destroy", [2]])
    assert 2 not in grids


def test_flush_releases_the_gate() -> None:
    dispatcher, _ = make_dispatcher()
    gate = dispatcher.context.gate

    redraw(dispatcher, ["grid_line", line(0, "a")])
    assert gate.lock_level is LockLevel.FAST

    redraw(dispatcher, ["grid_line", line(0, "b")], ["flush"])
    assert gate.lock_level is LockLevel.IDLE
    assert not gate.primary.locked()


def test_commands_after_a_mid_batch_flush_retake_the_gate() -> None:
    dispatcher, _ = make_dispatcher()
    gate = dispatcher.context.gate

    redraw(dispatcher, ["flush"], ["grid_line", line(0, "a")])

    assert gate.lock_level is LockLevel.FAST
    gate.release_batch()


def test_parse_batch_skips_non_arrays() -> None:
    batch = parse_batch([["flush"], 5, [], [b"grid_clear", [1]]])
    assert [command.raw_name for command in batch] == ["flush", "grid_clear"]
    assert batch[0].iter_calls() == ((),)


def test_grouped_calls_are_unpacked() -> None:
    (command,) = parse_batch([["grid_line", [[1, 0, 0, [["a"]]], [1, 1, 0, [["b"]]]]]])
    assert command.calls == ((1, 0, 0, [["a"]]), (1, 1, 0, [["b"]]))


def test_end_to_end_bytes_produce_a_single_red_write() -> None:
    dispatcher, surface = make_dispatcher()
    redraw(dispatcher, ["hl_attr_define", [5, {"foreground": 0xFF0000}, {}, []]], ["flush"])

    payload = msgpack.packb(
        [2, "redraw", [["grid_line", [[1, 0, 0, [["H", 5, 1]]]]]]],
        use_bin_type=True,
    )
    for message in StreamDecoder(ByteReader(payload)):
        dispatcher.dispatch(message)

    assert len(surface.writes) == 1
    text, attr = surface.writes[0]
    assert text == "H"
    assert attr.fg == (255, 0, 0)
    assert attr.bg == DEFAULT_BACKGROUND
