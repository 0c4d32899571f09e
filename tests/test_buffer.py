from __future__ import annotations

import pytest

from sexp_engine.buffer import Buffer
from sexp_engine.config import EngineConfig, IndentRules
from sexp_engine.errors import BufferValidationError


def test_insert_at_point_leaves_point_after_text() -> None:
    buffer = Buffer.from_text("(a b)", point=3)

    buffer.insert("xy")

    assert buffer.text == "(a xyb)"
    assert buffer.point == 5


def test_edit_before_point_shifts_point() -> None:
    buffer = Buffer.from_text("abc def", point=5)

    buffer.delete(0, 4)

    assert buffer.text == "def"
    assert buffer.point == 1


def test_delete_spanning_point_collapses_to_start() -> None:
    buffer = Buffer.from_text("abcdef", point=3)

    buffer.delete(1, 5)

    assert buffer.text == "af"
    assert buffer.point == 1


def test_marker_stays_put_for_insertion_at_its_position() -> None:
    buffer = Buffer.from_text("abc")
    marker = buffer.marker(1)

    buffer.insert("zz", 1)
    assert marker.position == 1

    buffer.insert("q", 0)
    assert marker.position == 2


def test_save_excursion_restores_point_through_edits() -> None:
    buffer = Buffer.from_text("(let ([a 1]) a)", point=5)

    with buffer.save_excursion():
        buffer.goto(10)
        buffer.insert("  ", 0)

    assert buffer.point == 7


def test_line_and_column_coordinates() -> None:
    buffer = Buffer.from_text("ab\ncde\n")

    assert buffer.position_for(4) == (1, 1)
    assert buffer.offset_for((2, 0)) == 7
    assert buffer.line_start(5) == 3
    assert buffer.line_end(4) == 6
    assert buffer.column_at(7) == 0


def test_goto_out_of_range_raises() -> None:
    buffer = Buffer.from_text("abc")

    with pytest.raises(BufferValidationError):
        buffer.goto(10)


def test_delete_blank_lines_collapses_run_to_one() -> None:
    buffer = Buffer.from_text("a\n\n\n\nb\n", point=3)

    buffer.delete_blank_lines()

    assert buffer.text == "a\n\nb\n"
    assert buffer.point == 2


def test_delete_blank_lines_removes_isolated_blank_line() -> None:
    buffer = Buffer.from_text("a\n\nb", point=2)

    buffer.delete_blank_lines()

    assert buffer.text == "a\nb"


def test_delete_blank_lines_on_text_line_removes_following_blanks() -> None:
    buffer = Buffer.from_text("a\n\n\nb", point=0)

    buffer.delete_blank_lines()

    assert buffer.text == "a\nb"


def test_just_one_space_collapses_surrounding_whitespace() -> None:
    buffer = Buffer.from_text("[a  \t 12]", point=6)

    buffer.just_one_space()

    assert buffer.text == "[a 12]"
    assert buffer.point == 3


def test_transaction_groups_edits_into_one_undo_entry() -> None:
    buffer = Buffer.from_text("abc")

    with buffer.transaction("pair"):
        buffer.insert("x", 0)
        buffer.insert("y", 4)

    assert buffer.text == "xabcy"
    assert len(buffer.undo) == 1

    assert buffer.undo_last() is True
    assert buffer.text == "abc"
    assert buffer.redo_last() is True
    assert buffer.text == "xabcy"


def test_edits_bump_version() -> None:
    buffer = Buffer.from_text("abc")
    version = buffer.version

    buffer.insert("d", 3)

    assert buffer.version == version + 1


def test_undo_limit_drops_oldest_entries() -> None:
    buffer = Buffer.from_text("", config=EngineConfig(undo_limit=2))

    for char in "abc":
        buffer.insert(char, len(buffer))

    assert len(buffer.undo) == 2
    assert buffer.undo_last() and buffer.undo_last()
    assert buffer.undo_last() is False
    assert buffer.text == "a"


def test_column_expands_tabs() -> None:
    assert Buffer.from_text("\tx").column_at(1) == 8
    assert Buffer.from_text("a\tx").column_at(2) == 8

    narrow = Buffer.from_text(
        "\tx", config=EngineConfig(indent=IndentRules(tab_width=4))
    )
    assert narrow.column_at(1) == 4
