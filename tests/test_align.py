from __future__ import annotations

import pytest

from sexp_engine.actions import align, max_couple_column, unalign
from sexp_engine.buffer import Buffer
from sexp_engine.errors import UserError

LET = "(let ([a 12]\n      [bar 23])\n  body)"
ALIGNED = "(let ([a   12]\n      [bar 23])\n  body)"


def make_buffer(text: str = LET, point: int = 6) -> Buffer:
    return Buffer.from_text(text, point=point)


def test_max_couple_column() -> None:
    buffer = make_buffer()

    assert max_couple_column(buffer) == 11
    assert buffer.point == 6


def test_align_pads_values_to_rightmost_column() -> None:
    buffer = make_buffer()

    assert align(buffer) == 11
    assert buffer.text == ALIGNED
    assert buffer.point == 6


def test_align_is_idempotent() -> None:
    buffer = make_buffer()

    align(buffer)
    align(buffer)

    assert buffer.text == ALIGNED
    assert len(buffer.undo) == 1


def test_unalign_restores_single_spacing() -> None:
    buffer = make_buffer()

    align(buffer)
    assert unalign(buffer) == 2
    assert buffer.text == LET

    unalign(buffer)
    assert buffer.text == LET


def test_values_sharing_a_line_abort_without_edits() -> None:
    text = "(let ([a 1] [b 2]\n      [cc 3])\n  a)"
    buffer = make_buffer(text)

    with pytest.raises(UserError, match="same line"):
        align(buffer)
    assert buffer.text == text
    assert buffer.point == 6
    assert len(buffer.undo) == 0


def test_multiline_value_is_reindented_after_shift() -> None:
    buffer = make_buffer("(let ([a (list 1\n               2)]\n      [bcd 3])\n  a)")

    align(buffer)

    assert buffer.text == (
        "(let ([a   (list 1\n                 2)]\n      [bcd 3])\n  a)"
    )


def test_align_bare_couples() -> None:
    buffer = make_buffer("(hash-set* h\n  'a 1\n  'bcd 2)", point=15)

    align(buffer)

    assert buffer.text == "(hash-set* h\n  'a   1\n  'bcd 2)"


def test_align_from_explicit_start_keeps_point_and_undoes_in_one_step() -> None:
    buffer = make_buffer(point=0)

    align(buffer, start=6)
    assert buffer.point == 0
    assert buffer.text == ALIGNED

    assert buffer.undo_last() is True
    assert buffer.text == LET


def test_align_ignores_datum_comments_before_values() -> None:
    buffer = make_buffer("(let ([a #;old 1]\n      [bcd 2])\n  a)")

    assert align(buffer) == 15
    assert buffer.text == "(let ([a #;old 1]\n      [bcd     2])\n  a)"


def test_align_measures_tabs_as_display_columns() -> None:
    buffer = make_buffer("(let ([a\t1]\n      [bcd 2])\n  a)")

    assert align(buffer) == 16
    assert buffer.text == "(let ([a\t1]\n      [bcd      2])\n  a)"
