from __future__ import annotations

from typing import List, Tuple

from sexp_engine.buffer import Buffer
from sexp_engine.sexp import Couple, CoupleScanner

LET = "(let ([a 12]\n      [bar 23])\n  body)"


def test_for_each_visits_bracketed_couples_at_value_start() -> None:
    buffer = Buffer.from_text(LET, point=6)
    seen: List[Tuple[int, int]] = []

    def visit(couple: Couple) -> None:
        assert buffer.point == couple.value_start
        seen.append((buffer.point, buffer.column_at()))

    assert CoupleScanner(buffer).for_each(visit) == 2
    assert seen == [(9, 9), (24, 11)]
    assert buffer.point == 6


def test_bare_couples_flag_values_on_a_later_line() -> None:
    buffer = Buffer.from_text("(hash-set* h\n  'a 1\n  'b\n  2\n  'c 3)", point=15)

    couples = list(CoupleScanner(buffer).couples())

    assert [couple.same_line for couple in couples] == [True, False, True]


def test_for_each_skips_couples_split_across_lines() -> None:
    buffer = Buffer.from_text("(hash-set* h\n  'a 1\n  'b\n  2\n  'c 3)", point=15)

    assert CoupleScanner(buffer).for_each(lambda couple: None) == 2


def test_empty_binding_list_has_no_couples() -> None:
    buffer = Buffer.from_text("(let ()\n  x)", point=5)

    assert CoupleScanner(buffer).for_each(lambda couple: None) == 0


def test_value_start_includes_prefix_characters() -> None:
    buffer = Buffer.from_text("(hash 'a 'x\n      'bb 'y)", point=6)

    first = next(CoupleScanner(buffer).couples())

    assert first.value_start == 9


def test_listp_can_be_forced() -> None:
    buffer = Buffer.from_text("(f [a 1] [b 2])", point=3)

    assert CoupleScanner(buffer, listp=False).listp is False
    assert CoupleScanner(buffer).listp is True
