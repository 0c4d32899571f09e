"""Align and unalign the values of a couple series.

Point must be immediately before the first couple::

    (let ([a 12]              (let ([a   12]
          [bar 23])     ->          [bar 23])
      body)                   body)
"""

from __future__ import annotations

from typing import Dict, Optional

from sexp_engine.buffer import Buffer
from sexp_engine.errors import UserError
from sexp_engine.runtime import telemetry
from sexp_engine.sexp import Couple, CoupleScanner, SexpCursor


def _reindent_value(buffer: Buffer) -> None:
    start = buffer.point
    end = SexpCursor(buffer).sexp_end(start)
    buffer.reindent(start, end)


def max_couple_column(buffer: Buffer, listp: Optional[bool] = None) -> int:
    """Rightmost value column of the couples after point.

    Raises :class:`UserError` when two values share a line.
    """

    lines: Dict[int, int] = {}
    max_column = 0

    def measure(couple: Couple) -> None:
        nonlocal max_column
        line = couple.value_line
        if line in lines:
            raise UserError(f"couples on same line: line {line + 1}")
        column = buffer.column_at()
        lines[line] = column
        max_column = max(max_column, column)

    CoupleScanner(buffer, listp).for_each(measure)
    telemetry.record_event(
        "align.measure",
        level="debug",
        data={"couples": len(lines), "max_column": max_column},
    )
    return max_column


def align(buffer: Buffer, start: Optional[int] = None, listp: Optional[bool] = None) -> int:
    """Right-align the values of the couples at ``start`` (default: point).

    Returns the target column. Re-aligning aligned couples changes nothing.
    """

    with buffer.save_excursion(), telemetry.span(
        "actions::align", component="actions", metadata={"buffer": buffer.name}
    ):
        if start is not None:
            buffer.goto(start)
        max_column = max_couple_column(buffer, listp)

        def apply(couple: Couple) -> None:
            del couple
            missing = max_column - buffer.column_at()
            if missing > 0:
                buffer.insert(" " * missing)
            _reindent_value(buffer)

        with buffer.transaction("align"):
            CoupleScanner(buffer, listp).for_each(apply)
    return max_column


def unalign(buffer: Buffer, start: Optional[int] = None, listp: Optional[bool] = None) -> int:
    """Separate every couple's key and value by exactly one space.

    Returns the number of couples visited.
    """

    with buffer.save_excursion(), telemetry.span(
        "actions::unalign", component="actions", metadata={"buffer": buffer.name}
    ):
        if start is not None:
            buffer.goto(start)

        def collapse(couple: Couple) -> None:
            del couple
            buffer.just_one_space()
            _reindent_value(buffer)

        with buffer.transaction("unalign"):
            return CoupleScanner(buffer, listp).for_each(collapse)


__all__ = ["align", "max_couple_column", "unalign"]
