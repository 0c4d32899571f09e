"""Validation helpers shared across buffer services."""

from __future__ import annotations

from sexp_engine.errors import BufferValidationError

from .document import BufferDocument
from .state import Position


def ensure_offset(document: BufferDocument, offset: int) -> int:
    if offset < 0 or offset > len(document):
        raise BufferValidationError("Offset out of range", position=offset)
    return offset


def ensure_span(document: BufferDocument, start: int, end: int) -> tuple[int, int]:
    ensure_offset(document, start)
    ensure_offset(document, end)
    if start > end:
        start, end = end, start
    return start, end


def ensure_position(document: BufferDocument, position: Position) -> Position:
    row, col = position
    if row < 0 or row >= document.line_count:
        raise BufferValidationError("Row out of range", position=position)
    if col < 0 or col > len(document.get_line(row)):
        raise BufferValidationError("Column out of range", position=position)
    return position
