"""Balanced-expression navigation over a buffer.

Every motion works on ``buffer.point``: it computes the target offset from
the buffer's token index, moves point there, and returns it. A motion that
finds no structure raises :class:`~sexp_engine.errors.ScanError` and leaves
point where it was.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from sexp_engine.errors import ScanError

from .syntax import CLOSE_DELIMITERS, OPEN_DELIMITERS, SyntaxIndex, TokenKind

if TYPE_CHECKING:
    from sexp_engine.buffer import Buffer

_SKIPPED = (TokenKind.COMMENT, TokenKind.PREFIX)


def _matching_close(index: SyntaxIndex, open_index: int) -> int:
    stack: List[str] = []
    tokens = index.tokens
    for position in range(open_index, len(tokens)):
        token = tokens[position]
        if token.kind is TokenKind.OPEN:
            stack.append(index.char(token))
        elif token.kind is TokenKind.CLOSE:
            opener = stack.pop()
            if OPEN_DELIMITERS[opener] != index.char(token):
                raise ScanError("Mismatched delimiter", position=token.start)
            if not stack:
                return position
    raise ScanError("Unbalanced parentheses", position=tokens[open_index].start)


def _matching_open(index: SyntaxIndex, close_index: int) -> int:
    stack: List[str] = []
    tokens = index.tokens
    for position in range(close_index, -1, -1):
        token = tokens[position]
        if token.kind is TokenKind.CLOSE:
            stack.append(index.char(token))
        elif token.kind is TokenKind.OPEN:
            closer = stack.pop()
            if CLOSE_DELIMITERS[closer] != index.char(token):
                raise ScanError("Mismatched delimiter", position=token.start)
            if not stack:
                return position
    raise ScanError("Unbalanced parentheses", position=tokens[close_index].start)


def scan_forward(index: SyntaxIndex, offset: int) -> int:
    """End of the expression following ``offset``."""

    tokens = index.tokens
    position = index.first_ending_after(offset)
    while position < len(tokens):
        token = tokens[position]
        if token.kind in _SKIPPED:
            position += 1
            continue
        if token.kind is TokenKind.CLOSE:
            raise ScanError(
                "Containing expression ends prematurely", position=token.start
            )
        if token.kind is TokenKind.OPEN:
            return tokens[_matching_close(index, position)].end
        if not token.complete:
            raise ScanError("Unbalanced string", position=token.start)
        return token.end
    raise ScanError("No expression after point", position=offset)


def scan_backward(index: SyntaxIndex, offset: int) -> int:
    """Start of the expression preceding ``offset``, excluding prefixes."""

    tokens = index.tokens
    position = index.last_starting_before(offset)
    while position >= 0:
        token = tokens[position]
        if token.kind in _SKIPPED:
            position -= 1
            continue
        if token.kind is TokenKind.OPEN:
            raise ScanError(
                "Containing expression starts prematurely", position=token.start
            )
        if token.kind is TokenKind.CLOSE:
            return tokens[_matching_open(index, position)].start
        if not token.complete:
            raise ScanError("Unbalanced string", position=token.start)
        return token.start
    raise ScanError("No expression before point", position=offset)


def scan_up(index: SyntaxIndex, offset: int) -> int:
    """Offset just after the close delimiter of the list around ``offset``."""

    depth = 0
    tokens = index.tokens
    for position in range(index.first_ending_after(offset), len(tokens)):
        token = tokens[position]
        if token.kind is TokenKind.OPEN:
            depth += 1
        elif token.kind is TokenKind.CLOSE:
            if depth == 0:
                return token.end
            depth -= 1
    raise ScanError("Unbalanced parentheses", position=offset)


def scan_backward_up(index: SyntaxIndex, offset: int) -> int:
    """Offset of the open delimiter of the list around ``offset``."""

    depth = 0
    tokens = index.tokens
    for position in range(index.last_starting_before(offset), -1, -1):
        token = tokens[position]
        if token.kind is TokenKind.CLOSE:
            depth += 1
        elif token.kind is TokenKind.OPEN:
            if depth == 0:
                return token.start
            depth -= 1
    raise ScanError("Unbalanced parentheses", position=offset)


def scan_down(index: SyntaxIndex, offset: int) -> int:
    """Offset just inside the next list after ``offset``."""

    tokens = index.tokens
    for position in range(index.first_ending_after(offset), len(tokens)):
        token = tokens[position]
        if token.kind is TokenKind.OPEN:
            return token.end
        if token.kind is TokenKind.CLOSE:
            raise ScanError(
                "Containing expression ends prematurely", position=token.start
            )
    raise ScanError("No list after point", position=offset)


def skip_prefixes_backward(index: SyntaxIndex, offset: int) -> int:
    position = index.last_starting_before(offset)
    while position >= 0:
        token = index.tokens[position]
        if token.kind is not TokenKind.PREFIX or token.end != offset:
            break
        offset = token.start
        position -= 1
    return offset


class SexpCursor:
    """Moves a buffer's point over balanced expressions."""

    def __init__(self, buffer: "Buffer") -> None:
        self.buffer = buffer

    def _move(self, offset: int) -> int:
        return self.buffer.goto(offset)

    def forward_sexp(self) -> int:
        return self._move(scan_forward(self.buffer.syntax(), self.buffer.point))

    def backward_sexp(self) -> int:
        return self._move(scan_backward(self.buffer.syntax(), self.buffer.point))

    def up_list(self) -> int:
        return self._move(scan_up(self.buffer.syntax(), self.buffer.point))

    def backward_up_list(self) -> int:
        return self._move(scan_backward_up(self.buffer.syntax(), self.buffer.point))

    def down_list(self) -> int:
        return self._move(scan_down(self.buffer.syntax(), self.buffer.point))

    def backward_prefix_chars(self) -> int:
        return self._move(
            skip_prefixes_backward(self.buffer.syntax(), self.buffer.point)
        )

    def sexp_end(self, offset: int) -> int:
        """End of the expression starting at ``offset``, without moving point."""

        return scan_forward(self.buffer.syntax(), offset)

    def delete_backward_sexp(self) -> tuple[int, int]:
        """Delete the expression before point; return the deleted span."""

        end = self.buffer.point
        start = scan_backward(self.buffer.syntax(), end)
        self.buffer.delete(start, end)
        return start, end


__all__ = [
    "SexpCursor",
    "scan_backward",
    "scan_backward_up",
    "scan_down",
    "scan_forward",
    "scan_up",
    "skip_prefixes_backward",
]
