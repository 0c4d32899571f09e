"""Walk a series of key/value couples such as ``let`` binding clauses.

Couples are either bracketed (``[key value]``, ``listp=True``) or bare
``key value`` sequences. The series ends at the first structural
discontinuity; there is no terminator token.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterator, Optional

from sexp_engine.errors import ScanError

from .cursor import SexpCursor
from .syntax import OPEN_DELIMITERS

if TYPE_CHECKING:
    from sexp_engine.buffer import Buffer


@dataclass(frozen=True, slots=True)
class Couple:
    key_start: int
    value_start: int
    key_line: int
    value_line: int

    @property
    def same_line(self) -> bool:
        return self.key_line == self.value_line


CoupleVisitor = Callable[[Couple], None]


def starts_list(buffer: "Buffer", offset: Optional[int] = None) -> bool:
    return buffer.char_after(offset) in OPEN_DELIMITERS


class CoupleScanner:
    """Visits the value of every same-line couple after point.

    The visitor runs with point at the value start (prefix markers
    included) and may edit the buffer, as long as it leaves point at the
    start of the value when it returns.
    """

    def __init__(self, buffer: "Buffer", listp: Optional[bool] = None) -> None:
        self.buffer = buffer
        self.listp = starts_list(buffer) if listp is None else listp
        self.cursor = SexpCursor(buffer)

    def _next_couple(self) -> Optional[Couple]:
        cursor = self.cursor
        try:
            if self.listp:
                cursor.down_list()
            cursor.forward_sexp()
            key_end = self.buffer.point
            cursor.backward_sexp()
            key_start = self.buffer.point
            cursor.forward_sexp()
            cursor.forward_sexp()
            cursor.backward_sexp()
        except ScanError:
            return None
        value_start = cursor.backward_prefix_chars()
        return Couple(
            key_start=key_start,
            value_start=value_start,
            key_line=self.buffer.line_number_at(key_end),
            value_line=self.buffer.line_number_at(value_start),
        )

    def _leave_couple(self) -> bool:
        try:
            if self.listp:
                self.cursor.up_list()
            else:
                self.cursor.forward_sexp()
        except ScanError:
            return False
        return True

    def couples(self) -> Iterator[Couple]:
        """Yield every couple, including those skipped for alignment."""

        while True:
            couple = self._next_couple()
            if couple is None:
                return
            yield couple
            if not self._leave_couple():
                return

    def for_each(self, visitor: CoupleVisitor) -> int:
        """Run ``visitor`` on each same-line couple; return how many ran."""

        visited = 0
        with self.buffer.save_excursion():
            for couple in self.couples():
                if not couple.same_line:
                    continue
                visitor(couple)
                visited += 1
        return visited


__all__ = ["Couple", "CoupleScanner", "CoupleVisitor", "starts_list"]
