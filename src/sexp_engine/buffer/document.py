"""Core document data structure for sexp_engine buffers."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass(slots=True)
class BufferDocument:
    """Immutable-ish text storage with a lazily built line-start table.

    Edits never mutate a document in place; ``replace`` returns a successor
    with a bumped version so anything cached against the old version (syntax
    indexes, line tables) goes stale naturally.
    """

    text: str = ""
    version: int = 0
    dirty: bool = False
    _line_starts: List[int] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        starts = [0]
        find = self.text.find
        index = find("\n")
        while index >= 0:
            starts.append(index + 1)
            index = find("\n", index + 1)
        self._line_starts = starts

    @classmethod
    def from_text(cls, text: str) -> "BufferDocument":
        return cls(text=text, version=0, dirty=False)

    def replace(self, start: int, end: int, text: str) -> "BufferDocument":
        """Return a document with ``[start:end]`` replaced by ``text``."""

        new_text = self.text[:start] + text + self.text[end:]
        return BufferDocument(text=new_text, version=self.version + 1, dirty=True)

    def __len__(self) -> int:
        return len(self.text)

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line_start(self, row: int) -> int:
        return self._line_starts[row]

    def line_end(self, row: int) -> int:
        """Offset of the newline ending ``row`` (or end of text)."""

        if row + 1 < len(self._line_starts):
            return self._line_starts[row + 1] - 1
        return len(self.text)

    def get_line(self, row: int) -> str:
        return self.text[self.line_start(row) : self.line_end(row)]

    def row_for(self, offset: int) -> int:
        return bisect_right(self._line_starts, offset) - 1

    def position_for(self, offset: int) -> Tuple[int, int]:
        row = self.row_for(offset)
        return row, offset - self._line_starts[row]

    def offset_for(self, row: int, col: int) -> int:
        return self._line_starts[row] + col
