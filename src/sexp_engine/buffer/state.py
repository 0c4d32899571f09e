"""Point and marker state for buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

Position = Tuple[int, int]  # (row, column)


@dataclass(slots=True)
class BufferState:
    """Mutable point info tied to a BufferDocument version."""

    point: int = 0

    def set_point(self, offset: int) -> None:
        self.point = offset


@dataclass(eq=False, slots=True)
class Marker:
    """An offset that follows edits made to its buffer.

    An insertion exactly at the marker leaves it in place unless
    ``advances`` is set; a deletion spanning it collapses it to the start of
    the deleted range.
    """

    position: int
    advances: bool = False

    def adjust(self, start: int, end: int, inserted: int) -> None:
        if self.position > end or (self.advances and self.position == end):
            self.position += inserted - (end - start)
        elif self.position > start:
            self.position = start
