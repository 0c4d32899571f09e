"""Undo/redo history for buffer transactions."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional


@dataclass(slots=True)
class UndoEntry:
    """Whole-text snapshot around one outermost transaction."""

    label: str
    before_text: str
    after_text: str
    point_before: int
    point_after: int


class UndoTimeline:
    """Two-stack history. Pushing a new entry discards what could be redone.

    ``limit`` bounds the number of undoable entries; the oldest are dropped.
    """

    def __init__(self, limit: Optional[int] = None) -> None:
        self._done: Deque[UndoEntry] = deque(maxlen=limit)
        self._undone: List[UndoEntry] = []

    def __len__(self) -> int:
        return len(self._done) + len(self._undone)

    def push(self, entry: UndoEntry) -> None:
        self._undone.clear()
        self._done.append(entry)

    def undo(self) -> Optional[UndoEntry]:
        if not self._done:
            return None
        entry = self._done.pop()
        self._undone.append(entry)
        return entry

    def redo(self) -> Optional[UndoEntry]:
        if not self._undone:
            return None
        entry = self._undone.pop()
        self._done.append(entry)
        return entry
