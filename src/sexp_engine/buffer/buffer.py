"""High-level buffer façade combining document, point, markers, and undo."""

from __future__ import annotations

from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass
from typing import ContextManager, Iterator, List, Optional

from sexp_engine.config import EngineConfig, default_config
from sexp_engine.runtime import telemetry
from sexp_engine.sexp.indent import indentation_for
from sexp_engine.sexp.syntax import SyntaxIndex

from .document import BufferDocument
from .state import BufferState, Marker, Position
from .undo import UndoEntry, UndoTimeline
from .validation import ensure_offset, ensure_position, ensure_span

_HORIZONTAL_SPACE = " \t"


@dataclass(slots=True)
class BufferDelta:
    version: int
    start: int
    end: int
    text: str
    point: int
    label: str


class Buffer:
    """Mutable text with a point, markers, and an undo timeline.

    Every edit funnels through :meth:`replace_range`, which keeps point and
    markers consistent and bumps the document version.
    """

    def __init__(
        self,
        *,
        name: str = "default",
        path: Optional[str] = None,
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
        undo: Optional[UndoTimeline] = None,
        config: Optional[EngineConfig] = None,
    ) -> None:
        self.name = name
        self.path = path
        self.config = config or default_config()
        self.document = BufferDocument() if document is None else document
        self.state = state or BufferState()
        self.undo = UndoTimeline(self.config.undo_limit) if undo is None else undo
        self._markers: List[Marker] = []
        self._syntax: Optional[SyntaxIndex] = None
        self._syntax_version = -1
        self._transaction: Optional[Transaction] = None

    @classmethod
    def from_text(
        cls,
        text: str,
        *,
        name: str = "default",
        path: Optional[str] = None,
        point: int = 0,
        config: Optional[EngineConfig] = None,
    ) -> "Buffer":
        buffer = cls(
            name=name,
            path=path,
            document=BufferDocument.from_text(text),
            config=config,
        )
        buffer.goto(point)
        return buffer

    # -- reading ----------------------------------------------------------

    @property
    def text(self) -> str:
        return self.document.text

    @property
    def version(self) -> int:
        return self.document.version

    @property
    def point(self) -> int:
        return self.state.point

    def __len__(self) -> int:
        return len(self.document)

    def goto(self, offset: int) -> int:
        self.state.set_point(ensure_offset(self.document, offset))
        return offset

    def substring(self, start: int, end: int) -> str:
        start, end = ensure_span(self.document, start, end)
        return self.document.text[start:end]

    def char_after(self, offset: Optional[int] = None) -> str:
        offset = self.point if offset is None else offset
        return self.document.text[offset : offset + 1]

    def position_for(self, offset: Optional[int] = None) -> Position:
        offset = self.point if offset is None else offset
        return self.document.position_for(ensure_offset(self.document, offset))

    def offset_for(self, position: Position) -> int:
        row, col = ensure_position(self.document, position)
        return self.document.offset_for(row, col)

    def line_number_at(self, offset: Optional[int] = None) -> int:
        return self.position_for(offset)[0]

    def column_at(self, offset: Optional[int] = None) -> int:
        """Display column of ``offset``, with tabs expanded."""

        row, col = self.position_for(offset)
        start = self.document.line_start(row)
        prefix = self.document.text[start : start + col]
        return len(prefix.expandtabs(self.config.indent.tab_width))

    def line_start(self, offset: Optional[int] = None) -> int:
        return self.document.line_start(self.line_number_at(offset))

    def line_end(self, offset: Optional[int] = None) -> int:
        return self.document.line_end(self.line_number_at(offset))

    def syntax(self) -> SyntaxIndex:
        """Token index for the current text, rebuilt once per version."""

        if self._syntax is None or self._syntax_version != self.version:
            self._syntax = SyntaxIndex(self.document.text)
            self._syntax_version = self.version
        return self._syntax

    # -- markers ----------------------------------------------------------

    def marker(self, offset: Optional[int] = None, *, advances: bool = False) -> Marker:
        offset = self.point if offset is None else offset
        marker = Marker(ensure_offset(self.document, offset), advances)
        self._markers.append(marker)
        return marker

    def release(self, marker: Marker) -> None:
        if marker in self._markers:
            self._markers.remove(marker)

    @contextmanager
    def save_excursion(self) -> Iterator[Marker]:
        """Restore point on exit, following any edits made meanwhile."""

        marker = self.marker()
        try:
            yield marker
        finally:
            self.release(marker)
            self.state.set_point(min(marker.position, len(self.document)))

    # -- editing ----------------------------------------------------------

    def transaction(self, label: str) -> "Transaction":
        return Transaction(self, label)

    def replace_range(self, start: int, end: int, text: str, *, label: str) -> BufferDelta:
        start, end = ensure_span(self.document, start, end)
        with Transaction(self, label):
            self.document = self.document.replace(start, end, text)
            point = self.state.point
            if point > end:
                point += len(text) - (end - start)
            elif point >= start:
                point = start + len(text)
            self.state.set_point(point)
            for marker in self._markers:
                marker.adjust(start, end, len(text))

        return BufferDelta(
            version=self.document.version,
            start=start,
            end=start + len(text),
            text=text,
            point=self.state.point,
            label=label,
        )

    def insert(self, text: str, offset: Optional[int] = None) -> BufferDelta:
        offset = self.point if offset is None else offset
        return self.replace_range(offset, offset, text, label="insert")

    def delete(self, start: int, end: int) -> BufferDelta:
        return self.replace_range(start, end, "", label="delete")

    def just_one_space(self, offset: Optional[int] = None) -> BufferDelta:
        """Collapse the spaces and tabs around ``offset`` to a single space."""

        offset = self.point if offset is None else offset
        text = self.document.text
        start = offset
        while start > 0 and text[start - 1] in _HORIZONTAL_SPACE:
            start -= 1
        end = offset
        while end < len(text) and text[end] in _HORIZONTAL_SPACE:
            end += 1
        return self.replace_range(start, end, " ", label="just_one_space")

    def delete_blank_lines(self) -> None:
        """Tidy blank lines around point.

        On a blank line, the surrounding run of blank lines is reduced to one,
        or deleted when the line is isolated. On a non-blank line, the blank
        lines immediately after it are deleted.
        """

        document = self.document
        row = document.row_for(self.point)
        last = row
        while last + 1 < document.line_count and _blank(document.get_line(last + 1)):
            last += 1

        if not _blank(document.get_line(row)):
            if last > row:
                self.delete(document.line_end(row), document.line_end(last))
            return

        first = row
        while first > 0 and _blank(document.get_line(first - 1)):
            first -= 1

        if first < last:
            self.replace_range(
                document.line_start(first),
                document.line_end(last),
                "",
                label="delete_blank_lines",
            )
            self.goto(document.line_start(first))
        elif row + 1 < document.line_count:
            self.delete(document.line_start(row), document.line_start(row + 1))
        elif row > 0:
            self.delete(document.line_end(row - 1), document.line_end(row))

    def indent_line_to(self, row: int, column: int) -> None:
        start = self.document.line_start(row)
        line = self.document.get_line(row)
        width = len(line) - len(line.lstrip(_HORIZONTAL_SPACE))
        if line[:width] == " " * column:
            return
        self.replace_range(start, start + width, " " * column, label="indent")

    def reindent(self, start: int, end: int) -> None:
        """Re-indent every line after the first whose start lies in the span."""

        start, end = ensure_span(self.document, start, end)
        rules = self.config.indent
        with self.save_excursion(), self.transaction("reindent"):
            tail = self.marker(end)
            try:
                row = self.document.row_for(start) + 1
                while row < self.document.line_count:
                    line_start = self.document.line_start(row)
                    if line_start > tail.position:
                        break
                    if not _blank(self.document.get_line(row)):
                        column = indentation_for(self.syntax(), line_start, rules)
                        if column is not None:
                            self.indent_line_to(row, column)
                    row += 1
            finally:
                self.release(tail)

    # -- undo -------------------------------------------------------------

    def undo_last(self) -> bool:
        entry = self.undo.undo()
        if entry is None:
            return False
        self._restore(entry.before_text, entry.point_before)
        return True

    def redo_last(self) -> bool:
        entry = self.undo.redo()
        if entry is None:
            return False
        self._restore(entry.after_text, entry.point_after)
        return True

    def _restore(self, text: str, point: int) -> None:
        version = self.document.version + 1
        self.document = BufferDocument(text=text, version=version, dirty=True)
        self.state.set_point(min(point, len(text)))
        for marker in self._markers:
            marker.position = min(marker.position, len(text))


class Transaction(AbstractContextManager["Transaction"]):
    """Groups edits into one undo entry; nested transactions fold into the outermost."""

    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None
        self._outermost = False
        self._before_text = ""
        self._before_point = 0

    def __enter__(self) -> "Transaction":
        if self.buffer._transaction is None:
            self._outermost = True
            self.buffer._transaction = self
            self._before_text = self.buffer.text
            self._before_point = self.buffer.point
            self._span_cm = telemetry.span(
                name=f"buffer::{self.label}",
                component="buffer",
                metadata={"buffer": self.buffer.name},
            )
            self._span_cm.__enter__()
        return self

    def commit(self) -> None:
        after_text = self.buffer.text
        if after_text == self._before_text:
            return
        entry = UndoEntry(
            label=self.label,
            before_text=self._before_text,
            after_text=after_text,
            point_before=self._before_point,
            point_after=self.buffer.point,
        )
        self.buffer.undo.push(entry)

    def __exit__(self, exc_type, exc, tb) -> bool:
        if not self._outermost:
            return False
        self.buffer._transaction = None
        try:
            self.commit()
        finally:
            if self._span_cm is not None:
                self._span_cm.__exit__(exc_type, exc, tb)
        return False


def _blank(line: str) -> bool:
    return not line.strip()
