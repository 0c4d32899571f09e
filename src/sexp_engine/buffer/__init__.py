"""Buffer abstractions: document storage, point and markers, undo."""

from .buffer import Buffer, BufferDelta, Transaction
from .document import BufferDocument
from .state import BufferState, Marker, Position
from .undo import UndoEntry, UndoTimeline
from .validation import ensure_offset, ensure_position, ensure_span

__all__ = [
    "Buffer",
    "BufferDelta",
    "BufferDocument",
    "BufferState",
    "Marker",
    "Position",
    "Transaction",
    "UndoEntry",
    "UndoTimeline",
    "ensure_offset",
    "ensure_position",
    "ensure_span",
]
