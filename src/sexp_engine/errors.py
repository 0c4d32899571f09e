"""Exception hierarchy shared by the buffer, cursor, and editing layers."""

from __future__ import annotations

from typing import Optional


class EngineError(RuntimeError):
    """Base class for every error raised by sexp_engine."""


class ScanError(EngineError):
    """Raised when the expected balanced structure is absent at a position.

    Scanners treat this as "no more structure here" rather than a failure.
    """

    def __init__(self, message: str, *, position: Optional[int] = None) -> None:
        super().__init__(message)
        self.position = position


class UserError(EngineError):
    """Abort the current operation with a message meant for the user."""


class BufferValidationError(EngineError):
    """Raised when an offset or (row, column) lies outside the buffer."""

    def __init__(self, message: str, *, position: object = None) -> None:
        super().__init__(message)
        self.position = position


__all__ = ["EngineError", "ScanError", "UserError", "BufferValidationError"]
