"""Structural editing engine for Racket source text."""

__all__ = [
    "actions",
    "buffer",
    "config",
    "errors",
    "requires",
    "runtime",
    "sexp",
]

__version__ = "0.1.0"
