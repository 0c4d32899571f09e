"""Lexing, navigation, indentation and reading of balanced expressions."""

from .couples import Couple, CoupleScanner, starts_list
from .cursor import SexpCursor
from .indent import indentation_for
from .reader import Atom, Expr, ListExpr, format_datum, read, read_all
from .syntax import SyntaxIndex, Token, TokenKind, tokenize

__all__ = [
    "Atom",
    "Couple",
    "CoupleScanner",
    "Expr",
    "ListExpr",
    "SexpCursor",
    "SyntaxIndex",
    "Token",
    "TokenKind",
    "format_datum",
    "indentation_for",
    "read",
    "read_all",
    "starts_list",
    "tokenize",
]
