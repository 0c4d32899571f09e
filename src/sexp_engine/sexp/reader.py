"""Data model and reader/printer for Racket datums.

The model is deliberately small: enough to carry require specs to a
rewriter and print them back, not a full reader. Atoms keep their source
spelling, so string literals retain their quotes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple, Union

from sexp_engine.errors import ScanError

from .syntax import OPEN_DELIMITERS, SyntaxIndex, TokenKind

PREFIX_NAMES = {
    "'": "quote",
    "`": "quasiquote",
    ",": "unquote",
    ",@": "unquote-splicing",
    "#'": "syntax",
    "#`": "quasisyntax",
    "#,": "unsyntax",
    "#,@": "unsyntax-splicing",
}
_PREFIX_FOR_NAME = {name: prefix for prefix, name in PREFIX_NAMES.items()}


@dataclass(frozen=True)
class Atom:
    """An atomic token (symbol, number, keyword or string literal)."""

    value: str

    @property
    def is_string(self) -> bool:
        return self.value.startswith('"')


@dataclass(frozen=True)
class ListExpr:
    """A bracketed form, e.g. ``(for-syntax racket/base)``."""

    items: Tuple["Expr", ...]
    delimiter: str = field(default="(", compare=False)

    @property
    def head(self) -> str:
        if self.items and isinstance(self.items[0], Atom):
            return self.items[0].value
        return ""


Expr = Union[Atom, ListExpr]


class _Reader:
    def __init__(self, text: str) -> None:
        self.index = SyntaxIndex(text)
        self.position = 0

    def _skip_comments(self) -> None:
        tokens = self.index.tokens
        while self.position < len(tokens) and tokens[self.position].kind is TokenKind.COMMENT:
            self.position += 1

    def at_end(self) -> bool:
        self._skip_comments()
        return self.position >= len(self.index.tokens)

    def read(self) -> Expr:
        self._skip_comments()
        tokens = self.index.tokens
        if self.position >= len(tokens):
            raise ScanError("Unexpected end of input", position=len(self.index.text))
        token = tokens[self.position]
        self.position += 1
        spelling = self.index.token_text(token)

        if token.kind is TokenKind.PREFIX:
            if spelling == "#;":
                self.read()
                return self.read()
            if spelling == "#":
                return self._read_hash()
            datum = self.read()
            return ListExpr((Atom(PREFIX_NAMES[spelling]), datum))
        if token.kind is TokenKind.OPEN:
            return self._read_list(spelling, token.start)
        if token.kind is TokenKind.CLOSE:
            raise ScanError("Unexpected close delimiter", position=token.start)
        if not token.complete:
            raise ScanError("Unbalanced string", position=token.start)
        return Atom(spelling)

    def _read_hash(self) -> Expr:
        datum = self.read()
        if isinstance(datum, ListExpr):
            return ListExpr(datum.items, delimiter="#" + datum.delimiter)
        return Atom("#" + datum.value)

    def _read_list(self, opener: str, start: int) -> ListExpr:
        items: List[Expr] = []
        closer = OPEN_DELIMITERS[opener]
        tokens = self.index.tokens
        while True:
            self._skip_comments()
            if self.position >= len(tokens):
                raise ScanError("Unbalanced parentheses", position=start)
            token = tokens[self.position]
            if token.kind is TokenKind.CLOSE:
                if self.index.char(token) != closer:
                    raise ScanError("Mismatched delimiter", position=token.start)
                self.position += 1
                return ListExpr(tuple(items), delimiter=opener)
            items.append(self.read())


def read(text: str) -> Expr:
    """Read the first datum in ``text``."""

    return _Reader(text).read()


def read_all(text: str) -> List[Expr]:
    reader = _Reader(text)
    datums: List[Expr] = []
    while not reader.at_end():
        datums.append(reader.read())
    return datums


def format_datum(expr: Expr) -> str:
    if isinstance(expr, Atom):
        return expr.value
    if len(expr.items) == 2 and expr.head in _PREFIX_FOR_NAME:
        return _PREFIX_FOR_NAME[expr.head] + format_datum(expr.items[1])
    opener = expr.delimiter
    closer = OPEN_DELIMITERS[opener[-1]]
    return opener + " ".join(format_datum(item) for item in expr.items) + closer


def string_literal(value: str) -> Atom:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return Atom(f'"{escaped}"')


__all__ = [
    "Atom",
    "Expr",
    "ListExpr",
    "PREFIX_NAMES",
    "format_datum",
    "read",
    "read_all",
    "string_literal",
]
