"""Lexical classification of Racket source text.

The whole text is tokenized in one forward pass. Forward lexing is always
deterministic, even for unbalanced input, so every structural question the
cursor asks (including backward ones) is answered from the token table
instead of re-scanning characters in reverse.
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

OPEN_DELIMITERS = {"(": ")", "[": "]", "{": "}"}
CLOSE_DELIMITERS = {close: open_ for open_, close in OPEN_DELIMITERS.items()}
QUOTE_CHARS = "'`,"
ATOM_DELIMITERS = frozenset(" \t\n\r\f\v()[]{}\";'`,")


class TokenKind(str, Enum):
    OPEN = "open"
    CLOSE = "close"
    ATOM = "atom"
    STRING = "string"
    PREFIX = "prefix"
    COMMENT = "comment"


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    start: int
    end: int
    complete: bool = True


def _string_end(text: str, index: int) -> Tuple[int, bool]:
    length = len(text)
    while index < length:
        char = text[index]
        if char == "\\":
            index += 2
        elif char == '"':
            return index + 1, True
        else:
            index += 1
    return length, False


def _block_comment_end(text: str, index: int) -> Tuple[int, bool]:
    depth = 1
    index += 2
    length = len(text)
    while index < length:
        if text.startswith("|#", index):
            depth -= 1
            index += 2
            if depth == 0:
                return index, True
        elif text.startswith("#|", index):
            depth += 1
            index += 2
        else:
            index += 1
    return length, False


def _atom_end(text: str, index: int) -> int:
    length = len(text)
    while index < length:
        char = text[index]
        if char == "\\":
            index += 2
        elif char == "|":
            closing = text.find("|", index + 1)
            index = length if closing < 0 else closing + 1
        elif char in ATOM_DELIMITERS:
            break
        else:
            index += 1
    return min(index, length)


def _prefix_end(text: str, index: int) -> Optional[int]:
    """Return the end of a reader prefix starting at ``index``, if any."""

    char = text[index]
    nxt = text[index + 1] if index + 1 < len(text) else ""
    if char in QUOTE_CHARS:
        end = index + 1
    elif char == "#" and nxt in QUOTE_CHARS:
        end = index + 2
    elif char == "#" and nxt == ";":
        return index + 2
    elif char == "#" and (nxt in OPEN_DELIMITERS or nxt == '"'):
        return index + 1
    else:
        return None
    if text[end - 1] == "," and text.startswith("@", end):
        end += 1
    return end


def tokenize(text: str) -> Tuple[Token, ...]:
    tokens: List[Token] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char.isspace():
            index += 1
            continue

        complete = True
        if char == ";":
            end = text.find("\n", index)
            end = length if end < 0 else end
            kind = TokenKind.COMMENT
        elif text.startswith("#|", index):
            end, complete = _block_comment_end(text, index)
            kind = TokenKind.COMMENT
        elif char == '"':
            end, complete = _string_end(text, index + 1)
            kind = TokenKind.STRING
        elif char in OPEN_DELIMITERS:
            end, kind = index + 1, TokenKind.OPEN
        elif char in CLOSE_DELIMITERS:
            end, kind = index + 1, TokenKind.CLOSE
        else:
            prefix_end = _prefix_end(text, index)
            if prefix_end is not None:
                end, kind = prefix_end, TokenKind.PREFIX
            else:
                end, kind = _atom_end(text, index), TokenKind.ATOM

        tokens.append(Token(kind, index, end, complete))
        index = end
    return tuple(_fold_datum_comments(text, tokens))


def _datum_end(text: str, tokens: List[Token], position: int) -> Optional[int]:
    """Index just past the datum starting at or after ``position``."""

    while position < len(tokens):
        token = tokens[position]
        if token.kind is TokenKind.COMMENT:
            position += 1
        elif token.kind is TokenKind.PREFIX:
            if text[token.start : token.end] == "#;":
                skipped = _datum_end(text, tokens, position + 1)
                if skipped is None:
                    return None
                position = skipped
            else:
                position += 1
        elif token.kind is TokenKind.CLOSE:
            return None
        elif token.kind is TokenKind.OPEN:
            depth = 0
            for closing in range(position, len(tokens)):
                kind = tokens[closing].kind
                if kind is TokenKind.OPEN:
                    depth += 1
                elif kind is TokenKind.CLOSE:
                    depth -= 1
                    if depth == 0:
                        return closing + 1
            return None
        else:
            return position + 1
    return None


def _fold_datum_comments(text: str, tokens: List[Token]) -> List[Token]:
    """Merge each ``#;`` and the datum it comments out into one COMMENT token.

    A ``#;`` with no complete datum after it stays a PREFIX token.
    """

    folded: List[Token] = []
    position = 0
    while position < len(tokens):
        token = tokens[position]
        if token.kind is TokenKind.PREFIX and text[token.start : token.end] == "#;":
            end = _datum_end(text, tokens, position + 1)
            if end is not None:
                folded.append(Token(TokenKind.COMMENT, token.start, tokens[end - 1].end))
                position = end
                continue
        folded.append(token)
        position += 1
    return folded


class SyntaxIndex:
    """Token table for one version of a text, with bisect lookups."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = tokenize(text)
        self._starts = [token.start for token in self.tokens]
        self._ends = [token.end for token in self.tokens]

    def __len__(self) -> int:
        return len(self.tokens)

    def first_ending_after(self, offset: int) -> int:
        """Index of the first token whose end lies beyond ``offset``."""

        return bisect_right(self._ends, offset)

    def last_starting_before(self, offset: int) -> int:
        """Index of the last token starting before ``offset`` (or -1)."""

        return bisect_left(self._starts, offset) - 1

    def token_containing(self, offset: int) -> Optional[Token]:
        """Token strictly surrounding ``offset`` (start < offset < end)."""

        index = self.last_starting_before(offset)
        if index >= 0 and self.tokens[index].end > offset:
            return self.tokens[index]
        return None

    def in_string_or_comment(self, offset: int) -> bool:
        token = self.token_containing(offset)
        return token is not None and token.kind in (
            TokenKind.STRING,
            TokenKind.COMMENT,
        )

    def char(self, token: Token) -> str:
        return self.text[token.start]

    def token_text(self, token: Token) -> str:
        return self.text[token.start : token.end]


__all__ = [
    "ATOM_DELIMITERS",
    "CLOSE_DELIMITERS",
    "OPEN_DELIMITERS",
    "QUOTE_CHARS",
    "SyntaxIndex",
    "Token",
    "TokenKind",
    "tokenize",
]
