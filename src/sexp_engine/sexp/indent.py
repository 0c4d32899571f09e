"""Indentation rules for continuation lines inside lists."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from sexp_engine.config import IndentRules

from .syntax import SyntaxIndex, Token, TokenKind

_NUMBER_RE = re.compile(r"[-+]?\.?\d")


@dataclass(frozen=True, slots=True)
class _Element:
    start: int  # includes reader prefixes
    head: Token  # first non-prefix token


def _column(text: str, offset: int, tab_width: int) -> int:
    line = text[text.rfind("\n", 0, offset) + 1 : offset]
    return len(line.expandtabs(tab_width))


def _same_line(text: str, first: int, second: int) -> bool:
    return text.find("\n", first, second) < 0


def _is_symbol(text: str) -> bool:
    return bool(text) and not text.startswith("#") and not _NUMBER_RE.match(text)


def enclosing_open(index: SyntaxIndex, offset: int) -> Optional[int]:
    """Token index of the innermost unclosed open delimiter before ``offset``."""

    depth = 0
    for position in range(index.last_starting_before(offset), -1, -1):
        kind = index.tokens[position].kind
        if kind is TokenKind.CLOSE:
            depth += 1
        elif kind is TokenKind.OPEN:
            if depth == 0:
                return position
            depth -= 1
    return None


def _elements(index: SyntaxIndex, open_index: int, limit: int) -> List[_Element]:
    elements: List[_Element] = []
    depth = 0
    start: Optional[int] = None
    head: Optional[Token] = None
    for token in index.tokens[open_index + 1 :]:
        if token.start >= limit:
            break
        if token.kind is TokenKind.COMMENT:
            continue
        if depth == 0:
            if start is None:
                start = token.start
            if head is None and token.kind is not TokenKind.PREFIX:
                head = token
        if token.kind is TokenKind.PREFIX:
            continue
        if token.kind is TokenKind.OPEN:
            depth += 1
            continue
        if token.kind is TokenKind.CLOSE:
            depth -= 1
        if depth == 0 and start is not None and head is not None:
            elements.append(_Element(start, head))
            start = head = None
    return elements


def indentation_for(
    index: SyntaxIndex, line_start: int, rules: IndentRules
) -> Optional[int]:
    """Column the line beginning at ``line_start`` should be indented to.

    Returns ``None`` for lines that begin inside a string or block comment,
    which must be left untouched.
    """

    if index.in_string_or_comment(line_start):
        return None
    text = index.text
    open_index = enclosing_open(index, line_start)
    if open_index is None:
        return 0

    open_token = index.tokens[open_index]
    open_column = _column(text, open_token.start, rules.tab_width)
    elements = _elements(index, open_index, line_start)
    if not elements:
        return open_column + 1

    head = elements[0]
    name = index.token_text(head.head)
    if head.head.kind is not TokenKind.ATOM or head.start != head.head.start:
        return _column(text, head.start, rules.tab_width)
    if not _is_symbol(name):
        return _column(text, head.start, rules.tab_width)

    distinguished = rules.distinguished(name)
    if name == "let" and len(elements) > 1 and elements[1].head.kind is TokenKind.ATOM:
        distinguished = 2
    if distinguished is not None:
        if len(elements) - 1 < distinguished:
            return open_column + 2 * rules.body_indent
        return open_column + rules.body_indent

    if len(elements) > 1 and _same_line(text, head.start, elements[1].start):
        return _column(text, elements[1].start, rules.tab_width)
    return _column(text, head.start, rules.tab_width)


__all__ = ["enclosing_open", "indentation_for"]
