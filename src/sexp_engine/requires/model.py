"""Structured representation of ``require`` forms."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple

from sexp_engine.errors import ScanError
from sexp_engine.sexp.reader import Atom, Expr, ListExpr, format_datum, read


@dataclass(frozen=True)
class RequireForm:
    """A require form: its keyword and its specs in source order."""

    specs: Tuple[Expr, ...]
    keyword: str = "require"

    @classmethod
    def from_expr(cls, expr: Expr) -> "RequireForm":
        if not isinstance(expr, ListExpr) or not expr.items:
            raise ScanError(f"Not a require form: {format_datum(expr)}")
        head = expr.items[0]
        if not isinstance(head, Atom):
            raise ScanError(f"Not a require form: {format_datum(expr)}")
        return cls(specs=tuple(expr.items[1:]), keyword=head.value)

    @classmethod
    def from_text(cls, text: str) -> "RequireForm":
        return cls.from_expr(read(text))

    def to_expr(self) -> ListExpr:
        return ListExpr((Atom(self.keyword),) + self.specs)

    def __str__(self) -> str:
        return format_datum(self.to_expr())


def all_specs(forms: Iterable[RequireForm]) -> List[Expr]:
    """Concatenate the specs of ``forms`` in discovery order."""

    specs: List[Expr] = []
    for form in forms:
        specs.extend(form.specs)
    return specs


__all__ = ["RequireForm", "all_specs"]
