"""Collaborators that turn collected require forms into a new require block.

A rewriter answers with the replacement text (``""`` meaning "delete only")
or ``None`` when the source could not be analysed because of a syntax
error.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence

from sexp_engine.errors import UserError
from sexp_engine.runtime import telemetry
from sexp_engine.sexp.reader import Atom, Expr, ListExpr, format_datum, string_literal

from .model import RequireForm
from .tidy import tidy_requires_text

Transport = Callable[[str], Optional[str]]


class RequireRewriter(Protocol):
    def tidy(self, requires: Sequence[RequireForm]) -> Optional[str]:
        ...

    def trim(self, source_path: str, requires: Sequence[RequireForm]) -> Optional[str]:
        ...

    def base_convert(
        self, source_path: str, requires: Sequence[RequireForm]
    ) -> Optional[str]:
        ...


def _forms_datum(requires: Sequence[RequireForm]) -> ListExpr:
    return ListExpr(tuple(form.to_expr() for form in requires))


def build_request(command: str, *args: Expr) -> str:
    """Serialize one back-end command, e.g. ``(requires/tidy ((require a)))``."""

    return format_datum(ListExpr((Atom(command),) + args))


class BackendRewriter:
    """Sends each request through ``transport`` and returns its reply.

    The transport owns the connection to the analysis back end; it is called
    once per operation and must return the reply text, or ``None`` for a
    syntax error.
    """

    def __init__(self, transport: Transport) -> None:
        self.transport = transport

    def _send(self, command: str, *args: Expr) -> Optional[str]:
        request = build_request(command, *args)
        with telemetry.span(
            "requires::request", component="requires", metadata={"command": command}
        ) as handle:
            reply = self.transport(request)
            handle.add_metadata("ok", reply is not None)
        return reply

    def tidy(self, requires: Sequence[RequireForm]) -> Optional[str]:
        return self._send("requires/tidy", _forms_datum(requires))

    def trim(self, source_path: str, requires: Sequence[RequireForm]) -> Optional[str]:
        return self._send(
            "requires/trim", string_literal(source_path), _forms_datum(requires)
        )

    def base_convert(
        self, source_path: str, requires: Sequence[RequireForm]
    ) -> Optional[str]:
        return self._send(
            "requires/base", string_literal(source_path), _forms_datum(requires)
        )


class LocalRewriter:
    """Tidies in process; trim and base conversion go to ``backend``."""

    def __init__(
        self, backend: Optional[RequireRewriter] = None, *, keyword: str = "require"
    ) -> None:
        self.backend = backend
        self.keyword = keyword

    def _require_backend(self, operation: str) -> RequireRewriter:
        if self.backend is None:
            raise UserError(f"{operation} needs an analysis back end")
        return self.backend

    def tidy(self, requires: Sequence[RequireForm]) -> Optional[str]:
        return tidy_requires_text(requires, keyword=self.keyword)

    def trim(self, source_path: str, requires: Sequence[RequireForm]) -> Optional[str]:
        return self._require_backend("trim").trim(source_path, requires)

    def base_convert(
        self, source_path: str, requires: Sequence[RequireForm]
    ) -> Optional[str]:
        return self._require_backend("base conversion").base_convert(
            source_path, requires
        )


__all__ = [
    "BackendRewriter",
    "LocalRewriter",
    "RequireRewriter",
    "Transport",
    "build_request",
]
