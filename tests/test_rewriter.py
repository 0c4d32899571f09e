from __future__ import annotations

from typing import List, Optional, Sequence

import pytest

from sexp_engine.errors import UserError
from sexp_engine.requires import BackendRewriter, LocalRewriter, RequireForm


class RecordingTransport:
    def __init__(self, reply: Optional[str] = "(require a)") -> None:
        self.reply = reply
        self.requests: List[str] = []

    def __call__(self, request: str) -> Optional[str]:
        self.requests.append(request)
        return self.reply


def make_forms(*texts: str) -> List[RequireForm]:
    return [RequireForm.from_text(text) for text in texts]


def test_tidy_request_lists_the_forms() -> None:
    transport = RecordingTransport()
    rewriter = BackendRewriter(transport)

    reply = rewriter.tidy(make_forms("(require a)", "(require (for-syntax b))"))

    assert reply == "(require a)"
    assert transport.requests == [
        "(requires/tidy ((require a) (require (for-syntax b))))"
    ]


def test_trim_and_base_requests_carry_an_escaped_path() -> None:
    transport = RecordingTransport()
    rewriter = BackendRewriter(transport)
    requires = make_forms("(require a)")

    rewriter.trim('/tmp/x "y".rkt', requires)
    rewriter.base_convert("/tmp/m.rkt", requires)

    assert transport.requests == [
        '(requires/trim "/tmp/x \\"y\\".rkt" ((require a)))',
        '(requires/base "/tmp/m.rkt" ((require a)))',
    ]


def test_syntax_error_reply_passes_through() -> None:
    rewriter = BackendRewriter(RecordingTransport(reply=None))

    assert rewriter.trim("/tmp/m.rkt", make_forms("(require a)")) is None


class StubBackend:
    def __init__(self) -> None:
        self.calls: List[str] = []

    def tidy(self, requires: Sequence[RequireForm]) -> Optional[str]:
        self.calls.append("tidy")
        return None

    def trim(self, source_path: str, requires: Sequence[RequireForm]) -> Optional[str]:
        self.calls.append(f"trim {source_path}")
        return "(require kept)"

    def base_convert(
        self, source_path: str, requires: Sequence[RequireForm]
    ) -> Optional[str]:
        self.calls.append(f"base {source_path}")
        return ""


def test_local_rewriter_tidies_in_process() -> None:
    backend = StubBackend()
    rewriter = LocalRewriter(backend)

    assert rewriter.tidy(make_forms("(require b)", "(require a)")) == (
        "(require a\n         b)"
    )
    assert rewriter.trim("/tmp/m.rkt", []) == "(require kept)"
    assert rewriter.base_convert("/tmp/m.rkt", []) == ""
    assert backend.calls == ["trim /tmp/m.rkt", "base /tmp/m.rkt"]


def test_local_rewriter_without_backend_rejects_analysis() -> None:
    rewriter = LocalRewriter()

    with pytest.raises(UserError, match="analysis back end"):
        rewriter.trim("/tmp/m.rkt", [])
    with pytest.raises(UserError):
        rewriter.base_convert("/tmp/m.rkt", [])
