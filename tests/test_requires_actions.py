from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import pytest

from sexp_engine.actions import base_requires, tidy_requires, trim_requires
from sexp_engine.actions.requires import SUBMODULE_PROMPT
from sexp_engine.buffer import Buffer
from sexp_engine.errors import UserError
from sexp_engine.requires import LocalRewriter, RequireForm

SOURCE = (
    "#lang racket\n"
    "(require racket/list)\n"
    "(require (for-syntax racket/base) racket/list)\n"
    "\n"
    "(define x 1)\n"
)


class FakeRewriter:
    """Answers every request with a fixed reply and records the calls."""

    def __init__(self, reply: Optional[str] = "(require racket/list)") -> None:
        self.reply = reply
        self.calls: List[Tuple[str, Optional[str], int]] = []

    def tidy(self, requires: Sequence[RequireForm]) -> Optional[str]:
        self.calls.append(("tidy", None, len(requires)))
        return self.reply

    def trim(self, source_path: str, requires: Sequence[RequireForm]) -> Optional[str]:
        self.calls.append(("trim", source_path, len(requires)))
        return self.reply

    def base_convert(
        self, source_path: str, requires: Sequence[RequireForm]
    ) -> Optional[str]:
        self.calls.append(("base", source_path, len(requires)))
        return self.reply


def make_buffer(text: str = SOURCE, path: Optional[str] = "/tmp/m.rkt") -> Buffer:
    return Buffer.from_text(text, name="m.rkt", path=path)


def test_tidy_replaces_requires_with_one_block() -> None:
    buffer = make_buffer()

    assert tidy_requires(buffer, LocalRewriter()) is True
    assert buffer.text == (
        "#lang racket\n"
        "(require (for-syntax racket/base)\n"
        "         racket/list)\n"
        "\n"
        "(define x 1)\n"
    )
    assert len(buffer.undo) == 1

    buffer.undo_last()
    assert buffer.text == SOURCE


def test_tidy_without_requires_does_nothing() -> None:
    rewriter = FakeRewriter()
    buffer = make_buffer("#lang racket\n(define x 1)\n")

    assert tidy_requires(buffer, rewriter) is False
    assert rewriter.calls == []


def test_trim_splices_the_reply() -> None:
    rewriter = FakeRewriter()
    buffer = make_buffer()

    trim_requires(buffer, rewriter)

    assert rewriter.calls == [("trim", "/tmp/m.rkt", 2)]
    assert buffer.text == "#lang racket\n(require racket/list)\n\n(define x 1)\n"


def test_trim_syntax_error_leaves_buffer_untouched() -> None:
    buffer = make_buffer()

    with pytest.raises(UserError, match="syntax error"):
        trim_requires(buffer, FakeRewriter(reply=None))
    assert buffer.text == SOURCE
    assert len(buffer.undo) == 0


def test_trim_empty_reply_only_deletes() -> None:
    buffer = make_buffer()

    trim_requires(buffer, FakeRewriter(reply=""))

    assert buffer.text == "#lang racket\n\n(define x 1)\n"


def test_trim_requires_a_file_and_requires() -> None:
    with pytest.raises(UserError, match="not visiting a file"):
        trim_requires(make_buffer(path=None), FakeRewriter())
    with pytest.raises(UserError, match="no top-level requires"):
        trim_requires(make_buffer("#lang racket\n(define x 1)\n"), FakeRewriter())


def test_trim_prefers_explicit_source_path() -> None:
    rewriter = FakeRewriter()

    trim_requires(make_buffer(path=None), rewriter, source_path="/src/other.rkt")

    assert rewriter.calls[0][1] == "/src/other.rkt"


def test_reply_for_a_stale_buffer_is_rejected() -> None:
    buffer = make_buffer()

    class EditingRewriter(FakeRewriter):
        def trim(self, source_path: str, requires: Sequence[RequireForm]) -> Optional[str]:
            buffer.insert(";; edited\n", len(buffer))
            return super().trim(source_path, requires)

    with pytest.raises(UserError, match="buffer changed"):
        trim_requires(buffer, EditingRewriter())
    assert buffer.text == SOURCE + ";; edited\n"


def test_submodules_need_confirmation() -> None:
    text = SOURCE + "(module+ test)\n"
    prompts: List[str] = []

    def decline(prompt: str) -> bool:
        prompts.append(prompt)
        return False

    rewriter = FakeRewriter()
    with pytest.raises(UserError, match="submodule"):
        trim_requires(make_buffer(text), rewriter, confirm=decline)
    assert prompts == [SUBMODULE_PROMPT]
    assert rewriter.calls == []

    accepted = make_buffer(text)
    trim_requires(accepted, rewriter, confirm=lambda prompt: True)
    assert accepted.text.startswith("#lang racket\n(require racket/list)\n")


def test_submodules_without_callback_proceed() -> None:
    buffer = make_buffer(SOURCE + "(module+ test)\n")

    trim_requires(buffer, FakeRewriter())

    assert buffer.text.endswith("(define x 1)\n(module+ test)\n")


def test_base_rewrites_lang_and_requires() -> None:
    rewriter = FakeRewriter()
    buffer = make_buffer()

    base_requires(buffer, rewriter)

    assert rewriter.calls == [("base", "/tmp/m.rkt", 2)]
    assert buffer.text == (
        "#lang racket/base\n(require racket/list)\n\n(define x 1)\n"
    )
    assert len(buffer.undo) == 1


def test_base_without_requires_inserts_after_lang_line() -> None:
    buffer = make_buffer("#lang racket\n\n(define x 1)\n")

    base_requires(buffer, FakeRewriter())

    assert buffer.text == (
        "#lang racket/base\n(require racket/list)\n\n(define x 1)\n"
    )


def test_base_rejects_other_languages() -> None:
    buffer = make_buffer("#lang racket/base\n(require racket/list)\n")

    with pytest.raises(UserError, match="not a #lang racket buffer"):
        base_requires(buffer, FakeRewriter())
