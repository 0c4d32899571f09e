"""Tidy, trim and base-convert the top-level requires of a buffer.

Each operation collects the require forms, asks the rewriter for a
replacement block, and only then splices: the old forms are killed and the
reply is inserted where the first one began. A failed or stale reply
leaves the buffer untouched.
"""

from __future__ import annotations

from typing import Callable, Optional

from sexp_engine.buffer import Buffer
from sexp_engine.errors import UserError
from sexp_engine.requires import (
    RequireRewriter,
    find_requires,
    find_submodule_forms,
    kill_requires,
)
from sexp_engine.runtime import telemetry

Confirm = Callable[[str], bool]

SUBMODULE_PROMPT = (
    "Analysis will be unreliable due to module+ or module* forms. Proceed anyway?"
)


def confirm_submodules(buffer: Buffer, confirm: Optional[Confirm]) -> None:
    """Ask before rewriting a buffer whose requires may belong to submodules."""

    offsets = find_submodule_forms(buffer)
    if not offsets:
        return
    if confirm is None:
        telemetry.record_event(
            "requires.submodule_warning",
            level="warning",
            data={"buffer": buffer.name, "offsets": offsets},
        )
        return
    if not confirm(SUBMODULE_PROMPT):
        raise UserError("buffer contains unresolved submodule forms")


def _source_path(buffer: Buffer, source_path: Optional[str]) -> str:
    path = source_path or buffer.path
    if not path:
        raise UserError("buffer is not visiting a file")
    return path


def _splice(
    buffer: Buffer,
    reply: Optional[str],
    *,
    version: int,
    label: str,
    prepare: Optional[Callable[[], None]] = None,
    fallback: Optional[Callable[[], int]] = None,
) -> None:
    if reply is None:
        raise UserError("syntax error in source")
    if buffer.version != version:
        raise UserError("buffer changed while the requires were being rewritten")

    with buffer.save_excursion(), buffer.transaction(label):
        if prepare is not None:
            prepare()
        insertion_point = kill_requires(buffer)
        if insertion_point is None and fallback is not None:
            insertion_point = fallback()
        if reply and insertion_point is not None:
            buffer.insert(reply + "\n", insertion_point)


def tidy_requires(
    buffer: Buffer, rewriter: RequireRewriter, *, confirm: Optional[Confirm] = None
) -> bool:
    """Merge all top-level requires into one sorted form.

    Returns ``False`` when the buffer has no requires.
    """

    with telemetry.span(
        "actions::tidy_requires", component="actions", metadata={"buffer": buffer.name}
    ):
        confirm_submodules(buffer, confirm)
        forms = find_requires(buffer)
        if not forms:
            return False
        version = buffer.version
        reply = rewriter.tidy(forms)
        _splice(buffer, reply, version=version, label="tidy_requires")
    return True


def trim_requires(
    buffer: Buffer,
    rewriter: RequireRewriter,
    *,
    source_path: Optional[str] = None,
    confirm: Optional[Confirm] = None,
) -> None:
    """Replace the requires with only those the module actually uses."""

    with telemetry.span(
        "actions::trim_requires", component="actions", metadata={"buffer": buffer.name}
    ):
        path = _source_path(buffer, source_path)
        confirm_submodules(buffer, confirm)
        forms = find_requires(buffer)
        if not forms:
            raise UserError("no top-level requires found")
        version = buffer.version
        reply = rewriter.trim(path, forms)
        _splice(buffer, reply, version=version, label="trim_requires")


def base_requires(
    buffer: Buffer,
    rewriter: RequireRewriter,
    *,
    source_path: Optional[str] = None,
    confirm: Optional[Confirm] = None,
) -> None:
    """Switch ``#lang racket`` to ``#lang racket/base`` plus explicit requires.

    Proceeds even without requires, since the lang itself may provide
    what the module uses.
    """

    config = buffer.config
    with telemetry.span(
        "actions::base_requires", component="actions", metadata={"buffer": buffer.name}
    ):
        if buffer.document.get_line(0).rstrip() != f"#lang {config.full_lang}":
            raise UserError(f"not a #lang {config.full_lang} buffer")
        path = _source_path(buffer, source_path)
        confirm_submodules(buffer, confirm)
        forms = find_requires(buffer)
        version = buffer.version
        reply = rewriter.base_convert(path, forms)

        def rewrite_lang() -> None:
            buffer.replace_range(
                0,
                buffer.document.line_end(0),
                f"#lang {config.base_lang}",
                label="rewrite_lang",
            )

        def after_lang() -> int:
            end = buffer.document.line_end(0)
            if end == len(buffer):
                buffer.insert("\n", end)
            return end + 1

        _splice(
            buffer,
            reply,
            version=version,
            label="base_requires",
            prepare=rewrite_lang,
            fallback=after_lang,
        )


__all__ = [
    "SUBMODULE_PROMPT",
    "base_requires",
    "confirm_submodules",
    "tidy_requires",
    "trim_requires",
]
