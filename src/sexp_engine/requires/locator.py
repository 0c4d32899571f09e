"""Find or remove the top-level require forms of a buffer.

Only forms that open at column 0 are considered top level. Requires nested
inside ``module`` forms are not matched, and column-0 requires that belong
to a ``module+`` / ``module*`` submodule are matched even though they are
scoped to it; callers surface :func:`find_submodule_forms` to the user
before rewriting.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import List, Optional, Pattern, Union, cast

from sexp_engine.buffer import Buffer, Marker
from sexp_engine.errors import ScanError
from sexp_engine.runtime import telemetry
from sexp_engine.sexp import SexpCursor

from .model import RequireForm

_SUBMODULE_RE = re.compile(r"\(module[+*](?=[\s)])")


class LocateMode(str, Enum):
    FIND = "find"
    KILL = "kill"


def _form_pattern(keyword: str) -> Pattern[str]:
    return re.compile(rf"^\({re.escape(keyword)}(?=[\s)])", re.MULTILINE)


def find_or_kill(
    buffer: Buffer,
    mode: LocateMode,
    *,
    keyword: Optional[str] = None,
) -> Union[List[RequireForm], Optional[int]]:
    """Locate every top-level require form, top to bottom.

    In ``FIND`` mode the parsed forms are returned and the buffer is left
    alone. In ``KILL`` mode each form is deleted (followed by blank-line
    cleanup) and the offset where the first one began is returned, or
    ``None`` when there were none.
    """

    mode = LocateMode(mode)
    keyword = keyword or buffer.config.require_keyword
    pattern = _form_pattern(keyword)
    cursor = SexpCursor(buffer)
    forms: List[RequireForm] = []
    first: Optional[int] = None
    first_marker: Optional[Marker] = None

    with buffer.save_excursion(), buffer.transaction(f"{mode.value}_requires"):
        search_from = 0
        while True:
            match = pattern.search(buffer.text, search_from)
            if match is None:
                break
            if buffer.syntax().in_string_or_comment(match.start()):
                search_from = match.end()
                continue

            buffer.goto(match.end())
            try:
                start = cursor.backward_up_list()
                end = cursor.forward_sexp()
                form = RequireForm.from_text(buffer.substring(start, end))
            except ScanError as exc:
                telemetry.record_event(
                    "requires.scan_stopped",
                    level="warning",
                    data={"offset": match.start(), "reason": str(exc)},
                )
                break

            forms.append(form)
            if mode is LocateMode.KILL:
                if first is None:
                    first = start
                    first_marker = buffer.marker(start)
                cursor.delete_backward_sexp()
                buffer.delete_blank_lines()
            search_from = buffer.point

        insertion_point = None
        if first is not None and first_marker is not None:
            insertion_point = _insertion_point(buffer, first, first_marker.position)
            buffer.release(first_marker)

    telemetry.record_event(
        "requires.located",
        level="debug",
        data={"buffer": buffer.name, "mode": mode.value, "count": len(forms)},
    )
    if mode is LocateMode.KILL:
        return insertion_point
    return forms


def _insertion_point(buffer: Buffer, start: int, tracked: int) -> int:
    """Where the first killed form began.

    The original offset is kept while it still begins a line. Collapsing
    several blank lines above the form can move it into the middle of a
    later line, and then the marker-tracked offset is used instead.
    """

    if start <= len(buffer) and (start == 0 or buffer.text[start - 1] == "\n"):
        return start
    return tracked


def find_requires(buffer: Buffer, *, keyword: Optional[str] = None) -> List[RequireForm]:
    return cast(List[RequireForm], find_or_kill(buffer, LocateMode.FIND, keyword=keyword))


def kill_requires(buffer: Buffer, *, keyword: Optional[str] = None) -> Optional[int]:
    return cast(Optional[int], find_or_kill(buffer, LocateMode.KILL, keyword=keyword))


def find_submodule_forms(buffer: Buffer) -> List[int]:
    """Offsets of ``(module+`` and ``(module*`` forms outside strings and comments."""

    syntax = buffer.syntax()
    return [
        match.start()
        for match in _SUBMODULE_RE.finditer(buffer.text)
        if not syntax.in_string_or_comment(match.start())
    ]


__all__ = [
    "LocateMode",
    "find_or_kill",
    "find_requires",
    "find_submodule_forms",
    "kill_requires",
]
