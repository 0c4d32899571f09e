"""Merge require forms into one sorted, de-duplicated require block.

Phase wrappers are flattened and regrouped, so::

    (require racket/list)
    (require (for-syntax syntax/parse) racket/list "util.rkt")
    (require (for-syntax racket/base))

becomes::

    (require (for-syntax racket/base
                         syntax/parse)
             racket/list
             "util.rkt")
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from sexp_engine.sexp.reader import Atom, Expr, ListExpr, format_datum

from .model import RequireForm

Phase = Optional[int]  # None is the label phase

_PHASE_SHIFTS = {"for-syntax": 1, "for-template": -1}
_PHASE_WRAPPERS = ("for-syntax", "for-template", "for-label", "for-meta")
_MODULE_KINDS = {"lib": 1, "planet": 2, "file": 3, "submod": 5, "quote": 5}


def _meta_level(level: Expr) -> Tuple[bool, Phase]:
    if not isinstance(level, Atom):
        return False, None
    if level.value in ("#f", "#false"):
        return True, None
    try:
        return True, int(level.value)
    except ValueError:
        return False, None


def _shift(phase: Phase, delta: Phase) -> Phase:
    if phase is None or delta is None:
        return None
    return phase + delta


def _collect(spec: Expr, phase: Phase, groups: Dict[Phase, List[Expr]]) -> None:
    if not isinstance(spec, ListExpr) or spec.head not in _PHASE_WRAPPERS:
        groups.setdefault(phase, []).append(spec)
        return

    items = spec.items[1:]
    if spec.head == "for-label":
        inner: Phase = None
    elif spec.head == "for-meta":
        valid, level = _meta_level(items[0]) if items else (False, None)
        if not valid:
            groups.setdefault(phase, []).append(spec)
            return
        inner = _shift(phase, level)
        items = items[1:]
    else:
        inner = _shift(phase, _PHASE_SHIFTS[spec.head])
    for item in items:
        _collect(item, inner, groups)


def _phase_order(phase: Phase) -> Tuple[int, int]:
    if phase == 1:
        return (0, 0)
    if phase == -1:
        return (1, 0)
    if phase is None:
        return (2, 0)
    if phase == 0:
        return (4, 0)
    return (3, phase)


def _wrapper(phase: Phase) -> str:
    if phase == 1:
        return "for-syntax"
    if phase == -1:
        return "for-template"
    if phase is None:
        return "for-label"
    return f"for-meta {phase}"


def module_kind(spec: Expr) -> int:
    """Sort rank: collection paths first, then lib, planet, file, relative, submod."""

    if isinstance(spec, Atom):
        return 4 if spec.is_string else 0
    return _MODULE_KINDS.get(spec.head, 6)


def _sort_key(spec: Expr) -> Tuple[int, str]:
    return module_kind(spec), format_datum(spec)


def group_by_phase(forms: Iterable[RequireForm]) -> Dict[Phase, List[Expr]]:
    """Sorted, de-duplicated specs for each phase present in ``forms``."""

    groups: Dict[Phase, List[Expr]] = {}
    for form in forms:
        for spec in form.specs:
            _collect(spec, 0, groups)
    return {
        phase: sorted(dict.fromkeys(groups[phase]), key=_sort_key)
        for phase in sorted(groups, key=_phase_order)
    }


def _render_group(wrapper: str, items: List[str], column: int) -> str:
    opener = f"({wrapper} "
    separator = "\n" + " " * (column + len(opener))
    return opener + separator.join(items) + ")"


def tidy_requires_text(forms: Iterable[RequireForm], *, keyword: str = "require") -> str:
    """Render ``forms`` as a single require block, or ``""`` when empty."""

    groups = group_by_phase(forms)
    if not groups:
        return ""

    head = f"({keyword} "
    column = len(head)
    entries: List[str] = []
    for phase, specs in groups.items():
        printed = [format_datum(spec) for spec in specs]
        if phase == 0:
            entries.extend(printed)
        else:
            entries.append(_render_group(_wrapper(phase), printed, column))
    return head + ("\n" + " " * column).join(entries) + ")"


__all__ = ["group_by_phase", "module_kind", "tidy_requires_text"]
