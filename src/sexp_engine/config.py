"""Engine configuration: environment helpers, indentation rules, require layout."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Mapping, Optional

ENV_PREFIX = "SEXP_ENGINE_"


def env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def env_flag(name: str, default: bool) -> bool:
    raw = env(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    raw = env(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc


# Number of distinguished arguments before the body of each special form.
DEFAULT_SPECIAL_FORMS: Mapping[str, int] = {
    "begin": 0,
    "begin0": 1,
    "case": 1,
    "case-lambda": 0,
    "cond": 0,
    "define": 1,
    "define-syntax": 1,
    "define-syntax-rule": 1,
    "define-values": 1,
    "do": 2,
    "lambda": 1,
    "let": 1,
    "let*": 1,
    "let*-values": 1,
    "let-values": 1,
    "letrec": 1,
    "letrec-values": 1,
    "match": 1,
    "match-define": 1,
    "match-lambda": 0,
    "module": 2,
    "module*": 2,
    "module+": 1,
    "parameterize": 1,
    "struct": 1,
    "syntax-case": 2,
    "syntax-parse": 1,
    "syntax-rules": 1,
    "unless": 1,
    "when": 1,
    "with-handlers": 1,
    "λ": 1,
}


@dataclass(slots=True)
class IndentRules:
    """How continuation lines inside a list are indented."""

    body_indent: int = 2
    tab_width: int = 8
    special_forms: Dict[str, int] = field(
        default_factory=lambda: dict(DEFAULT_SPECIAL_FORMS)
    )

    def distinguished(self, name: str) -> Optional[int]:
        """Return the distinguished-argument count for ``name``, if special."""

        if name in self.special_forms:
            return self.special_forms[name]
        if name.startswith("def"):
            return 1
        if name.startswith(("for/", "for*/", "with-")) or name in {"for", "for*"}:
            return 1
        return None


@dataclass(slots=True)
class EngineConfig:
    require_keyword: str = "require"
    full_lang: str = "racket"
    base_lang: str = "racket/base"
    indent: IndentRules = field(default_factory=IndentRules)
    undo_limit: Optional[int] = None


def load_config() -> EngineConfig:
    """Build a configuration from ``SEXP_ENGINE_*`` environment variables."""

    indent = IndentRules(
        body_indent=env_int("BODY_INDENT", 2),
        tab_width=env_int("TAB_WIDTH", 8),
    )
    return EngineConfig(
        require_keyword=env("REQUIRE_KEYWORD") or "require",
        indent=indent,
        undo_limit=env_int("UNDO_LIMIT", 0) or None,
    )


@lru_cache(maxsize=None)
def default_config() -> EngineConfig:
    return load_config()


__all__ = [
    "DEFAULT_SPECIAL_FORMS",
    "ENV_PREFIX",
    "EngineConfig",
    "IndentRules",
    "default_config",
    "env",
    "env_flag",
    "env_int",
    "load_config",
]
