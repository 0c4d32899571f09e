"""Collect, remove and rewrite top-level require forms."""

from .locator import (
    LocateMode,
    find_or_kill,
    find_requires,
    find_submodule_forms,
    kill_requires,
)
from .model import RequireForm, all_specs
from .rewriter import BackendRewriter, LocalRewriter, RequireRewriter, build_request
from .tidy import group_by_phase, tidy_requires_text

__all__ = [
    "BackendRewriter",
    "LocalRewriter",
    "LocateMode",
    "RequireForm",
    "RequireRewriter",
    "all_specs",
    "build_request",
    "find_or_kill",
    "find_requires",
    "find_submodule_forms",
    "group_by_phase",
    "kill_requires",
    "tidy_requires_text",
]
