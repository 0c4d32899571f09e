"""High-level editing verbs built on the cursor and require locator."""

from .align import align, max_couple_column, unalign
from .requires import base_requires, confirm_submodules, tidy_requires, trim_requires

__all__ = [
    "align",
    "base_requires",
    "confirm_submodules",
    "max_couple_column",
    "tidy_requires",
    "trim_requires",
    "unalign",
]
