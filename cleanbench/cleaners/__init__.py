"""Bundled deep-clean contenders."""

from __future__ import annotations

from functools import partial

from cleanbench.cleaners.deep_clean import (
    CleanOptions,
    clean_in_place,
    is_droppable,
    iterative_clean,
    recursive_clean,
)
from cleanbench.discovery import Contender, ContenderRegistry

__all__ = [
    "CleanOptions",
    "clean_in_place",
    "default_registry",
    "is_droppable",
    "iterative_clean",
    "recursive_clean",
]


def default_registry() -> ContenderRegistry:
    """Registry of the reference cleaners, in a stable order."""
    return ContenderRegistry([
        Contender(
            name="recursive",
            operation=recursive_clean,
            description="Recursive copy-on-clean",
        ),
        Contender(
            name="iterative",
            operation=iterative_clean,
            description="Explicit-stack copy-on-clean",
        ),
        Contender(
            name="in_place",
            operation=clean_in_place,
            mutates_input=True,
            description="Mutates its input; cloned per iteration",
        ),
        Contender(
            name="recursive_keep_empty_strings",
            operation=partial(recursive_clean, options=CleanOptions(empty_strings=False)),
            description="Recursive, keeps empty strings",
        ),
        Contender(
            name="recursive_drop_nan",
            operation=partial(recursive_clean, options=CleanOptions(nan_values=True)),
            description="Recursive, also drops NaN floats",
        ),
    ])
