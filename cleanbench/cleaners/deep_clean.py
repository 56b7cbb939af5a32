"""Reference deep-clean implementations.

Each removes "empty" values (None, "", [], {}) from nested dict/list data.
Cleaning is bottom-up: a container that becomes empty once its children are
cleaned is removed as well. The top-level value is always returned, even when
it ends up empty.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class CleanOptions:
    """Which kinds of empty value to drop."""

    null_values: bool = True
    empty_strings: bool = True
    empty_lists: bool = True
    empty_objects: bool = True
    nan_values: bool = False


DEFAULT_OPTIONS = CleanOptions()


def is_droppable(value: Any, options: CleanOptions = DEFAULT_OPTIONS) -> bool:
    if value is None:
        return options.null_values
    if isinstance(value, str):
        return options.empty_strings and value == ""
    if isinstance(value, list):
        return options.empty_lists and not value
    if isinstance(value, dict):
        return options.empty_objects and not value
    if isinstance(value, float) and math.isnan(value):
        return options.nan_values
    return False


def recursive_clean(value: Any, options: Optional[CleanOptions] = None) -> Any:
    """Return a cleaned copy of ``value``; the input is left untouched."""
    opts = options or DEFAULT_OPTIONS
    if isinstance(value, dict):
        out = {}
        for key, item in value.items():
            cleaned = recursive_clean(item, opts)
            if not is_droppable(cleaned, opts):
                out[key] = cleaned
        return out
    if isinstance(value, list):
        cleaned_items = (recursive_clean(item, opts) for item in value)
        return [item for item in cleaned_items if not is_droppable(item, opts)]
    return value


def _items(container: Any) -> Iterable[Tuple[Any, Any]]:
    return container.items() if isinstance(container, dict) else enumerate(container)


def _put(container: Any, key: Any, value: Any) -> None:
    if isinstance(container, dict):
        container[key] = value
    else:
        container.append(value)


def iterative_clean(value: Any, options: Optional[CleanOptions] = None) -> Any:
    """Same result as :func:`recursive_clean`, using an explicit stack.

    Nesting depth is not limited by the interpreter's recursion limit.
    """
    opts = options or DEFAULT_OPTIONS
    if not isinstance(value, (dict, list)):
        return value

    root: Any = {} if isinstance(value, dict) else []
    # frame: (child iterator, output container, parent output, key in parent)
    frames: List[Tuple[Any, Any, Any, Any]] = [(iter(_items(value)), root, None, None)]
    while frames:
        it, out, parent, key = frames[-1]
        for k, item in it:
            if isinstance(item, (dict, list)):
                child: Any = {} if isinstance(item, dict) else []
                frames.append((iter(_items(item)), child, out, k))
                break
            if not is_droppable(item, opts):
                _put(out, k, item)
        else:
            frames.pop()
            if parent is not None and not is_droppable(out, opts):
                _put(parent, key, out)
    return root


def clean_in_place(value: Any, options: Optional[CleanOptions] = None) -> Any:
    """Clean ``value`` by mutating it; returns the same object."""
    opts = options or DEFAULT_OPTIONS
    if isinstance(value, dict):
        for key in list(value):
            item = value[key]
            if isinstance(item, (dict, list)):
                clean_in_place(item, opts)
            if is_droppable(item, opts):
                del value[key]
    elif isinstance(value, list):
        for index in range(len(value) - 1, -1, -1):
            item = value[index]
            if isinstance(item, (dict, list)):
                clean_in_place(item, opts)
            if is_droppable(item, opts):
                del value[index]
    return value
