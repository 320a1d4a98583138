"""Normalization helpers.

Centralizes null-safe parsing of snapshot leaves.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any


def safe_number(value: Any) -> float | None:
    """Return *value* as a float when it is a JSON number, else ``None``.

    Numeric strings are not coerced: a leaf must already be numeric.
    Booleans are rejected even though they subclass ``int``. Integers
    beyond float range and non-finite values are ``None``.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        result = float(value)
    except OverflowError:
        return None
    if not math.isfinite(result):
        return None
    return result


def child(node: Any, key: str) -> Any:
    """Return ``node[key]`` when *node* is a mapping, else ``None``."""
    if isinstance(node, Mapping):
        return node.get(key)
    return None


def child_at(node: Any, path: str) -> Any:
    """Walk a slash separated *path* from *node*.

    Empty segments are skipped, so ``""`` and ``"/"`` return *node* itself.
    """
    current = node
    for segment in path.split("/"):
        if not segment:
            continue
        current = child(current, segment)
        if current is None:
            return None
    return current
