"""Helpers for probing heterogeneous upstream records."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

KeyPath = str | tuple[str, ...]


def safe_get(d: Any, *keys, default=None):
    cur = d
    for k in keys:
        if isinstance(cur, dict) and k in cur:
            cur = cur[k]
        else:
            return default
    return cur


def as_text(value: Any) -> str:
    """Scalar → str; anything else (None, containers) → ''."""
    if value is None or isinstance(value, (dict, list, tuple)):
        return ""
    if isinstance(value, bool):
        return "true" if value else ""
    return str(value)


def first_present(record: Any, *candidates: KeyPath) -> str:
    """
    Value of the first candidate key that holds something usable.

    Candidates are tried in order; each is a key or a tuple path into nested
    dicts. ``None``, empty strings and containers are skipped. Returns ``""``
    when no candidate matches so the caller's schema stays complete.
    """
    if not isinstance(record, dict):
        return ""
    for candidate in candidates:
        path = candidate if isinstance(candidate, tuple) else (candidate,)
        text = as_text(safe_get(record, *path))
        if text.strip():
            return text
    return ""


def records(body: Any, *keys: str) -> Sequence[dict]:
    """First list found under ``keys``, keeping only dict entries."""
    for key in keys:
        value = safe_get(body, key)
        if isinstance(value, list):
            return [item for item in value if isinstance(item, dict)]
    return []
