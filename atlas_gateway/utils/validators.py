"""Query parameter parsing shared by the provider adapters."""

from __future__ import annotations

import re
from collections.abc import Collection, Mapping
from typing import Any

from atlas_gateway.exceptions import InvalidRequestError

_LEADING_INT_RE = re.compile(r"^\s*([+-]?)(\d+)")

# Longer digit runs are out of range for every parameter and are not converted.
MAX_INT_DIGITS = 18
OUT_OF_RANGE = 10**MAX_INT_DIGITS


def parse_leading_int(value: Any) -> int | None:
    """Parse the leading integer of ``value`` the way a browser parseInt does.

    ``"12abc"`` → 12, ``"3.9"`` → 3, ``"abc"`` / ``None`` / ``""`` → None.
    Digit runs too long to be meaningful come back as ``±10**18``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT_RE.match(str(value))
    if not match:
        return None
    sign, digits = match.groups()
    magnitude = OUT_OF_RANGE if len(digits) > MAX_INT_DIGITS else int(digits)
    return -magnitude if sign == "-" else magnitude


def clamp_int(value: Any, lo: int, hi: int, default: int) -> int:
    """Clamp ``value`` into [lo, hi]; non-numeric or absent values give ``default``.

    Args:
        value: Raw parameter value
        lo: Minimum accepted value
        hi: Maximum accepted value
        default: Value used when ``value`` does not parse

    Returns:
        An integer guaranteed to lie in [lo, hi]
    """
    parsed = parse_leading_int(value)
    if parsed is None:
        return default
    return min(hi, max(lo, parsed))


def first_param(params: Mapping[str, Any], *names: str) -> Any:
    """Value of the first alias present in ``params`` (even if empty)."""
    for name in names:
        if name in params and params[name] is not None:
            return params[name]
    return None


def text_param(params: Mapping[str, Any], name: str, default: str = "") -> str:
    value = params.get(name)
    if value is None:
        return default
    return str(value).strip()


def require_param(params: Mapping[str, Any], name: str) -> str:
    """Return the trimmed value of ``name`` or reject the request."""
    value = text_param(params, name)
    if not value:
        raise InvalidRequestError(f"Missing required parameter: {name}")
    return value


def choose(value: Any, allowed: Collection[str], default: str) -> str:
    """``value`` when it is one of ``allowed``, otherwise ``default``."""
    candidate = str(value).strip() if value is not None else ""
    return candidate if candidate in allowed else default
