"""Classify raw upstream responses into success or failure.

Providers sometimes answer HTTP 200 with a human-readable error. Those cases
are described per provider as an ordered quirk table instead of inline
conditionals, so the generic classifier stays provider-agnostic. Quirk rules
match on upstream wording and can misfire on legitimate content that happens
to contain the same words; treat them as heuristics.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from atlas_gateway.proxy.results import FailureKind, RawResponse, Success, UpstreamFailure

# Marker for "body did not parse as JSON"; distinct from a JSON null.
NOT_JSON: Any = object()

ELLIPSIS = "…"


@dataclass(frozen=True)
class QuirkRule:
    """One disguised-error heuristic.

    ``predicate`` receives the raw text and the parsed body (``NOT_JSON`` when
    parsing failed). ``status`` is the gateway status to answer with; when it
    is ``None`` the status is derived from the body via ``status_from``.
    """

    name: str
    predicate: Callable[[str, Any], bool]
    kind: FailureKind = FailureKind.REJECTED
    status: int | None = 400
    status_from: Callable[[Any], int | None] | None = None

    def resolve_status(self, parsed: Any) -> int:
        if self.status is not None:
            return self.status
        if self.status_from is not None:
            derived = self.status_from(parsed)
            if derived and 400 <= derived < 600:
                return derived
        return 502


def excerpt(text: Any, limit: int = 800) -> str:
    """First ``limit`` characters of ``text``, marked when truncated."""
    if text is None:
        return ""
    value = str(text)
    return value[:limit] + ELLIPSIS if len(value) > limit else value


def parse_json(text: str) -> Any:
    if not text or not text.strip():
        return NOT_JSON
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return NOT_JSON


def classify_response(
    raw: RawResponse,
    quirks: Sequence[QuirkRule] = (),
    excerpt_limit: int = 800,
) -> Success | UpstreamFailure:
    """Produce exactly one classified result for ``raw``. Never raises."""
    parsed = parse_json(raw.text)
    snippet = excerpt(raw.text, excerpt_limit)
    body = None if parsed is NOT_JSON else parsed

    if raw.ok:
        for rule in quirks:
            try:
                matched = rule.predicate(raw.text, parsed)
            except (TypeError, AttributeError, KeyError):
                matched = False
            if matched:
                return UpstreamFailure(
                    kind=rule.kind,
                    status=rule.resolve_status(parsed),
                    upstream_status=raw.status,
                    excerpt=snippet,
                    body=body,
                    reason=rule.name,
                )

    if not raw.ok:
        return UpstreamFailure(
            kind=FailureKind.REJECTED,
            status=raw.status if raw.status >= 400 else 502,
            upstream_status=raw.status,
            excerpt=snippet,
            body=body,
            reason="upstream status",
        )

    if parsed is NOT_JSON:
        return UpstreamFailure(
            kind=FailureKind.MALFORMED,
            status=502,
            upstream_status=raw.status,
            excerpt=snippet,
            reason="non-JSON upstream response",
        )

    return Success(status=raw.status, body=parsed)


# Reusable predicates ------------------------------------------------------


def plain_text_containing(*phrases: str, case_sensitive: Sequence[str] = ()) -> Callable[[str, Any], bool]:
    """Non-JSON body containing any of ``phrases`` (case-insensitive) or ``case_sensitive``."""
    lowered = tuple(p.lower() for p in phrases)

    def predicate(text: str, parsed: Any) -> bool:
        if parsed is not NOT_JSON:
            return False
        if any(p in text for p in case_sensitive):
            return True
        low = text.lower()
        return any(p in low for p in lowered)

    return predicate


def json_with_key(key: str) -> Callable[[str, Any], bool]:
    """JSON object carrying a top-level ``key`` member."""

    def predicate(text: str, parsed: Any) -> bool:
        return isinstance(parsed, dict) and parsed.get(key) not in (None, "", {})

    return predicate


def embedded_error_code(parsed: Any) -> int | None:
    """``{"error": {"code": 403}}`` → 403."""
    if not isinstance(parsed, dict):
        return None
    error = parsed.get("error")
    if isinstance(error, dict):
        code = error.get("code")
        if isinstance(code, int):
            return code
        if isinstance(code, str) and code.isdigit():
            return int(code)
    return None
