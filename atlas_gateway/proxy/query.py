"""Upstream request construction helpers."""

from __future__ import annotations

import enum
from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx

# Characters encodeURIComponent leaves alone (on top of quote's `_.-~`).
COMPONENT_SAFE = "!*'()"


class CredentialPlacement(enum.Enum):
    """Where an upstream expects its API key."""

    NONE = "none"
    QUERY = "query"
    HEADER = "header"
    BOTH = "both"


@dataclass(frozen=True)
class Credential:
    """Credential contract of one provider."""

    placement: CredentialPlacement = CredentialPlacement.NONE
    query_param: str = "api_key"
    header: str = "X-Api-Key"

    def query_params(self, key: str) -> list[tuple[str, str]]:
        if key and self.placement in (CredentialPlacement.QUERY, CredentialPlacement.BOTH):
            return [(self.query_param, key)]
        return []

    def headers(self, key: str) -> dict[str, str]:
        if key and self.placement in (CredentialPlacement.HEADER, CredentialPlacement.BOTH):
            return {self.header: key}
        return {}


@dataclass(frozen=True)
class UpstreamQuery:
    """Fully built request to an external API. Never mutated after construction."""

    method: str
    url: str
    timeout: float
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    label: str = ""


def encode_component(value: Any) -> str:
    """Percent-encode a single query value exactly once."""
    return quote(str(value), safe=COMPONENT_SAFE)


def build_url(
    base: str,
    params: Iterable[tuple[str, Any]],
    literal: Collection[str] = (),
) -> str:
    """
    Join ``base`` and ``params`` into a URL.

    Values whose key appears in ``literal`` are inserted verbatim; the caller
    guarantees they are already in their on-the-wire form.
    """
    parts = []
    for key, value in params:
        if value is None:
            continue
        encoded = str(value) if key in literal else encode_component(value)
        parts.append(f"{encode_component(key)}={encoded}")
    if not parts:
        return base
    separator = "&" if "?" in base else "?"
    return f"{base}{separator}{'&'.join(parts)}"


def strip_query_param(url: str, name: str) -> str:
    """Remove ``name`` from the query string of ``url``; unparsable URLs pass through."""
    if not url:
        return ""
    try:
        return str(httpx.URL(url).copy_remove_param(name))
    except (httpx.InvalidURL, TypeError, ValueError):
        return str(url)


def ensure_query_param(url: str, name: str, value: str) -> str:
    """Add ``name=value`` to ``url`` unless the URL already carries that parameter."""
    if not url:
        return ""
    try:
        parsed = httpx.URL(url)
        if parsed.params.get(name):
            return str(parsed)
        return str(parsed.copy_set_param(name, value))
    except (httpx.InvalidURL, TypeError, ValueError):
        joiner = "&" if "?" in url else "?"
        return f"{url}{joiner}{name}={encode_component(value)}"


def redact_url(url: str, names: Collection[str] = ("api_key", "key")) -> str:
    """Hide credential values before a URL is logged."""
    redacted = url
    for name in names:
        try:
            parsed = httpx.URL(redacted)
        except (httpx.InvalidURL, TypeError, ValueError):
            return redacted
        if name in parsed.params:
            redacted = str(parsed.copy_set_param(name, "[REDACTED]"))
    return redacted
