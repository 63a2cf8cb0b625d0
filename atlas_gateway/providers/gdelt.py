"""GDELT DOC (articles) and TV (broadcast clips) adapters.

GDELT has no credentials. It rejects short quoted phrases with a plain-text
200 response, so queries are sanitized before sending and plain-text bodies
are screened by a quirk rule.
"""

from __future__ import annotations

import math
import re
from abc import abstractmethod
from collections.abc import Mapping
from typing import Any

from atlas_gateway.models import Article, Clip
from atlas_gateway.proxy.adapter import ProviderAdapter, ProxyRequest
from atlas_gateway.proxy.classify import QuirkRule, plain_text_containing
from atlas_gateway.proxy.query import UpstreamQuery, build_url
from atlas_gateway.providers.normalize import first_present, records
from atlas_gateway.utils.validators import clamp_int, first_param, require_param, text_param

DEFAULT_TIMESPAN = "1m"
MAX_RECORDS = 250
DEFAULT_MAX_RECORDS = 50
MIN_PHRASE_CHARS = 4
# Longer custom TV windows fall back to the default window.
MAX_WINDOW_DIGITS = 6

# Long-form window names accepted from the dashboard.
TIMESPAN_ALIASES = {
    "1 month": "1m",
    "3 months": "3m",
    "6 months": "6m",
    "1 year": "1y",
}

DOC_TIMESPANS = {"1m": "30d", "3m": "90d", "6m": "180d", "1y": "365d"}
DOC_FALLBACK = "30d"
_DOC_CUSTOM_RE = re.compile(r"^\d+(h|d|w|m|y)$")

TV_TIMESPANS = {"1m": "30days", "3m": "90days", "6m": "180days", "1y": "365days"}
TV_FALLBACK = "30days"
_TV_DAYS_RE = re.compile(r"^\d+days$")
_TV_CUSTOM_RE = re.compile(r"^(\d+)(h|d|w)$")

_QUOTED_RE = re.compile(r'"([^"]+)"')
_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]")
_WHITESPACE_RE = re.compile(r"\s+")

GDELT_QUIRKS = (
    QuirkRule(
        name="plain-text error",
        predicate=plain_text_containing(
            "error", "invalid", case_sensitive=("The specified phrase is too short",)
        ),
        status=400,
    ),
)


def sanitize_query(query: str) -> str:
    """Normalize quotes, unquote too-short phrases, collapse whitespace."""
    text = str(query).replace("“", '"').replace("”", '"')
    text = text.replace("‘", "'").replace("’", "'")

    def unquote_short(match: re.Match) -> str:
        inner = match.group(1)
        if len(_NON_ALNUM_RE.sub("", inner)) < MIN_PHRASE_CHARS:
            return inner
        return match.group(0)

    text = _QUOTED_RE.sub(unquote_short, text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def _canonical_token(token: str) -> str:
    value = (token or "").strip().lower()
    return TIMESPAN_ALIASES.get(value, value)


def doc_timespan(token: str) -> str:
    t = _canonical_token(token)
    if t in DOC_TIMESPANS:
        return DOC_TIMESPANS[t]
    if _DOC_CUSTOM_RE.match(t):
        return t
    return DOC_FALLBACK


def tv_timespan(token: str) -> str:
    t = _canonical_token(token)
    if t in TV_TIMESPANS:
        return TV_TIMESPANS[t]
    if _TV_DAYS_RE.match(t):
        return t
    match = _TV_CUSTOM_RE.match(t)
    if match and len(match.group(1)) <= MAX_WINDOW_DIGITS:
        n, unit = int(match.group(1)), match.group(2)
        if unit == "h":
            return f"{max(1, math.floor(n / 24 + 0.5))}days"
        if unit == "d":
            return f"{n}days"
        return f"{n * 7}days"
    return TV_FALLBACK


class GdeltAdapter(ProviderAdapter):
    quirks = GDELT_QUIRKS
    path = ""
    mode = ""
    timespan_param = "timespan"

    @property
    def timeout(self) -> float:
        return self.settings.gdelt_timeout

    @abstractmethod
    def map_timespan(self, token: str) -> str:
        """GDELT window string for a caller timespan token."""

    def parse_request(self, params: Mapping[str, Any]) -> ProxyRequest:
        query = require_param(params, "query")
        return ProxyRequest(
            selector=self.name,
            query=sanitize_query(query),
            timespan=self.map_timespan(text_param(params, "timespan", DEFAULT_TIMESPAN)),
            limit=clamp_int(
                first_param(params, "maxrecords", "max", "maxRecords"),
                1,
                MAX_RECORDS,
                DEFAULT_MAX_RECORDS,
            ),
        )

    def build_queries(self, request: ProxyRequest) -> list[UpstreamQuery]:
        url = build_url(
            f"{self.settings.gdelt_base_url.rstrip('/')}/{self.path}",
            [
                ("query", request.query),
                ("mode", self.mode),
                ("format", "json"),
                ("sort", "datedesc"),
                (self.timespan_param, request.timespan),
                ("maxrecords", request.limit),
            ],
        )
        return [UpstreamQuery("GET", url, self.timeout, label=self.label)]

    def error_details(self, request: ProxyRequest) -> dict[str, Any]:
        return {"query": request.query}


class GdeltDocAdapter(GdeltAdapter):
    name = "doc"
    label = "GDELT DOC"
    path = "doc/doc"
    mode = "artlist"

    def map_timespan(self, token: str) -> str:
        return doc_timespan(token)

    def normalize(self, request: ProxyRequest, body: Any, query: UpstreamQuery) -> dict[str, Any]:
        articles = [
            Article(
                title=first_present(a, "title"),
                url=first_present(a, "url", "url_mobile"),
                date=first_present(a, "seendate", "date"),
                source=first_present(a, "domain", "source"),
                language=first_present(a, "language"),
                country=first_present(a, "sourcecountry", "country"),
                image=first_present(a, "socialimage", "image"),
            ).to_wire()
            for a in records(body, "articles")
        ]
        return {"articles": articles}


class GdeltTvAdapter(GdeltAdapter):
    name = "tv"
    label = "GDELT TV"
    path = "tv/tv"
    mode = "clipgallery"
    timespan_param = "TIMESPAN"

    def map_timespan(self, token: str) -> str:
        return tv_timespan(token)

    def normalize(self, request: ProxyRequest, body: Any, query: UpstreamQuery) -> dict[str, Any]:
        clips = [
            Clip(
                station=first_present(c, "station", "station_name", "stationName", "source"),
                show=first_present(c, "show", "program", "show_name", "showName"),
                date=first_present(c, "date", "startdatetime", "datetime", "dateline", "seendate"),
                snippet=first_present(c, "snippet", "teaser", "context", "caption", "summary"),
                url=first_present(c, "url", "clip", "clipurl", "link"),
            ).to_wire()
            for c in records(body, "clips", "show_clips")
        ]
        return {"clips": clips}
