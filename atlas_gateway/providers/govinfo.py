"""GovInfo Congressional Record search with snippet enrichment."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from atlas_gateway.models import Document
from atlas_gateway.proxy.adapter import ProviderAdapter, ProxyRequest
from atlas_gateway.proxy.classify import parse_json, NOT_JSON
from atlas_gateway.proxy.client import BoundedHttpClient
from atlas_gateway.proxy.pool import bounded_map
from atlas_gateway.proxy.query import (
    Credential,
    CredentialPlacement,
    UpstreamQuery,
    build_url,
    ensure_query_param,
    strip_query_param,
)
from atlas_gateway.proxy.results import FailureKind, RawResponse, UpstreamFailure
from atlas_gateway.providers.normalize import first_present, records, safe_get
from atlas_gateway.utils.logging import get_logger
from atlas_gateway.utils.text import extract_needles, make_snippet, strip_html
from atlas_gateway.utils.validators import clamp_int, require_param, text_param

logger = get_logger(__name__)

MAX_PAGE_SIZE = 50
DEFAULT_PAGE_SIZE = 25
FIRST_PAGE_MARK = "*"

_FIELD_OPERATOR_RE = re.compile(r"collection\s*:|docclass\s*:", re.IGNORECASE)

# Probed in order for the full-text rendition of a package or granule.
_CONTENT_LINKS = ("txtLink", "textLink", "htmLink", "htmlLink")

# Granule id fragments, checked in order once docClass says nothing.
_GRANULE_CHAMBERS = (
    ("PgH", "House"),
    ("PgS", "Senate"),
    ("PgD", "Daily Digest"),
    ("PgE", "Extensions"),
)


def build_floor_query(query: str) -> str:
    """Restrict a plain query to House and Senate floor proceedings.

    Queries that already use ``collection:`` or ``docClass:`` are the
    caller's own and pass through untouched.
    """
    if _FIELD_OPERATOR_RE.search(query):
        return query
    return f"collection:(CREC) AND (docClass:(HOUSE OR SENATE)) AND ({query})"


def infer_chamber(result: dict[str, Any]) -> str:
    doc_class = str(result.get("docClass") or "").upper()
    if "HOUSE" in doc_class:
        return "House"
    if "SENATE" in doc_class:
        return "Senate"
    granule = str(result.get("granuleId") or "")
    for fragment, chamber in _GRANULE_CHAMBERS:
        if fragment in granule:
            return chamber
    return ""


def content_link(summary: Any) -> str:
    """Best text or HTML rendition advertised by a package summary."""
    downloads = safe_get(summary, "download") or safe_get(summary, "downloads") or {}
    link = first_present(downloads, *_CONTENT_LINKS)
    return link or first_present(summary, "txtLink", "htmLink")


class GovInfoSearchAdapter(ProviderAdapter):
    name = "search"
    label = "GovInfo"
    credential = Credential(CredentialPlacement.BOTH, query_param="api_key", header="X-Api-Key")

    @property
    def timeout(self) -> float:
        return self.settings.govinfo_timeout

    def parse_request(self, params: Mapping[str, Any]) -> ProxyRequest:
        api_key = text_param(params, "api_key") or self.settings.govinfo_api_key
        if not api_key:
            require_param(params, "api_key")
        query = require_param(params, "query")
        return ProxyRequest(
            selector=self.name,
            query=query,
            limit=clamp_int(params.get("pageSize"), 1, MAX_PAGE_SIZE, DEFAULT_PAGE_SIZE),
            cursor=text_param(params, "offsetMark") or FIRST_PAGE_MARK,
            api_key=api_key,
        )

    def build_queries(self, request: ProxyRequest) -> list[UpstreamQuery]:
        url = build_url(
            f"{self.settings.govinfo_base_url.rstrip('/')}/search",
            self.credential.query_params(request.api_key),
        )
        body = {
            "query": build_floor_query(request.query),
            "pageSize": str(request.limit),
            "offsetMark": request.cursor,
            "sorts": [{"field": "publishdate", "sortOrder": "DESC"}],
        }
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        headers.update(self.credential.headers(request.api_key))
        return [
            UpstreamQuery("POST", url, self.timeout, headers=headers, body=body, label="GovInfo search")
        ]

    def failure_message(self, failure: UpstreamFailure) -> str:
        if failure.kind is FailureKind.MALFORMED:
            return "GovInfo returned non-JSON"
        return "GovInfo search failed"

    def normalize(self, request: ProxyRequest, body: Any, query: UpstreamQuery) -> dict[str, Any]:
        results = [
            Document(
                title=first_present(r, "title", "packageTitle", "granuleTitle"),
                date_issued=first_present(r, "dateIssued", "publishDate", "lastModified"),
                chamber=infer_chamber(r),
                details_link=strip_query_param(first_present(r, "resultLink", "link"), "api_key"),
                package_id=first_present(r, "packageId"),
                granule_id=first_present(r, "granuleId"),
            ).to_wire()
            for r in records(body, "results")
        ]
        cursor = first_present(body, "offsetMark", "nextOffsetMark") or None
        return {"results": results, "offsetMark": cursor}

    async def enrich(
        self, request: ProxyRequest, payload: dict[str, Any], client: BoundedHttpClient
    ) -> dict[str, Any]:
        """Fill ``snippet`` for the leading results; the rest keep ``""``."""
        results = payload["results"]
        cap = self.settings.govinfo_snippet_limit
        head = results[:cap]
        if not head:
            return payload

        needles = extract_needles(request.query)

        async def enrich_one(document: dict[str, Any]) -> dict[str, Any]:
            snippet = await self.fetch_snippet(client, document, request.api_key, needles)
            return {**document, "snippet": snippet}

        enriched = await bounded_map(
            enrich_one, head, limit=self.settings.govinfo_enrich_concurrency
        )
        return {**payload, "results": enriched + results[cap:]}

    async def _get(self, client: BoundedHttpClient, url: str, accept: str, label: str):
        query = UpstreamQuery(
            "GET", url, self.timeout, headers={"Accept": accept}, label=label
        )
        result = await client.send(query)
        if not isinstance(result, RawResponse) or not result.ok:
            return None
        return result.text

    async def fetch_snippet(
        self,
        client: BoundedHttpClient,
        document: dict[str, Any],
        api_key: str,
        needles: list[str],
    ) -> str:
        """Snippet for one document, or ``""`` on any failure."""
        details = document.get("detailsLink") or ""
        if not details:
            return ""
        try:
            summary_text = await self._get(
                client,
                ensure_query_param(details, "api_key", api_key),
                "application/json",
                "GovInfo summary",
            )
            if summary_text is None:
                return ""
            summary = parse_json(summary_text)
            if summary is NOT_JSON:
                return ""
            link = content_link(summary)
            if not link:
                return ""
            content = await self._get(
                client,
                ensure_query_param(strip_query_param(link, "api_key"), "api_key", api_key),
                "text/plain,text/html;q=0.9",
                "GovInfo content",
            )
            if not content:
                return ""
            return make_snippet(
                strip_html(content), needles, self.settings.govinfo_snippet_width
            )
        except Exception as e:
            logger.debug(
                f"Snippet enrichment failed for {document.get('packageId') or details}: {e}",
                extra={"provider": self.label},
            )
            return ""
