"""Congress.gov bill search."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from atlas_gateway.models import Bill
from atlas_gateway.proxy.adapter import ProviderAdapter, ProxyRequest
from atlas_gateway.proxy.classify import QuirkRule, embedded_error_code, json_with_key
from atlas_gateway.proxy.query import (
    Credential,
    CredentialPlacement,
    UpstreamQuery,
    build_url,
    strip_query_param,
)
from atlas_gateway.proxy.results import UpstreamFailure
from atlas_gateway.providers.normalize import first_present, records
from atlas_gateway.utils.validators import clamp_int, require_param

MAX_LIMIT = 250
DEFAULT_LIMIT = 20
MAX_OFFSET = 1_000_000
SORT_ORDER = "updateDate desc"

CONGRESS_QUIRKS = (
    QuirkRule(
        name="embedded error",
        predicate=json_with_key("error"),
        status=None,
        status_from=embedded_error_code,
    ),
)


class CongressBillAdapter(ProviderAdapter):
    name = "bill"
    label = "Congress API"
    quirks = CONGRESS_QUIRKS
    credential = Credential(CredentialPlacement.QUERY, query_param="api_key")

    @property
    def timeout(self) -> float:
        return self.settings.congress_timeout

    def parse_request(self, params: Mapping[str, Any]) -> ProxyRequest:
        return ProxyRequest(
            selector=self.name,
            query=require_param(params, "q"),
            limit=clamp_int(params.get("limit"), 1, MAX_LIMIT, DEFAULT_LIMIT),
            api_key=self.require_configured_key(self.settings.congress_api_key),
            options={"offset": clamp_int(params.get("offset"), 0, MAX_OFFSET, 0)},
        )

    def build_queries(self, request: ProxyRequest) -> list[UpstreamQuery]:
        url = build_url(
            f"{self.settings.congress_base_url.rstrip('/')}/bill",
            [
                ("query", request.query),
                ("limit", request.limit),
                ("offset", request.options["offset"]),
                ("sort", SORT_ORDER),
                ("format", "json"),
                *self.credential.query_params(request.api_key),
            ],
        )
        return [UpstreamQuery("GET", url, self.timeout, label="Congress bills")]

    def failure_message(self, failure: UpstreamFailure) -> str:
        message = first_present(failure.body, ("error", "message"), "error")
        return message or f"Congress API {failure.upstream_status}"

    def normalize(self, request: ProxyRequest, body: Any, query: UpstreamQuery) -> dict[str, Any]:
        bills = [
            Bill(
                congress=first_present(b, "congress"),
                type=first_present(b, "type"),
                number=first_present(b, "number"),
                title=first_present(b, "title"),
                origin_chamber=first_present(b, "originChamber"),
                latest_action_date=first_present(b, ("latestAction", "actionDate")),
                latest_action_text=first_present(b, ("latestAction", "text")),
                update_date=first_present(b, "updateDate", "updateDateIncludingText"),
                url=strip_query_param(first_present(b, "url"), "api_key"),
            ).to_wire()
            for b in records(body, "bills")
        ]
        count = first_present(body, ("pagination", "count"))
        return {"bills": bills, "count": int(count) if count.isdigit() else len(bills)}
