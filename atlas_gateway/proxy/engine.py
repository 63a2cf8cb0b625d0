"""Generic request pipeline shared by every provider."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from atlas_gateway.exceptions import GatewayError
from atlas_gateway.proxy.adapter import Endpoint, Failure, ProviderAdapter, ProxyRequest
from atlas_gateway.proxy.client import BoundedHttpClient
from atlas_gateway.proxy.query import UpstreamQuery
from atlas_gateway.proxy.results import NetworkFailure, Success
from atlas_gateway.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProxyOutcome:
    """Status code and JSON-ready body handed back to the HTTP layer."""

    status_code: int
    body: dict[str, Any]

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class ProxyEngine:
    """
    Runs validator → builder → client → classifier → normalizer → enrichment
    for whichever adapter an endpoint resolves to.

    ``handle`` always produces an outcome; nothing raised by an adapter
    escapes to the caller.
    """

    def __init__(self, client: BoundedHttpClient, endpoints: Iterable[Endpoint]):
        self.client = client
        self.endpoints: dict[str, Endpoint] = {e.path: e for e in endpoints}

    async def handle(self, path: str, params: Mapping[str, Any]) -> ProxyOutcome:
        endpoint = self.endpoints.get(path)
        if endpoint is None:
            return ProxyOutcome(404, {"error": f"Unknown endpoint {path}"})
        try:
            adapter = endpoint.resolve(params)
            request = adapter.parse_request(params)
            payload = await self._execute(adapter, request)
            return ProxyOutcome(200, payload)
        except GatewayError as e:
            log = logger.info if e.status_code < 500 else logger.warning
            log(
                f"{path} failed with {e.status_code}: {e.message}",
                extra={"endpoint": path, "status_code": e.status_code},
            )
            return ProxyOutcome(e.status_code, e.to_payload())
        except Exception as e:
            logger.exception(
                f"Unhandled error in {path}: {e}",
                extra={"endpoint": path, "status_code": 500},
            )
            return ProxyOutcome(500, {"error": f"Unhandled {path} error", "message": str(e)})

    async def _execute(self, adapter: ProviderAdapter, request: ProxyRequest) -> dict[str, Any]:
        failures: list[tuple[UpstreamQuery, Failure]] = []
        queries = adapter.build_queries(request)
        for attempt, query in enumerate(queries, start=1):
            result = await self.client.send(query)
            outcome = result if isinstance(result, NetworkFailure) else adapter.classify(result)
            if isinstance(outcome, Success):
                payload = adapter.normalize(request, outcome.body, query)
                return await adapter.enrich(request, payload, self.client)

            failures.append((query, outcome))
            if attempt < len(queries):
                logger.info(
                    f"{adapter.label} attempt {query.label or attempt} failed "
                    f"({outcome.status}); trying next",
                    extra={"provider": adapter.label, "attempt": attempt},
                )
        raise adapter.exhausted(request, failures)
