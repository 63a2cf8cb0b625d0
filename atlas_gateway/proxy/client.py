"""Bounded upstream HTTP client."""

import asyncio

import httpx

from atlas_gateway.proxy.query import UpstreamQuery, redact_url
from atlas_gateway.proxy.results import NetworkFailure, NetworkReason, RawResponse
from atlas_gateway.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_ACCEPT = "application/json,text/plain;q=0.9,*/*;q=0.8"
TIMEOUT_MESSAGE = "Upstream timeout"


class BoundedHttpClient:
    """Issues one upstream call per ``send`` under a hard timeout.

    Never raises for upstream trouble: the outcome is either the raw response
    or a :class:`NetworkFailure`.
    """

    def __init__(self, client: httpx.AsyncClient, user_agent: str):
        self._client = client
        self.user_agent = user_agent

    def _headers(self, query: UpstreamQuery) -> dict[str, str]:
        headers = {"User-Agent": self.user_agent, "Accept": DEFAULT_ACCEPT}
        headers.update(query.headers)
        return headers

    async def send(self, query: UpstreamQuery) -> RawResponse | NetworkFailure:
        """Send ``query`` and return what came back, or why nothing did."""
        safe_url = redact_url(query.url)
        logger.debug(
            f"Upstream request: {query.method} {safe_url}",
            extra={"upstream": query.label or safe_url},
        )
        try:
            async with asyncio.timeout(query.timeout):
                response = await self._client.request(
                    query.method,
                    query.url,
                    headers=self._headers(query),
                    json=query.body,
                    timeout=query.timeout,
                )
                text = response.text
        except (TimeoutError, httpx.TimeoutException):
            logger.warning(
                f"Upstream timeout after {query.timeout}s: {safe_url}",
                extra={"upstream": query.label or safe_url},
            )
            return NetworkFailure(NetworkReason.TIMEOUT, TIMEOUT_MESSAGE)
        except httpx.HTTPError as e:
            logger.warning(
                f"Network error calling upstream {safe_url}: {e}",
                extra={"upstream": query.label or safe_url},
            )
            return NetworkFailure(NetworkReason.TRANSPORT, str(e) or e.__class__.__name__)

        logger.debug(
            f"Upstream response: {response.status_code}",
            extra={"upstream": query.label or safe_url, "upstream_status": response.status_code},
        )
        return RawResponse(
            status=response.status_code,
            text=text,
        )
