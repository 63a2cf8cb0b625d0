"""Provider adapter interface.

An adapter is everything the engine needs to know about one upstream
variant: how to read the caller's parameters, which requests to send, how
to classify and reshape the answer, and how to word a failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from atlas_gateway.config import Settings
from atlas_gateway.exceptions import (
    ConfigurationError,
    GatewayError,
    InvalidRequestError,
    UpstreamExhaustedError,
    UpstreamMalformedError,
    UpstreamRejectedError,
    UpstreamUnavailableError,
)
from atlas_gateway.proxy.classify import QuirkRule, classify_response
from atlas_gateway.proxy.client import BoundedHttpClient
from atlas_gateway.proxy.query import Credential, UpstreamQuery
from atlas_gateway.proxy.results import (
    FailureKind,
    NetworkFailure,
    RawResponse,
    Success,
    UpstreamFailure,
)
from atlas_gateway.utils.validators import text_param

Failure = UpstreamFailure | NetworkFailure


@dataclass(frozen=True)
class ProxyRequest:
    """Validated caller parameters for one request."""

    selector: str = ""
    query: str = ""
    timespan: str = ""
    limit: int = 0
    cursor: str | None = None
    api_key: str = ""
    options: Mapping[str, Any] = field(default_factory=dict)


class ProviderAdapter(ABC):
    """Base class for one upstream variant."""

    name: str = ""
    label: str = ""
    quirks: Sequence[QuirkRule] = ()
    credential: Credential = Credential()
    exhausted_message: str = ""

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    @abstractmethod
    def timeout(self) -> float:
        """Per-call upstream timeout in seconds."""

    @abstractmethod
    def parse_request(self, params: Mapping[str, Any]) -> ProxyRequest:
        """Validate raw query parameters. Raises InvalidRequestError."""

    @abstractmethod
    def build_queries(self, request: ProxyRequest) -> list[UpstreamQuery]:
        """Ordered upstream attempts; the first success wins."""

    @abstractmethod
    def normalize(self, request: ProxyRequest, body: Any, query: UpstreamQuery) -> dict[str, Any]:
        """Reshape a successful upstream body into the caller-facing payload."""

    def classify(self, raw: RawResponse) -> Success | UpstreamFailure:
        return classify_response(raw, self.quirks, self.settings.excerpt_limit)

    async def enrich(
        self, request: ProxyRequest, payload: dict[str, Any], client: BoundedHttpClient
    ) -> dict[str, Any]:
        """Secondary calls that augment ``payload``. Must not raise for upstream trouble."""
        return payload

    def require_configured_key(self, key: str) -> str:
        """The configured upstream key; a missing one is a deployment error."""
        if not key:
            raise ConfigurationError(f"{self.label} key is not configured")
        return key

    # Failure rendering -------------------------------------------------

    def error_details(self, request: ProxyRequest) -> dict[str, Any]:
        """Extra members added to every error body of this adapter."""
        return {}

    def failure_message(self, failure: UpstreamFailure) -> str:
        if failure.kind is FailureKind.MALFORMED:
            return f"{self.label} returned non-JSON"
        return f"{self.label} upstream error"

    def rejection(self, request: ProxyRequest, failure: Failure) -> GatewayError:
        """Exception describing a single failed attempt."""
        details = self.error_details(request)
        if isinstance(failure, NetworkFailure):
            return UpstreamUnavailableError(
                failure.message, status_code=failure.status, **details
            )
        error_cls = (
            UpstreamMalformedError
            if failure.kind is FailureKind.MALFORMED
            else UpstreamRejectedError
        )
        return error_cls(
            self.failure_message(failure),
            status_code=failure.status,
            upstream_status=failure.upstream_status,
            upstream_text=failure.excerpt,
            **details,
        )

    def exhausted(
        self, request: ProxyRequest, failures: Sequence[tuple[UpstreamQuery, Failure]]
    ) -> GatewayError:
        """Exception for the case where every attempt failed."""
        if len(failures) == 1:
            return self.rejection(request, failures[0][1])
        attempts = []
        for query, failure in failures:
            entry: dict[str, Any] = {"attempt": query.label, "status": failure.status}
            if isinstance(failure, NetworkFailure):
                entry["error"] = failure.message
            else:
                entry["upstream_status"] = failure.upstream_status
                entry["error"] = self.failure_message(failure)
            attempts.append(entry)
        message = self.exhausted_message or f"All {self.label} attempts failed"
        return UpstreamExhaustedError(message, attempts=attempts, **self.error_details(request))


class Endpoint:
    """One public route and the adapters reachable through it.

    With a ``selector`` the adapter is chosen by that query parameter
    (falling back to ``default``); without one the endpoint wraps exactly
    one adapter.
    """

    def __init__(
        self,
        path: str,
        adapters: Iterable[ProviderAdapter],
        selector: str | None = None,
        default: str | None = None,
    ):
        self.path = path
        self.selector = selector
        self.default = default
        self.adapters: dict[str, ProviderAdapter] = {a.name: a for a in adapters}
        if not self.adapters:
            raise ValueError(f"Endpoint {path} has no adapters")
        if selector is None and len(self.adapters) != 1:
            raise ValueError(f"Endpoint {path} needs a selector for several adapters")

    @property
    def choices(self) -> list[str]:
        return list(self.adapters)

    def resolve(self, params: Mapping[str, Any]) -> ProviderAdapter:
        if self.selector is None:
            return next(iter(self.adapters.values()))
        raw = text_param(params, self.selector) or (self.default or "")
        adapter = self.adapters.get(raw.lower())
        if adapter is None:
            options = " or ".join(f"{self.selector}={name}" for name in self.choices)
            raise InvalidRequestError(
                f"Invalid {self.selector}. Use {options}",
                **{self.selector: raw, "valid": self.choices},
            )
        return adapter
