"""Custom exceptions for the gateway.

Every exception renders to the uniform error body returned to browser
callers: at minimum an ``error`` message, optionally ``upstream_status`` and a
bounded ``upstream_text`` excerpt.
"""

from typing import Any


class GatewayError(Exception):
    """Base exception for the gateway."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None, **details: Any):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = {k: v for k, v in details.items() if v is not None}
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        """Render the error as a JSON-ready dict."""
        return {"error": self.message, **self.details}


class InvalidRequestError(GatewayError):
    """Missing or invalid caller parameter; no upstream call is attempted."""

    status_code = 400


class ConfigurationError(GatewayError):
    """Exception raised for configuration errors."""

    status_code = 500


class UpstreamRejectedError(GatewayError):
    """Upstream answered with a failure status or a disguised error body."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        upstream_status: int | None = None,
        upstream_text: str | None = None,
        **details: Any,
    ):
        super().__init__(
            message,
            status_code=status_code,
            upstream_status=upstream_status,
            upstream_text=upstream_text,
            **details,
        )


class UpstreamMalformedError(UpstreamRejectedError):
    """Upstream returned a body that is not the JSON it promised."""


class UpstreamUnavailableError(GatewayError):
    """Exception raised for network/connection errors and timeouts."""

    status_code = 502


class UpstreamExhaustedError(GatewayError):
    """Every fallback attempt against an upstream failed."""

    status_code = 502
