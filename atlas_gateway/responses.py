"""JSON responses rendered with orjson."""

from typing import Any, Optional

import orjson
from fastapi.responses import JSONResponse

from atlas_gateway.proxy.engine import ProxyOutcome


class ProxyJSONResponse(JSONResponse):
    media_type = "application/json"

    def render(self, content: Any) -> bytes:
        return orjson.dumps(content)


def cache_control(status_code: int, max_age: int) -> Optional[str]:
    """Cache hint: public for successes when enabled, never for errors."""
    if status_code >= 400:
        return "no-store"
    if max_age > 0:
        return f"public, max-age={max_age}"
    return None


def outcome_response(outcome: ProxyOutcome, max_age: int = 0) -> ProxyJSONResponse:
    hint = cache_control(outcome.status_code, max_age)
    return ProxyJSONResponse(
        status_code=outcome.status_code,
        content=outcome.body,
        headers={"Cache-Control": hint} if hint else None,
    )


def error_response(status_code: int, message: str, **details: Any) -> ProxyJSONResponse:
    body = {"error": message, **details}
    return ProxyJSONResponse(
        status_code=status_code,
        content=body,
        headers={"Cache-Control": "no-store"},
    )
