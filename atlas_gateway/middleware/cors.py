"""CORS headers on every response, preflight included."""

from typing import Callable, Sequence

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from atlas_gateway.utils.logging import get_logger

logger = get_logger(__name__)

ALLOW_METHODS = "GET, OPTIONS"
ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """
    Stamp CORS headers on every response the gateway produces.

    Any ``OPTIONS`` request is answered here with 200 and an empty body. An
    exception that escapes the application is turned into a JSON 500 so the
    browser can still read it.
    """

    def __init__(self, app: ASGIApp, allow_origins: Sequence[str] = ("*",)):
        super().__init__(app)
        self.allow_origins = list(allow_origins) or ["*"]

    def _origin_for(self, request: Request) -> str:
        if "*" in self.allow_origins:
            return "*"
        origin = request.headers.get("origin", "")
        return origin if origin in self.allow_origins else self.allow_origins[0]

    def _apply(self, request: Request, response: Response) -> Response:
        response.headers["Access-Control-Allow-Origin"] = self._origin_for(request)
        response.headers["Access-Control-Allow-Methods"] = ALLOW_METHODS
        response.headers["Access-Control-Allow-Headers"] = ALLOW_HEADERS
        if "*" not in self.allow_origins:
            response.headers["Vary"] = "Origin"
        return response

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method == "OPTIONS":
            return self._apply(request, Response(status_code=200))

        try:
            response = await call_next(request)
        except Exception as e:
            path = request.url.path
            logger.exception(
                f"Unhandled error serving {path}: {e}",
                extra={"endpoint": path, "status_code": 500},
            )
            response = JSONResponse(
                status_code=500,
                content={"error": f"Unhandled {path} error", "message": str(e)},
                headers={"Cache-Control": "no-store"},
            )
        return self._apply(request, response)
