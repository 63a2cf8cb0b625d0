"""FastAPI application for the Voter Atlas data gateway."""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from atlas_gateway import __version__
from atlas_gateway.config import Settings, get_settings
from atlas_gateway.exceptions import GatewayError
from atlas_gateway.middleware import CORSHeadersMiddleware, RequestLoggingMiddleware
from atlas_gateway.responses import ProxyJSONResponse, error_response
from atlas_gateway.routers import health_router, proxy_router
from atlas_gateway.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the gateway application.

    Args:
        settings: Explicit settings; defaults to the cached environment settings

    Returns:
        Configured FastAPI instance
    """
    settings = settings or get_settings()
    setup_logging(level=settings.log_level, json_format=settings.log_json, log_file=settings.log_file)

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version or __version__,
        description="CORS-enabled proxies for GDELT, GovInfo, Census, Congress.gov and YouTube",
        debug=settings.debug,
        default_response_class=ProxyJSONResponse,
    )
    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    # Last added runs first: CORS wraps request logging.
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CORSHeadersMiddleware, allow_origins=settings.allowed_origins)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        response = error_response(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(400, "Invalid request parameters", detail=jsonable_encoder(exc.errors()))

    @app.exception_handler(GatewayError)
    async def gateway_exception_handler(request: Request, exc: GatewayError):
        return error_response(exc.status_code, exc.message, **exc.details)

    app.include_router(proxy_router)
    app.include_router(health_router)

    logger.info(f"{settings.app_title} {app.version} ready")
    return app


app = create_app()
