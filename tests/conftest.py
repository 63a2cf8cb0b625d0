"""Shared fixtures: settings, an instrumented upstream stub, app and engine factories."""

import inspect
from contextlib import asynccontextmanager

import httpx
import pytest
from fastapi.testclient import TestClient

from atlas_gateway.config import Settings
from atlas_gateway.dependencies import get_http_client
from atlas_gateway.main import create_app
from atlas_gateway.providers import build_endpoints
from atlas_gateway.proxy.client import BoundedHttpClient
from atlas_gateway.proxy.engine import ProxyEngine


class UpstreamStub:
    """MockTransport handler that records requests and tracks concurrency."""

    def __init__(self, handler):
        self.handler = handler
        self.requests: list[httpx.Request] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            response = self.handler(request)
            if inspect.isawaitable(response):
                response = await response
            return response
        finally:
            self.in_flight -= 1

    @property
    def calls(self) -> int:
        return len(self.requests)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


def json_response(payload, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


def unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected upstream call: {request.method} {request.url}")


@pytest.fixture
def settings():
    """Settings isolated from any local .env, with short timeouts."""
    return Settings(
        _env_file=None,
        log_level="WARNING",
        log_json=False,
        census_api_key="census-test-key",
        congress_api_key="congress-test-key",
        youtube_api_key="youtube-test-key",
        govinfo_api_key="",
        gdelt_timeout=2.0,
        govinfo_timeout=2.0,
        census_timeout=2.0,
        congress_timeout=2.0,
        youtube_timeout=2.0,
    )


@pytest.fixture
def gateway(settings):
    """Factory: ``gateway(handler, **setting_overrides)`` → (TestClient, UpstreamStub)."""

    def build(handler=unreachable, **overrides):
        config = settings.model_copy(update=overrides) if overrides else settings
        stub = UpstreamStub(handler)
        app = create_app(config)

        async def stub_http_client():
            async with httpx.AsyncClient(transport=httpx.MockTransport(stub)) as client:
                yield client

        app.dependency_overrides[get_http_client] = stub_http_client
        return TestClient(app), stub

    return build


@pytest.fixture
def engine_factory(settings):
    """Factory: ``async with engine_factory(handler) as (engine, stub)``."""

    @asynccontextmanager
    async def build(handler=unreachable, **overrides):
        config = settings.model_copy(update=overrides) if overrides else settings
        stub = UpstreamStub(handler)
        async with httpx.AsyncClient(transport=httpx.MockTransport(stub)) as client:
            engine = ProxyEngine(
                BoundedHttpClient(client, user_agent=config.user_agent),
                build_endpoints(config),
            )
            yield engine, stub

    return build
