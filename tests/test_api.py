"""Tests for the HTTP surface: routing, CORS, error bodies and headers."""

import asyncio
import time

import httpx
import pytest

from conftest import json_response
from atlas_gateway.dependencies import get_engine
from atlas_gateway.providers.gdelt import GdeltDocAdapter

ARTICLES = {
    "articles": [
        {"title": "B", "url": "https://n.test/b", "seendate": "20240102T000000Z"},
        {"title": "A", "url": "https://n.test/a", "seendate": "20240101T000000Z"},
    ]
}

CORS_ORIGIN = "access-control-allow-origin"


def _articles(request):
    return json_response(ARTICLES)


class TestCors:
    def test_headers_on_success(self, gateway):
        client, _ = gateway(_articles)
        response = client.get("/api/gdelt", params={"query": "visa"})

        assert response.status_code == 200
        assert response.headers[CORS_ORIGIN] == "*"
        assert response.headers["access-control-allow-methods"] == "GET, OPTIONS"
        assert "content-type" in response.headers["access-control-allow-headers"]

    def test_headers_on_client_error(self, gateway):
        client, stub = gateway()
        response = client.get("/api/congress")

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required parameter: q"}
        assert response.headers[CORS_ORIGIN] == "*"
        assert stub.calls == 0

    @pytest.mark.parametrize("path", ["/api/gdelt", "/api/census", "/api/unknown"])
    def test_preflight_is_empty_200(self, gateway, path):
        client, stub = gateway()
        response = client.options(path, headers={"Origin": "https://atlas.test"})

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers[CORS_ORIGIN] == "*"
        assert stub.calls == 0

    def test_allow_list_echoes_known_origin(self, gateway):
        client, _ = gateway(_articles, cors_allow_origins="https://atlas.test, https://admin.atlas.test")
        response = client.get(
            "/api/gdelt", params={"query": "visa"}, headers={"Origin": "https://admin.atlas.test"}
        )

        assert response.headers[CORS_ORIGIN] == "https://admin.atlas.test"
        assert response.headers["vary"] == "Origin"


class TestRouting:
    def test_post_is_405_json(self, gateway):
        client, stub = gateway()
        response = client.post("/api/gdelt", json={"query": "visa"})

        assert response.status_code == 405
        assert response.json() == {"error": "Method Not Allowed"}
        assert response.headers[CORS_ORIGIN] == "*"
        assert stub.calls == 0

    def test_unknown_path_is_404_json(self, gateway):
        client, _ = gateway()
        response = client.get("/api/weather")

        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}
        assert response.headers[CORS_ORIGIN] == "*"

    def test_health(self, gateway, settings):
        client, stub = gateway()
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": settings.app_version}
        assert stub.calls == 0

    def test_request_id_header(self, gateway):
        client, _ = gateway(_articles)
        response = client.get("/api/gdelt", params={"query": "visa"}, headers={"X-Request-ID": "req-1"})

        assert response.headers["x-request-id"] == "req-1"


class TestProxyResponses:
    def test_output_is_deterministic(self, gateway):
        client, stub = gateway(_articles)
        first = client.get("/api/gdelt", params={"query": "visa", "timespan": "1y"})
        second = client.get("/api/gdelt", params={"query": "visa", "timespan": "1y"})

        assert first.content == second.content
        assert [a["title"] for a in first.json()["articles"]] == ["B", "A"]
        assert stub.calls == 2

    def test_cache_control_hints(self, gateway):
        client, _ = gateway(_articles, cache_max_age=300)
        ok = client.get("/api/gdelt", params={"query": "visa"})
        bad = client.get("/api/gdelt")

        assert ok.headers["cache-control"] == "public, max-age=300"
        assert bad.headers["cache-control"] == "no-store"

    def test_no_cache_hint_by_default(self, gateway):
        client, _ = gateway(_articles)
        response = client.get("/api/gdelt", params={"query": "visa"})

        assert "cache-control" not in response.headers

    def test_never_responding_upstream_times_out(self, gateway):
        async def never_responds(request):
            await asyncio.sleep(30)

        client, _ = gateway(never_responds, gdelt_timeout=0.3)
        started = time.perf_counter()
        response = client.get("/api/gdelt", params={"query": "visa"})
        elapsed = time.perf_counter() - started

        assert response.status_code == 504
        assert response.json() == {"error": "Upstream timeout", "query": "visa"}
        assert response.headers[CORS_ORIGIN] == "*"
        assert elapsed < 3.0

    def test_transport_failure_is_502(self, gateway):
        def refuse(request):
            raise httpx.ConnectError("Name or service not known", request=request)

        client, _ = gateway(refuse)
        response = client.get("/api/census", params={"action": "verify"})

        assert response.status_code == 502
        assert "Name or service not known" in response.json()["error"]

    def test_adapter_crash_is_500(self, gateway, monkeypatch):
        def explode(self, request, body, query):
            raise KeyError("seendate")

        monkeypatch.setattr(GdeltDocAdapter, "normalize", explode)
        client, _ = gateway(_articles)
        response = client.get("/api/gdelt", params={"query": "visa"})

        assert response.status_code == 500
        assert response.json() == {"error": "Unhandled /api/gdelt error", "message": "'seendate'"}
        assert response.headers[CORS_ORIGIN] == "*"

    def test_escaped_exception_still_gets_json_and_cors(self, gateway):
        def broken_engine():
            raise RuntimeError("engine unavailable")

        client, _ = gateway()
        client.app.dependency_overrides[get_engine] = broken_engine
        response = client.get("/api/youtube", params={"action": "search", "q": "visa"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Unhandled /api/youtube error",
            "message": "engine unavailable",
        }
        assert response.headers[CORS_ORIGIN] == "*"


def test_openapi_documents_every_payload_shape(gateway):
    client, _ = gateway()
    schemas = client.get("/openapi.json").json()["components"]["schemas"]

    for name in ("ArticleList", "ClipList", "VideoSearch", "VideoStatsMap", "ErrorResponse"):
        assert name in schemas
