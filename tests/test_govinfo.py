"""Tests for the GovInfo search adapter and its snippet enrichment."""

import asyncio
import json

import httpx
import pytest

from conftest import json_response
from atlas_gateway.providers.govinfo import build_floor_query, content_link, infer_chamber

SEARCH_PATH = "/search"


def _search_results(n: int) -> list[dict]:
    return [
        {
            "title": f"Congressional Record item {i}",
            "dateIssued": "2024-01-10",
            "docClass": "HOUSE" if i % 2 else "SENATE",
            "packageId": "CREC-2024-01-10",
            "granuleId": f"CREC-2024-01-10-pt1-PgH{i}",
            "resultLink": f"https://api.govinfo.gov/packages/CREC-{i}/summary?api_key=LEAKED",
        }
        for i in range(1, n + 1)
    ]


def test_floor_query_wrapping():
    assert build_floor_query("H-1B") == (
        "collection:(CREC) AND (docClass:(HOUSE OR SENATE)) AND (H-1B)"
    )
    assert build_floor_query("collection:(BILLS) AND visa") == "collection:(BILLS) AND visa"
    assert build_floor_query("DOCCLASS : SENATE") == "DOCCLASS : SENATE"


@pytest.mark.parametrize(
    "record,expected",
    [
        ({"docClass": "HOUSE"}, "House"),
        ({"docClass": "senate"}, "Senate"),
        ({"granuleId": "CREC-2024-01-10-pt1-PgH12"}, "House"),
        ({"granuleId": "CREC-2024-01-10-pt1-PgS40"}, "Senate"),
        ({"granuleId": "CREC-2024-01-10-pt1-PgD5"}, "Daily Digest"),
        ({"granuleId": "CREC-2024-01-10-pt1-PgE7"}, "Extensions"),
        ({"granuleId": "CREC-2024-01-10-FrontMatter"}, ""),
        ({}, ""),
    ],
)
def test_infer_chamber(record, expected):
    assert infer_chamber(record) == expected


def test_content_link_preference():
    assert content_link({"download": {"htmLink": "h", "txtLink": "t"}}) == "t"
    assert content_link({"downloads": {"htmlLink": "hl"}}) == "hl"
    assert content_link({"htmLink": "top"}) == "top"
    assert content_link({"download": {}}) == ""


@pytest.mark.asyncio
async def test_search_request_shape(engine_factory):
    def handler(request):
        return json_response({"results": [], "nextOffsetMark": "AoJ"})

    async with engine_factory(handler) as (engine, stub):
        outcome = await engine.handle(
            "/api/govinfo", {"query": "visa", "api_key": "caller-key", "pageSize": "99"}
        )

    assert outcome.status_code == 200
    assert outcome.body == {"results": [], "offsetMark": "AoJ"}

    request = stub.requests[0]
    assert request.method == "POST"
    assert request.url.path == SEARCH_PATH
    assert request.url.params["api_key"] == "caller-key"
    assert request.headers["x-api-key"] == "caller-key"
    assert json.loads(request.content) == {
        "query": "collection:(CREC) AND (docClass:(HOUSE OR SENATE)) AND (visa)",
        "pageSize": "50",
        "offsetMark": "*",
        "sorts": [{"field": "publishdate", "sortOrder": "DESC"}],
    }


@pytest.mark.asyncio
async def test_configured_key_used_when_caller_sends_none(engine_factory):
    def handler(request):
        return json_response({"results": []})

    async with engine_factory(handler, govinfo_api_key="server-key") as (engine, stub):
        outcome = await engine.handle("/api/govinfo", {"query": "visa", "offsetMark": "AoJw"})

    assert outcome.body["offsetMark"] is None
    assert stub.requests[0].url.params["api_key"] == "server-key"
    assert json.loads(stub.requests[0].content)["offsetMark"] == "AoJw"


@pytest.mark.asyncio
async def test_missing_key_or_query_is_rejected_without_upstream_call(engine_factory):
    async with engine_factory() as (engine, stub):
        no_key = await engine.handle("/api/govinfo", {"query": "visa"})
        no_query = await engine.handle("/api/govinfo", {"api_key": "k"})

    assert no_key.status_code == 400
    assert no_key.body == {"error": "Missing required parameter: api_key"}
    assert no_query.status_code == 400
    assert no_query.body == {"error": "Missing required parameter: query"}
    assert stub.calls == 0


@pytest.mark.asyncio
async def test_enrichment_is_capped_and_bounded(engine_factory):
    async def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == SEARCH_PATH:
            return json_response({"results": _search_results(50), "offsetMark": "next"})
        if path.endswith("/summary"):
            assert request.url.params["api_key"] == "k"
            await asyncio.sleep(0.02)
            package = path.split("/")[2]
            return json_response(
                {"download": {"txtLink": f"https://api.govinfo.gov/packages/{package}/htm"}}
            )
        if path.endswith("/htm"):
            assert request.url.params["api_key"] == "k"
            await asyncio.sleep(0.02)
            return httpx.Response(
                200,
                text="<html><body><pre>Mr. President, the H-1B visa backlog "
                "affects many families.</pre></body></html>",
            )
        raise AssertionError(f"unexpected path {path}")

    async with engine_factory(handler) as (engine, stub):
        outcome = await engine.handle("/api/govinfo", {"query": "visa backlog", "api_key": "k"})

    assert outcome.status_code == 200
    results = outcome.body["results"]
    assert len(results) == 50
    assert outcome.body["offsetMark"] == "next"

    summary_calls = [p for p in stub.paths() if p.endswith("/summary")]
    assert len(summary_calls) == 10
    assert stub.max_in_flight == 3

    assert [r["title"] for r in results] == [f"Congressional Record item {i}" for i in range(1, 51)]
    for r in results[:10]:
        assert "visa backlog" in r["snippet"]
    assert all(r["snippet"] == "" for r in results[10:])
    assert all("LEAKED" not in r["detailsLink"] for r in results)
    assert results[0]["chamber"] == "House"
    assert results[1]["chamber"] == "Senate"


@pytest.mark.asyncio
async def test_enrichment_failures_degrade_to_empty_snippets(engine_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == SEARCH_PATH:
            results = _search_results(4)
            results[3]["resultLink"] = ""
            return json_response({"results": results})
        if "CREC-1" in path:
            return httpx.Response(500, text="boom")
        if "CREC-2" in path:
            return httpx.Response(200, text="not json")
        if "CREC-3" in path:
            raise httpx.ConnectError("reset", request=request)
        raise AssertionError(f"unexpected path {path}")

    async with engine_factory(handler) as (engine, stub):
        outcome = await engine.handle("/api/govinfo", {"query": "visa", "api_key": "k"})

    assert outcome.status_code == 200
    assert [r["snippet"] for r in outcome.body["results"]] == ["", "", "", ""]
    assert stub.calls == 4


@pytest.mark.asyncio
async def test_non_json_search_response(engine_factory):
    def handler(request):
        return httpx.Response(200, text="<html>Gateway</html>")

    async with engine_factory(handler) as (engine, _):
        outcome = await engine.handle("/api/govinfo", {"query": "visa", "api_key": "k"})

    assert outcome.status_code == 502
    assert outcome.body == {
        "error": "GovInfo returned non-JSON",
        "upstream_status": 200,
        "upstream_text": "<html>Gateway</html>",
    }


@pytest.mark.asyncio
async def test_search_failure_mirrors_status(engine_factory):
    def handler(request):
        return json_response({"message": "API_KEY_INVALID"}, status_code=403)

    async with engine_factory(handler) as (engine, _):
        outcome = await engine.handle("/api/govinfo", {"query": "visa", "api_key": "bad"})

    assert outcome.status_code == 403
    assert outcome.body["error"] == "GovInfo search failed"
    assert "API_KEY_INVALID" in outcome.body["upstream_text"]
