"""Tests for the Congress.gov bill search adapter."""

import pytest

from conftest import json_response

BILLS = {
    "bills": [
        {
            "congress": 118,
            "type": "HR",
            "number": "3599",
            "title": "Eliminating Backlogs Act",
            "originChamber": "House",
            "latestAction": {"actionDate": "2023-05-24", "text": "Referred to the Committee."},
            "updateDate": "2024-01-05",
            "url": "https://api.congress.gov/v3/bill/118/hr/3599?format=json&api_key=SECRET",
        },
        {"number": "12"},
    ],
    "pagination": {"count": 412, "next": "https://api.congress.gov/v3/bill?offset=20"},
}


@pytest.mark.asyncio
async def test_bill_search(engine_factory):
    async with engine_factory(lambda request: json_response(BILLS)) as (engine, stub):
        outcome = await engine.handle("/api/congress", {"q": "green card", "limit": "999"})

    assert outcome.status_code == 200
    assert outcome.body["count"] == 412
    first, second = outcome.body["bills"]
    assert first["congress"] == "118"
    assert first["latestActionDate"] == "2023-05-24"
    assert first["latestActionText"] == "Referred to the Committee."
    assert "SECRET" not in first["url"]
    assert set(second) == set(first)
    assert second["title"] == ""

    params = stub.requests[0].url.params
    assert stub.requests[0].url.path == "/v3/bill"
    assert params["query"] == "green card"
    assert params["limit"] == "250"
    assert params["offset"] == "0"
    assert params["sort"] == "updateDate desc"
    assert params["api_key"] == "congress-test-key"


@pytest.mark.asyncio
async def test_limit_and_offset_defaults(engine_factory):
    async with engine_factory(lambda request: json_response({"bills": []})) as (engine, stub):
        outcome = await engine.handle("/api/congress", {"q": "visa", "offset": "-5"})

    assert outcome.body == {"bills": [], "count": 0}
    assert stub.requests[0].url.params["limit"] == "20"
    assert stub.requests[0].url.params["offset"] == "0"


@pytest.mark.asyncio
async def test_missing_q(engine_factory):
    async with engine_factory() as (engine, stub):
        outcome = await engine.handle("/api/congress", {"query": "visa"})

    assert outcome.status_code == 400
    assert outcome.body == {"error": "Missing required parameter: q"}
    assert stub.calls == 0


@pytest.mark.asyncio
async def test_unconfigured_key_is_a_server_error(engine_factory):
    async with engine_factory(congress_api_key="") as (engine, stub):
        outcome = await engine.handle("/api/congress", {"q": "visa"})

    assert outcome.status_code == 500
    assert outcome.body == {"error": "Congress API key is not configured"}
    assert stub.calls == 0


@pytest.mark.asyncio
async def test_embedded_error_at_200(engine_factory):
    def handler(request):
        return json_response({"error": {"code": 403, "message": "API_KEY_INVALID"}})

    async with engine_factory(handler) as (engine, _):
        outcome = await engine.handle("/api/congress", {"q": "visa"})

    assert outcome.status_code == 403
    assert outcome.body["error"] == "API_KEY_INVALID"
    assert outcome.body["upstream_status"] == 200
