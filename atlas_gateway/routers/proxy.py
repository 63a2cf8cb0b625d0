"""Public proxy routes.

Handlers accept any query parameters and hand them to the engine as-is;
validation belongs to the adapters so every route answers with the same
error body.
"""

from typing import Union

from fastapi import APIRouter, Depends, Request

from atlas_gateway.config import Settings, get_settings
from atlas_gateway.dependencies import get_engine
from atlas_gateway.models import (
    ArticleList,
    BillList,
    CensusTable,
    ClipList,
    DocumentPage,
    ErrorResponse,
    VideoSearch,
    VideoStatsMap,
)
from atlas_gateway.providers import (
    CENSUS_PATH,
    CONGRESS_PATH,
    GDELT_PATH,
    GOVINFO_PATH,
    YOUTUBE_PATH,
)
from atlas_gateway.proxy.engine import ProxyEngine
from atlas_gateway.responses import ProxyJSONResponse, outcome_response

router = APIRouter(tags=["proxy"])

_ERRORS = {
    400: {"model": ErrorResponse, "description": "Missing or invalid parameter"},
    502: {"model": ErrorResponse, "description": "Upstream failure"},
    504: {"model": ErrorResponse, "description": "Upstream timeout"},
}


async def _proxy(path: str, request: Request, engine: ProxyEngine, settings: Settings):
    outcome = await engine.handle(path, request.query_params)
    return outcome_response(outcome, settings.cache_max_age)


@router.get(
    GDELT_PATH,
    response_class=ProxyJSONResponse,
    responses={200: {"model": Union[ArticleList, ClipList]}, **_ERRORS},
    summary="GDELT DOC articles (source=doc) or TV clips (source=tv)",
)
async def gdelt(
    request: Request,
    engine: ProxyEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    return await _proxy(GDELT_PATH, request, engine, settings)


@router.get(
    GOVINFO_PATH,
    response_class=ProxyJSONResponse,
    responses={200: {"model": DocumentPage}, **_ERRORS},
    summary="Congressional Record floor search with snippets",
)
async def govinfo(
    request: Request,
    engine: ProxyEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    return await _proxy(GOVINFO_PATH, request, engine, settings)


@router.get(
    CENSUS_PATH,
    response_class=ProxyJSONResponse,
    responses={200: {"model": CensusTable}, **_ERRORS},
    summary="ACS district tables (action=language or action=verify)",
)
async def census(
    request: Request,
    engine: ProxyEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    return await _proxy(CENSUS_PATH, request, engine, settings)


@router.get(
    CONGRESS_PATH,
    response_class=ProxyJSONResponse,
    responses={200: {"model": BillList}, **_ERRORS},
    summary="Congress.gov bill search",
)
async def congress(
    request: Request,
    engine: ProxyEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    return await _proxy(CONGRESS_PATH, request, engine, settings)


@router.get(
    YOUTUBE_PATH,
    response_class=ProxyJSONResponse,
    responses={200: {"model": Union[VideoSearch, VideoStatsMap]}, **_ERRORS},
    summary="YouTube search (action=search) or statistics (action=stats)",
)
async def youtube(
    request: Request,
    engine: ProxyEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    return await _proxy(YOUTUBE_PATH, request, engine, settings)
