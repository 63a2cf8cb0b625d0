"""Upstream provider adapters and the route table that exposes them."""

from __future__ import annotations

from atlas_gateway.config import Settings
from atlas_gateway.proxy.adapter import Endpoint

from .census import CensusLanguageAdapter, CensusVerifyAdapter
from .congress import CongressBillAdapter
from .gdelt import GdeltDocAdapter, GdeltTvAdapter
from .govinfo import GovInfoSearchAdapter
from .youtube import YouTubeSearchAdapter, YouTubeStatsAdapter

GDELT_PATH = "/api/gdelt"
GOVINFO_PATH = "/api/govinfo"
CENSUS_PATH = "/api/census"
CONGRESS_PATH = "/api/congress"
YOUTUBE_PATH = "/api/youtube"


def build_endpoints(settings: Settings) -> list[Endpoint]:
    """Every public endpoint with its adapters, configured from ``settings``."""
    return [
        Endpoint(
            GDELT_PATH,
            [GdeltDocAdapter(settings), GdeltTvAdapter(settings)],
            selector="source",
            default="doc",
        ),
        Endpoint(GOVINFO_PATH, [GovInfoSearchAdapter(settings)]),
        Endpoint(
            CENSUS_PATH,
            [CensusLanguageAdapter(settings), CensusVerifyAdapter(settings)],
            selector="action",
        ),
        Endpoint(CONGRESS_PATH, [CongressBillAdapter(settings)]),
        Endpoint(
            YOUTUBE_PATH,
            [YouTubeSearchAdapter(settings), YouTubeStatsAdapter(settings)],
            selector="action",
        ),
    ]


__all__ = [
    "build_endpoints",
    "CensusLanguageAdapter",
    "CensusVerifyAdapter",
    "CongressBillAdapter",
    "GdeltDocAdapter",
    "GdeltTvAdapter",
    "GovInfoSearchAdapter",
    "YouTubeSearchAdapter",
    "YouTubeStatsAdapter",
]
