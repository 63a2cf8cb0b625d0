"""FastAPI dependencies."""

from collections.abc import AsyncGenerator

import httpx
from fastapi import Depends

from atlas_gateway.config import Settings, get_settings
from atlas_gateway.providers import build_endpoints
from atlas_gateway.proxy.client import BoundedHttpClient
from atlas_gateway.proxy.engine import ProxyEngine


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """One upstream client per inbound request; closed when the response is sent."""
    async with httpx.AsyncClient(follow_redirects=True) as client:
        yield client


def get_engine(
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> ProxyEngine:
    return ProxyEngine(
        BoundedHttpClient(client, user_agent=settings.user_agent),
        build_endpoints(settings),
    )
