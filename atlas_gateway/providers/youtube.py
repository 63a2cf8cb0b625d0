"""YouTube Data API v3 search and statistics."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from atlas_gateway.exceptions import InvalidRequestError
from atlas_gateway.models import Video, VideoStats
from atlas_gateway.proxy.adapter import ProviderAdapter, ProxyRequest
from atlas_gateway.proxy.classify import QuirkRule, embedded_error_code, json_with_key
from atlas_gateway.proxy.client import BoundedHttpClient
from atlas_gateway.proxy.query import (
    Credential,
    CredentialPlacement,
    UpstreamQuery,
    build_url,
    encode_component,
)
from atlas_gateway.proxy.results import NetworkFailure, Success, UpstreamFailure
from atlas_gateway.providers.normalize import first_present, records
from atlas_gateway.utils.logging import get_logger
from atlas_gateway.utils.validators import choose, clamp_int, require_param

logger = get_logger(__name__)

ORDERS = frozenset({"date", "rating", "relevance", "title", "videoCount", "viewCount"})
DEFAULT_ORDER = "relevance"
MAX_RESULTS = 50
DEFAULT_RESULTS = 15
MAX_IDS = 50
WATCH_URL = "https://www.youtube.com/watch?v={}"

YOUTUBE_QUIRKS = (
    QuirkRule(
        name="embedded error",
        predicate=json_with_key("error"),
        status=None,
        status_from=embedded_error_code,
    ),
)


def parse_ids(raw: str) -> list[str]:
    """Comma list → trimmed, de-duplicated ids in first-seen order."""
    ids: list[str] = []
    for part in raw.split(","):
        video_id = part.strip()
        if video_id and video_id not in ids:
            ids.append(video_id)
    return ids[:MAX_IDS]


def video_stats(item: dict[str, Any]) -> dict[str, str]:
    return VideoStats(
        view_count=first_present(item, ("statistics", "viewCount")),
        like_count=first_present(item, ("statistics", "likeCount")),
        comment_count=first_present(item, ("statistics", "commentCount")),
        duration=first_present(item, ("contentDetails", "duration")),
    ).to_wire()


def stats_by_id(body: Any) -> dict[str, dict[str, str]]:
    return {
        first_present(item, "id"): video_stats(item)
        for item in records(body, "items")
        if first_present(item, "id")
    }


class YouTubeAdapter(ProviderAdapter):
    label = "YouTube API"
    quirks = YOUTUBE_QUIRKS
    credential = Credential(CredentialPlacement.QUERY, query_param="key")

    @property
    def timeout(self) -> float:
        return self.settings.youtube_timeout

    @property
    def base_url(self) -> str:
        return self.settings.youtube_base_url.rstrip("/")

    def failure_message(self, failure: UpstreamFailure) -> str:
        message = first_present(failure.body, ("error", "message"))
        return message or f"YouTube API {failure.upstream_status}"

    def stats_query(self, ids: list[str], part: str, api_key: str) -> UpstreamQuery:
        url = build_url(
            f"{self.base_url}/videos",
            [
                ("part", part),
                ("id", ",".join(encode_component(i) for i in ids)),
                *self.credential.query_params(api_key),
            ],
            literal=("part", "id"),
        )
        return UpstreamQuery("GET", url, self.timeout, label="YouTube videos")


class YouTubeSearchAdapter(YouTubeAdapter):
    name = "search"

    def parse_request(self, params: Mapping[str, Any]) -> ProxyRequest:
        return ProxyRequest(
            selector=self.name,
            query=require_param(params, "q"),
            limit=clamp_int(params.get("maxResults"), 1, MAX_RESULTS, DEFAULT_RESULTS),
            api_key=self.require_configured_key(self.settings.youtube_api_key),
            options={"order": choose(params.get("order"), ORDERS, DEFAULT_ORDER)},
        )

    def build_queries(self, request: ProxyRequest) -> list[UpstreamQuery]:
        url = build_url(
            f"{self.base_url}/search",
            [
                ("part", "snippet"),
                ("type", "video"),
                ("maxResults", request.limit),
                ("order", request.options["order"]),
                ("q", request.query),
                *self.credential.query_params(request.api_key),
            ],
        )
        return [UpstreamQuery("GET", url, self.timeout, label="YouTube search")]

    def normalize(self, request: ProxyRequest, body: Any, query: UpstreamQuery) -> dict[str, Any]:
        videos = []
        for item in records(body, "items"):
            video_id = first_present(item, ("id", "videoId"), "id")
            videos.append(
                Video(
                    id=video_id,
                    title=first_present(item, ("snippet", "title")),
                    description=first_present(item, ("snippet", "description")),
                    channel_title=first_present(item, ("snippet", "channelTitle")),
                    channel_id=first_present(item, ("snippet", "channelId")),
                    published_at=first_present(item, ("snippet", "publishedAt")),
                    thumbnail=first_present(
                        item,
                        ("snippet", "thumbnails", "high", "url"),
                        ("snippet", "thumbnails", "medium", "url"),
                        ("snippet", "thumbnails", "default", "url"),
                    ),
                    url=WATCH_URL.format(video_id) if video_id else "",
                ).to_wire()
            )
        return {"videos": videos, "stats": {}}

    async def enrich(
        self, request: ProxyRequest, payload: dict[str, Any], client: BoundedHttpClient
    ) -> dict[str, Any]:
        """Merge view/like/comment counts and durations into each video.

        The statistics lookup is best effort: when it fails the videos are
        returned with empty counts.
        """
        videos = payload["videos"]
        ids = [v["id"] for v in videos if v["id"]]
        if not ids:
            return payload
        query = self.stats_query(ids, "statistics,contentDetails", request.api_key)
        result = await client.send(query)
        outcome = result if isinstance(result, NetworkFailure) else self.classify(result)
        if not isinstance(outcome, Success):
            logger.warning(
                f"YouTube statistics lookup failed ({outcome.status}); returning videos without stats",
                extra={"provider": self.label},
            )
            return payload

        stats = stats_by_id(outcome.body)
        merged = [{**v, **stats.get(v["id"], {})} for v in videos]
        return {"videos": merged, "stats": stats}


class YouTubeStatsAdapter(YouTubeAdapter):
    name = "stats"

    def parse_request(self, params: Mapping[str, Any]) -> ProxyRequest:
        ids = parse_ids(require_param(params, "ids"))
        if not ids:
            raise InvalidRequestError("Missing required parameter: ids")
        return ProxyRequest(
            selector=self.name,
            query=",".join(ids),
            api_key=self.require_configured_key(self.settings.youtube_api_key),
            options={"ids": ids},
        )

    def build_queries(self, request: ProxyRequest) -> list[UpstreamQuery]:
        return [self.stats_query(list(request.options["ids"]), "statistics", request.api_key)]

    def normalize(self, request: ProxyRequest, body: Any, query: UpstreamQuery) -> dict[str, Any]:
        return {"stats": stats_by_id(body)}
