"""Pydantic models for the caller-facing response shapes.

Every normalized record field defaults to an empty string, so a record
built from an upstream item that carries none of the candidate fields still
has the complete field set.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class NormalizedRecord(BaseModel):
    """Base for normalized records: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_wire(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True)


class Article(NormalizedRecord):
    """GDELT DOC article."""

    title: str = ""
    url: str = ""
    date: str = Field(default="", description="GDELT seendate")
    source: str = Field(default="", description="Publishing domain")
    language: str = ""
    country: str = Field(default="", description="Source country")
    image: str = Field(default="", description="Social sharing image")


class Clip(NormalizedRecord):
    """GDELT TV clip."""

    station: str = ""
    show: str = ""
    date: str = ""
    snippet: str = ""
    url: str = ""


class Document(NormalizedRecord):
    """GovInfo Congressional Record search result."""

    title: str = ""
    date_issued: str = Field(default="", alias="dateIssued")
    chamber: str = Field(default="", description="House, Senate, Daily Digest or Extensions")
    details_link: str = Field(default="", alias="detailsLink", description="Summary URL without api_key")
    package_id: str = Field(default="", alias="packageId")
    granule_id: str = Field(default="", alias="granuleId")
    snippet: str = Field(default="", description="Text around the first query term, when enriched")


class Bill(NormalizedRecord):
    """Congress.gov bill."""

    congress: str = ""
    type: str = ""
    number: str = ""
    title: str = ""
    origin_chamber: str = Field(default="", alias="originChamber")
    latest_action_date: str = Field(default="", alias="latestActionDate")
    latest_action_text: str = Field(default="", alias="latestActionText")
    update_date: str = Field(default="", alias="updateDate")
    url: str = ""


class VideoStats(NormalizedRecord):
    """YouTube statistics for one video."""

    view_count: str = Field(default="", alias="viewCount")
    like_count: str = Field(default="", alias="likeCount")
    comment_count: str = Field(default="", alias="commentCount")
    duration: str = Field(default="", description="ISO-8601 duration")


class Video(NormalizedRecord):
    """YouTube search result merged with its statistics."""

    id: str = ""
    title: str = ""
    description: str = ""
    channel_title: str = Field(default="", alias="channelTitle")
    channel_id: str = Field(default="", alias="channelId")
    published_at: str = Field(default="", alias="publishedAt")
    thumbnail: str = ""
    url: str = ""
    view_count: str = Field(default="", alias="viewCount")
    like_count: str = Field(default="", alias="likeCount")
    comment_count: str = Field(default="", alias="commentCount")
    duration: str = ""


# Response envelopes (documentation only; handlers return plain dicts)


class ArticleList(BaseModel):
    articles: List[Article]


class ClipList(BaseModel):
    clips: List[Clip]


class DocumentPage(BaseModel):
    results: List[Document]
    offsetMark: Optional[str] = None


class CensusTable(BaseModel):
    data: List[List[Any]]
    vintage: str
    table: str


class BillList(BaseModel):
    bills: List[Bill]
    count: int


class VideoSearch(BaseModel):
    videos: List[Video]
    stats: Dict[str, VideoStats]


class VideoStatsMap(BaseModel):
    stats: Dict[str, VideoStats]


class ErrorResponse(BaseModel):
    """Uniform error body."""

    error: str
    upstream_status: Optional[int] = None
    upstream_text: Optional[str] = Field(default=None, description="Bounded excerpt of upstream text")
    message: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
