"""Tunebridge contract models.

Two groups live here:

* YouTube Data API payloads. Every provider response is validated into one of
  these at the client boundary; optional provider fields resolve to ``None``
  or empty defaults and unknown fields are dropped, so nothing downstream
  handles raw dicts.
* Service request/response bodies. JSON uses camelCase keys (``videoId``,
  ``nextPageToken``) to match what the YouTube API itself returns.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ProviderModel(CamelModel):
    """Immutable snapshot of something YouTube returned."""

    model_config = ConfigDict(frozen=True)


# === YouTube: shared ===


class Thumbnail(ProviderModel):
    url: str | None = None
    width: int | None = None
    height: int | None = None


# === YouTube: playlistItems.list ===


class PlaylistItemSnippet(ProviderModel):
    title: str | None = None
    description: str | None = None
    thumbnails: dict[str, Thumbnail] | None = None
    position: int | None = None
    video_owner_channel_title: str | None = None


class PlaylistItemContentDetails(ProviderModel):
    video_id: str | None = None
    video_published_at: str | None = None

    @field_validator("video_id")
    @classmethod
    def blank_id_is_none(cls, value: str | None) -> str | None:
        return (value or "").strip() or None


class PlaylistItem(ProviderModel):
    id: str | None = None
    snippet: PlaylistItemSnippet = Field(default_factory=PlaylistItemSnippet)
    content_details: PlaylistItemContentDetails = Field(
        default_factory=PlaylistItemContentDetails
    )

    @property
    def video_id(self) -> str | None:
        """Join key into videos.list; None for malformed entries."""
        return self.content_details.video_id


class PlaylistItemListResponse(ProviderModel):
    items: list[PlaylistItem] = []
    next_page_token: str | None = None

    @field_validator("next_page_token")
    @classmethod
    def blank_token_is_none(cls, value: str | None) -> str | None:
        return value or None


# === YouTube: videos.list ===


class VideoSnippet(ProviderModel):
    title: str | None = None
    description: str | None = None
    channel_id: str | None = None
    channel_title: str | None = None
    published_at: str | None = None
    thumbnails: dict[str, Thumbnail] | None = None
    tags: list[str] = []
    category_id: str | None = None


class VideoContentDetails(ProviderModel):
    duration: str | None = None  # ISO 8601, e.g. "PT4M13S"
    definition: str | None = None
    caption: str | None = None
    licensed_content: bool | None = None


class VideoStatistics(ProviderModel):
    # YouTube sends counts as decimal strings; pydantic coerces them
    view_count: int | None = None
    like_count: int | None = None
    comment_count: int | None = None
    favorite_count: int | None = None


class VideoStatus(ProviderModel):
    privacy_status: str | None = None
    upload_status: str | None = None
    embeddable: bool | None = None
    made_for_kids: bool | None = None


class Video(ProviderModel):
    id: str
    snippet: VideoSnippet | None = None
    content_details: VideoContentDetails | None = None
    statistics: VideoStatistics | None = None
    status: VideoStatus | None = None


class VideoListResponse(ProviderModel):
    items: list[Video] = []


# === YouTube: search.list ===


class SearchResultId(ProviderModel):
    kind: str | None = None
    video_id: str | None = None


class SearchResultSnippet(ProviderModel):
    title: str | None = None
    description: str | None = None
    channel_id: str | None = None
    channel_title: str | None = None


class SearchResult(ProviderModel):
    id: SearchResultId = Field(default_factory=SearchResultId)
    snippet: SearchResultSnippet = Field(default_factory=SearchResultSnippet)


class SearchListResponse(ProviderModel):
    items: list[SearchResult] = []


# === YouTube: playlists.list ===


class PlaylistSnippet(ProviderModel):
    title: str | None = None
    description: str | None = None
    channel_title: str | None = None
    published_at: str | None = None
    thumbnails: dict[str, Thumbnail] | None = None


class PlaylistContentDetails(ProviderModel):
    item_count: int | None = None


class Playlist(ProviderModel):
    id: str
    snippet: PlaylistSnippet = Field(default_factory=PlaylistSnippet)
    content_details: PlaylistContentDetails = Field(default_factory=PlaylistContentDetails)


class PlaylistListResponse(ProviderModel):
    items: list[Playlist] = []
    next_page_token: str | None = None

    @field_validator("next_page_token")
    @classmethod
    def blank_token_is_none(cls, value: str | None) -> str | None:
        return value or None


# === Playlist enrichment ===


class PlaylistSnapshot(CamelModel):
    """What the playlist entry said when it was added (possibly stale)."""

    title: str | None = None
    description: str | None = None
    thumbnails: dict[str, Thumbnail] | None = None
    position: int | None = None
    video_published_at: str | None = None


class EnrichedItem(CamelModel):
    video_id: str | None
    playlist_snapshot: PlaylistSnapshot
    video: Video | None = None  # None when deleted/private upstream
    missing: bool


class PlaylistDetailsResponse(CamelModel):
    playlist_id: str
    requested_limit: int
    returned_count: int
    missing_count: int
    next_page_token: str | None = None
    items: list[EnrichedItem] = []


# === Search batch ===


class MatchedVideo(CamelModel):
    video_id: str
    title: str | None = None
    channel_title: str | None = None


class MatchRecord(CamelModel):
    """Outcome of resolving one query. ``result`` is None on failure or no hit."""

    query: str
    ok: bool
    result: MatchedVideo | None = None
    error: str | None = None


class SearchBatchRequest(CamelModel):
    # Left untyped so a non-list body gets the same 400 as an empty list
    queries: Any = None
    max_per_batch: int | None = None


class SearchBatchResponse(CamelModel):
    results: list[MatchRecord] = []


# === Recommendations ===


Bucket = Literal["CoreFit", "Discovery", "Bridge"]


class TasteProfile(CamelModel):
    genres: list[str] = []
    moods: list[str] = []
    notes: str = ""


class Recommendation(CamelModel):
    artist: str
    title: str
    reason: str
    mood_tags: list[str] = []
    query: str
    confidence: float | None = Field(default=None, ge=0, le=1)
    novelty: float | None = Field(default=None, ge=0, le=1)
    bucket: Bucket | None = None

    @field_validator("query")
    @classmethod
    def strip_query(cls, value: str) -> str:
        # Matches are merged back by exact query text
        return value.strip()


class RecommendationSet(CamelModel):
    profile: TasteProfile
    recommendations: list[Recommendation] = []


class RecommendRequest(CamelModel):
    titles: Any = None
    count: int | None = Field(default=None, alias="max")


class MatchedRecommendation(Recommendation):
    match: MatchedVideo | None = None


class DiscoverRequest(CamelModel):
    playlist_id: str = Field(min_length=1)
    limit: int | None = None
    page_token: str | None = None
    count: int | None = Field(default=None, alias="max")


class DiscoverResponse(CamelModel):
    playlist_id: str
    returned_count: int
    missing_count: int
    titles_used: int
    profile: TasteProfile
    recommendations: list[MatchedRecommendation] = []


# === Errors ===


class ErrorResponse(BaseModel):
    error: str
    message: str
    retryable: bool
    detail: Any = None
