"""Recommendation endpoints backed by Gemini."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from tunebridge.api.deps import youtube_client
from tunebridge.models.contracts import (
    DiscoverRequest,
    DiscoverResponse,
    RecommendationSet,
    RecommendRequest,
)
from tunebridge.pipeline.discovery import discover
from tunebridge.pipeline.recommend import clamp_count, generate_recommendations, prepare_titles
from tunebridge.utils.youtube import YouTubeClient

router = APIRouter(tags=["recommendations"])


@router.post("/recommend", response_model=RecommendationSet)
async def recommend(body: RecommendRequest) -> RecommendationSet:
    """Taste profile plus ``max`` (default 15, at most 30) recommendations."""
    titles = prepare_titles(body.titles)
    return await generate_recommendations(titles, clamp_count(body.count))


@router.post("/discover", response_model=DiscoverResponse)
async def discover_from_playlist(
    body: DiscoverRequest,
    client: YouTubeClient = Depends(youtube_client),
) -> DiscoverResponse:
    """Recommendations for a playlist, each with its matched YouTube video."""
    return await discover(
        client,
        body.playlist_id,
        limit=body.limit,
        page_token=body.page_token,
        count=body.count,
    )
