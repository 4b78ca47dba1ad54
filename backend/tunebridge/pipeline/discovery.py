"""End-to-end discovery: playlist -> recommendations -> matched videos.

Runs the enrichment pipeline, feeds the cleaned titles of entries that still
exist to the recommendation model, resolves each recommendation's query, and
merges the matches back by query text.
"""

from __future__ import annotations

import structlog
from google import genai

from tunebridge.config import settings
from tunebridge.errors import InvalidInputError
from tunebridge.models.contracts import DiscoverResponse, EnrichedItem
from tunebridge.pipeline.playlist_details import get_playlist_details
from tunebridge.pipeline.recommend import (
    attach_matches,
    clamp_count,
    generate_recommendations,
    prepare_titles,
)
from tunebridge.pipeline.search_batch import index_matches, resolve_queries
from tunebridge.utils.youtube import YouTubeClient

log = structlog.get_logger("pipeline.discovery")


def playlist_titles(items: list[EnrichedItem]) -> list[str]:
    """Current titles for entries that still exist, falling back to the snapshot."""
    titles = []
    for entry in items:
        if entry.missing:
            continue
        title = entry.video.snippet.title if entry.video and entry.video.snippet else None
        title = title or entry.playlist_snapshot.title
        if title:
            titles.append(title)
    return titles


async def discover(
    youtube: YouTubeClient,
    playlist_id: str,
    *,
    limit: int | None = None,
    page_token: str | None = None,
    count: int | None = None,
    genai_client: genai.Client | None = None,
) -> DiscoverResponse:
    count = clamp_count(count)
    details = await get_playlist_details(youtube, playlist_id, limit=limit, page_token=page_token)

    raw_titles = playlist_titles(details.items)
    if not raw_titles:
        raise InvalidInputError("playlist has no available videos to learn from")
    titles = prepare_titles(raw_titles)

    rec_set = await generate_recommendations(titles, count, client=genai_client)

    # Same quota cap as the public search-batch endpoint
    queries = [r.query for r in rec_set.recommendations if r.query][: settings.search_max_batch]
    records = await resolve_queries(youtube, queries)
    merged = attach_matches(rec_set.recommendations, index_matches(records))

    log.info(
        "discover_complete",
        playlist_id=playlist_id,
        titles=len(titles),
        recommendations=len(merged),
        matched=sum(1 for m in merged if m.match is not None),
    )
    return DiscoverResponse(
        playlist_id=playlist_id,
        returned_count=details.returned_count,
        missing_count=details.missing_count,
        titles_used=len(titles),
        profile=rec_set.profile,
        recommendations=merged,
    )
