"""YouTube-backed endpoints: playlists, enriched playlist details, search batch."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from tunebridge.api.deps import youtube_client
from tunebridge.models.contracts import (
    PlaylistDetailsResponse,
    PlaylistListResponse,
    SearchBatchRequest,
    SearchBatchResponse,
)
from tunebridge.pipeline.playlist_details import get_playlist_details
from tunebridge.pipeline.search_batch import normalize_queries, resolve_queries
from tunebridge.utils.youtube import YouTubeClient

router = APIRouter(prefix="/youtube", tags=["youtube"])


@router.get("/playlists", response_model=PlaylistListResponse)
async def list_playlists(
    page_token: str | None = Query(default=None, alias="pageToken"),
    client: YouTubeClient = Depends(youtube_client),
) -> PlaylistListResponse:
    """One page of the caller's own playlists; pass ``nextPageToken`` back for more."""
    return await client.list_my_playlists(page_token=page_token)


@router.get("/playlist-details", response_model=PlaylistDetailsResponse)
async def playlist_details(
    playlist_id: str | None = Query(default=None, alias="playlistId"),
    limit: int | None = Query(default=None),
    page_token: str | None = Query(default=None, alias="pageToken"),
    client: YouTubeClient = Depends(youtube_client),
) -> PlaylistDetailsResponse:
    """Playlist entries in playlist order, each joined with its current video record.

    ``limit`` defaults to 200 and is capped at 1000. ``nextPageToken`` in the
    response resumes right after the last returned entry.
    """
    return await get_playlist_details(
        client, playlist_id or "", limit=limit, page_token=page_token
    )


@router.post("/search-batch", response_model=SearchBatchResponse)
async def search_batch(
    body: SearchBatchRequest,
    client: YouTubeClient = Depends(youtube_client),
) -> SearchBatchResponse:
    """Resolve each query to its top video hit; failures are reported per query."""
    queries = normalize_queries(body.queries, body.max_per_batch)
    return SearchBatchResponse(results=await resolve_queries(client, queries))
