"""Playlist enrichment pipeline: paginate -> batch detail lookup -> ordered join.

1. ``fetch_playlist_items`` walks playlistItems.list page by page until the
   requested number of entries is collected or the playlist ends.
2. ``fetch_video_details`` looks up the current video record for every
   collected id, 50 ids per videos.list call, all chunks in parallel.
3. ``join_with_details`` merges the two in playlist order, flagging entries
   YouTube no longer returns (deleted, private, or missing an id).

Any upstream failure in steps 1-2 aborts the whole enrichment; no partial
playlist is returned.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import TypeVar

import structlog

from tunebridge.config import settings
from tunebridge.errors import InvalidInputError
from tunebridge.models.contracts import (
    EnrichedItem,
    PlaylistDetailsResponse,
    PlaylistItem,
    PlaylistSnapshot,
    Video,
)
from tunebridge.utils.youtube import MAX_IDS_PER_CALL, MAX_PAGE_SIZE, YouTubeClient

log = structlog.get_logger("pipeline.playlist_details")

T = TypeVar("T")


@dataclass(frozen=True)
class PlaylistItemsResult:
    items: list[PlaylistItem]
    # Non-None only when the playlist continues past the returned items
    next_page_token: str | None


def chunked(values: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive slices of at most ``size`` elements."""
    if size < 1:
        raise ValueError(f"chunk size must be at least 1, got {size}")
    for start in range(0, len(values), size):
        yield list(values[start : start + size])


def clamp_limit(limit: int | None) -> int:
    """Apply the default and ceiling to a caller-supplied item limit."""
    if limit is None:
        return settings.playlist_default_limit
    return min(limit, settings.playlist_max_limit)


# === Step 1: Pagination ===


async def fetch_playlist_items(
    client: YouTubeClient,
    playlist_id: str,
    limit: int,
    *,
    page_token: str | None = None,
    page_size: int | None = None,
) -> PlaylistItemsResult:
    """Collect up to ``limit`` playlist entries starting at ``page_token``.

    Pages are strictly sequential since each token comes from the previous
    page. Every request asks only for what is still needed, so the returned
    token resumes exactly after the last returned entry.
    """
    if limit <= 0:
        return PlaylistItemsResult(items=[], next_page_token=None)

    if page_size is None:
        page_size = settings.youtube_page_size
    if page_size < 1:
        raise ValueError(f"page size must be at least 1, got {page_size}")
    page_size = min(page_size, MAX_PAGE_SIZE)
    items: list[PlaylistItem] = []
    token = page_token or None
    pages = 0

    while True:
        requested_token = token
        page = await client.list_playlist_items(
            playlist_id,
            page_size=min(page_size, limit - len(items)),
            page_token=requested_token,
        )
        pages += 1
        items.extend(page.items)
        token = page.next_page_token
        log.debug(
            "playlist_page_fetched",
            playlist_id=playlist_id,
            page=pages,
            page_items=len(page.items),
            total=len(items),
            has_more=token is not None,
        )
        if token is None or len(items) >= limit:
            break
        if token == requested_token:
            # Provider handed back the token it was given; no progress possible
            log.warning("playlist_token_stalled", playlist_id=playlist_id, page=pages)
            break

    # The provider may ignore maxResults; never hand back more than asked
    return PlaylistItemsResult(items=items[:limit], next_page_token=token)


# === Step 2: Batched detail lookup ===


async def fetch_video_details(
    client: YouTubeClient,
    video_ids: Sequence[str],
    *,
    chunk_size: int | None = None,
) -> dict[str, Video]:
    """Map each video id YouTube still knows about to its current record.

    Ids YouTube omits (deleted, private, unknown) are absent from the map.
    Duplicate ids are sent as given; the map keeps one record per id.
    """
    if chunk_size is None:
        chunk_size = settings.youtube_detail_chunk_size
    size = min(chunk_size, MAX_IDS_PER_CALL)
    chunks = list(chunked(video_ids, size))
    if not chunks:
        return {}

    responses = await asyncio.gather(*(client.list_videos(ids) for ids in chunks))

    video_map = {video.id: video for response in responses for video in response.items}
    log.info(
        "video_details_fetched",
        requested=len(video_ids),
        chunks=len(chunks),
        found=len(video_map),
    )
    return video_map


# === Step 3: Ordered join ===


def _snapshot(item: PlaylistItem) -> PlaylistSnapshot:
    return PlaylistSnapshot(
        title=item.snippet.title,
        description=item.snippet.description,
        thumbnails=item.snippet.thumbnails,
        position=item.snippet.position,
        video_published_at=item.content_details.video_published_at,
    )


def join_with_details(
    items: Sequence[PlaylistItem],
    video_map: dict[str, Video],
) -> list[EnrichedItem]:
    """Pair each playlist entry with its video record, in playlist order."""
    enriched = []
    for item in items:
        video_id = item.video_id
        video = video_map.get(video_id) if video_id is not None else None
        enriched.append(
            EnrichedItem(
                video_id=video_id,
                playlist_snapshot=_snapshot(item),
                video=video,
                missing=video is None,
            )
        )
    return enriched


# === Orchestration ===


async def get_playlist_details(
    client: YouTubeClient,
    playlist_id: str,
    *,
    limit: int | None = None,
    page_token: str | None = None,
) -> PlaylistDetailsResponse:
    """Run all three steps for one playlist."""
    if not playlist_id or not playlist_id.strip():
        raise InvalidInputError("playlistId is required")

    requested = clamp_limit(limit)
    log.info("playlist_details_start", playlist_id=playlist_id, limit=requested)

    page = await fetch_playlist_items(client, playlist_id, requested, page_token=page_token)
    video_ids = [item.video_id for item in page.items if item.video_id is not None]
    video_map = await fetch_video_details(client, video_ids)
    enriched = join_with_details(page.items, video_map)

    missing = sum(1 for entry in enriched if entry.missing)
    log.info(
        "playlist_details_complete",
        playlist_id=playlist_id,
        returned=len(enriched),
        missing=missing,
        has_more=page.next_page_token is not None,
    )
    return PlaylistDetailsResponse(
        playlist_id=playlist_id,
        requested_limit=requested,
        returned_count=len(enriched),
        missing_count=missing,
        next_page_token=page.next_page_token,
        items=enriched,
    )
