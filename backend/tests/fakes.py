"""In-memory YouTube stand-in shared by pipeline and endpoint tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from tunebridge.errors import UpstreamError
from tunebridge.models.contracts import (
    PlaylistItem,
    PlaylistItemListResponse,
    PlaylistListResponse,
    SearchListResponse,
    Video,
    VideoListResponse,
)


AUTH = {"Authorization": "Bearer test-token"}


def make_item(video_id: str | None, title: str = "", position: int = 0) -> PlaylistItem:
    return PlaylistItem.model_validate(
        {
            "snippet": {"title": title or f"title {video_id}", "position": position},
            "contentDetails": {"videoId": video_id} if video_id is not None else {},
        }
    )


def make_video(video_id: str, title: str | None = None) -> Video:
    return Video.model_validate(
        {
            "id": video_id,
            "snippet": {"title": title or f"live {video_id}", "channelTitle": "chan"},
            "statistics": {"viewCount": "10"},
        }
    )


def make_playlist(n: int) -> list[PlaylistItem]:
    return [make_item(f"v{i}", position=i) for i in range(n)]


class FakeYouTube:
    """Serves a fixed playlist with offset page tokens ("p<offset>").

    ``known_ids`` limits which ids videos.list returns (default: all).
    ``search`` maps a query to a SearchListResponse-shaped dict, or raises.
    """

    def __init__(
        self,
        playlist: list[PlaylistItem] | None = None,
        *,
        known_ids: set[str] | None = None,
        ignore_page_size: bool = False,
        search: Callable[[str], dict] | None = None,
        fail_page: int | None = None,
        fail_videos: bool = False,
    ) -> None:
        self.playlist = playlist or []
        self.known_ids = known_ids
        self.ignore_page_size = ignore_page_size
        self.search = search
        self.fail_page = fail_page
        self.fail_videos = fail_videos
        self.page_calls: list[tuple[int, str | None]] = []
        self.page_sizes_returned: list[int] = []
        self.video_calls: list[list[str]] = []
        self.search_calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def list_playlist_items(
        self, playlist_id: str, *, page_size: int = 50, page_token: str | None = None
    ) -> PlaylistItemListResponse:
        self.page_calls.append((page_size, page_token))
        if self.fail_page is not None and len(self.page_calls) == self.fail_page:
            raise UpstreamError(403, "quotaExceeded", details={"error": {"code": 403}})
        offset = int(page_token[1:]) if page_token else 0
        size = 50 if self.ignore_page_size else page_size
        items = self.playlist[offset : offset + size]
        self.page_sizes_returned.append(len(items))
        end = offset + len(items)
        next_token = f"p{end}" if end < len(self.playlist) else None
        return PlaylistItemListResponse(items=items, next_page_token=next_token)

    async def list_videos(self, video_ids: list[str]) -> VideoListResponse:
        self.video_calls.append(list(video_ids))
        await asyncio.sleep(0)
        if self.fail_videos:
            raise UpstreamError(500, "backendError")
        known = [
            make_video(vid)
            for vid in video_ids
            if self.known_ids is None or vid in self.known_ids
        ]
        return VideoListResponse(items=known)

    async def search_videos(self, query: str, *, max_results: int = 1) -> SearchListResponse:
        self.search_calls.append(query)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.01)
            if self.search is None:
                payload = {
                    "items": [
                        {
                            "id": {"videoId": f"id:{query}"},
                            "snippet": {"title": query, "channelTitle": "chan"},
                        }
                    ]
                }
            else:
                payload = self.search(query)
            return SearchListResponse.model_validate(payload)
        finally:
            self.in_flight -= 1

    async def list_my_playlists(self, *, page_token: str | None = None) -> PlaylistListResponse:
        return PlaylistListResponse.model_validate(
            {
                "items": [{"id": "PL1", "snippet": {"title": "Mix"}, "contentDetails": {"itemCount": 3}}],
                "nextPageToken": "next" if page_token is None else None,
            }
        )
