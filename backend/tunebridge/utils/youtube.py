"""YouTube Data API v3 client: one async method per endpoint.

The caller owns the ``httpx.AsyncClient`` and passes the user's OAuth access
token explicitly; nothing here reads credentials from ambient state. Each
method validates the JSON body into a contract model, which is the only place
provider payload shapes are interpreted.

Every request is a single attempt. Non-2xx responses, transport failures and
timeouts all raise ``UpstreamError``.
"""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from tunebridge.config import settings
from tunebridge.errors import UpstreamError
from tunebridge.models.contracts import (
    PlaylistItemListResponse,
    PlaylistListResponse,
    SearchListResponse,
    VideoListResponse,
)

log = structlog.get_logger("youtube")

MAX_PAGE_SIZE = 50  # playlistItems.list / playlists.list maxResults ceiling
MAX_IDS_PER_CALL = 50  # videos.list id ceiling

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def _error_message(body: Any, default: str) -> str:
    """Pull ``error.message`` out of a Google API error body."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return default


class YouTubeClient:
    """Thin async wrapper over the four YouTube endpoints the pipeline uses."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        access_token: str,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._http = http_client
        self._access_token = access_token
        self._base_url = (base_url or settings.youtube_api_base_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.http_timeout_seconds

    async def _get(
        self,
        path: str,
        params: dict[str, str],
        model: type[_ModelT],
        *,
        error_label: str = "YouTube API error",
    ) -> _ModelT:
        url = f"{self._base_url}/{path}"
        try:
            resp = await self._http.get(
                url,
                params=params,
                headers={
                    "Authorization": f"Bearer {self._access_token}",
                    "Accept": "application/json",
                },
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            log.warning("youtube_request_timeout", path=path)
            raise UpstreamError(504, f"Timeout calling YouTube {path}") from exc
        except httpx.RequestError as exc:
            log.warning("youtube_request_failed", path=path, error_type=type(exc).__name__)
            raise UpstreamError(
                502, f"Network error calling YouTube {path}: {type(exc).__name__}"
            ) from exc

        try:
            body: Any = resp.json()
        except ValueError:
            body = resp.text

        if resp.status_code >= 400:
            message = _error_message(body, error_label)
            log.warning("youtube_error_response", path=path, status=resp.status_code, message=message)
            raise UpstreamError(resp.status_code, message, details=body)

        try:
            return model.model_validate(body)
        except ValidationError as exc:
            log.error("youtube_unexpected_payload", path=path, error=str(exc)[:200])
            raise UpstreamError(
                502, f"Unexpected YouTube {path} response shape", details=body
            ) from exc

    async def list_playlist_items(
        self,
        playlist_id: str,
        *,
        page_size: int = MAX_PAGE_SIZE,
        page_token: str | None = None,
    ) -> PlaylistItemListResponse:
        """Fetch one page of a playlist's entries."""
        params = {
            "part": "snippet,contentDetails",
            "playlistId": playlist_id,
            "maxResults": str(min(page_size, MAX_PAGE_SIZE)),
        }
        if page_token:
            params["pageToken"] = page_token
        return await self._get("playlistItems", params, PlaylistItemListResponse)

    async def list_videos(self, video_ids: list[str]) -> VideoListResponse:
        """Fetch authoritative records for up to 50 video ids.

        Unknown, deleted and private ids are silently omitted by YouTube.
        """
        if len(video_ids) > MAX_IDS_PER_CALL:
            raise ValueError(f"videos.list accepts at most {MAX_IDS_PER_CALL} ids")
        params = {
            "part": "snippet,contentDetails,statistics,status",
            "id": ",".join(video_ids),
        }
        return await self._get("videos", params, VideoListResponse)

    async def search_videos(self, query: str, *, max_results: int = 1) -> SearchListResponse:
        params = {
            "part": "snippet",
            "type": "video",
            "maxResults": str(max_results),
            "q": query,
        }
        return await self._get(
            "search", params, SearchListResponse, error_label="YouTube search error"
        )

    async def list_my_playlists(self, *, page_token: str | None = None) -> PlaylistListResponse:
        """Fetch one page of the token owner's playlists."""
        params = {
            "part": "snippet,contentDetails",
            "mine": "true",
            "maxResults": str(MAX_PAGE_SIZE),
        }
        if page_token:
            params["pageToken"] = page_token
        return await self._get("playlists", params, PlaylistListResponse)
