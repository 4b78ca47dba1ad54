"""Resolve free-text queries to YouTube videos, three searches at a time.

A failed search is captured on its own ``MatchRecord`` (``ok=False``) so one
bad query never blocks the rest of the batch. Results come back in input
order; ``index_matches`` then keys them by query text for merging into
recommendation records.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from tunebridge.config import settings
from tunebridge.errors import InvalidInputError, TunebridgeError
from tunebridge.models.contracts import MatchedVideo, MatchRecord
from tunebridge.utils.concurrency import map_with_concurrency
from tunebridge.utils.youtube import YouTubeClient

log = structlog.get_logger("pipeline.search_batch")


def normalize_queries(raw: Any, max_per_batch: int | None = None) -> list[str]:
    """Validate a caller's query list and cap it to the batch size.

    Non-string and blank entries are dropped and the rest are stripped.
    Duplicates are kept; each one is searched.
    """
    if not isinstance(raw, list) or not raw:
        raise InvalidInputError("queries(array) is required")

    cap = settings.search_default_batch if max_per_batch is None else max_per_batch
    cap = min(cap, settings.search_max_batch)

    queries = [q.strip() for q in raw if isinstance(q, str) and q.strip()]
    return queries[: max(cap, 0)]


async def search_one(client: YouTubeClient, query: str) -> MatchedVideo | None:
    """Top video hit for ``query``, or None when the search is empty."""
    response = await client.search_videos(query, max_results=1)
    if not response.items:
        return None
    hit = response.items[0]
    if hit.id.video_id is None:
        return None
    return MatchedVideo(
        video_id=hit.id.video_id,
        title=hit.snippet.title,
        channel_title=hit.snippet.channel_title,
    )


async def resolve_queries(
    client: YouTubeClient,
    queries: Sequence[str],
    *,
    concurrency: int | None = None,
) -> list[MatchRecord]:
    """Search every query; one ``MatchRecord`` per query, in input order."""
    limit = settings.search_concurrency if concurrency is None else concurrency

    async def _resolve(query: str, index: int) -> MatchRecord:
        try:
            match = await search_one(client, query)
        except Exception as exc:
            message = exc.message if isinstance(exc, TunebridgeError) else str(exc)
            log.warning(
                "search_query_failed",
                index=index,
                query=query[:80],
                error_type=type(exc).__name__,
                error=message[:200],
            )
            return MatchRecord(query=query, ok=False, error=message or "search failed")
        return MatchRecord(query=query, ok=True, result=match)

    records = await map_with_concurrency(queries, limit, _resolve)

    failed = sum(1 for r in records if not r.ok)
    log.info(
        "search_batch_complete",
        queries=len(records),
        failed=failed,
        matched=sum(1 for r in records if r.result is not None),
        concurrency=limit,
    )
    return records


def index_matches(records: Sequence[MatchRecord]) -> dict[str, MatchRecord]:
    """Key records by query text; a later duplicate overwrites an earlier one."""
    index: dict[str, MatchRecord] = {}
    for record in records:
        index[record.query] = record
    return index
