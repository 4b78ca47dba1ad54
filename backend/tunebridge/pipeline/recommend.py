"""Taste profile + bucketed recommendations from playlist titles (Gemini).

Titles are cleaned and deduplicated before they reach the prompt. The model
is asked for JSON matching ``RECOMMENDATION_SCHEMA`` and the reply is
validated into ``RecommendationSet``. Each recommendation's ``query`` later
drives the search batch; ``attach_matches`` merges those results back.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import structlog
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import ValidationError

from tunebridge.config import settings
from tunebridge.errors import (
    ConfigurationError,
    InvalidInputError,
    RecommendationParseError,
    UpstreamError,
)
from tunebridge.models.contracts import (
    MatchedRecommendation,
    MatchRecord,
    Recommendation,
    RecommendationSet,
)

log = structlog.get_logger("pipeline.recommend")

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"

TEMPERATURE = 0.7

_WHITESPACE_RE = re.compile(r"\s+")
_BRACKETED_RE = re.compile(r"\[.*?\]|\(.*?\)")

RECOMMENDATION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "profile": {
            "type": "object",
            "description": "Taste summary derived from the input titles",
            "properties": {
                "genres": {"type": "array", "items": {"type": "string"}},
                "moods": {"type": "array", "items": {"type": "string"}},
                "notes": {"type": "string"},
            },
            "required": ["genres", "moods", "notes"],
        },
        "recommendations": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "bucket": {"type": "string", "enum": ["CoreFit", "Discovery", "Bridge"]},
                    "artist": {"type": "string"},
                    "title": {"type": "string"},
                    "reason": {"type": "string"},
                    "moodTags": {"type": "array", "items": {"type": "string"}},
                    "query": {
                        "type": "string",
                        "description": "YouTube search string (artist + title)",
                    },
                    "confidence": {"type": "number", "minimum": 0, "maximum": 1},
                    "novelty": {"type": "number", "minimum": 0, "maximum": 1},
                },
                "required": ["artist", "title", "reason", "moodTags", "query"],
            },
        },
    },
    "required": ["profile", "recommendations"],
}


# === Input preparation ===


def clean_title(title: str) -> str:
    """Drop bracketed noise like "(Official Video)" or "[MV]" and squeeze spaces."""
    title = _BRACKETED_RE.sub(" ", _WHITESPACE_RE.sub(" ", title))
    return _WHITESPACE_RE.sub(" ", title).strip()


def prepare_titles(raw: Any, max_titles: int | None = None) -> list[str]:
    """Validate, clean and deduplicate titles, keeping first-seen order."""
    if not isinstance(raw, list) or not raw:
        raise InvalidInputError("titles(array) is required")
    cap = max_titles or settings.recommend_max_titles
    cleaned = (clean_title(t) for t in raw if isinstance(t, str))
    unique = dict.fromkeys(t for t in cleaned if t)
    return list(unique)[:cap]


def clamp_count(count: int | None) -> int:
    if count is None:
        return settings.recommend_default_count
    if count < 1:
        raise InvalidInputError(f"max must be at least 1, got {count}")
    return min(count, settings.recommend_max_count)


# === Prompt ===

_prompt_cache: str | None = None


def _load_prompt_template() -> str:
    global _prompt_cache  # noqa: PLW0603
    if _prompt_cache is None:
        _prompt_cache = (PROMPTS_DIR / "recommendation.txt").read_text()
    return _prompt_cache


def build_prompt(titles: Sequence[str], count: int) -> str:
    numbered = "\n".join(f"{i}. {t}" for i, t in enumerate(titles, start=1))
    return _load_prompt_template().format(count=count, titles=numbered)


# === Model call ===


def get_client() -> genai.Client:
    """Create a Gemini client using the configured API key."""
    if not settings.google_ai_api_key:
        raise ConfigurationError("GOOGLE_AI_API_KEY is not set")
    return genai.Client(api_key=settings.google_ai_api_key)


def parse_recommendations(text: str) -> RecommendationSet:
    try:
        return RecommendationSet.model_validate_json(text)
    except ValidationError as exc:
        log.warning("recommendation_parse_failed", error=str(exc)[:300], text_len=len(text))
        raise RecommendationParseError(
            "Model did not return valid JSON", details=text[:2000]
        ) from exc


async def generate_recommendations(
    titles: Sequence[str],
    count: int,
    *,
    client: genai.Client | None = None,
) -> RecommendationSet:
    """Ask Gemini for a taste profile and ``count`` recommendations."""
    if not titles:
        raise InvalidInputError("at least one non-empty title is required")
    if client is None:
        client = get_client()

    config = types.GenerateContentConfig(
        temperature=TEMPERATURE,
        response_mime_type="application/json",
        response_json_schema=RECOMMENDATION_SCHEMA,
    )
    log.info("recommend_start", titles=len(titles), count=count, model=settings.gemini_model)

    try:
        # The sync SDK call runs in a worker thread, bounded by a timeout
        async with asyncio.timeout(settings.gemini_timeout_seconds):
            response = await asyncio.to_thread(
                client.models.generate_content,
                model=settings.gemini_model,
                contents=build_prompt(titles, count),
                config=config,
            )
    except TimeoutError as exc:
        raise UpstreamError(
            504, f"Gemini timed out after {settings.gemini_timeout_seconds:.0f}s"
        ) from exc
    except genai_errors.APIError as exc:
        log.error("recommend_api_error", status=exc.code, message=exc.message)
        raise UpstreamError(
            exc.code or 502, exc.message or "Gemini API error", details=exc.details
        ) from exc

    usage = response.usage_metadata
    if usage is not None:
        log.info(
            "recommend_tokens",
            input_tokens=usage.prompt_token_count,
            output_tokens=usage.candidates_token_count,
            model=settings.gemini_model,
        )

    result = parse_recommendations(response.text or "")
    log.info(
        "recommend_complete",
        recommendations=len(result.recommendations),
        genres=len(result.profile.genres),
    )
    return result


# === Merge ===


def attach_matches(
    recommendations: Sequence[Recommendation],
    match_index: dict[str, MatchRecord],
) -> list[MatchedRecommendation]:
    """Attach the resolved video to each recommendation by exact query text."""
    merged = []
    for rec in recommendations:
        record = match_index.get(rec.query)
        match = record.result if record is not None and record.ok else None
        merged.append(MatchedRecommendation(**rec.model_dump(), match=match))
    return merged
