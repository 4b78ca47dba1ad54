"""Request-scoped dependencies shared by the API routers."""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
from fastapi import Depends, Header

from tunebridge.errors import AuthenticationError
from tunebridge.utils.youtube import YouTubeClient


def bearer_token(authorization: str | None = Header(default=None)) -> str:
    """Extract the caller's Google OAuth access token from ``Authorization``."""
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    raise AuthenticationError("Not authenticated")


async def youtube_client(token: str = Depends(bearer_token)) -> AsyncIterator[YouTubeClient]:
    """YouTube client bound to the caller's token, closed after the request."""
    async with httpx.AsyncClient() as http_client:
        yield YouTubeClient(http_client, token)
