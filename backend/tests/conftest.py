"""Shared fixtures: an in-process API client with the YouTube dependency faked."""

import pytest
from fastapi import Depends
from httpx import ASGITransport, AsyncClient

from tests.fakes import FakeYouTube, make_playlist
from tunebridge.api.deps import bearer_token, youtube_client
from tunebridge.main import app


@pytest.fixture
def fake_youtube():
    """Five-entry playlist where v3 has been deleted upstream."""
    return FakeYouTube(make_playlist(5), known_ids={"v0", "v1", "v2", "v4"})


@pytest.fixture
async def client(fake_youtube):
    """ASGI client; authenticated requests get ``fake_youtube`` as their YouTube client."""

    def _fake_client(token: str = Depends(bearer_token)) -> FakeYouTube:
        return fake_youtube

    app.dependency_overrides[youtube_client] = _fake_client
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
