"""Tests verifying the project scaffold is correctly set up."""

import uuid
from unittest.mock import patch

import pytest

from tests.fakes import AUTH
from tunebridge.models.contracts import ErrorResponse


class TestHealthEndpoint:
    """Verify the health endpoint returns the expected shape."""

    @pytest.mark.asyncio
    async def test_health_returns_200(self, client):
        """Health endpoint returns 200 with status, version and environment."""
        resp = await client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["version"] == "0.1.0"
        assert "environment" in body
        assert body["gemini"] in ("configured", "not_configured")

    @pytest.mark.asyncio
    async def test_health_reports_gemini_configuration(self, client):
        with patch("tunebridge.api.routes.health.settings") as mock_settings:
            mock_settings.environment = "production"
            mock_settings.google_ai_api_key = "key"
            resp = await client.get("/health")
        body = resp.json()
        assert body["environment"] == "production"
        assert body["gemini"] == "configured"

    @pytest.mark.asyncio
    async def test_health_needs_no_token(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200


class TestRequestIdMiddleware:
    """Verify X-Request-ID is attached to every response."""

    @pytest.mark.asyncio
    async def test_response_includes_request_id_header(self, client):
        """Every response includes an X-Request-ID header."""
        resp = await client.get("/health")
        assert "X-Request-ID" in resp.headers
        uuid.UUID(resp.headers["X-Request-ID"])

    @pytest.mark.asyncio
    async def test_client_provided_request_id_echoed(self, client):
        """Client-provided X-Request-ID is echoed back."""
        resp = await client.get("/health", headers={"X-Request-ID": "trace-abc"})
        assert resp.headers["X-Request-ID"] == "trace-abc"

    @pytest.mark.asyncio
    async def test_request_id_on_401_response(self, client):
        resp = await client.get("/api/v1/youtube/playlists", headers={"X-Request-ID": "r-401"})
        assert resp.status_code == 401
        assert resp.headers["X-Request-ID"] == "r-401"

    @pytest.mark.asyncio
    async def test_request_id_on_422_response(self, client):
        resp = await client.post("/api/v1/discover", json={}, headers=AUTH)
        assert resp.status_code == 422
        assert "X-Request-ID" in resp.headers


class TestExceptionHandler:
    """Verify unhandled exceptions return consistent ErrorResponse JSON."""

    @pytest.mark.asyncio
    @patch(
        "tunebridge.api.routes.youtube.get_playlist_details",
        side_effect=RuntimeError("unexpected bug"),
    )
    async def test_unhandled_exception_returns_500_json(self, _mock, client):
        """Unhandled exception returns 500 with ErrorResponse shape, not HTML."""
        resp = await client.get(
            "/api/v1/youtube/playlist-details", params={"playlistId": "PL"}, headers=AUTH
        )
        assert resp.status_code == 500
        er = ErrorResponse.model_validate(resp.json())
        assert er.error == "internal_error"
        assert er.retryable is True
        assert "unexpected bug" not in er.message
        uuid.UUID(resp.headers["X-Request-ID"])


class TestValidationErrorHandler:
    """Verify validation errors return ErrorResponse JSON (not FastAPI's default)."""

    @pytest.mark.asyncio
    async def test_missing_field_returns_error_response_shape(self, client):
        resp = await client.post("/api/v1/discover", json={}, headers=AUTH)
        assert resp.status_code == 422
        er = ErrorResponse.model_validate(resp.json())
        assert er.error == "validation_error"
        assert er.retryable is False
        assert "playlistId" in er.message

    @pytest.mark.asyncio
    async def test_invalid_field_type_returns_error_response_shape(self, client):
        resp = await client.post(
            "/api/v1/youtube/search-batch",
            json={"queries": ["a"], "maxPerBatch": "many"},
            headers=AUTH,
        )
        assert resp.status_code == 422
        assert ErrorResponse.model_validate(resp.json()).error == "validation_error"


class TestOpenAPISchema:
    """Verify the OpenAPI schema lists every endpoint with the right method."""

    def test_all_endpoints_in_schema(self):
        from tunebridge.main import app

        paths = app.openapi()["paths"]
        expected_methods = {
            "/health": {"get"},
            "/api/v1/youtube/playlists": {"get"},
            "/api/v1/youtube/playlist-details": {"get"},
            "/api/v1/youtube/search-batch": {"post"},
            "/api/v1/recommend": {"post"},
            "/api/v1/discover": {"post"},
        }
        assert set(paths) == set(expected_methods)
        for path, methods in expected_methods.items():
            actual = set(paths[path].keys()) - {"parameters"}
            assert actual == methods, f"{path}: expected {methods}, got {actual}"

    def test_key_models_in_schema(self):
        from tunebridge.main import app

        schema_names = set(app.openapi()["components"]["schemas"].keys())
        required_models = {
            "PlaylistDetailsResponse",
            "EnrichedItem",
            "SearchBatchResponse",
            "MatchRecord",
            "RecommendationSet",
            "DiscoverResponse",
        }
        missing = {
            model
            for model in required_models
            if model not in schema_names
            and f"{model}-Input" not in schema_names
            and f"{model}-Output" not in schema_names
        }
        assert not missing, f"Missing models in OpenAPI schema: {missing}"


class TestEnvExample:
    """Verify .env.example documents all config.py settings."""

    def test_all_settings_in_env_example(self):
        """Every Settings field appears in .env.example."""
        from pathlib import Path

        from tunebridge.config import Settings

        env_example = Path(__file__).parent.parent.parent / ".env.example"
        env_text = env_example.read_text().upper()

        missing = [name for name in Settings.model_fields if name.upper() not in env_text]
        assert not missing, f"Settings fields missing from .env.example: {missing}"

    def test_env_file_sits_beside_env_example(self, tmp_path, monkeypatch):
        """Settings reads .env from the repo root, where .env.example lives."""
        from tunebridge.config import Settings

        assert Settings.model_config["env_file"] == ".env"

        (tmp_path / ".env").write_text("SEARCH_CONCURRENCY=7\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("SEARCH_CONCURRENCY", raising=False)
        assert Settings().search_concurrency == 7


class TestAppImports:
    """Verify core modules are importable."""

    def test_config_defaults(self):
        from tunebridge.config import Settings

        defaults = Settings.model_fields
        assert defaults["youtube_api_base_url"].default == "https://www.googleapis.com/youtube/v3"
        assert defaults["playlist_default_limit"].default == 200
        assert defaults["playlist_max_limit"].default == 1000
        assert defaults["search_concurrency"].default == 3
        assert defaults["search_default_batch"].default == 10
        assert defaults["search_max_batch"].default == 15
        assert defaults["recommend_default_count"].default == 15
        assert defaults["recommend_max_count"].default == 30

    def test_fastapi_app_importable(self):
        from tunebridge.main import app

        assert app.title == "Tunebridge API"
