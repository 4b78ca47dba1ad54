from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {
        "env_file": ".env",
        "extra": "ignore",
        "env_prefix": "",
        "case_sensitive": False,
    }

    # YouTube Data API
    youtube_api_base_url: str = "https://www.googleapis.com/youtube/v3"
    youtube_page_size: int = 50  # provider max for playlistItems.list
    youtube_detail_chunk_size: int = 50  # provider max ids per videos.list
    http_timeout_seconds: float = 30.0

    # Playlist enrichment
    playlist_default_limit: int = 200
    playlist_max_limit: int = 1000

    # Search batch
    search_concurrency: int = 3
    search_default_batch: int = 10
    search_max_batch: int = 15

    # Recommendations (Gemini)
    google_ai_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_timeout_seconds: float = 120.0
    recommend_default_count: int = 15
    recommend_max_count: int = 30
    recommend_max_titles: int = 150

    # App
    environment: str = "development"
    log_level: str = "INFO"
    log_file: str = ""


settings = Settings()
