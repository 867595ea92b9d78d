"""Application configuration settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///./data/speedreader.db"

    # App
    debug: bool = False
    log_level: str = "INFO"

    # Playback
    default_target_wpm: int = 300
    min_wpm: int = 100
    max_wpm: int = 1000
    ramp_enabled: bool = True
    ramp_duration_ms: int = 2000
    easing_curve: str = "easeOutQuad"
    natural_pacing_enabled: bool = True
    comma_pause_ms: int = 50
    period_pause_ms: int = 200
    tick_interval_ms: int = 16
    timing_tolerance_ms: int = 10

    # Persistence
    cache_staleness_days: int = 30
    token_chunk_size: int = 1000
    max_cached_tokens: int = 2_000_000
    progress_save_every_words: int = 10
    progress_save_interval_seconds: float = 5.0
    snippet_context_words: int = 3

    # Extraction
    min_word_count: int = 5
    max_plausible_first_page: int = 5


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""
    return Settings()
