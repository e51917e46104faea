# core/config.py

"""
Application Configuration
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    app_name: str = "RewriteForge API"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # API Settings
    api_prefix: str = "/v1"
    host: str = "0.0.0.0"
    port: int = 3000

    # Provider Settings
    openai_api_key: Optional[str] = Field(
        None, validation_alias=AliasChoices("REWRITE_OPENAI_API_KEY", "OPENAI_API_KEY")
    )
    openai_model: str = "gpt-4"
    openai_max_tokens: int = 1024
    anthropic_api_key: Optional[str] = Field(
        None, validation_alias=AliasChoices("REWRITE_ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY")
    )
    anthropic_model: str = "claude-3-opus-20240229"
    anthropic_max_tokens: int = 1024

    # Cache Settings (cache_ttl_seconds=None keeps entries forever)
    cache_max_size: Optional[int] = 100
    cache_ttl_seconds: Optional[float] = 300

    # Request Settings
    max_text_length: int = 5000
    default_style: str = "formal"
    default_backend: str = "localmoc"

    # Job Queue Settings
    worker_poll_interval_ms: int = 100
    job_max_age_hours: float = 24

    # Streaming Settings
    stream_default_delay_ms: int = 50
    stream_mock_delay_ms: int = 100
    stream_max_delay_ms: int = 5000
    cached_replay_delay_ms: int = 10
    mock_warmup_ms: int = 500

    # Observability Settings
    max_request_logs: int = 1000

    class Config:
        env_prefix = "REWRITE_"
        env_file = ".env"
        case_sensitive = False
        populate_by_name = True
        extra = "ignore"


settings = Settings()
