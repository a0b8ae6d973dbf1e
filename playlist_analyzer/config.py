from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache

from .constants import OPENAI_MODEL_FAST


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = "development"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./playlist_analyzer.db"

    # OpenAI
    openai_api_key: Optional[str] = None
    openai_model: str = OPENAI_MODEL_FAST
    openai_timeout: float = 60.0

    # YouTube Data API
    youtube_api_base_url: str = "https://www.googleapis.com/youtube/v3"
    youtube_api_key: Optional[str] = None
    youtube_timeout: float = 15.0

    # Rate limiting (per caller, per endpoint family)
    rate_limit_max_requests: int = Field(
        default=10,
        ge=1,
        description="Maximum analysis requests per window and caller"
    )
    rate_limit_window_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Length of the sliding rate-limit window in seconds"
    )

    # Background jobs
    job_pacing_delay_seconds: float = Field(
        default=0.05,
        ge=0,
        description="Pause between two videos of a playlist job"
    )
    prompt_version: int = Field(
        default=1,
        ge=1,
        description="Version of the analysis prompt templates, part of every cache key"
    )

    # CORS
    allowed_origins: str = "*"

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
