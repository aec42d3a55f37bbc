from __future__ import annotations

from pydantic import Field

try:
    from pydantic_settings import BaseSettings, SettingsConfigDict
except Exception as e:  # pragma: no cover
    raise RuntimeError(
        "pydantic-settings is required. Install with: pip install pydantic-settings"
    ) from e


class MethodMateSettings(BaseSettings):
    """Process-wide configuration for methodmate.

    Environment variables are prefixed with METHODMATE_. Build once at startup
    and pass the instance into clients and pipelines; it is frozen.
    """

    model_config = SettingsConfigDict(env_prefix="METHODMATE_", extra="ignore", frozen=True)

    # --- Core ---
    log_level: str = Field(default="INFO", description="Python logging level")

    # --- Extraction ---
    max_chunk_length: int = Field(default=8000, gt=0)
    chunk_pacing_ms: int = Field(default=1000, ge=0, description="Delay between chunk calls")
    retry_count: int = Field(default=3, ge=0, description="Retries after the first attempt")
    retry_delay_ms: int = Field(default=2000, ge=0, description="Flat delay between retries")
    oracle_timeout_ms: int = Field(default=10000, gt=0)
    section_fallback_chars: int = Field(default=10000, gt=0)

    # --- Oracle (Coze bot) ---
    coze_api_url: str = Field(default="https://api.coze.com")
    coze_api_key: str | None = Field(default=None)
    coze_bot_id: str | None = Field(default=None)
    coze_user_id: str | None = Field(default=None)

    # --- Providers ---
    core_api_key: str | None = None
    semantic_scholar_api_key: str | None = None

    # --- Enrichment ---
    enrich_concurrency: int = Field(default=4, gt=0)


settings = MethodMateSettings()
