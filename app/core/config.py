from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # MongoDB cache (leave mongo_uri unset to run without a cache)
    mongo_uri: str | None = None
    mongo_db: str = "link_preview"
    mongo_max_pool_size: int = 10
    cache_connect_attempts: int = 3
    cache_connect_timeout_ms: int = 2000

    # HTTP fetcher
    http_timeout: float = 10.0
    http_api_timeout: float = 5.0  # oEmbed / JSON endpoints
    http_verify_ssl: bool = True  # set False behind corporate SSL-inspection proxies
    http_max_content_length: int = 2_000_000  # bytes read per page

    # API
    cors_origins: list[str] = ["*"]
    debug: bool = False

    # Logging
    log_level: str = "INFO"


settings = Settings()
