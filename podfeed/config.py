from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Feed source
    rss_feed_url: str = ""
    fetch_timeout_seconds: float = 10.0
    user_agent: str = "podfeed/0.1"

    # Server-side cache of the mapped feed (0 disables)
    feed_cache_ttl_seconds: int = 300

    # Cache-Control lifetimes (seconds)
    episodes_max_age: int = 300
    podcast_info_max_age: int = 600

    # Pagination
    default_page_size: int = 10
    max_page_size: int = 100

    # HTTP server
    cors_origin: str = "*"
    host: str = "127.0.0.1"
    port: int = 5000
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @field_validator("rss_feed_url")
    @classmethod
    def _check_feed_url(cls, value: str) -> str:
        value = value.strip()
        if value and not value.startswith(("http://", "https://")):
            raise ValueError("rss_feed_url must be an absolute http:// or https:// URL")
        return value

    @property
    def feed_configured(self) -> bool:
        return bool(self.rss_feed_url)


def get_settings() -> Settings:
    return Settings()
