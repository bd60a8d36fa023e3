"""Configuration and environment settings for kakeibo-sync."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings for kakeibo-sync."""

    database_url: str = "sqlite:///kakeibo.db"
    # 64 hex characters (32 bytes) used for AES-256-GCM credential encryption
    master_key: str = ""
    groq_api_key: str = ""
    groq_model: str = "llama-3.3-70b-versatile"
    groq_temperature: float = 0.1
    groq_max_completion_tokens: int = 50
    groq_top_p: float = 0.95
    groq_stream: bool = False
    fallback_category_name: str = "uncategorized"
    worker_poll_interval_ms: int = 5000
    scrape_cron: str = "0 3 * * *"
    background_enabled: bool = True
    scraper_headless: bool = True
    scraper_timeout_ms: int = 30000
    log_dir: str = "logs"
    server_host: str = "127.0.0.1"
    server_port: int = 8000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def get_settings() -> "Settings":
    """Return an instance of the application settings."""
    return Settings()
