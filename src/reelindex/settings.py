from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """reelindex service settings.

    All settings can be overridden via environment variables or .env file,
    using uppercase names (e.g. CATALOG_PATH=/data/movies.json).
    """
    catalog_path: Optional[str] = None
    catalog_flush_delay: float = 2.0  # seconds of quiet before the catalog hits disk
    search_max_results: int = 20
    bot_search_max_results: int = 5  # chat surfaces show fewer results
    default_language: str = "English"
    language_detector: str = "default"  # or "keywords"
    normalize_strategy: str = "truncate"  # or "strip"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
