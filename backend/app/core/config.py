"""
Core configuration module for the Rostomyia listing search service.
Settings are loaded from environment variables (and an optional .env file).
"""

from pydantic_settings import BaseSettings
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Defaults are suitable for a local SQLite deployment.
    """

    # Application
    app_name: str = "Rostomyia Listing Search"
    app_version: str = "1.0.0"
    environment: str = "production"
    debug: bool = False

    # Database (listing source, read once at startup)
    database_url: str = "sqlite:///./listings.db"
    database_pool_size: int = 10
    database_max_overflow: int = 20
    database_pool_recycle: int = 1800  # Recycle connections after 30 min
    database_pool_pre_ping: bool = True

    # Fallback catalog when the database is empty or unreachable
    seed_file: Optional[str] = "data/sample_listings.json"

    # Search behaviour
    suggestion_limit: int = 8
    max_suggestion_limit: int = 20
    default_price_min: int = 0
    default_price_max: int = 1_000_000
    default_price_step: int = 50_000
    default_lang: str = "fr"

    # API Configuration
    api_prefix: str = "/api/v1"
    api_host: str = "0.0.0.0"
    api_port: int = 8890
    api_workers: int = 2

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"

    # Rate limiting (search runs on every keystroke, keep it generous)
    rate_limit_enabled: bool = True
    search_rate_limit: str = "300/minute"
    suggest_rate_limit: str = "600/minute"
    health_rate_limit: str = "1000/minute"

    # CORS - restrict to known frontend origins (extend via .env)
    cors_origins: list = ["http://localhost:3000", "http://127.0.0.1:3000"]
    cors_allow_credentials: bool = False
    cors_allow_methods: list = ["GET", "POST", "OPTIONS"]
    cors_allow_headers: list = ["Content-Type", "Accept", "Accept-Language"]

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
