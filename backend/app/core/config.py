"""
Core configuration module for the Bhraman travel booking API.
Settings are loaded from environment variables (and an optional .env file).
"""

from pydantic_settings import BaseSettings
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Defaults are suitable for local development against SQLite.
    """

    # Application
    app_name: str = "Bhraman Travel Booking API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False

    # Database
    database_url: str = "sqlite:///./bhraman.db"
    database_pool_size: int = 10
    database_max_overflow: int = 20
    database_pool_recycle: int = 1800  # Recycle connections after 30 min
    database_pool_pre_ping: bool = True  # Verify connections before use

    # API Configuration
    api_prefix: str = "/api"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_workers: int = 2

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"

    # CORS
    cors_origins: list = ["http://localhost:3000", "http://127.0.0.1:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list = ["GET", "POST", "PATCH", "DELETE", "OPTIONS"]
    cors_allow_headers: list = ["Content-Type", "Accept", "Authorization"]

    # Rate limiting
    rate_limit_enabled: bool = True

    # Identity provider tokens (issued and signed by the auth service)
    auth_jwt_secret: str = "CHANGE-ME-IN-DOTENV"
    auth_jwt_algorithm: str = "HS256"
    auth_jwt_audience: Optional[str] = None

    # Payment gateway webhook/checkout signature secret
    payment_key_secret: str = "CHANGE-ME-IN-DOTENV"

    # Listings
    default_page_size: int = 10
    max_page_size: int = 100

    # Admin dashboard
    dashboard_recent_limit: int = 5

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
