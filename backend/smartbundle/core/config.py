"""
Centralized configuration management with Pydantic Settings.
All environment variables are validated and typed.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "SmartBundle API"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = Field(default="development", pattern="^(development|staging|production)$")

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    database_url: str
    database_pool_size: int = 10
    database_max_overflow: int = 5
    database_echo: bool = False
    database_auto_create: bool = False  # create_all at startup instead of Alembic

    # Security
    secret_key: str = Field(min_length=32)
    encryption_key: str = Field(min_length=32)
    internal_api_key: Optional[str] = None  # shared with the OAuth auth-proxy

    # CORS for the embedded admin - stored as comma-separated string
    allowed_origins_str: str = Field(
        default="https://admin.shopify.com",
        alias="ALLOWED_ORIGINS",
    )

    @property
    def allowed_origins(self) -> List[str]:
        """Parse allowed origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins_str.split(",") if origin.strip()]

    # Shopify
    shopify_api_key: Optional[str] = None
    shopify_api_secret: Optional[str] = None
    shopify_api_version: str = "2024-10"
    shopify_app_handle: str = "alintro-bundles"
    billing_mode: str = Field(default="test", pattern="^(test|live)$")
    catalog_page_size: int = 50
    catalog_max_products: int = 250

    # AI suggestions (OpenAI-compatible completion API, Groq by default)
    groq_api_key: Optional[str] = None
    ai_base_url: str = "https://api.groq.com/openai/v1"
    default_ai_model: str = "llama-3.1-8b-instant"
    ai_temperature: float = 0.7
    ai_max_tokens: int = 1500
    ai_timeout_seconds: float = 60.0

    # Email (SendGrid)
    sendgrid_api_key: Optional[str] = None
    support_email: str = "support@alintro.com"
    support_from_name: str = "Alintro Support"

    # Observability
    sentry_dsn: Optional[str] = None
    log_level: str = "INFO"

    @property
    def billing_test_mode(self) -> bool:
        return self.billing_mode != "live"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
