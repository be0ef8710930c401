# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Settings are validated once at startup. Components that make decisions
# from configuration (access control, LLM calls) receive explicit config
# objects built from these settings instead of reading them directly.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------

    APP_NAME: str = Field(
        default="HQ",
        description="Display name used in emails"
    )

    APP_DESCRIPTION: str = Field(
        default="where our agents live",
        description="Tagline used in emails"
    )

    APP_URL: str = Field(
        default="http://localhost:3000",
        description="Public base URL; magic links point here"
    )

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # Required - the app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    STORAGE_BUCKET: str = Field(
        default="uploads",
        description="Public storage bucket for uploaded and generated files"
    )

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    SECRET_KEY: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="Secret key for signing session tokens"
    )

    ALLOWED_EMAIL_DOMAINS: str = Field(
        default="",
        description="Domains whose users may sign in and become admins (comma-separated)"
    )

    MAGIC_LINK_MAX_AGE_HOURS: int = Field(
        default=24,
        ge=1,
        le=168,
        description="How long an emailed sign-in link stays valid"
    )

    SESSION_MAX_AGE_DAYS: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Lifetime of an issued session token"
    )

    # -------------------------------------------------------------------------
    # Email (Postmark)
    # -------------------------------------------------------------------------

    POSTMARK_API_KEY: str | None = Field(
        default=None,
        description="Postmark server token (emails are only logged without it in development)"
    )

    EMAIL_FROM: str = Field(
        default="noreply@example.com",
        description="Sender address for outbound email"
    )

    # -------------------------------------------------------------------------
    # LLM Configuration
    # -------------------------------------------------------------------------
    # Any OpenAI-compatible endpoint works; Groq by default

    GROQ_API_KEY: str | None = Field(
        default=None,
        description="API key for the chat-completions provider"
    )

    LLM_BASE_URL: str = Field(
        default="https://api.groq.com/openai/v1",
        description="Base URL of the OpenAI-compatible API"
    )

    LLM_MODEL: str = Field(
        default="moonshotai/kimi-k2-instruct",
        description="Default model for structured answers (must support JSON mode)"
    )

    LLM_TEMPERATURE: float = Field(
        default=0.6,
        ge=0.0,
        le=2.0,
        description="Default generation temperature"
    )

    LLM_MAX_TOKENS: int = Field(
        default=4096,
        ge=1,
        description="Default completion token budget"
    )

    LLM_MAX_RETRIES: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Total attempts for a structured answer"
    )

    # -------------------------------------------------------------------------
    # Embeddings (Cloudflare Workers AI)
    # -------------------------------------------------------------------------

    CLOUDFLARE_API_KEY: str | None = Field(default=None)
    CLOUDFLARE_ACCOUNT_ID: str | None = Field(default=None)

    # -------------------------------------------------------------------------
    # Content Generation (Replicate)
    # -------------------------------------------------------------------------

    REPLICATE_API_KEY: str | None = Field(default=None)

    # -------------------------------------------------------------------------
    # File Upload Settings
    # -------------------------------------------------------------------------

    MAX_UPLOAD_SIZE_MB: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Maximum file upload size in MB"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def allowed_email_domains_list(self) -> list[str]:
        """
        Parse ALLOWED_EMAIL_DOMAINS into a list.

        Example: "acme.com, acme.io" -> ["acme.com", "acme.io"]
        """
        return [d.strip() for d in self.ALLOWED_EMAIL_DOMAINS.split(",") if d.strip()]

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS string into a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def has_llm(self) -> bool:
        return bool(self.GROQ_API_KEY)

    @property
    def has_cloudflare(self) -> bool:
        return bool(self.CLOUDFLARE_API_KEY and self.CLOUDFLARE_ACCOUNT_ID)

    @property
    def has_replicate(self) -> bool:
        return bool(self.REPLICATE_API_KEY)

    @property
    def has_postmark(self) -> bool:
        return bool(self.POSTMARK_API_KEY)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
