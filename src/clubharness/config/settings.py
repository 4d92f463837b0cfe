"""Harness settings using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Club harness configuration from environment variables.

    Backend and payment credentials are optional here so that settings can
    be loaded by code that only needs part of them. The clients that need a
    credential check for it and raise ConfigurationError when it is absent.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",  # The application's own .env carries many more keys
    )

    # Logging
    debug: bool = Field(default=False, description="Pretty console logs")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Minimum log level"
    )

    # Backend - Supabase
    supabase_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PUBLIC_SUPABASE_URL", "SUPABASE_URL"),
        description="Supabase project URL",
    )
    service_role_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("SERVICE_ROLE_KEY", "SUPABASE_SERVICE_ROLE_KEY"),
        description="Supabase service-role key (bypasses row level security)",
    )

    # Payments - Stripe
    stripe_secret_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("STRIPE_SECRET_KEY"),
        description="Stripe test-mode secret key",
    )
    membership_fee_lookup_name: str = Field(
        default="standard_membership_fee",
        validation_alias=AliasChoices("MEMBERSHIP_FEE_LOOKUP_NAME"),
        description="Lookup key of the monthly membership price",
    )
    annual_fee_lookup: str = Field(
        default="annual_membership_fee_revised",
        validation_alias=AliasChoices("ANNUAL_FEE_LOOKUP"),
        description="Lookup key of the annual fee price",
    )
    migration_code: str = Field(
        default="DHCDASHBOARD",
        validation_alias=AliasChoices("PUBLIC_DASHBOARD_MIGRATION_CODE"),
        description="Promotion code literal used by the dashboard migration flow",
    )

    # Application under test
    app_base_url: str = Field(
        default="http://localhost:5173",
        validation_alias=AliasChoices("APP_BASE_URL"),
        description="Base URL of the web application",
    )
    cookie_domain: str = Field(
        default="127.0.0.1",
        validation_alias=AliasChoices("COOKIE_DOMAIN"),
        description="Domain the session cookie is scoped to",
    )
    test_password: SecretStr = Field(
        default=SecretStr("password"),
        validation_alias=AliasChoices("TEST_USER_PASSWORD"),
        description="Password given to every fixture account",
    )

    @field_validator("supabase_url", "app_base_url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Validate URL format."""
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
