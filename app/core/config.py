"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Values that only matter once a collaborator is used
(Firestore credentials, Stripe key, email endpoint) are optional here;
the dependency that needs them answers 503 when they are missing.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env."""

    # App
    app_name: str = "adalert-settings"
    app_version: str = "1.0.0"
    debug: bool = False
    # DEBUG, INFO, WARNING...; defaults to DEBUG when debug is set, else INFO.
    log_level: str | None = None
    # Base URL of the web app; used in email links (invite accept, login).
    app_base_url: str = "http://localhost:3000"

    # Firebase / Firestore: use key (env) or path (file). For Vercel, use key.
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None  # Path to JSON file
    # Audience for Firebase ID tokens; defaults to the service account project.
    firebase_project_id: str | None = None

    # Email dispatch endpoint (internal HTTP POST) and template identifiers
    email_endpoint_url: str | None = None
    email_endpoint_token: SecretStr | None = None
    email_template_profile_update: str = ""
    email_template_invitation: str = ""

    # Stripe
    stripe_secret_key: SecretStr | None = None
    stripe_price_id: str = ""
    subscription_price_first_ads_account: Decimal = Decimal(59)
    subscription_price_additional_ads_account: Decimal = Decimal(19)
    invoices_page_size: int = 10

    # Invitations
    invitation_ttl_days: int = 7

    # Storage (avatars)
    storage_backend: str = "local"
    storage_root: str = "/var/adalert/storage"
    storage_base_url: str | None = None
    s3_bucket: str | None = None
    s3_region: str = "us-east-1"
    s3_endpoint_url: str | None = None
    s3_access_key: str | None = None
    s3_secret_key: SecretStr | None = None
    max_upload_size: int = 5 * 1024 * 1024  # 5MB avatars
    allowed_avatar_types: str = "image/png,image/jpeg,image/gif,image/webp"

    # Billing address country lookup (best-effort)
    country_lookup_url: str = "https://restcountries.com/v3.1/alpha"
    country_lookup_timeout_seconds: float = 5.0

    # Settings sessions: idle lifetime of a user's cached slices
    session_ttl_seconds: int = 1800

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Request / middleware
    request_id_header: str = "X-Request-ID"
    correlation_id_header: str = "X-Correlation-ID"

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_storage_and_pricing(self) -> "Settings":
        """Validate storage backend and subscription prices."""
        if self.storage_backend == "s3":
            if not self.s3_bucket:
                raise ValueError(
                    "s3_bucket is required when storage_backend is 's3'. "
                    "Set S3_BUCKET environment variable or update .env file."
                )
        elif self.storage_backend != "local":
            raise ValueError(
                f"Invalid storage_backend '{self.storage_backend}'. "
                "Must be one of: 'local', 's3'"
            )
        if (
            self.subscription_price_first_ads_account < 0
            or self.subscription_price_additional_ads_account < 0
        ):
            raise ValueError("Subscription prices must be non-negative")
        if self.invitation_ttl_days <= 0:
            raise ValueError("INVITATION_TTL_DAYS must be positive")
        return self

    @property
    def avatar_content_types(self) -> frozenset[str]:
        return frozenset(
            t.strip() for t in self.allowed_avatar_types.split(",") if t.strip()
        )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
