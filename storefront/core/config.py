"""Application configuration management using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Required settings will raise validation errors if not provided.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="mixedenergy-storefront", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/staging/production)")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,https://mixedenergy.dk",
        description="Comma-separated list of allowed CORS origins",
    )

    # Supabase
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_secret_key: str = Field(..., description="Supabase secret key for backend operations")

    # QuickPay
    quickpay_api_key: str = Field(default="", description="QuickPay API user key")
    quickpay_private_key: str = Field(default="", description="QuickPay private key used to sign callbacks")
    quickpay_base_url: str = Field(default="https://api.quickpay.net", description="QuickPay API base URL")
    quickpay_currency: str = Field(default="dkk", description="Currency for created payments")
    quickpay_auto_capture: bool = Field(default=True, description="Capture payments automatically on authorization")

    # PostNord
    postnord_api_key: str = Field(default="", description="PostNord API key")
    postnord_base_url: str = Field(default="https://api2.postnord.com", description="PostNord API base URL")
    postnord_use_fixture: bool = Field(default=False, description="Serve service points from the bundled fixture (local development)")

    # DAWA (Danmarks Adressers Web API)
    dawa_base_url: str = Field(default="https://api.dataforsyningen.dk", description="DAWA API base URL")

    # Outbound HTTP
    http_timeout_seconds: float = Field(default=15.0, gt=0, description="Timeout for upstream HTTP calls")

    # Email (Resend)
    resend_api_key: str = Field(default="", description="Resend API key for sending emails")
    email_from_address: str = Field(
        default="Mixed Energy <info@mixedenergy.dk>",
        description="From address for transactional emails",
    )
    email_bcc_address: str = Field(default="", description="Optional BCC address for order confirmations")

    # URLs
    frontend_url: str = Field(default="http://localhost:3000", description="Storefront URL used for payment redirects")
    public_api_url: str = Field(default="http://localhost:8080", description="Public URL of this API, used for gateway callbacks")

    # Session
    session_cookie_name: str = Field(default="session_id", description="Session cookie name")
    session_cookie_max_age: int = Field(default=31536000, description="Session cookie max age in seconds (1 year)")
    session_cookie_secure: bool = Field(default=True, description="Use secure cookies (HTTPS only)")
    auth_cookie_name: str = Field(default="session", description="Cookie holding the Supabase access token")
    auth_cookie_max_age: int = Field(default=432000, description="Login cookie max age in seconds (5 days)")
    session_retention_days: int = Field(default=1, ge=0, description="Days before the cleanup job deletes a session")

    # Shared secrets
    cron_auth_token: str = Field(default="", description="Secret expected in the x-cron-auth header")
    admin_auth_token: str = Field(default="", description="Secret expected in the x-admin-auth header")

    # Requests
    max_request_body_size: int = Field(default=1_048_576, description="Maximum request body size in bytes")

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def payment_continue_url(self) -> str:
        """Page the customer returns to after paying."""
        return f"{self.frontend_url.rstrip('/')}/payment-success"

    @property
    def payment_cancel_url(self) -> str:
        """Page the customer returns to after cancelling payment."""
        return f"{self.frontend_url.rstrip('/')}/basket"

    @property
    def payment_callback_url(self) -> str:
        """Endpoint QuickPay posts payment updates to."""
        return f"{self.public_api_url.rstrip('/')}/api/quickpay/callback"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings: Application settings instance.

    Note:
        Settings are cached using lru_cache for performance.
        Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
