"""Unit tests for configuration module."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from storefront.core.config import Settings, get_settings

REQUIRED_ENV = {
    "SUPABASE_URL": "https://test.supabase.co",
    "SUPABASE_SECRET_KEY": "test-secret",
}


class TestSettings:
    """Tests for Settings class."""

    def test_settings_loads_from_environment(self) -> None:
        """Test that Settings loads values from environment variables."""
        env_vars = {
            **REQUIRED_ENV,
            "APP_NAME": "test-app",
            "APP_ENV": "testing",
            "DEBUG": "true",
            "PORT": "9000",
            "QUICKPAY_API_KEY": "qp-key",
            "POSTNORD_USE_FIXTURE": "true",
            "SESSION_RETENTION_DAYS": "3",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            settings = Settings()

            assert settings.app_name == "test-app"
            assert settings.app_env == "testing"
            assert settings.debug is True
            assert settings.port == 9000
            assert settings.quickpay_api_key == "qp-key"
            assert settings.postnord_use_fixture is True
            assert settings.session_retention_days == 3

    def test_settings_cors_origins_list(self) -> None:
        """Test that CORS origins are correctly parsed into a list."""
        env_vars = {
            **REQUIRED_ENV,
            "CORS_ORIGINS": "http://localhost:3000, https://mixedenergy.dk , ",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            origins = Settings().cors_origins_list

            assert origins == ["http://localhost:3000", "https://mixedenergy.dk"]

    def test_payment_urls(self) -> None:
        """Test that redirect and callback URLs are derived from base URLs."""
        env_vars = {
            **REQUIRED_ENV,
            "FRONTEND_URL": "https://mixedenergy.dk/",
            "PUBLIC_API_URL": "https://api.mixedenergy.dk",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            settings = Settings()

            assert settings.payment_continue_url == "https://mixedenergy.dk/payment-success"
            assert settings.payment_cancel_url == "https://mixedenergy.dk/basket"
            assert settings.payment_callback_url == "https://api.mixedenergy.dk/api/quickpay/callback"

    def test_settings_default_values(self) -> None:
        """Test that default values are applied correctly."""
        with patch.dict(os.environ, REQUIRED_ENV, clear=True):
            settings = Settings(_env_file=None)

            assert settings.app_name == "mixedenergy-storefront"
            assert settings.app_env == "development"
            assert settings.debug is False
            assert settings.port == 8080
            assert settings.quickpay_currency == "dkk"
            assert settings.quickpay_auto_capture is True
            assert settings.session_retention_days == 1
            assert settings.session_cookie_secure is True
            assert settings.cron_auth_token == ""

    def test_settings_validation_error_missing_required(self) -> None:
        """Test that validation errors are raised for missing required fields."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)


class TestGetSettings:
    """Tests for get_settings function."""

    def test_get_settings_returns_cached_instance(self) -> None:
        """Test that get_settings returns the same cached instance."""
        get_settings.cache_clear()

        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2
