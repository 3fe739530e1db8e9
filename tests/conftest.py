"""Pytest configuration and fixtures."""

import os
from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing application modules
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
os.environ.setdefault("QUICKPAY_API_KEY", "test-quickpay-api-key")
os.environ.setdefault("QUICKPAY_PRIVATE_KEY", "test-quickpay-private-key")
os.environ.setdefault("POSTNORD_API_KEY", "test-postnord-key")
os.environ.setdefault("RESEND_API_KEY", "re_test_key")
os.environ.setdefault("CRON_AUTH_TOKEN", "test-cron-secret")
os.environ.setdefault("ADMIN_AUTH_TOKEN", "test-admin-secret")
os.environ.setdefault("SESSION_COOKIE_SECURE", "false")


@pytest.fixture(scope="session")
def test_settings() -> Generator[Any, None, None]:
    """Provide test settings with cleared cache.

    Yields:
        Settings: Test configuration settings.
    """
    from storefront.core.config import get_settings

    # Clear the cache to ensure fresh settings
    get_settings.cache_clear()

    settings = get_settings()
    yield settings

    # Clean up cache after tests
    get_settings.cache_clear()


@pytest.fixture
def mock_supabase_client() -> Generator[MagicMock, None, None]:
    """Provide a mocked Supabase client.

    Yields:
        MagicMock: Mocked Supabase client for testing.
    """
    mock_client = MagicMock()

    # Configure default mock responses
    mock_response = MagicMock()
    mock_response.data = []
    mock_client.table.return_value.select.return_value.limit.return_value.execute.return_value = (
        mock_response
    )

    with patch("storefront.core.supabase.get_supabase_client", return_value=mock_client):
        yield mock_client


@pytest.fixture
def client(mock_supabase_client: MagicMock) -> Generator[TestClient, None, None]:
    """Provide a test client for the FastAPI application.

    Args:
        mock_supabase_client: Mocked Supabase client fixture.

    Yields:
        TestClient: FastAPI test client.
    """
    from storefront.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_drinks() -> dict[str, dict[str, Any]]:
    """Drink rows as stored in the database, including private fields."""
    return {
        "cola": {
            "slug": "cola",
            "name": "Cola",
            "size": "0.5 l",
            "sale_price": 1500,
            "purchase_price": 700,
            "recycling_fee": 300,
            "stock": 120,
            "is_sugar_free": False,
        },
        "cola-zero": {
            "slug": "cola-zero",
            "name": "Cola Zero",
            "size": "0.5 l",
            "sale_price": 1500,
            "purchase_price": 700,
            "recycling_fee": 300,
            "stock": 80,
            "is_sugar_free": True,
        },
        "energy-mini": {
            "slug": "energy-mini",
            "name": "Energy Mini",
            "size": "0,25 l",
            "sale_price": 1000,
            "purchase_price": 400,
            "recycling_fee": 100,
            "stock": 40,
            "is_sugar_free": True,
        },
    }


@pytest.fixture
def sample_package() -> dict[str, Any]:
    """A package row with two size tiers."""
    return {
        "slug": "mixed-box",
        "title": "Mixed Box",
        "collectionsDrinks": ["cola", "cola-zero", "energy-mini"],
        "packages": [
            {"size": 8, "discount": 0.9, "min_price": 5000},
            {"size": 12, "discount": 0.85, "min_price": 20000, "price_jump": 100},
        ],
        "_internal_note": "not public",
    }
