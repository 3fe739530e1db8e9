"""Catalog service for drinks and packages.

Everything returned to clients passes through ``to_public``, which strips
private columns and internal keys. Services that need private data
(pricing, weights) use the ``*_rows`` methods instead.
"""

import logging
from typing import Any

from supabase import Client

from storefront.api.middleware.error_handler import NotFoundError
from storefront.core.supabase import get_supabase_client
from storefront.models.catalog import Drink, Package

logger = logging.getLogger(__name__)

PRIVATE_FIELDS = frozenset({"purchase_price", "stock"})


def to_public(data: Any) -> Any:
    """Return a copy of ``data`` safe to expose publicly.

    Removes keys starting with ``_`` and the private catalog fields,
    at any nesting depth.
    """
    if isinstance(data, dict):
        return {
            key: to_public(value)
            for key, value in data.items()
            if not (isinstance(key, str) and key.startswith("_")) and key not in PRIVATE_FIELDS
        }
    if isinstance(data, list):
        return [to_public(item) for item in data]
    return data


class CatalogService:
    """Service for catalog reads."""

    def __init__(self, supabase_client: Client | None = None):
        """Initialize catalog service.

        Args:
            supabase_client: Optional Supabase client for testing.
        """
        self._supabase_client = supabase_client

    @property
    def supabase(self) -> Client:
        """Get Supabase client."""
        if self._supabase_client is None:
            self._supabase_client = get_supabase_client()
        return self._supabase_client

    # Private reads

    async def get_package_row(self, slug: str) -> Package | None:
        """Fetch a full package row by slug."""
        response = (
            self.supabase.table("packages")
            .select("*")
            .eq("slug", slug)
            .maybe_single()
            .execute()
        )
        return response.data if response and response.data else None

    async def get_drink_rows(self, slugs: list[str]) -> dict[str, Drink]:
        """Fetch full drink rows for the given slugs, keyed by slug.

        Unknown slugs are simply absent from the result.
        """
        if not slugs:
            return {}
        response = (
            self.supabase.table("drinks")
            .select("*")
            .in_("slug", list(slugs))
            .execute()
        )
        return {row["slug"]: row for row in response.data or []}

    # Public reads

    async def list_drinks(self) -> dict[str, Any]:
        """List all drinks keyed by slug."""
        response = self.supabase.table("drinks").select("*").order("name").execute()
        return {row["slug"]: to_public(row) for row in response.data or []}

    async def get_drink(self, slug: str) -> dict[str, Any]:
        """Get one drink.

        Raises:
            NotFoundError: If no drink has this slug.
        """
        response = (
            self.supabase.table("drinks")
            .select("*")
            .eq("slug", slug)
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            raise NotFoundError(f"Drink not found: {slug}")
        return to_public(response.data)

    async def get_drinks_by_slugs(self, slugs: list[str]) -> dict[str, Any]:
        """Get several drinks keyed by slug."""
        rows = await self.get_drink_rows(slugs)
        return {slug: to_public(row) for slug, row in rows.items()}

    async def list_packages(self) -> list[dict[str, Any]]:
        """List all packages."""
        response = self.supabase.table("packages").select("*").order("slug").execute()
        return [to_public(row) for row in response.data or []]

    async def get_package(self, slug: str) -> dict[str, Any]:
        """Get one package.

        Raises:
            NotFoundError: If no package has this slug.
        """
        row = await self.get_package_row(slug)
        if row is None:
            raise NotFoundError(f"Package not found: {slug}")
        return to_public(row)
