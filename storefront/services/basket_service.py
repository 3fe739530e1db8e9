"""Basket operations on a visitor session.

The basket lives in ``sessions.basket_details`` as JSON. Pending package
choices are kept in ``sessions.temporary_selections`` until the visitor
adds them to the basket.
"""

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any

from storefront.models.session import BasketItem
from storefront.services.pricing_service import (
    PricingService,
    generate_random_selection,
    get_delivery_fee,
)
from storefront.services.session_service import SessionService, empty_basket

logger = logging.getLogger(__name__)

REQUIRED_CUSTOMER_FIELDS = ("fullName", "mobileNumber", "email", "address", "postalCode", "city")
OPTIONAL_CUSTOMER_FIELDS = ("customerType", "streetNumber", "country")

MOBILE_NUMBER_PATTERN = re.compile(r"^\d{8}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
POSTAL_CODE_PATTERN = re.compile(r"^\d{4}$")

FORMAT_RULES: dict[str, tuple[re.Pattern[str], str]] = {
    "mobileNumber": (MOBILE_NUMBER_PATTERN, "Mobilnummer skal være 8 cifre"),
    "email": (EMAIL_PATTERN, "E-mail format er ugyldigt"),
    "postalCode": (POSTAL_CODE_PATTERN, "Postnummer skal være 4 cifre"),
}


def with_totals(item: BasketItem) -> BasketItem:
    """Recompute the line totals from the per-package values."""
    quantity = item["quantity"]
    item["totalPrice"] = item["pricePerPackage"] * quantity
    item["totalRecyclingFee"] = item.get("recyclingFeePerPackage", 0) * quantity
    return item


def validate_customer_details(details: dict[str, Any]) -> tuple[dict[str, str | None], dict[str, str]]:
    """Trim and validate customer details.

    Required fields that are blank or malformed are stored as None and
    reported in the error map with a Danish message.

    Returns:
        tuple: (cleaned details, field name to error message)
    """
    cleaned: dict[str, str | None] = {}
    errors: dict[str, str] = {}

    for field in REQUIRED_CUSTOMER_FIELDS:
        value = details.get(field)
        if not isinstance(value, str) or not value.strip():
            cleaned[field] = None
            errors[field] = f"{field} er påkrævet"
            continue

        value = value.strip()
        rule = FORMAT_RULES.get(field)
        if rule and not rule[0].match(value):
            cleaned[field] = None
            errors[field] = rule[1]
        else:
            cleaned[field] = value

    for field in OPTIONAL_CUSTOMER_FIELDS:
        value = details.get(field)
        if isinstance(value, str) and value.strip():
            cleaned[field] = value.strip()

    return cleaned, errors


class BasketService:
    """Service for basket and selection operations."""

    def __init__(
        self,
        session_service: SessionService | None = None,
        pricing_service: PricingService | None = None,
    ) -> None:
        self.sessions = session_service or SessionService()
        self.pricing = pricing_service or PricingService()

    @staticmethod
    def _basket(session: dict[str, Any]) -> dict[str, Any]:
        basket = session.get("basket_details") or {}
        return {**empty_basket(), **basket}

    async def _refresh_delivery_fee(self, basket: dict[str, Any]) -> None:
        """Recompute the delivery fee of a chosen delivery option after the items change."""
        delivery = basket.get("deliveryDetails") or {}
        delivery_type = delivery.get("deliveryType")
        if not delivery_type:
            return

        weight = await self.pricing.calculate_basket_weight(basket["items"])
        fee = get_delivery_fee(weight, delivery_type)
        if fee != delivery.get("deliveryFee"):
            logger.info("Delivery fee changed from %s to %d øre (%.2f kg)", delivery.get("deliveryFee"), fee, weight)
        basket["deliveryDetails"] = {**delivery, "deliveryFee": fee}

    async def _save_basket(self, session_id: str, basket: dict[str, Any]) -> dict[str, Any]:
        session = await self.sessions.update_session(session_id, {"basket_details": basket})
        return self._basket(session)

    async def get_basket(self, session_id: str | None) -> dict[str, Any]:
        """Get the basket of a session in the frontend's shape."""
        session = await self.sessions.require_session(session_id)
        basket = self._basket(session)
        return {
            "basketItems": basket["items"],
            "customerDetails": basket["customerDetails"],
            "deliveryDetails": basket["deliveryDetails"],
            "allowCookies": bool(session.get("allow_cookies")),
        }

    async def _store_selection(
        self,
        session: dict[str, Any],
        package_slug: str,
        selected_size: int,
        selected_products: dict[str, int],
        sugar_preference: str | None,
    ) -> dict[str, Any]:
        price = await self.pricing.calculate_package_price(package_slug, selected_size, selected_products)

        selection_id = str(uuid.uuid4())
        selection = {
            "packageSlug": package_slug,
            "selectedSize": selected_size,
            "selectedProducts": selected_products,
            "sugarPreference": sugar_preference,
            "pricePerPackage": price.price,
            "recyclingFeePerPackage": price.recycling_fee_per_package,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }

        selections = dict(session.get("temporary_selections") or {})
        selections[selection_id] = selection
        await self.sessions.update_session(session["session_id"], {"temporary_selections": selections})

        logger.info("Stored selection %s for package %s", selection_id, package_slug)
        return {"selectionId": selection_id, **selection}

    async def create_temporary_selection(
        self,
        session_id: str | None,
        package_slug: str,
        selected_size: int,
        selected_products: dict[str, int],
        sugar_preference: str | None = None,
    ) -> dict[str, Any]:
        """Price a hand-picked package and keep it as a pending selection.

        Raises:
            ValueError: If the quantities do not add up to the package size,
                or a drink is not part of the package.
        """
        session = await self.sessions.require_session(session_id)

        products = {slug: qty for slug, qty in selected_products.items() if qty}
        if any(qty < 0 for qty in products.values()):
            raise ValueError("Quantities must be positive")
        if sum(products.values()) != selected_size:
            raise ValueError("Total quantity of selected drinks does not match the package size")

        package, _ = await self.pricing.get_package_and_tier(package_slug, selected_size)
        eligible = set(package.get("collectionsDrinks") or [])
        not_eligible = sorted(slug for slug in products if slug not in eligible)
        if not_eligible:
            raise ValueError(f"Drinks not available in this package: {', '.join(not_eligible)}")

        return await self._store_selection(session, package_slug, selected_size, products, sugar_preference)

    async def generate_random_selection(
        self,
        session_id: str | None,
        slug: str,
        selected_size: int,
        sugar_preference: str = "alle",
    ) -> dict[str, Any]:
        """Draw a mystery-box selection and keep it as a pending selection.

        Raises:
            ValueError: If the package has no drinks matching the preference.
        """
        session = await self.sessions.require_session(session_id)

        package, _ = await self.pricing.get_package_and_tier(slug, selected_size)
        eligible = package.get("collectionsDrinks") or []
        if not eligible:
            raise ValueError("No collectionsDrinks found for this package")

        drinks = await self.pricing.catalog.get_drink_rows(eligible)
        products = generate_random_selection(drinks, selected_size, sugar_preference)

        return await self._store_selection(session, slug, selected_size, products, sugar_preference)

    async def add_item(self, session_id: str | None, selection_id: str, quantity: int = 1) -> dict[str, Any]:
        """Add a pending selection to the basket.

        The selection is re-priced first. An identical basket line (same
        package, size and drinks) has its quantity increased instead of
        adding a new line.

        Raises:
            ValueError: If the selection id is unknown or quantity < 1.
        """
        if quantity < 1:
            raise ValueError("Quantity must be greater than zero")

        session = await self.sessions.require_session(session_id)
        selection = (session.get("temporary_selections") or {}).get(selection_id)
        if not selection:
            raise ValueError("Invalid or expired selectionId")

        slug = selection["packageSlug"]
        size = selection["selectedSize"]
        drinks = selection["selectedProducts"]
        price = await self.pricing.calculate_package_price(slug, size, drinks)

        basket = self._basket(session)
        items: list[BasketItem] = list(basket["items"])

        for item in items:
            if item.get("slug") == slug and item.get("packages_size") == size and item.get("selectedDrinks") == drinks:
                item["quantity"] += quantity
                item["pricePerPackage"] = price.price
                item["recyclingFeePerPackage"] = price.recycling_fee_per_package
                with_totals(item)
                break
        else:
            items.append(
                with_totals(
                    {
                        "slug": slug,
                        "quantity": quantity,
                        "packages_size": size,
                        "selectedDrinks": drinks,
                        "sugarPreference": selection.get("sugarPreference"),
                        "pricePerPackage": price.price,
                        "recyclingFeePerPackage": price.recycling_fee_per_package,
                    }
                )
            )

        basket["items"] = items
        await self._refresh_delivery_fee(basket)
        return await self._save_basket(session["session_id"], basket)

    async def update_quantity(self, session_id: str | None, index: int, quantity: int) -> dict[str, Any]:
        """Change the quantity of a basket line.

        Raises:
            ValueError: If the index is out of range or quantity <= 0.
        """
        session = await self.sessions.require_session(session_id)
        basket = self._basket(session)
        items = list(basket["items"])

        if index < 0 or index >= len(items):
            raise ValueError("Invalid item index")
        if quantity <= 0:
            raise ValueError("Quantity must be greater than zero")

        items[index]["quantity"] = quantity
        with_totals(items[index])

        basket["items"] = items
        await self._refresh_delivery_fee(basket)
        return await self._save_basket(session["session_id"], basket)

    async def remove_item(self, session_id: str | None, index: int) -> dict[str, Any]:
        """Remove a basket line.

        Raises:
            ValueError: If the index is out of range.
        """
        session = await self.sessions.require_session(session_id)
        basket = self._basket(session)
        items = list(basket["items"])

        if index < 0 or index >= len(items):
            raise ValueError("Invalid item index")

        del items[index]
        basket["items"] = items
        await self._refresh_delivery_fee(basket)
        return await self._save_basket(session["session_id"], basket)

    async def update_customer_details(
        self,
        session_id: str | None,
        customer_details: dict[str, Any],
    ) -> tuple[dict[str, Any], dict[str, str]]:
        """Validate and store customer details.

        Returns:
            tuple: (stored customer details, per-field errors)
        """
        session = await self.sessions.require_session(session_id)
        cleaned, errors = validate_customer_details(customer_details)

        basket = self._basket(session)
        basket["customerDetails"] = {**(basket["customerDetails"] or {}), **cleaned}
        saved = await self._save_basket(session["session_id"], basket)

        if errors:
            logger.debug("Customer details for %s have errors: %s", session_id, sorted(errors))
        return saved["customerDetails"], errors

    async def update_delivery_details(
        self,
        session_id: str | None,
        delivery_option: str,
        delivery_address: dict[str, Any],
        provider_details: dict[str, Any],
    ) -> dict[str, Any]:
        """Store the delivery choice with a fee computed from basket weight."""
        session = await self.sessions.require_session(session_id)
        basket = self._basket(session)

        weight = await self.pricing.calculate_basket_weight(basket["items"])
        fee = get_delivery_fee(weight, delivery_option)

        basket["deliveryDetails"] = {
            "provider": "postnord",
            "deliveryType": delivery_option,
            "deliveryFee": fee,
            "currency": "DKK",
            "deliveryAddress": delivery_address,
            "providerDetails": provider_details,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        saved = await self._save_basket(session["session_id"], basket)

        logger.info("Delivery %s for session %s: %.2f kg, fee %d øre", delivery_option, session_id, weight, fee)
        return saved["deliveryDetails"]
