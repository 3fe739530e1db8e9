"""Package pricing, delivery fees and mystery-box selection.

All amounts are integers in øre (100 øre = 1 DKK).
"""

import logging
import math
import random
import re
from dataclasses import dataclass
from typing import Any

from storefront.api.middleware.error_handler import NotFoundError
from storefront.models.catalog import Drink, Package, PackageTier
from storefront.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

# (max weight in kg, fee in øre); heavier baskets pay the last fee
PICKUP_POINT_FEES: list[tuple[float, int]] = [
    (1, 3200),
    (2, 3900),
    (5, 5500),
    (10, 7500),
    (15, 8500),
    (20, 8900),
    (25, 11000),
    (30, 12500),
    (35, 13500),
]

HOME_DELIVERY_FEES: list[tuple[float, int]] = [
    (1, 4300),
    (2, 5000),
    (5, 6500),
    (10, 8300),
    (15, 10000),
    (20, 11000),
    (25, 12000),
    (30, 12500),
    (35, 13500),
]

SUGAR_PREFERENCES = ("alle", "med_sukker", "uden_sukker")

_VOLUME_PATTERN = re.compile(r"([\d.,]+)\s*l", re.IGNORECASE)


@dataclass
class PackagePrice:
    """Calculated price of one package."""

    price: int
    recycling_fee_per_package: int
    original_price: int

    def to_response(self) -> dict[str, int]:
        return {
            "price": self.price,
            "recyclingFeePerPackage": self.recycling_fee_per_package,
            "originalPrice": self.original_price,
        }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def find_tier(package: Package, selected_size: int) -> PackageTier | None:
    """Find the size tier of a package matching ``selected_size``."""
    for tier in package.get("packages") or []:
        try:
            if int(tier.get("size")) == int(selected_size):
                return tier
        except (TypeError, ValueError):
            continue
    return None


def calculate_price(
    tier: PackageTier,
    selected_size: int,
    selected_products: dict[str, int],
    drinks: dict[str, Drink],
) -> PackagePrice:
    """Price one package from its tier and the chosen drinks.

    Subtotal of sale prices, plus ``price_jump`` per drink, times
    ``discount``, floored at ``min_price`` and rounded to whole øre.

    Raises:
        NotFoundError: If a selected drink is missing from ``drinks``.
    """
    subtotal = 0
    recycling_fee = 0
    for slug, quantity in selected_products.items():
        drink = drinks.get(slug)
        if drink is None:
            raise NotFoundError(f"Drink not found: {slug}")
        subtotal += (drink.get("sale_price") or 0) * quantity
        recycling_fee += (drink.get("recycling_fee") or 0) * quantity

    total: float = subtotal
    if tier.get("price_jump") is not None:
        total += tier["price_jump"] * selected_size
    if tier.get("discount") is not None:
        total *= tier["discount"]

    min_price = tier.get("min_price") or 0
    return PackagePrice(
        price=_round_half_up(max(total, min_price)),
        recycling_fee_per_package=recycling_fee,
        original_price=subtotal,
    )


def approximate_weight_from_size(size: str | None) -> float:
    """Approximate the shipping weight in kg of one drink from its size label.

    1 l of drink weighs about 1 kg; packaging is added on top
    (20 g for 0.5 l cans, 15 g for 0.25 l cans, 4 % otherwise).
    Unparseable sizes weigh nothing.
    """
    if not size:
        return 0.0
    match = _VOLUME_PATTERN.search(size)
    if not match:
        return 0.0
    try:
        liters = float(match.group(1).replace(",", "."))
    except ValueError:
        return 0.0

    if liters == 0.5:
        return liters + 0.02
    if liters == 0.25:
        return liters + 0.015
    return liters + 0.04 * liters


def get_delivery_fee(weight: float, delivery_option: str) -> int:
    """Look up the delivery fee for a basket weight."""
    table = PICKUP_POINT_FEES if delivery_option == "pickupPoint" else HOME_DELIVERY_FEES
    for max_weight, fee in table:
        if weight <= max_weight:
            return fee
    return table[-1][1]


def filter_by_sugar_preference(drinks: dict[str, Drink], sugar_preference: str) -> list[str]:
    """Return the slugs of drinks matching a sugar preference."""
    if sugar_preference == "uden_sukker":
        return [slug for slug, drink in drinks.items() if drink.get("is_sugar_free")]
    if sugar_preference == "med_sukker":
        return [slug for slug, drink in drinks.items() if not drink.get("is_sugar_free")]
    return list(drinks)


def generate_random_selection(
    drinks: dict[str, Drink],
    selected_size: int,
    sugar_preference: str = "alle",
    rng: random.Random | None = None,
) -> dict[str, int]:
    """Draw ``selected_size`` drinks at random, with repetition.

    Raises:
        ValueError: If no drink matches the sugar preference.
    """
    if sugar_preference not in SUGAR_PREFERENCES:
        raise ValueError(f"Unknown sugar preference: {sugar_preference}")

    available = sorted(filter_by_sugar_preference(drinks, sugar_preference))
    if not available:
        raise ValueError("Ingen drikkevarer matcher dit sukkervalg")

    rng = rng or random.SystemRandom()
    selection: dict[str, int] = {}
    for _ in range(selected_size):
        slug = rng.choice(available)
        selection[slug] = selection.get(slug, 0) + 1
    return selection


class PricingService:
    """Service computing package prices against the live catalog."""

    def __init__(self, catalog_service: CatalogService | None = None) -> None:
        self.catalog = catalog_service or CatalogService()

    async def get_package_and_tier(self, slug: str, selected_size: int) -> tuple[Package, PackageTier]:
        """Load a package and the tier for ``selected_size``.

        Raises:
            NotFoundError: If the package does not exist.
            ValueError: If the package has no such size.
        """
        package = await self.catalog.get_package_row(slug)
        if package is None:
            raise NotFoundError(f"Package not found: {slug}")

        tier = find_tier(package, selected_size)
        if tier is None:
            raise ValueError(f"Package {slug} has no size {selected_size}")
        return package, tier

    async def calculate_package_price(
        self,
        slug: str,
        selected_size: int,
        selected_products: dict[str, int],
    ) -> PackagePrice:
        """Price a package selection using current catalog prices.

        Args:
            slug: Package slug.
            selected_size: Package size tier.
            selected_products: Drink slug to quantity.

        Returns:
            PackagePrice: Price, recycling fee and undiscounted subtotal.
        """
        _, tier = await self.get_package_and_tier(slug, selected_size)
        drinks = await self.catalog.get_drink_rows(list(selected_products))
        result = calculate_price(tier, selected_size, selected_products, drinks)

        logger.debug(
            "Priced %s size %s: %s øre (subtotal %s)",
            slug,
            selected_size,
            result.price,
            result.original_price,
        )
        return result

    async def calculate_basket_weight(self, items: list[dict[str, Any]]) -> float:
        """Approximate the total weight in kg of all drinks in a basket."""
        counts: dict[str, int] = {}
        for item in items:
            quantity = item.get("quantity") or 0
            for slug, count in (item.get("selectedDrinks") or {}).items():
                counts[slug] = counts.get(slug, 0) + count * quantity

        drinks = await self.catalog.get_drink_rows(list(counts))
        return sum(
            approximate_weight_from_size(drinks[slug].get("size")) * count
            for slug, count in counts.items()
            if slug in drinks
        )
