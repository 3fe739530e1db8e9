"""Catalog model type definitions for the drinks and packages tables."""

from typing import Any, TypedDict


class Drink(TypedDict, total=False):
    """Drinks table row representation.

    purchase_price and stock are private and never leave the API.
    Prices are in øre.
    """

    slug: str
    name: str
    size: str
    is_sugar_free: bool
    sale_price: int
    purchase_price: int
    stock: int
    recycling_fee: int
    nutrition: dict[str, Any]
    image: str


class PackageTier(TypedDict, total=False):
    """A size option of a package (number of drinks in the box)."""

    size: int
    min_price: int
    price_jump: float
    discount: float


class Package(TypedDict, total=False):
    """Packages table row representation."""

    slug: str
    title: str
    description: str
    category: str
    image: str
    packages: list[PackageTier]
    collectionsDrinks: list[str]
