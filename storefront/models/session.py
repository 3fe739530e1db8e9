"""Session model type definitions for database operations."""

from datetime import datetime
from typing import Literal

from typing_extensions import TypedDict


# Sugar filter used by the mystery-box generator
SugarPreference = Literal["alle", "med_sukker", "uden_sukker"]

# Delivery options offered at checkout
DeliveryType = Literal["pickupPoint", "homeDelivery"]


class BasketItem(TypedDict, total=False):
    """Structure for a single basket line.

    Matches the frontend BasketItem interface. Amounts are in øre.
    totalPrice and totalRecyclingFee are always the per-package value
    multiplied by quantity.
    """

    slug: str
    quantity: int
    packages_size: int
    sugarPreference: SugarPreference | None
    selectedDrinks: dict[str, int]
    pricePerPackage: int
    recyclingFeePerPackage: int
    totalPrice: int
    totalRecyclingFee: int


class CustomerDetails(TypedDict, total=False):
    """Structure for checkout customer details."""

    customerType: str
    fullName: str
    mobileNumber: str
    email: str
    address: str
    streetNumber: str
    postalCode: str
    city: str
    country: str


class DeliveryDetails(TypedDict, total=False):
    """Structure for the chosen delivery option and its fee."""

    provider: str
    deliveryType: DeliveryType
    deliveryFee: int
    currency: str
    deliveryAddress: dict
    providerDetails: dict
    createdAt: str


class BasketDetails(TypedDict, total=False):
    """JSONB content of sessions.basket_details."""

    items: list[BasketItem]
    customerDetails: CustomerDetails
    deliveryDetails: DeliveryDetails


class TemporarySelection(TypedDict, total=False):
    """A priced package selection waiting to be added to the basket."""

    packageSlug: str
    selectedSize: int
    selectedProducts: dict[str, int]
    sugarPreference: SugarPreference | None
    pricePerPackage: int
    recyclingFeePerPackage: int
    createdAt: str


class Session(TypedDict):
    """Session table row representation.

    Represents an anonymous visitor session stored in the sessions table.
    Maps directly to the database schema.
    """

    session_id: str
    allow_cookies: bool
    basket_details: BasketDetails
    temporary_selections: dict[str, TemporarySelection]
    created_at: datetime
    updated_at: datetime


class SessionUpdate(TypedDict, total=False):
    """Data that can be updated on a session."""

    allow_cookies: bool
    basket_details: BasketDetails
    temporary_selections: dict[str, TemporarySelection]
    updated_at: str
