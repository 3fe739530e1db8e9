"""Database model type definitions."""

from storefront.models.catalog import Drink, Package, PackageTier
from storefront.models.order import Order, OrderStatus, OrderUpdate
from storefront.models.session import (
    BasketDetails,
    BasketItem,
    CustomerDetails,
    DeliveryDetails,
    Session,
    SessionUpdate,
    TemporarySelection,
)

__all__ = [
    "BasketDetails",
    "BasketItem",
    "CustomerDetails",
    "DeliveryDetails",
    "Drink",
    "Order",
    "OrderStatus",
    "OrderUpdate",
    "Package",
    "PackageTier",
    "Session",
    "SessionUpdate",
    "TemporarySelection",
]
