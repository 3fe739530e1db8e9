"""Order model type definitions for database operations."""

from datetime import datetime
from typing import Any, Literal, TypedDict

from storefront.models.session import BasketDetails, CustomerDetails


# Order status values stored in orders.status
OrderStatus = Literal["new", "paid", "paid_and_captured", "failed", "cancelled"]

PAID_STATUSES: frozenset[str] = frozenset({"paid", "paid_and_captured"})


class Order(TypedDict):
    """Order table row representation.

    Created with status "new" when checkout starts; the payment fields
    are filled in as the gateway reports progress.
    """

    id: str
    session_id: str
    status: OrderStatus
    basket_details: BasketDetails
    customer_details: CustomerDetails
    total_price: int
    payment_id: int | None
    payment_link: str | None
    quickpay_details: dict[str, Any] | None
    order_confirmation_sent: bool
    created_at: datetime
    updated_at: datetime


class OrderUpdate(TypedDict, total=False):
    """Data that can be updated on an order.

    Used when the payment link is created and when gateway state arrives.
    """

    status: OrderStatus
    payment_id: int
    payment_link: str
    quickpay_details: dict[str, Any]
    order_confirmation_sent: bool
    updated_at: str
