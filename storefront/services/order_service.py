"""Order business logic service."""

import logging
import secrets
from datetime import datetime, timezone
from typing import Any

from supabase import Client

from storefront.api.middleware.error_handler import NotFoundError
from storefront.core.supabase import get_supabase_client
from storefront.models.order import PAID_STATUSES, OrderStatus
from storefront.services.session_service import SessionService

logger = logging.getLogger(__name__)

# QuickPay operation status code for an approved operation
QP_APPROVED = "20000"


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def generate_order_id() -> str:
    """Generate a 20-character alphanumeric order id.

    QuickPay accepts order ids of 4 to 20 characters.
    """
    return secrets.token_hex(10)


def calculate_order_total(basket_details: dict[str, Any]) -> int:
    """Sum item prices, recycling fees and the delivery fee in øre."""
    items = basket_details.get("items") or []
    delivery_fee = (basket_details.get("deliveryDetails") or {}).get("deliveryFee") or 0
    return sum(
        (item.get("totalPrice") or 0) + (item.get("totalRecyclingFee") or 0)
        for item in items
    ) + delivery_fee


def has_successful_capture(payment: dict[str, Any]) -> bool:
    """Check whether a gateway payment has an approved capture operation."""
    return any(
        op.get("type") == "capture" and str(op.get("qp_status_code")) == QP_APPROVED and not op.get("pending")
        for op in payment.get("operations") or []
    )


def derive_order_status(payment: dict[str, Any]) -> OrderStatus | None:
    """Map a gateway payment to an order status.

    Returns None while the payment is still waiting for the customer
    (no operations yet), so the order stays "new".
    """
    if payment.get("accepted"):
        return "paid_and_captured" if has_successful_capture(payment) else "paid"
    if payment.get("state") == "cancelled":
        return "cancelled"
    if payment.get("state") in ("initial", "new") and not payment.get("operations"):
        return None
    return "failed"


def resolve_status_transition(current: str, derived: OrderStatus | None) -> str:
    """Combine the stored status with a derived one. Paid orders never go back."""
    if derived is None:
        return current
    if current in PAID_STATUSES and derived not in PAID_STATUSES:
        return current
    if current == "paid_and_captured":
        return current
    return derived


class OrderService:
    """Service for order lifecycle operations."""

    def __init__(
        self,
        supabase_client: Client | None = None,
        session_service: SessionService | None = None,
    ) -> None:
        """Initialize order service.

        Args:
            supabase_client: Optional Supabase client for testing.
            session_service: Optional session service for testing.
        """
        self.client = supabase_client or get_supabase_client()
        self._session_service = session_service

    @property
    def sessions(self) -> SessionService:
        if self._session_service is None:
            self._session_service = SessionService(supabase_client=self.client)
        return self._session_service

    async def create_order_from_basket(self, session_id: str | None) -> dict[str, Any]:
        """Snapshot the session's basket into a new order.

        Args:
            session_id: The visitor's session id.

        Returns:
            dict: The created order row with status "new".

        Raises:
            NotFoundError: If the session does not exist.
            ValueError: If the basket is empty.
        """
        session = await self.sessions.require_session(session_id)
        basket = session.get("basket_details") or {}
        if not basket.get("items"):
            raise ValueError("Basket is empty")

        now = _utcnow_iso()
        order_data = {
            "id": generate_order_id(),
            "session_id": session["session_id"],
            "status": "new",
            "basket_details": basket,
            "customer_details": basket.get("customerDetails") or {},
            "total_price": calculate_order_total(basket),
            "order_confirmation_sent": False,
            "created_at": now,
            "updated_at": now,
        }

        response = self.client.table("orders").insert(order_data).execute()
        order = response.data[0] if response.data else order_data

        logger.info("Created order %s for session %s: %d øre", order["id"], session_id, order["total_price"])
        return order

    async def get_order_or_none(self, order_id: str) -> dict[str, Any] | None:
        response = (
            self.client.table("orders")
            .select("*")
            .eq("id", order_id)
            .maybe_single()
            .execute()
        )
        return response.data if response and response.data else None

    async def get_order(self, order_id: str) -> dict[str, Any]:
        """Get an order by id.

        Raises:
            NotFoundError: If the order does not exist.
        """
        order = await self.get_order_or_none(order_id)
        if order is None:
            raise NotFoundError(f"Order not found: {order_id}")
        return order

    async def update_order(self, order_id: str, data: dict[str, Any]) -> dict[str, Any]:
        response = (
            self.client.table("orders")
            .update({**data, "updated_at": _utcnow_iso()})
            .eq("id", order_id)
            .execute()
        )
        if not response.data:
            raise NotFoundError(f"Order not found: {order_id}")
        return response.data[0]

    async def record_payment_link(
        self,
        order_id: str,
        payment_id: int,
        payment_link: str,
        payment: dict[str, Any],
    ) -> dict[str, Any]:
        """Store the gateway payment id, link and payload on an order."""
        return await self.update_order(
            order_id,
            {
                "payment_id": payment_id,
                "payment_link": payment_link,
                "quickpay_details": payment,
            },
        )

    async def apply_payment_state(self, order_id: str, payment: dict[str, Any]) -> tuple[dict[str, Any], bool]:
        """Apply a gateway payment payload to an order.

        Safe to call repeatedly with the same or older payloads: a paid
        order is never moved back to an unpaid status.

        Returns:
            tuple: (updated order, True if the order just became paid)
        """
        order = await self.get_order(order_id)
        current = order.get("status") or "new"
        new_status = resolve_status_transition(current, derive_order_status(payment))

        update: dict[str, Any] = {"status": new_status, "quickpay_details": payment}
        if payment.get("id") is not None and not order.get("payment_id"):
            update["payment_id"] = payment["id"]

        updated = await self.update_order(order_id, update)
        newly_paid = current not in PAID_STATUSES and new_status in PAID_STATUSES

        if new_status != current:
            logger.info("Order %s status %s -> %s", order_id, current, new_status)
        return updated, newly_paid

    async def claim_confirmation(self, order_id: str) -> bool:
        """Atomically flag the confirmation as sent.

        Returns:
            bool: True if this caller set the flag, False if it was already set.
        """
        response = (
            self.client.table("orders")
            .update({"order_confirmation_sent": True, "updated_at": _utcnow_iso()})
            .eq("id", order_id)
            .eq("order_confirmation_sent", False)
            .execute()
        )
        return bool(response.data)

    async def release_confirmation(self, order_id: str) -> None:
        """Clear the confirmation flag after a failed send so it can be retried."""
        await self.update_order(order_id, {"order_confirmation_sent": False})
