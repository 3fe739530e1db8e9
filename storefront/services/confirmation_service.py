"""Order confirmation: invoice rendering plus email, sent at most once per order."""

import logging
from typing import Any

from storefront.models.order import PAID_STATUSES
from storefront.services.email_service import EmailService
from storefront.services.invoice_service import render_invoice_pdf
from storefront.services.order_service import OrderService

logger = logging.getLogger(__name__)


class ConfirmationService:
    """Sends the confirmation email for paid orders."""

    def __init__(
        self,
        order_service: OrderService | None = None,
        email_service: EmailService | None = None,
    ) -> None:
        self.orders = order_service or OrderService()
        self.email = email_service or EmailService()

    async def send_confirmation(self, order_id: str, require_paid: bool = True) -> dict[str, bool]:
        """Send the confirmation for an order unless it was already sent.

        A failed send is logged and the flag is released so a later
        call can retry; the order status is left untouched.

        Args:
            order_id: The order id.
            require_paid: Reject unpaid orders.

        Returns:
            dict: ``sent`` and ``alreadySent`` flags.

        Raises:
            NotFoundError: If the order does not exist.
            ValueError: If the order is not paid and ``require_paid`` is set.
        """
        order = await self.orders.get_order(order_id)
        if require_paid and order.get("status") not in PAID_STATUSES:
            raise ValueError("Order is not paid")

        if order.get("order_confirmation_sent") or not await self.orders.claim_confirmation(order_id):
            logger.info("Confirmation for order %s already sent", order_id)
            return {"sent": False, "alreadySent": True}

        result = await self._deliver(order)
        if not result.get("success"):
            await self.orders.release_confirmation(order_id)
            return {"sent": False, "alreadySent": False}

        return {"sent": True, "alreadySent": False}

    async def _deliver(self, order: dict[str, Any]) -> dict[str, Any]:
        try:
            invoice = render_invoice_pdf(order)
        except Exception as e:
            # Send without attachment rather than not at all
            logger.error("Failed to render invoice for order %s: %s", order.get("id"), str(e))
            invoice = None
        return await self.email.send_order_confirmation(order, invoice)
