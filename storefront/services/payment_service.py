"""Payment service for QuickPay payments, links, callbacks and captures."""

import hashlib
import hmac
import json
import logging
from typing import Any

import httpx

from storefront.api.middleware.error_handler import UpstreamServiceError
from storefront.core.config import Settings, get_settings
from storefront.core.http import get_quickpay_client
from storefront.models.order import PAID_STATUSES
from storefront.services.confirmation_service import ConfirmationService
from storefront.services.order_service import OrderService

logger = logging.getLogger(__name__)

CHECKSUM_HEADER = "QuickPay-Checksum-Sha256"

ORDER_ID_EXISTS_MESSAGE = "order_id already exists on another payment"


def compute_checksum(body: bytes, private_key: str) -> str:
    """HMAC-SHA256 hex digest QuickPay sends with callbacks."""
    return hmac.new(private_key.encode("utf-8"), body, hashlib.sha256).hexdigest()


def _body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class PaymentService:
    """Service for the QuickPay payment flow.

    Handles:
    - creating a payment for an order (reusing one that already exists)
    - creating the payment window link
    - verifying and applying callbacks
    - status checks and manual captures
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        order_service: OrderService | None = None,
        confirmation_service: ConfirmationService | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize payment service.

        Args:
            client: Optional QuickPay HTTP client for testing.
            order_service: Optional order service for testing.
            confirmation_service: Optional confirmation service for testing.
            settings: Optional settings override.
        """
        self.settings = settings or get_settings()
        self._client = client
        self._orders = order_service
        self._confirmation = confirmation_service

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = get_quickpay_client()
        return self._client

    @property
    def orders(self) -> OrderService:
        if self._orders is None:
            self._orders = OrderService()
        return self._orders

    @property
    def confirmation(self) -> ConfirmationService:
        if self._confirmation is None:
            self._confirmation = ConfirmationService(order_service=self.orders)
        return self._confirmation

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("QuickPay %s %s failed: %s", method, path, e)
            raise UpstreamServiceError("QuickPay", f"QuickPay request failed: {e}") from e

    def _fail(self, message: str, response: httpx.Response) -> UpstreamServiceError:
        body = _body(response)
        logger.error("%s (HTTP %s): %s", message, response.status_code, body)
        return UpstreamServiceError("QuickPay", message, upstream=body)

    # Gateway calls

    async def create_payment(self, order_id: str) -> tuple[dict[str, Any], bool]:
        """Create a gateway payment for an order id.

        If the gateway already has a payment for this order id, that
        payment is fetched and returned instead.

        Returns:
            tuple: (payment, already_existed)

        Raises:
            UpstreamServiceError: If the gateway rejects the request.
        """
        response = await self._send(
            "POST",
            "/payments",
            json={"order_id": order_id, "currency": self.settings.quickpay_currency},
        )
        if response.is_success:
            payment = response.json()
            logger.info("QuickPay payment %s created for order %s", payment.get("id"), order_id)
            return payment, False

        body = _body(response)
        if response.status_code == 400 and ORDER_ID_EXISTS_MESSAGE in json.dumps(body):
            logger.warning("Payment for order %s already exists, retrieving it", order_id)
            existing = await self.find_payment_by_order_id(order_id)
            if existing is not None:
                return existing, True

        raise self._fail("Failed to create payment", response)

    async def find_payment_by_order_id(self, order_id: str) -> dict[str, Any] | None:
        """Return the first gateway payment with this order id, if any."""
        response = await self._send("GET", "/payments", params={"order_id": order_id})
        if not response.is_success:
            raise self._fail("Failed to retrieve existing payment", response)
        payments = response.json()
        if isinstance(payments, list) and payments:
            return payments[0]
        return None

    async def create_payment_link(
        self,
        payment_id: int,
        amount: int,
        customer_email: str | None = None,
    ) -> str:
        """Create (or replace) the payment window link.

        Args:
            payment_id: Gateway payment id.
            amount: Amount in øre.
            customer_email: Optional email prefilled in the payment window.

        Returns:
            str: Payment window URL.
        """
        body: dict[str, Any] = {
            "amount": amount,
            "continue_url": self.settings.payment_continue_url,
            "cancel_url": self.settings.payment_cancel_url,
            "callback_url": self.settings.payment_callback_url,
            "auto_capture": self.settings.quickpay_auto_capture,
        }
        if customer_email:
            body["customer_email"] = customer_email

        response = await self._send("PUT", f"/payments/{payment_id}/link", json=body)
        if not response.is_success:
            raise self._fail("Failed to create payment link", response)
        return response.json()["url"]

    async def get_payment(self, payment_id: int) -> dict[str, Any]:
        """Fetch a payment from the gateway."""
        response = await self._send("GET", f"/payments/{payment_id}")
        if not response.is_success:
            raise self._fail("Failed to fetch payment", response)
        return response.json()

    async def capture_payment(self, payment_id: int, amount: int) -> dict[str, Any]:
        """Capture an authorized payment.

        Returns:
            dict: The payment after the capture request (may still be pending).
        """
        response = await self._send(
            "POST",
            f"/payments/{payment_id}/capture",
            json={"amount": amount},
        )
        if not response.is_success:
            raise self._fail("Failed to capture payment", response)
        return response.json()

    # Order flow

    async def create_payment_for_order(self, order_id: str, total_price: int) -> dict[str, Any]:
        """Create a payment and payment link for a stored order.

        Args:
            order_id: Order id, used as the gateway order id.
            total_price: Amount in øre; must equal the stored order total.

        Returns:
            dict: ``url``, ``paymentId``, ``orderId`` and ``alreadyExisted``.

        Raises:
            NotFoundError: If the order does not exist.
            ValueError: If the amount differs from the order total or the
                order is already paid.
        """
        order = await self.orders.get_order(order_id)
        if order.get("status") in PAID_STATUSES:
            raise ValueError("Order is already paid")
        if order.get("total_price") != total_price:
            raise ValueError("totalPrice does not match the order total")

        payment, already_existed = await self.create_payment(order_id)
        customer_email = (order.get("customer_details") or {}).get("email")
        url = await self.create_payment_link(payment["id"], total_price, customer_email)

        await self.orders.record_payment_link(order_id, payment["id"], url, payment)
        return {
            "url": url,
            "paymentId": payment["id"],
            "orderId": order_id,
            "alreadyExisted": already_existed,
        }

    async def get_payment_status(self, order_id: str, refresh: bool = False) -> dict[str, Any]:
        """Report whether an order is paid.

        Reads the stored order. With ``refresh`` and a stored payment id,
        the payment is re-read from the gateway and applied first.

        Returns:
            dict: ``accepted`` and the stored ``order``.
        """
        order = await self.orders.get_order(order_id)

        if refresh and order.get("payment_id"):
            payment = await self.get_payment(order["payment_id"])
            order = await self._apply(order_id, payment)

        return {"accepted": order.get("status") in PAID_STATUSES, "order": order}

    def verify_checksum(self, body: bytes, checksum: str | None) -> bool:
        """Check a callback's checksum header against the raw body."""
        if not checksum or not self.settings.quickpay_private_key:
            return False
        expected = compute_checksum(body, self.settings.quickpay_private_key)
        return hmac.compare_digest(expected, checksum.strip().lower())

    async def handle_callback(self, body: bytes, checksum: str | None) -> dict[str, Any]:
        """Verify and apply a payment callback.

        Args:
            body: Raw request body.
            checksum: Value of the checksum header.

        Returns:
            dict: The updated order.

        Raises:
            PermissionError: If the checksum is missing or wrong.
            ValueError: If the payload is not a payment with an order id.
        """
        if not self.verify_checksum(body, checksum):
            raise PermissionError("Invalid callback checksum")

        try:
            payment = json.loads(body)
        except ValueError as e:
            raise ValueError("Callback body is not valid JSON") from e

        order_id = payment.get("order_id") if isinstance(payment, dict) else None
        if not order_id:
            raise ValueError("Callback payload has no order_id")

        logger.info(
            "QuickPay callback for order %s: state=%s accepted=%s",
            order_id,
            payment.get("state"),
            payment.get("accepted"),
        )
        return await self._apply(order_id, payment)

    async def capture_order(self, order_id: str) -> dict[str, Any]:
        """Capture the full order total on the gateway.

        Raises:
            ValueError: If the order has no payment yet.
        """
        order = await self.orders.get_order(order_id)
        if not order.get("payment_id"):
            raise ValueError("Payment ID not found on order")

        payment = await self.capture_payment(order["payment_id"], order["total_price"])
        order = await self._apply(order_id, payment)
        return {"orderId": order_id, "status": order["status"], "payment": payment}

    async def _apply(self, order_id: str, payment: dict[str, Any]) -> dict[str, Any]:
        order, newly_paid = await self.orders.apply_payment_state(order_id, payment)
        if newly_paid:
            await self.confirmation.send_confirmation(order_id)
            order = await self.orders.get_order(order_id)
        return order
