"""Unit tests for PaymentService (QuickPay)."""

import json
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from storefront.api.middleware.error_handler import UpstreamServiceError
from storefront.services.payment_service import PaymentService, compute_checksum

QUICKPAY_BASE = "https://api.quickpay.net"

ORDER = {
    "id": "a1b2c3d4e5f6a7b8c9d0",
    "status": "new",
    "total_price": 43300,
    "customer_details": {"email": "jens@example.dk"},
    "payment_id": None,
    "order_confirmation_sent": False,
}

PAYMENT = {"id": 4242, "order_id": ORDER["id"], "state": "initial", "accepted": False, "operations": []}


def quickpay_client(
    routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]],
    calls: list[httpx.Request] | None = None,
) -> httpx.AsyncClient:
    """Client answering (method, path) pairs; anything else is a 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        route = routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        return route(request)

    return httpx.AsyncClient(base_url=QUICKPAY_BASE, transport=httpx.MockTransport(handler))


def link_route(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"url": "https://payment.quickpay.net/payments/abc"})


class TestPaymentService:
    """Tests for the payment flow."""

    @pytest.fixture
    def orders(self) -> MagicMock:
        orders = MagicMock()
        orders.get_order = AsyncMock(return_value=dict(ORDER))
        orders.record_payment_link = AsyncMock(return_value=dict(ORDER))
        orders.apply_payment_state = AsyncMock(return_value=({**ORDER, "status": "paid"}, True))
        return orders

    @pytest.fixture
    def confirmation(self) -> MagicMock:
        confirmation = MagicMock()
        confirmation.send_confirmation = AsyncMock(return_value={"sent": True, "alreadySent": False})
        return confirmation

    def make_service(
        self,
        client: httpx.AsyncClient,
        orders: MagicMock,
        confirmation: MagicMock,
        settings: Any,
    ) -> PaymentService:
        return PaymentService(
            client=client,
            order_service=orders,
            confirmation_service=confirmation,
            settings=settings,
        )

    @pytest.mark.asyncio
    async def test_create_payment_for_order(
        self, orders: MagicMock, confirmation: MagicMock, test_settings: Any
    ) -> None:
        calls: list[httpx.Request] = []
        client = quickpay_client(
            {
                ("POST", "/payments"): lambda r: httpx.Response(201, json=PAYMENT),
                ("PUT", "/payments/4242/link"): link_route,
            },
            calls,
        )
        service = self.make_service(client, orders, confirmation, test_settings)

        result = await service.create_payment_for_order(ORDER["id"], 43300)

        assert result == {
            "url": "https://payment.quickpay.net/payments/abc",
            "paymentId": 4242,
            "orderId": ORDER["id"],
            "alreadyExisted": False,
        }
        create_body = json.loads(calls[0].content)
        assert create_body == {"order_id": ORDER["id"], "currency": "dkk"}
        link_body = json.loads(calls[1].content)
        assert link_body["amount"] == 43300
        assert link_body["continue_url"].endswith("/payment-success")
        assert link_body["callback_url"].endswith("/api/quickpay/callback")
        assert link_body["customer_email"] == "jens@example.dk"
        orders.record_payment_link.assert_awaited_once_with(
            ORDER["id"], 4242, "https://payment.quickpay.net/payments/abc", PAYMENT
        )

    @pytest.mark.asyncio
    async def test_duplicate_order_id_reuses_existing_payment(
        self, orders: MagicMock, confirmation: MagicMock, test_settings: Any
    ) -> None:
        """Test that a retry for the same order reuses the gateway payment."""
        duplicate = {
            "message": "Validation error",
            "errors": {"order_id": ["order_id already exists on another payment"]},
        }
        client = quickpay_client(
            {
                ("POST", "/payments"): lambda r: httpx.Response(400, json=duplicate),
                ("GET", "/payments"): lambda r: httpx.Response(200, json=[PAYMENT]),
                ("PUT", "/payments/4242/link"): link_route,
            }
        )
        service = self.make_service(client, orders, confirmation, test_settings)

        result = await service.create_payment_for_order(ORDER["id"], 43300)

        assert result["alreadyExisted"] is True
        assert result["paymentId"] == 4242

    @pytest.mark.asyncio
    async def test_gateway_rejection_raises_with_upstream(
        self, orders: MagicMock, confirmation: MagicMock, test_settings: Any
    ) -> None:
        body = {"message": "Not authorized"}
        client = quickpay_client({("POST", "/payments"): lambda r: httpx.Response(403, json=body)})
        service = self.make_service(client, orders, confirmation, test_settings)

        with pytest.raises(UpstreamServiceError) as exc_info:
            await service.create_payment_for_order(ORDER["id"], 43300)

        assert exc_info.value.upstream == body
        orders.record_payment_link.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_link_rejection_raises_with_upstream(
        self, orders: MagicMock, confirmation: MagicMock, test_settings: Any
    ) -> None:
        """Test that a rejected payment link aborts before anything is stored."""
        body = {"message": "Validation error", "errors": {"amount": ["must be greater than 0"]}}
        client = quickpay_client(
            {
                ("POST", "/payments"): lambda r: httpx.Response(201, json=PAYMENT),
                ("PUT", "/payments/4242/link"): lambda r: httpx.Response(400, json=body),
            }
        )
        service = self.make_service(client, orders, confirmation, test_settings)

        with pytest.raises(UpstreamServiceError) as exc_info:
            await service.create_payment_for_order(ORDER["id"], 43300)

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Failed to create payment link"
        assert exc_info.value.upstream == body
        orders.record_payment_link.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_amount_mismatch_rejected(
        self, orders: MagicMock, confirmation: MagicMock, test_settings: Any
    ) -> None:
        calls: list[httpx.Request] = []
        service = self.make_service(quickpay_client({}, calls), orders, confirmation, test_settings)

        with pytest.raises(ValueError, match="totalPrice"):
            await service.create_payment_for_order(ORDER["id"], 100)

        assert calls == []

    @pytest.mark.asyncio
    async def test_paid_order_rejected(self, orders: MagicMock, confirmation: MagicMock, test_settings: Any) -> None:
        orders.get_order.return_value = {**ORDER, "status": "paid"}
        service = self.make_service(quickpay_client({}), orders, confirmation, test_settings)

        with pytest.raises(ValueError, match="already paid"):
            await service.create_payment_for_order(ORDER["id"], 43300)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["new", "failed", "cancelled"])
    async def test_status_not_accepted_for_unpaid_orders(
        self, orders: MagicMock, confirmation: MagicMock, test_settings: Any, status: str
    ) -> None:
        """Test that only paid statuses count as accepted."""
        orders.get_order.return_value = {**ORDER, "status": status}
        calls: list[httpx.Request] = []
        service = self.make_service(quickpay_client({}, calls), orders, confirmation, test_settings)

        result = await service.get_payment_status(ORDER["id"])

        assert result["accepted"] is False
        assert calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["paid", "paid_and_captured"])
    async def test_status_accepted_for_paid_orders(
        self, orders: MagicMock, confirmation: MagicMock, test_settings: Any, status: str
    ) -> None:
        orders.get_order.return_value = {**ORDER, "status": status}
        service = self.make_service(quickpay_client({}), orders, confirmation, test_settings)

        result = await service.get_payment_status(ORDER["id"])

        assert result["accepted"] is True

    @pytest.mark.asyncio
    async def test_status_refresh_reads_gateway(
        self, orders: MagicMock, confirmation: MagicMock, test_settings: Any
    ) -> None:
        orders.get_order.return_value = {**ORDER, "payment_id": 4242}
        orders.apply_payment_state.return_value = ({**ORDER, "status": "paid"}, False)
        accepted = {**PAYMENT, "accepted": True, "state": "new", "operations": [{"type": "authorize"}]}
        client = quickpay_client({("GET", "/payments/4242"): lambda r: httpx.Response(200, json=accepted)})
        service = self.make_service(client, orders, confirmation, test_settings)

        result = await service.get_payment_status(ORDER["id"], refresh=True)

        assert result["accepted"] is True
        orders.apply_payment_state.assert_awaited_once_with(ORDER["id"], accepted)
        confirmation.send_confirmation.assert_not_awaited()


class TestCallback:
    """Tests for callback verification and handling."""

    @pytest.fixture
    def orders(self) -> MagicMock:
        orders = MagicMock()
        orders.apply_payment_state = AsyncMock(return_value=({**ORDER, "status": "paid"}, True))
        orders.get_order = AsyncMock(return_value={**ORDER, "status": "paid", "order_confirmation_sent": True})
        return orders

    @pytest.fixture
    def confirmation(self) -> MagicMock:
        confirmation = MagicMock()
        confirmation.send_confirmation = AsyncMock(return_value={"sent": True, "alreadySent": False})
        return confirmation

    @pytest.fixture
    def service(self, orders: MagicMock, confirmation: MagicMock, test_settings: Any) -> PaymentService:
        return PaymentService(
            client=quickpay_client({}),
            order_service=orders,
            confirmation_service=confirmation,
            settings=test_settings,
        )

    def _signed(self, payload: dict[str, Any], key: str) -> tuple[bytes, str]:
        body = json.dumps(payload).encode("utf-8")
        return body, compute_checksum(body, key)

    def test_verify_checksum(self, service: PaymentService, test_settings: Any) -> None:
        body, checksum = self._signed(PAYMENT, test_settings.quickpay_private_key)

        assert service.verify_checksum(body, checksum) is True
        assert service.verify_checksum(body, checksum.upper()) is True
        assert service.verify_checksum(body + b" ", checksum) is False
        assert service.verify_checksum(body, None) is False
        assert service.verify_checksum(body, compute_checksum(body, "wrong-key")) is False

    @pytest.mark.asyncio
    async def test_invalid_checksum_rejected(self, service: PaymentService, orders: MagicMock) -> None:
        body, _ = self._signed(PAYMENT, "wrong-key")

        with pytest.raises(PermissionError):
            await service.handle_callback(body, "deadbeef")

        orders.apply_payment_state.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_accepted_callback_sends_confirmation(
        self, service: PaymentService, orders: MagicMock, confirmation: MagicMock, test_settings: Any
    ) -> None:
        payment = {**PAYMENT, "accepted": True, "state": "new", "operations": [{"type": "authorize"}]}
        body, checksum = self._signed(payment, test_settings.quickpay_private_key)

        order = await service.handle_callback(body, checksum)

        assert order["status"] == "paid"
        orders.apply_payment_state.assert_awaited_once_with(ORDER["id"], payment)
        confirmation.send_confirmation.assert_awaited_once_with(ORDER["id"])

    @pytest.mark.asyncio
    async def test_repeated_callback_does_not_resend(
        self, service: PaymentService, orders: MagicMock, confirmation: MagicMock, test_settings: Any
    ) -> None:
        orders.apply_payment_state.return_value = ({**ORDER, "status": "paid"}, False)
        body, checksum = self._signed({**PAYMENT, "accepted": True}, test_settings.quickpay_private_key)

        await service.handle_callback(body, checksum)

        confirmation.send_confirmation.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_callback_without_order_id(self, service: PaymentService, test_settings: Any) -> None:
        body, checksum = self._signed({"id": 1, "accepted": True}, test_settings.quickpay_private_key)

        with pytest.raises(ValueError, match="order_id"):
            await service.handle_callback(body, checksum)

    @pytest.mark.asyncio
    async def test_callback_invalid_json(self, service: PaymentService, test_settings: Any) -> None:
        body = b"not json"
        checksum = compute_checksum(body, test_settings.quickpay_private_key)

        with pytest.raises(ValueError):
            await service.handle_callback(body, checksum)

    @pytest.mark.asyncio
    async def test_capture_without_payment(self, service: PaymentService, orders: MagicMock) -> None:
        orders.get_order.return_value = {**ORDER, "payment_id": None}

        with pytest.raises(ValueError, match="Payment ID"):
            await service.capture_order(ORDER["id"])
