"""Order API routes."""

import logging

from fastapi import APIRouter, HTTPException, status

from storefront.api.deps import AdminAuth, SessionId
from storefront.schemas.order import CaptureResponse, ConfirmationResponse, OrderCreateRequest, OrderResponse
from storefront.services.confirmation_service import ConfirmationService
from storefront.services.order_service import OrderService
from storefront.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create order",
    description="Snapshots the session basket into a new order with status 'new'.",
    responses={
        400: {"description": "Basket is empty"},
        404: {"description": "Session not found"},
    },
)
async def create_order(session_id: SessionId, data: OrderCreateRequest | None = None) -> OrderResponse:
    """Create an order from the current basket.

    Args:
        session_id: Session id from header or cookie.
        data: Optional body carrying the session id as consentId.

    Returns:
        OrderResponse: The created order.

    Raises:
        HTTPException: 400 if the basket is empty.
    """
    service = OrderService()
    try:
        order = await service.create_order_from_basket((data.consentId if data else None) or session_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    return OrderResponse(**order)


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get order",
    responses={404: {"description": "Order not found"}},
)
async def get_order(order_id: str) -> OrderResponse:
    service = OrderService()
    return OrderResponse(**await service.get_order(order_id))


@router.post(
    "/{order_id}/send-confirmation",
    response_model=ConfirmationResponse,
    summary="Send order confirmation",
    description="Sends the confirmation email with invoice. Does nothing if it was already sent.",
    responses={
        400: {"description": "Order is not paid"},
        404: {"description": "Order not found"},
    },
)
async def send_confirmation(order_id: str) -> ConfirmationResponse:
    service = ConfirmationService()
    try:
        result = await service.send_confirmation(order_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    return ConfirmationResponse(**result)


@router.post(
    "/{order_id}/capture",
    response_model=CaptureResponse,
    summary="Capture payment",
    description="Captures the order total on the gateway. Requires the x-admin-auth header.",
    dependencies=[AdminAuth],
    responses={
        400: {"description": "Order has no payment"},
        401: {"description": "Missing or invalid admin secret"},
    },
)
async def capture_order(order_id: str) -> CaptureResponse:
    service = PaymentService()
    try:
        result = await service.capture_order(order_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    logger.info("Captured order %s, status %s", order_id, result["status"])
    return CaptureResponse(**result)
