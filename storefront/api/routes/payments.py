"""Payment API routes: payment creation, status checks and the QuickPay callback."""

import logging

from fastapi import APIRouter, HTTPException, Query, Request, status

from storefront.schemas.order import CreatePaymentRequest, CreatePaymentResponse, OrderResponse, PaymentStatusResponse
from storefront.services.payment_service import CHECKSUM_HEADER, PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments"])


@router.post(
    "/createPayment",
    response_model=CreatePaymentResponse,
    summary="Create payment link",
    description=(
        "Creates a QuickPay payment for an order (reusing an existing one for the same order id) "
        "and returns the payment window URL."
    ),
    responses={
        400: {"description": "Amount does not match the order"},
        404: {"description": "Order not found"},
        500: {"description": "QuickPay rejected the request"},
    },
)
async def create_payment(data: CreatePaymentRequest) -> CreatePaymentResponse:
    """Create a payment and payment link.

    Args:
        data: Order id and amount in øre.

    Returns:
        CreatePaymentResponse: Payment window URL and ids.

    Raises:
        HTTPException: 400 if the amount differs from the order total.
    """
    service = PaymentService()
    try:
        result = await service.create_payment_for_order(data.orderId, data.totalPrice)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    return CreatePaymentResponse(**result)


@router.get(
    "/payment-status",
    response_model=PaymentStatusResponse,
    summary="Get payment status",
    description=(
        "Reports whether the order is paid. With refresh=true the payment is re-read "
        "from QuickPay before answering."
    ),
    responses={404: {"description": "Order not found"}},
)
async def payment_status(
    order_id: str = Query(alias="orderId", description="Order id"),
    refresh: bool = Query(default=False, description="Re-read the payment from QuickPay"),
) -> PaymentStatusResponse:
    service = PaymentService()
    result = await service.get_payment_status(order_id, refresh=refresh)
    return PaymentStatusResponse(accepted=result["accepted"], order=OrderResponse(**result["order"]))


@router.post(
    "/quickpay/callback",
    status_code=status.HTTP_200_OK,
    summary="Handle QuickPay callbacks",
    description="Receives payment updates from QuickPay. Requires a valid checksum header.",
)
async def quickpay_callback(request: Request) -> dict[str, str]:
    """Handle a QuickPay payment callback.

    The checksum is verified against the raw body before anything is
    applied. Repeated or out-of-order callbacks are safe.

    Args:
        request: FastAPI request object for reading raw body and headers.

    Returns:
        dict: Acknowledgment with the resulting order status.

    Raises:
        HTTPException: 401 if the checksum is missing or invalid, 400 if the payload is malformed.
    """
    body = await request.body()
    checksum = request.headers.get(CHECKSUM_HEADER)

    if not checksum:
        logger.error("Missing %s header in callback request", CHECKSUM_HEADER)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing checksum",
        )

    service = PaymentService()
    try:
        order = await service.handle_callback(body, checksum)
    except PermissionError as e:
        logger.error("Invalid callback checksum")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid checksum",
        ) from e
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    return {"status": "received", "orderStatus": order.get("status", "")}
