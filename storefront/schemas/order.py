"""Order and payment Pydantic schemas for API request/response models."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# Order status literal type for validation
OrderStatus = Literal["new", "paid", "paid_and_captured", "failed", "cancelled"]


class OrderCreateRequest(BaseModel):
    """Schema for POST /orders."""

    model_config = ConfigDict(from_attributes=True)

    consentId: str | None = Field(default=None, description="Session id, if not sent as cookie")


class OrderResponse(BaseModel):
    """Schema for order API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(description="Order id, also used as gateway order_id")
    status: OrderStatus = Field(description="Order status")
    basket_details: dict[str, Any] = Field(default_factory=dict, description="Basket snapshot")
    customer_details: dict[str, Any] = Field(default_factory=dict, description="Customer details snapshot")
    total_price: int = Field(description="Total in øre, including recycling and delivery fees")
    payment_id: int | None = Field(default=None, description="Gateway payment id")
    payment_link: str | None = Field(default=None, description="Gateway payment link")
    order_confirmation_sent: bool = Field(default=False, description="Whether the confirmation email was sent")
    created_at: datetime | None = Field(default=None, description="Creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")


class ConfirmationResponse(BaseModel):
    """Result of a confirmation (re-)send."""

    model_config = ConfigDict(from_attributes=True)

    sent: bool = Field(description="True when an email was sent by this request")
    alreadySent: bool = Field(default=False, description="True when the confirmation had been sent before")


class CreatePaymentRequest(BaseModel):
    """Schema for POST /createPayment."""

    model_config = ConfigDict(from_attributes=True)

    orderId: str = Field(min_length=4, max_length=20, description="Order id")
    totalPrice: int = Field(gt=0, description="Amount to charge in øre")


class CreatePaymentResponse(BaseModel):
    """Schema for payment link creation."""

    model_config = ConfigDict(from_attributes=True)

    url: str = Field(description="Gateway payment window URL to redirect to")
    paymentId: int = Field(description="Gateway payment id")
    orderId: str = Field(description="Order id")
    alreadyExisted: bool = Field(default=False, description="True when an existing gateway payment was reused")


class PaymentStatusResponse(BaseModel):
    """Schema for GET /payment-status."""

    model_config = ConfigDict(from_attributes=True)

    accepted: bool = Field(description="True when the order status is paid or paid_and_captured")
    order: OrderResponse = Field(description="Stored order")


class CaptureResponse(BaseModel):
    """Schema for a manual capture."""

    model_config = ConfigDict(from_attributes=True)

    orderId: str = Field(description="Order id")
    status: OrderStatus = Field(description="Order status after capture")
    payment: dict[str, Any] = Field(description="Gateway payment after capture")
