"""Address validation and pickup-point Pydantic schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DatavaskRequest(BaseModel):
    """Schema for POST /dawa/datavask.

    address, city and postalCode are required by the handler itself,
    so a missing value is answered with 400 rather than 422.
    """

    model_config = ConfigDict(from_attributes=True)

    address: str | None = Field(default=None, description="Street name")
    city: str | None = Field(default=None, description="City")
    postalCode: str | None = Field(default=None, description="Postal code")
    streetNumber: str | None = Field(default=None, description="House number")
    country: str | None = Field(default=None, description="Country")
    customerType: str | None = Field(default=None, description="Customer type")
    email: str | None = Field(default=None, description="Email address")
    fullName: str | None = Field(default=None, description="Full name")
    mobileNumber: str | None = Field(default=None, description="Mobile number")


class DatavaskResponse(BaseModel):
    """Schema for a successful address cleansing."""

    model_config = ConfigDict(from_attributes=True)

    customerDetails: dict[str, Any] = Field(description="Customer fields echoed back")
    dawaResponse: dict[str, Any] = Field(description="Raw DAWA datavask response")


class ValidateAddressRequest(BaseModel):
    """Schema for POST /dawa/validate-address."""

    model_config = ConfigDict(from_attributes=True)

    address: str = Field(min_length=1, description="Free-text address")


class ValidateAddressResponse(BaseModel):
    """Schema for a precise address match."""

    model_config = ConfigDict(from_attributes=True)

    data: dict[str, Any] = Field(description="Top DAWA result (kategori A)")
