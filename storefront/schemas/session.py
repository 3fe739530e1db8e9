"""Session and basket Pydantic schemas for API request/response models."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


SugarPreference = Literal["alle", "med_sukker", "uden_sukker"]

DeliveryOption = Literal["pickupPoint", "homeDelivery"]


class SessionResponse(BaseModel):
    """Schema for GET /session."""

    model_config = ConfigDict(from_attributes=True)

    sessionId: str = Field(description="Opaque session identifier, also set as cookie")
    allowCookies: bool = Field(default=False, description="Whether the visitor accepted cookies")
    created: bool = Field(default=False, description="True when the session was created by this request")


class AcceptCookiesRequest(BaseModel):
    """Schema for POST /session/accept-cookies."""

    model_config = ConfigDict(from_attributes=True)

    consentId: str | None = Field(default=None, description="Session id, if not sent as cookie")


class BasketItemSchema(BaseModel):
    """Schema for a single basket line.

    Matches the frontend BasketItem interface. Amounts are in øre.
    """

    model_config = ConfigDict(from_attributes=True)

    slug: str = Field(description="Package slug")
    quantity: int = Field(ge=1, description="Number of packages")
    packages_size: int | None = Field(default=None, description="Number of drinks per package")
    sugarPreference: SugarPreference | None = Field(default=None, description="Sugar filter for random packages")
    selectedDrinks: dict[str, int] = Field(default_factory=dict, description="Drink slug to count")
    pricePerPackage: int = Field(ge=0, description="Price of one package in øre")
    recyclingFeePerPackage: int = Field(default=0, ge=0, description="Recycling fee of one package in øre")
    totalPrice: int = Field(ge=0, description="pricePerPackage multiplied by quantity")
    totalRecyclingFee: int = Field(default=0, ge=0, description="recyclingFeePerPackage multiplied by quantity")


class CustomerDetailsSchema(BaseModel):
    """Schema for checkout customer details.

    Every field is optional so partial forms can be saved; validation
    of formats happens in the basket service and is reported per field.
    """

    model_config = ConfigDict(from_attributes=True)

    customerType: str | None = Field(default=None, description="Private or business customer")
    fullName: str | None = Field(default=None, description="Full name")
    mobileNumber: str | None = Field(default=None, description="Danish mobile number, 8 digits")
    email: str | None = Field(default=None, description="Email address")
    address: str | None = Field(default=None, description="Street name")
    streetNumber: str | None = Field(default=None, description="House number")
    postalCode: str | None = Field(default=None, description="Danish postal code, 4 digits")
    city: str | None = Field(default=None, description="City")
    country: str | None = Field(default=None, description="Country")


class BasketResponse(BaseModel):
    """Schema for GET /getBasket."""

    model_config = ConfigDict(from_attributes=True)

    basketItems: list[BasketItemSchema] = Field(default_factory=list, description="Basket lines")
    customerDetails: dict = Field(default_factory=dict, description="Stored customer details")
    deliveryDetails: dict = Field(default_factory=dict, description="Stored delivery details")
    allowCookies: bool = Field(default=False, description="Whether the visitor accepted cookies")


class TemporarySelectionCreate(BaseModel):
    """Schema for POST /basket/selections."""

    model_config = ConfigDict(from_attributes=True)

    packageSlug: str = Field(min_length=1, description="Package slug")
    selectedSize: int = Field(ge=1, description="Number of drinks in the package")
    selectedProducts: dict[str, int] = Field(description="Drink slug to quantity")
    sugarPreference: SugarPreference | None = Field(default=None, description="Sugar filter used, if any")


class RandomSelectionCreate(BaseModel):
    """Schema for POST /basket/random-selection."""

    model_config = ConfigDict(from_attributes=True)

    slug: str = Field(min_length=1, description="Package slug")
    selectedSize: int = Field(ge=1, description="Number of drinks to draw")
    sugarPreference: SugarPreference = Field(default="alle", description="Sugar filter")


class TemporarySelectionResponse(BaseModel):
    """Schema for a stored temporary selection."""

    model_config = ConfigDict(from_attributes=True)

    selectionId: str = Field(description="Identifier used when adding the selection to the basket")
    packageSlug: str = Field(description="Package slug")
    selectedSize: int = Field(description="Number of drinks in the package")
    selectedProducts: dict[str, int] = Field(description="Drink slug to quantity")
    sugarPreference: SugarPreference | None = Field(default=None, description="Sugar filter used, if any")
    pricePerPackage: int = Field(description="Price of one package in øre")
    recyclingFeePerPackage: int = Field(description="Recycling fee of one package in øre")


class AddItemRequest(BaseModel):
    """Schema for POST /basket/items."""

    model_config = ConfigDict(from_attributes=True)

    selectionId: str = Field(min_length=1, description="Temporary selection to add")
    quantity: int = Field(default=1, ge=1, description="Number of packages")


class UpdateQuantityRequest(BaseModel):
    """Schema for PATCH /basket/items/{index}.

    Kept as a plain int so non-positive values reach the service and
    get the basket's own 400 response.
    """

    model_config = ConfigDict(from_attributes=True)

    quantity: int = Field(description="New number of packages")


class CustomerDetailsUpdate(BaseModel):
    """Schema for PUT /basket/customer-details."""

    model_config = ConfigDict(from_attributes=True)

    customerDetails: CustomerDetailsSchema = Field(description="Fields to save")


class CustomerDetailsResponse(BaseModel):
    """Result of saving customer details."""

    model_config = ConfigDict(from_attributes=True)

    customerDetails: dict = Field(description="Customer details as stored")
    errors: dict[str, str] = Field(default_factory=dict, description="Field name to Danish error message")


class DeliveryDetailsUpdate(BaseModel):
    """Schema for PUT /basket/delivery-details."""

    model_config = ConfigDict(from_attributes=True)

    deliveryOption: DeliveryOption = Field(description="Pickup point or home delivery")
    deliveryAddress: dict = Field(default_factory=dict, description="Address the parcel goes to")
    providerDetails: dict = Field(default_factory=dict, description="Carrier data, e.g. the chosen service point")


class DeliveryDetailsResponse(BaseModel):
    """Result of saving delivery details."""

    model_config = ConfigDict(from_attributes=True)

    deliveryDetails: dict = Field(description="Delivery details as stored, including deliveryFee in øre")
