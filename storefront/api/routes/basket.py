"""Basket API routes: reading the basket, selections, items and checkout details."""

from fastapi import APIRouter, HTTPException, Query, status

from storefront.api.deps import SessionId
from storefront.schemas.session import (
    AddItemRequest,
    BasketResponse,
    CustomerDetailsResponse,
    CustomerDetailsUpdate,
    DeliveryDetailsResponse,
    DeliveryDetailsUpdate,
    RandomSelectionCreate,
    TemporarySelectionCreate,
    TemporarySelectionResponse,
    UpdateQuantityRequest,
)
from storefront.services.basket_service import BasketService

router = APIRouter(tags=["basket"])


def _bad_request(e: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get(
    "/getBasket",
    response_model=BasketResponse,
    summary="Get basket",
    description="Returns the basket items, customer details and delivery details of a session.",
)
async def get_basket(
    session_id: SessionId,
    consent_id: str | None = Query(default=None, alias="consentId", description="Session id"),
) -> BasketResponse:
    """Get the basket for the session."""
    service = BasketService()
    basket = await service.get_basket(consent_id or session_id)
    return BasketResponse(**basket)


@router.post(
    "/basket/selections",
    response_model=TemporarySelectionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create package selection",
    description="Prices a hand-picked package and stores it as a temporary selection.",
)
async def create_selection(data: TemporarySelectionCreate, session_id: SessionId) -> TemporarySelectionResponse:
    """Create a temporary selection.

    Raises:
        HTTPException: 400 if the drinks do not fit the package.
    """
    service = BasketService()
    try:
        selection = await service.create_temporary_selection(
            session_id,
            package_slug=data.packageSlug,
            selected_size=data.selectedSize,
            selected_products=data.selectedProducts,
            sugar_preference=data.sugarPreference,
        )
    except ValueError as e:
        raise _bad_request(e) from e
    return TemporarySelectionResponse(**selection)


@router.post(
    "/basket/random-selection",
    response_model=TemporarySelectionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create mystery-box selection",
    description="Draws a random set of drinks for a package and stores it as a temporary selection.",
)
async def create_random_selection(data: RandomSelectionCreate, session_id: SessionId) -> TemporarySelectionResponse:
    """Create a random temporary selection.

    Raises:
        HTTPException: 400 if no drinks match the sugar preference.
    """
    service = BasketService()
    try:
        selection = await service.generate_random_selection(
            session_id,
            slug=data.slug,
            selected_size=data.selectedSize,
            sugar_preference=data.sugarPreference,
        )
    except ValueError as e:
        raise _bad_request(e) from e
    return TemporarySelectionResponse(**selection)


@router.post(
    "/basket/items",
    response_model=BasketResponse,
    summary="Add item",
    description="Adds a temporary selection to the basket, merging identical items.",
)
async def add_item(data: AddItemRequest, session_id: SessionId) -> BasketResponse:
    """Add a selection to the basket."""
    service = BasketService()
    try:
        await service.add_item(session_id, data.selectionId, data.quantity)
    except ValueError as e:
        raise _bad_request(e) from e
    return BasketResponse(**await service.get_basket(session_id))


@router.patch(
    "/basket/items/{index}",
    response_model=BasketResponse,
    summary="Update item quantity",
)
async def update_item_quantity(index: int, data: UpdateQuantityRequest, session_id: SessionId) -> BasketResponse:
    """Change the quantity of a basket item."""
    service = BasketService()
    try:
        await service.update_quantity(session_id, index, data.quantity)
    except ValueError as e:
        raise _bad_request(e) from e
    return BasketResponse(**await service.get_basket(session_id))


@router.delete(
    "/basket/items/{index}",
    response_model=BasketResponse,
    summary="Remove item",
)
async def remove_item(index: int, session_id: SessionId) -> BasketResponse:
    """Remove a basket item."""
    service = BasketService()
    try:
        await service.remove_item(session_id, index)
    except ValueError as e:
        raise _bad_request(e) from e
    return BasketResponse(**await service.get_basket(session_id))


@router.put(
    "/basket/customer-details",
    response_model=CustomerDetailsResponse,
    summary="Update customer details",
    description="Validates and stores customer details. Invalid fields are reported in errors.",
)
async def update_customer_details(data: CustomerDetailsUpdate, session_id: SessionId) -> CustomerDetailsResponse:
    """Store customer details and return per-field errors."""
    service = BasketService()
    stored, errors = await service.update_customer_details(
        session_id,
        data.customerDetails.model_dump(exclude_none=True),
    )
    return CustomerDetailsResponse(customerDetails=stored, errors=errors)


@router.put(
    "/basket/delivery-details",
    response_model=DeliveryDetailsResponse,
    summary="Update delivery details",
    description="Stores the delivery option with a fee based on basket weight.",
)
async def update_delivery_details(data: DeliveryDetailsUpdate, session_id: SessionId) -> DeliveryDetailsResponse:
    """Store delivery details."""
    service = BasketService()
    details = await service.update_delivery_details(
        session_id,
        delivery_option=data.deliveryOption,
        delivery_address=data.deliveryAddress,
        provider_details=data.providerDetails,
    )
    return DeliveryDetailsResponse(deliveryDetails=details)
