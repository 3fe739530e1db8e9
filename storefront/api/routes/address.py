"""Address validation (DAWA) and pickup point (PostNord) routes."""

from typing import Any

from fastapi import APIRouter, HTTPException, Query, status

from storefront.schemas.address import (
    DatavaskRequest,
    DatavaskResponse,
    ValidateAddressRequest,
    ValidateAddressResponse,
)
from storefront.services.address_service import AddressService
from storefront.services.pickup_point_service import PickupPointService

router = APIRouter(tags=["address"])


@router.post(
    "/dawa/datavask",
    response_model=DatavaskResponse,
    summary="Validate customer address",
    description="Cleans the address with DAWA datavask. Only a precise (category A) match is accepted.",
    responses={
        400: {"description": "Missing fields or no precise match"},
        500: {"description": "DAWA unavailable"},
    },
)
async def datavask(data: DatavaskRequest) -> DatavaskResponse:
    """Validate an address from customer details.

    Raises:
        HTTPException: 400 if address, city or postalCode is missing.
    """
    service = AddressService()
    try:
        result = await service.datavask(data.model_dump())
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    return DatavaskResponse(**result)


@router.post(
    "/dawa/validate-address",
    response_model=ValidateAddressResponse,
    summary="Validate free-text address",
    responses={400: {"description": "No precise match"}},
)
async def validate_address(data: ValidateAddressRequest) -> ValidateAddressResponse:
    service = AddressService()
    try:
        top = await service.validate_address(data.address)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    return ValidateAddressResponse(data=top)


@router.get(
    "/postnord/servicepoints",
    summary="Find pickup points",
    description="Returns the nearest PostNord service points for an address, as returned by PostNord.",
)
async def get_service_points(
    city: str = Query(description="City"),
    postal_code: str = Query(alias="postalCode", description="Postal code"),
    street_name: str = Query(alias="streetName", description="Street name"),
    street_number: str = Query(default="", alias="streetNumber", description="House number"),
) -> dict[str, Any]:
    service = PickupPointService()
    return await service.find_nearest(city, postal_code, street_name, street_number)
