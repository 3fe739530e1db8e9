"""Catalog API routes for drinks, packages and package pricing."""

from typing import Any

from fastapi import APIRouter, HTTPException, status

from storefront.schemas.catalog import DrinksBySlugsRequest, PackagePriceRequest, PackagePriceResponse
from storefront.services.catalog_service import CatalogService
from storefront.services.pricing_service import PricingService

router = APIRouter(tags=["catalog"])


@router.get(
    "/drinks",
    summary="List drinks",
    description="Returns all drinks keyed by slug. Private fields are removed.",
)
async def list_drinks() -> dict[str, Any]:
    service = CatalogService()
    return await service.list_drinks()


@router.post(
    "/drinks/by-slugs",
    summary="Get drinks by slugs",
    description="Returns the requested drinks keyed by slug. Unknown slugs are omitted.",
)
async def get_drinks_by_slugs(data: DrinksBySlugsRequest) -> dict[str, Any]:
    service = CatalogService()
    return await service.get_drinks_by_slugs(data.slugs)


@router.get(
    "/drinks/{slug}",
    summary="Get drink",
    responses={404: {"description": "Drink not found"}},
)
async def get_drink(slug: str) -> dict[str, Any]:
    service = CatalogService()
    return await service.get_drink(slug)


@router.get(
    "/packages",
    summary="List packages",
)
async def list_packages() -> list[dict[str, Any]]:
    service = CatalogService()
    return await service.list_packages()


@router.get(
    "/packages/{slug}",
    summary="Get package",
    responses={404: {"description": "Package not found"}},
)
async def get_package(slug: str) -> dict[str, Any]:
    service = CatalogService()
    return await service.get_package(slug)


@router.post(
    "/getPackagePrice",
    response_model=PackagePriceResponse,
    summary="Calculate package price",
    description="Prices a package size with the selected drinks using current catalog prices. Amounts are in øre.",
    responses={
        400: {"description": "Package has no such size"},
        404: {"description": "Package or drink not found"},
    },
)
async def get_package_price(data: PackagePriceRequest) -> PackagePriceResponse:
    """Calculate the price of one package.

    Args:
        data: Package slug, size and drink quantities.

    Returns:
        PackagePriceResponse: Price, recycling fee and undiscounted subtotal.

    Raises:
        HTTPException: 400 if the size is not offered for the package.
    """
    service = PricingService()
    try:
        result = await service.calculate_package_price(data.slug, data.selectedSize, data.selectedProducts)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    return PackagePriceResponse(**result.to_response())
