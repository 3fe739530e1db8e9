"""Catalog and pricing Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class DrinksBySlugsRequest(BaseModel):
    """Schema for POST /drinks/by-slugs."""

    model_config = ConfigDict(from_attributes=True)

    slugs: list[str] = Field(description="Drink slugs to fetch")


class PackagePriceRequest(BaseModel):
    """Schema for POST /getPackagePrice."""

    model_config = ConfigDict(from_attributes=True)

    slug: str = Field(min_length=1, description="Package slug")
    selectedSize: int = Field(ge=1, description="Package size tier")
    selectedProducts: dict[str, int] = Field(default_factory=dict, description="Drink slug to quantity")


class PackagePriceResponse(BaseModel):
    """Schema for the calculated package price. Amounts are in øre."""

    model_config = ConfigDict(from_attributes=True)

    price: int = Field(description="Final price of one package")
    recyclingFeePerPackage: int = Field(description="Recycling fee of one package")
    originalPrice: int = Field(description="Drink subtotal before markup and discount")
