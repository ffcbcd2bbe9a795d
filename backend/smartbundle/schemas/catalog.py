"""
Catalog schemas - products as read from the Shopify Admin API.
"""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CatalogProduct(BaseModel):
    """A store product flattened to its first variant."""

    id: str
    title: str
    description: str = ""
    product_type: str = Field("", alias="productType")
    tags: list[str] = Field(default_factory=list)
    price: Decimal = Decimal("0")
    compare_at_price: Optional[Decimal] = Field(None, alias="compareAtPrice")
    image_url: Optional[str] = Field(None, alias="imageUrl")
    variant_id: Optional[str] = Field(None, alias="variantId")

    model_config = ConfigDict(populate_by_name=True)


class CatalogResponse(BaseModel):
    products: list[CatalogProduct]
    total: int
