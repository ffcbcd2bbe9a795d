"""
Bundle Pydantic schemas for request/response validation.
"""
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from smartbundle.models.bundle import MIN_ACTIVE_PRODUCTS, Bundle, DiscountType
from smartbundle.services.pricing import compute_bundle_price, sum_prices


class BundleProductIn(BaseModel):
    """A product picked for a bundle, with the fields captured at add time."""

    product_id: str = Field(..., min_length=1, alias="productId")
    variant_id: Optional[str] = Field(None, alias="variantId")
    title: str = Field(..., min_length=1)
    price: Decimal = Field(Decimal("0"), ge=0)
    compare_at_price: Optional[Decimal] = Field(None, alias="compareAtPrice")
    image_url: Optional[str] = Field(None, alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True)


class BundleDraft(BaseModel):
    """Manually composed bundle, used for both create and full edit."""

    title: str = ""
    description: Optional[str] = None
    discount_type: DiscountType = Field(DiscountType.PERCENTAGE, alias="discountType")
    discount_value: Decimal = Field(Decimal("10"), ge=0, alias="discountValue")
    status: Literal["active", "draft"] = "active"
    priority: int = 0
    min_products: int = Field(MIN_ACTIVE_PRODUCTS, ge=1, alias="minProducts")
    products: list[BundleProductIn] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class BundleProductResponse(BaseModel):
    id: UUID
    product_id: str = Field(alias="productId")
    variant_id: Optional[str] = Field(None, alias="variantId")
    title: str
    price: Decimal
    compare_at_price: Optional[Decimal] = Field(None, alias="compareAtPrice")
    image_url: Optional[str] = Field(None, alias="imageUrl")
    position: int

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class BundleResponse(BaseModel):
    """Schema for bundle API responses."""

    id: UUID
    title: str
    description: Optional[str] = None
    discount_type: str = Field(alias="discountType")
    discount_value: Decimal = Field(alias="discountValue")
    discount_code: str = Field(alias="discountCode")
    status: str
    priority: int
    min_products: int = Field(alias="minProducts")
    is_ai_generated: bool = Field(alias="isAiGenerated")
    products: list[BundleProductResponse]
    original_price: Decimal = Field(Decimal("0"), alias="originalPrice")
    bundle_price: Decimal = Field(Decimal("0"), alias="bundlePrice")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )

    @classmethod
    def from_bundle(cls, bundle: Bundle) -> "BundleResponse":
        response = cls.model_validate(bundle)
        response.original_price = sum_prices(p.price for p in bundle.products)
        response.bundle_price = compute_bundle_price(
            response.original_price,
            bundle.discount_type,
            bundle.discount_value,
        )
        return response


class BundleListResponse(BaseModel):
    bundles: list[BundleResponse]
    total: int


class BundleCreatedResponse(BaseModel):
    id: UUID
    discount_code: str = Field(alias="discountCode")

    model_config = ConfigDict(populate_by_name=True)


class BulkActionRequest(BaseModel):
    action: Literal["delete", "activate", "pause"]
    bundle_ids: list[UUID] = Field(..., min_length=1, alias="bundleIds")

    model_config = ConfigDict(populate_by_name=True)


class BulkActionResponse(BaseModel):
    action: str
    affected: int
    # Ids that were not found or could not be activated
    skipped: list[UUID] = Field(default_factory=list)
