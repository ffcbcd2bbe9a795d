"""
Storefront schemas - the public widget API.

Only fields the widget needs to render and add to cart are exposed.
"""
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from smartbundle.models.bundle import Bundle


class StorefrontProduct(BaseModel):
    id: str
    title: str
    price: Decimal
    image_url: Optional[str] = Field(None, alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True)


class StorefrontBundle(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    discount_type: str = Field(alias="discountType")
    discount_value: Decimal = Field(alias="discountValue")
    discount_code: str = Field(alias="discountCode")
    products: list[StorefrontProduct]

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_bundle(cls, bundle: Bundle) -> "StorefrontBundle":
        return cls(
            id=str(bundle.id),
            title=bundle.title,
            description=bundle.description,
            discount_type=bundle.discount_type,
            discount_value=bundle.discount_value,
            discount_code=bundle.discount_code,
            products=[
                StorefrontProduct(
                    id=p.product_id,
                    title=p.title,
                    price=p.price,
                    image_url=p.image_url,
                )
                for p in bundle.products
            ],
        )


class StorefrontLookupResponse(BaseModel):
    bundles: list[StorefrontBundle] = Field(default_factory=list)
    error: Optional[str] = None


class AnalyticsEventIn(BaseModel):
    """Widget event; required fields are checked by the handler (400)."""

    event_type: Optional[str] = Field(None, alias="eventType")
    bundle_id: Optional[str] = Field(None, alias="bundleId")
    product_id: Optional[str] = Field(None, alias="productId")
    shop_domain: Optional[str] = Field(None, alias="shopDomain")
    customer_id: Optional[str] = Field(None, alias="customerId")
    revenue: Optional[Decimal] = None

    model_config = ConfigDict(populate_by_name=True)


class AnalyticsAck(BaseModel):
    success: bool


class CartComposeRequest(BaseModel):
    shop: str = Field(..., min_length=1)
    bundle_id: str = Field(..., alias="bundleId")
    option: Literal["single", "bundle"] = "bundle"
    variant_id: Optional[str] = Field(None, alias="variantId")
    # Member variant ids found by the widget, keyed by product id
    variant_ids: dict[str, str] = Field(default_factory=dict, alias="variantIds")
    buy_now: bool = Field(False, alias="buyNow")

    model_config = ConfigDict(populate_by_name=True)


class CartLineItem(BaseModel):
    id: int
    quantity: int = 1


class PricingLine(BaseModel):
    product_id: str = Field(alias="productId")
    title: str
    price: Decimal
    discounted_price: Decimal = Field(alias="discountedPrice")

    model_config = ConfigDict(populate_by_name=True)


class BundlePricing(BaseModel):
    lines: list[PricingLine]
    total: Decimal
    bundle_price: Decimal = Field(alias="bundlePrice")
    savings: Decimal

    model_config = ConfigDict(populate_by_name=True)


class CartComposeResponse(BaseModel):
    items: list[CartLineItem]
    redirect_url: str = Field(alias="redirectUrl")
    discount_code: Optional[str] = Field(None, alias="discountCode")
    pricing: Optional[BundlePricing] = None

    model_config = ConfigDict(populate_by_name=True)
