"""
Cart composition for the storefront widget.

The widget offers two options, the single product or the whole bundle, and
posts the resulting line items to the storefront's /cart/add.js.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional
from urllib.parse import quote

from smartbundle.core.errors import BundleValidationError
from smartbundle.core.logging import get_logger
from smartbundle.models.bundle import Bundle, DiscountType
from smartbundle.schemas.storefront import BundlePricing, CartLineItem, PricingLine
from smartbundle.services.pricing import compute_bundle_price, sum_prices, to_money

logger = get_logger(__name__)


class CartSelection(str, Enum):
    SINGLE = "single"
    BUNDLE = "bundle"


DEFAULT_SELECTION = CartSelection.BUNDLE


@dataclass
class CartPlan:
    items: list[CartLineItem] = field(default_factory=list)
    redirect_url: str = "/cart"
    discount_code: Optional[str] = None


def numeric_id(gid: Optional[str]) -> Optional[int]:
    """123 from "gid://shopify/ProductVariant/123" or "123"."""
    if gid is None:
        return None
    tail = str(gid).rsplit("/", 1)[-1]
    return int(tail) if tail.isdigit() else None


def redirect_url(buy_now: bool, discount_code: Optional[str] = None) -> str:
    target = "/checkout" if buy_now else "/cart"
    if discount_code:
        return f"/discount/{quote(discount_code)}?redirect={target}"
    return target


def compose_cart(
    selection: CartSelection,
    bundle: Bundle,
    single_variant_id: Optional[str] = None,
    variant_ids: Optional[dict[str, str]] = None,
    buy_now: bool = False,
) -> CartPlan:
    """
    Build the cart line items and the redirect that applies the discount.

    Bundle members without a usable variant id are skipped.

    Raises:
        BundleValidationError: Nothing could be added to the cart
    """
    variant_ids = variant_ids or {}

    if selection == CartSelection.SINGLE:
        variant = numeric_id(single_variant_id)
        items = [CartLineItem(id=variant, quantity=1)] if variant is not None else []
        discount_code = None
    else:
        items = []
        for product in bundle.products:
            variant = numeric_id(variant_ids.get(product.product_id) or product.variant_id)
            if variant is None:
                logger.debug("Bundle member has no variant", product_id=product.product_id)
                continue
            items.append(CartLineItem(id=variant, quantity=1))
        discount_code = bundle.discount_code

    if not items:
        raise BundleValidationError("No products available to add to cart")

    return CartPlan(
        items=items,
        redirect_url=redirect_url(buy_now, discount_code),
        discount_code=discount_code,
    )


def display_prices(bundle: Bundle) -> BundlePricing:
    """
    Member prices as the widget shows them.

    A percentage discount is applied to every member; a fixed amount is taken
    off the total only.
    """
    value = Decimal(str(bundle.discount_value))
    lines = []
    for product in bundle.products:
        price = to_money(product.price)
        if bundle.discount_type == DiscountType.PERCENTAGE.value:
            discounted = compute_bundle_price(price, bundle.discount_type, value)
        else:
            discounted = price
        lines.append(
            PricingLine(
                product_id=product.product_id,
                title=product.title,
                price=price,
                discounted_price=discounted,
            )
        )

    total = sum_prices(line.price for line in lines)
    bundle_price = compute_bundle_price(total, bundle.discount_type, value)
    return BundlePricing(
        lines=lines,
        total=total,
        bundle_price=bundle_price,
        savings=to_money(total - bundle_price),
    )
