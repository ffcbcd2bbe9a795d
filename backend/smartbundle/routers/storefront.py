"""
Public storefront API used by the bundle widget.

No authentication; open CORS is applied by StorefrontCORSMiddleware.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from smartbundle.core.database import DbSession
from smartbundle.core.logging import get_logger
from smartbundle.schemas.storefront import (
    AnalyticsAck,
    AnalyticsEventIn,
    CartComposeRequest,
    CartComposeResponse,
    StorefrontLookupResponse,
)
from smartbundle.services.cart import CartSelection, compose_cart, display_prices
from smartbundle.services.storefront import StorefrontService

logger = get_logger(__name__)

router = APIRouter(tags=["storefront"])


def get_storefront_service(session: DbSession) -> StorefrontService:
    return StorefrontService(session)


StorefrontServiceDep = Annotated[StorefrontService, Depends(get_storefront_service)]


@router.get(
    "/bundles",
    response_model=StorefrontLookupResponse,
    response_model_exclude_none=True,
)
async def lookup_bundles(
    service: StorefrontServiceDep,
    product_id: Annotated[Optional[str], Query(alias="productId")] = None,
    shop: Optional[str] = None,
) -> StorefrontLookupResponse:
    """
    Active bundles containing a product.

    Always answers 200; problems are reported in the error field.
    """
    return await service.lookup(shop, product_id)


@router.post("/analytics", response_model=AnalyticsAck)
async def record_event(
    event: AnalyticsEventIn,
    service: StorefrontServiceDep,
):
    """Record a widget event; any non-empty event type is stored as given."""
    if not event.shop_domain or not event.event_type:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Missing required fields"},
        )
    success = await service.record_event(
        event.shop_domain,
        event.event_type,
        bundle_id=event.bundle_id,
        product_id=event.product_id,
        customer_id=event.customer_id,
        revenue=event.revenue,
    )
    return AnalyticsAck(success=success)


@router.post(
    "/cart/compose",
    response_model=CartComposeResponse,
    response_model_exclude_none=True,
)
async def compose(
    request: CartComposeRequest,
    service: StorefrontServiceDep,
) -> CartComposeResponse:
    """
    Line items and redirect for the widget's add-to-cart.

    The bundle option redirects through /discount/<code> so Shopify applies
    the bundle discount.
    """
    bundle = await service.get_active_bundle(request.shop, request.bundle_id)
    selection = CartSelection(request.option)
    plan = compose_cart(
        selection,
        bundle,
        single_variant_id=request.variant_id,
        variant_ids=request.variant_ids,
        buy_now=request.buy_now,
    )

    logger.info(
        "Cart composed",
        shop=request.shop,
        bundle_id=str(bundle.id),
        option=selection.value,
        items=len(plan.items),
    )
    return CartComposeResponse(
        items=plan.items,
        redirect_url=plan.redirect_url,
        discount_code=plan.discount_code,
        pricing=display_prices(bundle) if selection == CartSelection.BUNDLE else None,
    )
