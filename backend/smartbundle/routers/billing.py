"""
Plan selection routes backed by Shopify app subscriptions.
"""
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter

from smartbundle.core.config import settings
from smartbundle.core.database import DbSession
from smartbundle.repositories.analytics import AnalyticsRepository
from smartbundle.routers.deps import CurrentShop, ShopifyClient
from smartbundle.schemas.billing import (
    PlansResponse,
    SubscribeRequest,
    SubscribeResponse,
)
from smartbundle.services.billing import PLANS, BillingService

router = APIRouter(prefix="/admin/plans", tags=["billing"])

REVENUE_WINDOW = timedelta(days=30)


@router.get("", response_model=PlansResponse)
async def list_plans(
    shop: CurrentShop,
    session: DbSession,
    shopify: ShopifyClient,
) -> PlansResponse:
    """Plan catalog, the plan derived from Shopify, and last-30-day revenue."""
    current_plan = await BillingService(shopify).get_current_plan()
    monthly_revenue = await AnalyticsRepository(session).revenue_since(
        shop.id,
        datetime.now(timezone.utc) - REVENUE_WINDOW,
    )
    return PlansResponse(
        plans=[plan.to_response() for plan in PLANS],
        current_plan=current_plan,
        monthly_revenue=monthly_revenue,
        is_test_mode=settings.billing_test_mode,
    )


@router.post("/subscribe", response_model=SubscribeResponse)
async def subscribe(
    request: SubscribeRequest,
    shop: CurrentShop,
    shopify: ShopifyClient,
) -> SubscribeResponse:
    """
    Start a plan subscription.

    Paid plans answer with the confirmation URL the merchant must open;
    errors are reported in the body.
    """
    return await BillingService(shopify).subscribe(shop.domain, request.plan_id)
