"""
Dashboard and analytics summary routes for the embedded admin.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Query

from smartbundle.core.database import DbSession
from smartbundle.core.logging import get_logger
from smartbundle.models.analytics import EventType
from smartbundle.models.bundle import BundleStatus
from smartbundle.repositories.analytics import AnalyticsRepository
from smartbundle.repositories.bundle import BundleRepository
from smartbundle.routers.deps import CurrentShop, ShopifyClient
from smartbundle.schemas.dashboard import (
    AnalyticsSummary,
    AnalyticsTotals,
    BundleStats,
    DashboardResponse,
    DashboardStats,
)
from smartbundle.services.billing import FREE_PLAN, BillingService, derive_plan_tier, subscription_price

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    shop: CurrentShop,
    session: DbSession,
    shopify: ShopifyClient,
    charge_id: Annotated[Optional[str], Query(description="Set by Shopify after billing approval")] = None,
) -> DashboardResponse:
    """
    Get bundle counters and the current plan.

    The plan falls back to FREE whenever the subscription lookup fails.
    """
    subscriptions = await BillingService(shopify).get_active_subscriptions()
    current_plan = (
        derive_plan_tier(subscription_price(subscriptions[0])) if subscriptions else FREE_PLAN
    )
    billing_confirmed = bool(charge_id and subscriptions)
    if billing_confirmed:
        logger.info("Billing confirmed", shop=shop.domain, plan=current_plan)

    bundles = BundleRepository(session)
    analytics = AnalyticsRepository(session)

    stats = DashboardStats(
        total_bundles=await bundles.count_for_shop(shop.id),
        active_bundles=await bundles.count_for_shop(shop.id, status=BundleStatus.ACTIVE.value),
        bundle_views=await analytics.count_for_shop(shop.id, EventType.VIEW.value),
        add_to_carts=await analytics.count_for_shop(shop.id, EventType.ADD_TO_CART.value),
    )

    return DashboardResponse(
        shop_domain=shop.domain,
        current_plan=current_plan,
        billing_confirmed=billing_confirmed,
        stats=stats,
    )


def _totals(counts: dict[str, int]) -> dict[str, int]:
    return {
        "views": counts.get(EventType.VIEW.value, 0),
        "clicks": counts.get(EventType.CLICK.value, 0),
        "add_to_carts": counts.get(EventType.ADD_TO_CART.value, 0),
        "purchases": counts.get(EventType.PURCHASE.value, 0),
    }


@router.get("/analytics", response_model=AnalyticsSummary)
async def get_analytics_summary(
    shop: CurrentShop,
    session: DbSession,
) -> AnalyticsSummary:
    """Event totals for the shop and per bundle."""
    analytics = AnalyticsRepository(session)
    totals = AnalyticsTotals(**_totals(await analytics.totals_by_type(shop.id)))

    per_bundle = await analytics.totals_by_bundle(shop.id)
    titles = {
        b.id: b.title
        for b in await BundleRepository(session).list_by_ids(shop.id, per_bundle.keys())
    }
    bundle_stats = [
        BundleStats(bundle_id=bundle_id, title=titles.get(bundle_id), **_totals(counts))
        for bundle_id, counts in per_bundle.items()
    ]
    bundle_stats.sort(key=lambda s: s.views, reverse=True)

    conversion_rate = (
        round(totals.add_to_carts / totals.views * 100, 1) if totals.views else 0.0
    )
    return AnalyticsSummary(
        totals=totals,
        conversion_rate=conversion_rate,
        bundle_stats=bundle_stats,
    )
