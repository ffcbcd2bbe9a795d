"""
Dashboard and analytics summary schemas.
"""
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DashboardStats(BaseModel):
    """Bundle and widget counters for the embedded dashboard."""

    total_bundles: int = Field(alias="totalBundles")
    active_bundles: int = Field(alias="activeBundles")
    bundle_views: int = Field(alias="bundleViews")
    add_to_carts: int = Field(alias="addToCarts")

    model_config = ConfigDict(populate_by_name=True)


class DashboardResponse(BaseModel):
    shop_domain: str = Field(alias="shopDomain")
    current_plan: str = Field(alias="currentPlan")
    billing_confirmed: bool = Field(False, alias="billingConfirmed")
    stats: DashboardStats

    model_config = ConfigDict(populate_by_name=True)


class AnalyticsTotals(BaseModel):
    views: int = 0
    clicks: int = 0
    add_to_carts: int = Field(0, alias="addToCarts")
    purchases: int = 0

    model_config = ConfigDict(populate_by_name=True)


class BundleStats(BaseModel):
    bundle_id: UUID = Field(alias="bundleId")
    title: Optional[str] = None
    views: int = 0
    clicks: int = 0
    add_to_carts: int = Field(0, alias="addToCarts")
    purchases: int = 0

    model_config = ConfigDict(populate_by_name=True)


class AnalyticsSummary(BaseModel):
    totals: AnalyticsTotals
    conversion_rate: float = Field(alias="conversionRate")
    bundle_stats: list[BundleStats] = Field(alias="bundleStats")

    model_config = ConfigDict(populate_by_name=True)
