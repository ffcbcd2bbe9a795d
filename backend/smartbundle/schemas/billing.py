"""
Billing plan schemas.
"""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PlanResponse(BaseModel):
    id: str
    name: str
    price: Decimal
    interval: str = "month"
    revenue_limit: str = Field(alias="revenueLimit")
    trial_days: int = Field(0, alias="trialDays")
    features: list[str]
    popular: bool = False

    model_config = ConfigDict(populate_by_name=True)


class PlansResponse(BaseModel):
    plans: list[PlanResponse]
    current_plan: str = Field(alias="currentPlan")
    monthly_revenue: Decimal = Field(Decimal("0"), alias="monthlyRevenue")
    is_test_mode: bool = Field(alias="isTestMode")

    model_config = ConfigDict(populate_by_name=True)


class SubscribeRequest(BaseModel):
    plan_id: str = Field(..., alias="planId")

    model_config = ConfigDict(populate_by_name=True)


class SubscribeResponse(BaseModel):
    success: bool = False
    plan_id: str = Field(alias="planId")
    confirmation_url: Optional[str] = Field(None, alias="confirmationUrl")
    message: Optional[str] = None
    error: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)
