"""
Billing plans backed by Shopify app subscriptions.

The plan tier is never stored: it is derived from the price of the shop's
active subscription each time it is needed.
"""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from smartbundle.core.config import settings
from smartbundle.core.errors import SmartBundleError
from smartbundle.core.logging import get_logger
from smartbundle.schemas.billing import PlanResponse, SubscribeResponse

logger = get_logger(__name__)

FREE_PLAN = "FREE"
PAID_TRIAL_DAYS = 7


@dataclass(frozen=True)
class Plan:
    id: str
    name: str
    price: Decimal
    revenue_limit: str
    features: tuple[str, ...] = field(default_factory=tuple)
    trial_days: int = 0
    popular: bool = False

    def to_response(self) -> PlanResponse:
        return PlanResponse(
            id=self.id,
            name=self.name,
            price=self.price,
            revenue_limit=self.revenue_limit,
            trial_days=self.trial_days,
            features=list(self.features),
            popular=self.popular,
        )


PLANS: tuple[Plan, ...] = (
    Plan(
        id="FREE",
        name="Free",
        price=Decimal("0"),
        revenue_limit="Up to $500 revenue/month",
        features=("Up to 3 bundles", "Basic widget", "Email support"),
    ),
    Plan(
        id="GROWTH",
        name="Growth",
        price=Decimal("19"),
        revenue_limit="Up to $1,000 revenue/month",
        features=(
            "Unlimited bundles",
            "AI bundle suggestions",
            "Priority support",
            "Custom widget styling",
        ),
        trial_days=PAID_TRIAL_DAYS,
        popular=True,
    ),
    Plan(
        id="SCALE",
        name="Scale",
        price=Decimal("49"),
        revenue_limit="Up to $5,000 revenue/month",
        features=(
            "Everything in Growth",
            "Advanced reporting",
            "A/B testing",
            "Dedicated support",
            "API access",
        ),
        trial_days=PAID_TRIAL_DAYS,
    ),
    Plan(
        id="PRO",
        name="Pro",
        price=Decimal("99"),
        revenue_limit="Unlimited revenue",
        features=(
            "Everything in Scale",
            "White-label option",
            "Custom integrations",
            "Account manager",
            "SLA guarantee",
        ),
        trial_days=PAID_TRIAL_DAYS,
    ),
)

PLANS_BY_ID = {plan.id: plan for plan in PLANS}


def derive_plan_tier(price: Any) -> str:
    """Map a monthly subscription price to its plan tier."""
    try:
        amount = Decimal(str(price))
    except (InvalidOperation, ValueError):
        return FREE_PLAN

    for plan in sorted(PLANS, key=lambda p: p.price, reverse=True):
        if plan.price > 0 and amount >= plan.price:
            return plan.id
    return FREE_PLAN


def subscription_price(subscription: dict[str, Any]) -> str:
    line_items = subscription.get("lineItems") or []
    if not line_items:
        return "0"
    pricing = ((line_items[0].get("plan") or {}).get("pricingDetails") or {})
    return (pricing.get("price") or {}).get("amount") or "0"


class BillingService:
    """Plan lookup and subscription creation through the Shopify client."""

    def __init__(self, shopify) -> None:
        self.shopify = shopify

    async def get_active_subscriptions(self) -> list[dict[str, Any]]:
        """Active subscriptions, empty on any lookup failure."""
        try:
            return await self.shopify.get_active_subscriptions()
        except Exception as e:
            logger.warning("Failed to check subscriptions", error=str(e))
            return []

    async def get_current_plan(self) -> str:
        subscriptions = await self.get_active_subscriptions()
        if not subscriptions:
            return FREE_PLAN
        return derive_plan_tier(subscription_price(subscriptions[0]))

    async def subscribe(self, shop_domain: str, plan_id: str) -> SubscribeResponse:
        """Start a subscription; paid plans return a confirmation URL."""
        plan: Optional[Plan] = PLANS_BY_ID.get(plan_id)
        if plan is None:
            return SubscribeResponse(plan_id=plan_id, error="Invalid plan")

        if plan.price == 0:
            return SubscribeResponse(
                success=True,
                plan_id=plan_id,
                message="You are on the Free plan",
            )

        return_url = f"https://{shop_domain}/admin/apps/{settings.shopify_app_handle}"
        try:
            confirmation_url = await self.shopify.create_subscription(
                name=f"Alintro {plan.name} Plan",
                price=plan.price,
                trial_days=plan.trial_days,
                return_url=return_url,
                test=settings.billing_test_mode,
            )
        except SmartBundleError as e:
            logger.error("Subscription creation failed", shop=shop_domain, plan=plan_id, error=e.message)
            return SubscribeResponse(plan_id=plan_id, error=e.message)

        logger.info("Subscription created", shop=shop_domain, plan=plan_id, test=settings.billing_test_mode)
        return SubscribeResponse(
            success=True,
            plan_id=plan_id,
            confirmation_url=confirmation_url,
        )
