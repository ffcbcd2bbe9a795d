"""
Shopify webhook receiver: app uninstall and GDPR topics.

Every verified webhook is acknowledged with 200, even when handling fails,
so Shopify does not keep redelivering it.
"""
import json
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Header, HTTPException, Request, status

from smartbundle.core.database import DbSession
from smartbundle.core.logging import get_logger
from smartbundle.core.security import verify_shopify_hmac
from smartbundle.repositories.analytics import AnalyticsRepository
from smartbundle.repositories.shop import ShopRepository

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])

SHOP_DELETION_TOPICS = {"app/uninstalled", "shop/redact"}


async def _delete_shop(session, shop_domain: str) -> dict[str, Any]:
    repo = ShopRepository(session)
    shop = await repo.get_by_domain(shop_domain)
    if not shop:
        return {"deleted": False}
    await repo.delete_with_data(shop)
    logger.info("Deleted shop and data", shop=shop_domain)
    return {"deleted": True}


async def _redact_customer(session, payload: dict[str, Any]) -> dict[str, Any]:
    customer_id = (payload.get("customer") or {}).get("id")
    if customer_id is None:
        return {"redacted": 0}
    removed = await AnalyticsRepository(session).delete_for_customer(str(customer_id))
    logger.info("Redacted customer events", customer_id=str(customer_id), removed=removed)
    return {"redacted": removed}


async def _report_customer_data(session, shop_domain: str, payload: dict[str, Any]) -> dict[str, Any]:
    customer_id = (payload.get("customer") or {}).get("id")
    shop = await ShopRepository(session).get_by_domain(shop_domain)
    events = 0
    if shop and customer_id is not None:
        analytics = AnalyticsRepository(session)
        events = await analytics.count_for_customer(shop.id, str(customer_id))
    logger.info(
        "Customer data requested",
        shop=shop_domain,
        customer_id=str(customer_id),
        events=events,
    )
    return {"events": events}


@router.post("/webhooks")
async def receive_webhook(
    request: Request,
    session: DbSession,
    x_shopify_topic: Annotated[Optional[str], Header()] = None,
    x_shopify_shop_domain: Annotated[Optional[str], Header()] = None,
    x_shopify_hmac_sha256: Annotated[Optional[str], Header()] = None,
) -> dict[str, Any]:
    """Verify the HMAC signature and dispatch on the topic."""
    body = await request.body()
    if not x_shopify_hmac_sha256 or not verify_shopify_hmac(x_shopify_hmac_sha256, body):
        logger.warning("Webhook signature rejected", topic=x_shopify_topic)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook signature",
        )

    topic = x_shopify_topic or ""
    shop_domain = x_shopify_shop_domain or ""
    logger.info("Webhook received", topic=topic, shop=shop_domain)

    try:
        payload = json.loads(body or b"{}")
        if not isinstance(payload, dict):
            payload = {}

        if topic in SHOP_DELETION_TOPICS:
            result = await _delete_shop(session, shop_domain)
        elif topic == "customers/redact":
            result = await _redact_customer(session, payload)
        elif topic == "customers/data_request":
            result = await _report_customer_data(session, shop_domain, payload)
        else:
            logger.info("Unhandled webhook topic", topic=topic)
            result = {}
    except Exception as e:
        logger.error("Webhook handling failed", topic=topic, shop=shop_domain, error=str(e))
        await session.rollback()
        return {"success": False, "topic": topic}

    return {"success": True, "topic": topic, **result}
