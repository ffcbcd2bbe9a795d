"""
Shop settings routes.
"""
from fastapi import APIRouter

from smartbundle.core.config import settings as app_settings
from smartbundle.core.database import DbSession
from smartbundle.core.logging import get_logger
from smartbundle.models.shop import Shop
from smartbundle.repositories.shop import ShopRepository
from smartbundle.routers.deps import CurrentShop
from smartbundle.schemas.shop import ShopSettings, ShopSettingsUpdate

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/settings", tags=["settings"])


def _to_settings(shop: Shop) -> ShopSettings:
    return ShopSettings(
        bundles_enabled=shop.bundles_enabled,
        analytics_enabled=shop.analytics_enabled,
        ai_enabled=shop.ai_enabled,
        ai_model=shop.ai_model,
        shop_domain=shop.domain,
        ai_configured=bool(app_settings.groq_api_key),
    )


@router.get("", response_model=ShopSettings)
async def get_settings(shop: CurrentShop) -> ShopSettings:
    return _to_settings(shop)


@router.patch("", response_model=ShopSettings)
async def update_settings(
    update: ShopSettingsUpdate,
    shop: CurrentShop,
    session: DbSession,
) -> ShopSettings:
    """Update shop feature flags; omitted fields are left unchanged."""
    update_data = update.model_dump(exclude_unset=True, by_alias=False)
    shop = await ShopRepository(session).update(shop, update_data)

    logger.info("Updated shop settings", shop=shop.domain, fields=sorted(update_data))
    return _to_settings(shop)
