"""
Storefront service - bundle lookup and event ingest for the public widget.

Neither operation ever fails the caller: problems degrade to an empty result
or an unsuccessful acknowledgement.
"""
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from smartbundle.core.errors import NotFoundError
from smartbundle.core.logging import get_logger
from smartbundle.models.bundle import Bundle
from smartbundle.repositories.analytics import AnalyticsRepository
from smartbundle.repositories.bundle import BundleRepository
from smartbundle.repositories.shop import ShopRepository
from smartbundle.schemas.storefront import StorefrontBundle, StorefrontLookupResponse

logger = get_logger(__name__)


def _parse_uuid(value: Optional[str]) -> Optional[UUID]:
    if not value:
        return None
    try:
        return UUID(str(value))
    except ValueError:
        return None


class StorefrontService:
    """Public, unauthenticated reads and writes scoped by shop domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.shops = ShopRepository(session)
        self.bundles = BundleRepository(session)
        self.analytics = AnalyticsRepository(session)

    async def lookup(self, shop_domain: Optional[str], product_id: Optional[str]) -> StorefrontLookupResponse:
        """Active bundles of a shop that contain a product."""
        if not product_id or not shop_domain:
            return StorefrontLookupResponse(error="Missing productId or shop")

        try:
            shop = await self.shops.get_by_domain(shop_domain)
            if not shop:
                return StorefrontLookupResponse(error="Shop not found")
            if not shop.bundles_enabled:
                return StorefrontLookupResponse()

            bundles = await self.bundles.find_active_containing_product(shop.id, product_id)
            return StorefrontLookupResponse(
                bundles=[StorefrontBundle.from_bundle(b) for b in bundles],
            )
        except Exception as e:
            logger.error("Storefront lookup failed", shop=shop_domain, error=str(e))
            await self.session.rollback()
            return StorefrontLookupResponse(error="Internal server error")

    async def record_event(
        self,
        shop_domain: str,
        event_type: str,
        *,
        bundle_id: Optional[str] = None,
        product_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        revenue: Optional[Decimal] = None,
    ) -> bool:
        """
        Store a widget event.

        Unknown shops and shops with analytics disabled are acknowledged
        without storing anything. Returns False only on internal errors.
        """
        try:
            shop = await self.shops.get_by_domain(shop_domain)
            if not shop or not shop.analytics_enabled:
                return True

            # Events only reference bundles that belong to the shop
            bundle_uuid = _parse_uuid(bundle_id)
            if bundle_uuid and not await self.bundles.get_for_shop(shop.id, bundle_uuid):
                bundle_uuid = None

            await self.analytics.record(
                shop.id,
                event_type,
                bundle_id=bundle_uuid,
                product_id=product_id,
                customer_id=customer_id,
                revenue=revenue,
            )
            return True
        except Exception as e:
            logger.error("Analytics ingest failed", shop=shop_domain, error=str(e))
            await self.session.rollback()
            return False

    async def get_active_bundle(self, shop_domain: str, bundle_id: str) -> Bundle:
        """Resolve the bundle a cart is being composed for."""
        bundle_uuid = _parse_uuid(bundle_id)
        shop = await self.shops.get_by_domain(shop_domain)
        if not shop or not bundle_uuid:
            raise NotFoundError("Bundle not found")

        bundle = await self.bundles.get_for_shop(shop.id, bundle_uuid)
        if not bundle or not bundle.is_active:
            raise NotFoundError("Bundle not found")
        return bundle
