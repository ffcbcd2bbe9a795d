"""
Shop repository for data access operations.
"""
from typing import Optional

from sqlalchemy import select

from smartbundle.models.analytics import AnalyticsEvent
from smartbundle.models.bundle import Bundle, BundleProduct
from smartbundle.models.shop import Shop
from smartbundle.repositories.base import BaseRepository


class ShopRepository(BaseRepository[Shop]):
    """Repository for Shop model operations."""

    model = Shop

    async def get_by_domain(self, domain: str) -> Optional[Shop]:
        """Get a shop by its myshopify domain."""
        stmt = select(Shop).where(Shop.domain == domain)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(self, domain: str) -> tuple[Shop, bool]:
        """
        Return the shop for a domain, creating it on first sight.
        Returns (shop, created) tuple.
        """
        existing = await self.get_by_domain(domain)
        if existing:
            return existing, False

        shop = Shop(domain=domain, name=Shop.display_name_for(domain))
        self.session.add(shop)
        await self.session.flush()
        return shop, True

    async def create_or_update(
        self,
        domain: str,
        access_token_encrypted: str,
        scopes: str,
    ) -> tuple[Shop, bool]:
        """
        Store the offline token for a shop, creating the shop if needed.
        Returns (shop, created) tuple.
        """
        shop, created = await self.get_or_create(domain)
        shop.access_token_encrypted = access_token_encrypted
        shop.scopes = scopes
        await self.session.flush()
        return shop, created

    async def delete_with_data(self, shop: Shop) -> None:
        """
        Delete a shop and everything that references it.

        Rows are removed explicitly, children first, so the result does not
        depend on the database enforcing ON DELETE CASCADE.
        """
        bundle_ids = select(Bundle.id).where(Bundle.shop_id == shop.id)

        await self.delete_where(AnalyticsEvent, AnalyticsEvent.shop_id == shop.id)
        await self.delete_where(BundleProduct, BundleProduct.bundle_id.in_(bundle_ids))
        await self.delete_where(Bundle, Bundle.shop_id == shop.id)
        await self.delete_where(Shop, Shop.id == shop.id)
        await self.session.flush()
