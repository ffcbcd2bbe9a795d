"""
Bundle repository for data access operations.
"""
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import or_, select

from smartbundle.models.bundle import Bundle, BundleProduct, BundleStatus
from smartbundle.repositories.base import BaseRepository

SHOPIFY_PRODUCT_GID_PREFIX = "gid://shopify/Product/"


class BundleRepository(BaseRepository[Bundle]):
    """Repository for Bundle and BundleProduct operations."""

    model = Bundle

    async def get_for_shop(self, shop_id: UUID, bundle_id: UUID) -> Optional[Bundle]:
        """Get a bundle only if it belongs to the given shop."""
        stmt = select(Bundle).where(
            Bundle.id == bundle_id,
            Bundle.shop_id == shop_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_shop(
        self,
        shop_id: UUID,
        *,
        status: Optional[str] = None,
    ) -> list[Bundle]:
        """List a shop's bundles, newest first."""
        stmt = select(Bundle).where(Bundle.shop_id == shop_id)
        if status:
            stmt = stmt.where(Bundle.status == status)
        stmt = stmt.order_by(Bundle.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_ids(self, shop_id: UUID, bundle_ids: Iterable[UUID]) -> list[Bundle]:
        stmt = select(Bundle).where(
            Bundle.shop_id == shop_id,
            Bundle.id.in_(list(bundle_ids)),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_active_containing_product(
        self,
        shop_id: UUID,
        product_id: str,
    ) -> list[Bundle]:
        """
        Active bundles of a shop that include a product.

        Accepts either a product GID or its numeric id; stored ids match when
        they are equal to the given value or end in "/<numeric id>".
        """
        numeric_id = product_id.removeprefix(SHOPIFY_PRODUCT_GID_PREFIX)
        matching_bundle_ids = select(BundleProduct.bundle_id).where(
            or_(
                BundleProduct.product_id == product_id,
                BundleProduct.product_id.endswith(f"/{numeric_id}", autoescape=True),
            )
        )
        stmt = (
            select(Bundle)
            .where(
                Bundle.shop_id == shop_id,
                Bundle.status == BundleStatus.ACTIVE.value,
                Bundle.id.in_(matching_bundle_ids),
            )
            .order_by(Bundle.priority.desc(), Bundle.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_for_shop(self, shop_id: UUID, status: Optional[str] = None) -> int:
        criteria = [Bundle.shop_id == shop_id]
        if status:
            criteria.append(Bundle.status == status)
        return await self.count_where(*criteria)

    async def replace_products(
        self,
        bundle: Bundle,
        products: list[BundleProduct],
    ) -> Bundle:
        """Replace a bundle's line items wholesale, renumbering positions."""
        for position, product in enumerate(products):
            product.position = position
        bundle.products = products
        await self.session.flush()
        return bundle

    async def delete_bundle(self, bundle: Bundle) -> None:
        """Delete a bundle and its line items."""
        await self.delete_where(BundleProduct, BundleProduct.bundle_id == bundle.id)
        await self.delete_where(Bundle, Bundle.id == bundle.id)
        await self.session.flush()
