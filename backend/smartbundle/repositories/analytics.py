"""
Analytics repository - append-only event storage and counters.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select

from smartbundle.models.analytics import AnalyticsEvent, EventType
from smartbundle.repositories.base import BaseRepository


class AnalyticsRepository(BaseRepository[AnalyticsEvent]):
    """Repository for AnalyticsEvent operations."""

    model = AnalyticsEvent

    async def record(
        self,
        shop_id: UUID,
        event_type: str,
        *,
        bundle_id: Optional[UUID] = None,
        product_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        revenue=None,
    ) -> AnalyticsEvent:
        """Append a storefront event."""
        return await self.create({
            "shop_id": shop_id,
            "event_type": event_type,
            "event_source": "storefront",
            "bundle_id": bundle_id,
            "product_id": product_id,
            "customer_id": customer_id,
            "revenue": revenue,
        })

    async def count_for_shop(self, shop_id: UUID, event_type: Optional[str] = None) -> int:
        criteria = [AnalyticsEvent.shop_id == shop_id]
        if event_type:
            criteria.append(AnalyticsEvent.event_type == event_type)
        return await self.count_where(*criteria)

    async def totals_by_type(self, shop_id: UUID) -> dict[str, int]:
        """Event counts keyed by event type."""
        stmt = (
            select(AnalyticsEvent.event_type, func.count())
            .where(AnalyticsEvent.shop_id == shop_id)
            .group_by(AnalyticsEvent.event_type)
        )
        result = await self.session.execute(stmt)
        return {event_type: count for event_type, count in result.all()}

    async def totals_by_bundle(self, shop_id: UUID) -> dict[UUID, dict[str, int]]:
        """Event counts per bundle, then per event type."""
        stmt = (
            select(AnalyticsEvent.bundle_id, AnalyticsEvent.event_type, func.count())
            .where(
                AnalyticsEvent.shop_id == shop_id,
                AnalyticsEvent.bundle_id.is_not(None),
            )
            .group_by(AnalyticsEvent.bundle_id, AnalyticsEvent.event_type)
        )
        result = await self.session.execute(stmt)

        totals: dict[UUID, dict[str, int]] = {}
        for bundle_id, event_type, count in result.all():
            totals.setdefault(bundle_id, {})[event_type] = count
        return totals

    async def delete_for_customer(self, customer_id: str) -> int:
        """Remove every event attributed to a customer (GDPR redact)."""
        return await self.delete_where(AnalyticsEvent, AnalyticsEvent.customer_id == customer_id)

    async def revenue_since(self, shop_id: UUID, since: datetime) -> Decimal:
        """Sum of purchase revenue recorded after a point in time."""
        stmt = select(func.coalesce(func.sum(AnalyticsEvent.revenue), 0)).where(
            AnalyticsEvent.shop_id == shop_id,
            AnalyticsEvent.event_type == EventType.PURCHASE.value,
            AnalyticsEvent.created_at >= since,
        )
        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar() or 0))

    async def count_for_customer(self, shop_id: UUID, customer_id: str) -> int:
        return await self.count_where(
            AnalyticsEvent.shop_id == shop_id,
            AnalyticsEvent.customer_id == customer_id,
        )
