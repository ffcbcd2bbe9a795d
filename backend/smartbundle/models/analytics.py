"""
Analytics event model - append-only storefront counters.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from smartbundle.core.database import Base
from smartbundle.models.base import utcnow


class EventType(str, Enum):
    """Event types counted on the dashboard."""

    VIEW = "view"
    CLICK = "click"
    ADD_TO_CART = "add_to_cart"
    PURCHASE = "purchase"


class AnalyticsEvent(Base):
    """Single storefront event. Never updated after insert."""

    __tablename__ = "analytics_events"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
    )
    shop_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("shops.id", ondelete="CASCADE"),
        index=True,
    )
    bundle_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("bundles.id", ondelete="SET NULL"),
        nullable=True,
    )

    event_type: Mapped[str] = mapped_column(String(50), nullable=False)
    event_source: Mapped[str] = mapped_column(String(50), default="storefront")
    product_id: Mapped[Optional[str]] = mapped_column(String(255))
    customer_id: Mapped[Optional[str]] = mapped_column(String(255), index=True)
    revenue: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
    )

    __table_args__ = (
        Index("ix_analytics_events_shop_type", "shop_id", "event_type"),
    )

    def __repr__(self) -> str:
        return f"<AnalyticsEvent {self.event_type}>"
