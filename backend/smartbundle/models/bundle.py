"""
Bundle models - a discounted grouping of products and its line items.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from smartbundle.core.database import Base
from smartbundle.models.base import utcnow

if TYPE_CHECKING:
    from smartbundle.models.shop import Shop


class BundleStatus(str, Enum):
    """Lifecycle states of a bundle."""

    ACTIVE = "active"
    DRAFT = "draft"
    # Written locally, waiting for the remote discount to be confirmed
    PENDING = "pending"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


MIN_ACTIVE_PRODUCTS = 2


class Bundle(Base):
    """Merchant-defined set of products sold together at a discount."""

    __tablename__ = "bundles"

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

    # Content
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    type: Mapped[str] = mapped_column(String(50), default="fixed")
    display_location: Mapped[str] = mapped_column(String(50), default="product_page")

    # Discount
    discount_type: Mapped[str] = mapped_column(
        String(20),
        default=DiscountType.PERCENTAGE.value,
    )
    discount_value: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    discount_code: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        index=True,
        nullable=False,
    )
    discount_node_id: Mapped[Optional[str]] = mapped_column(String(255))

    # Lifecycle
    status: Mapped[str] = mapped_column(
        String(20),
        default=BundleStatus.ACTIVE.value,
        index=True,
    )
    min_products: Mapped[int] = mapped_column(Integer, default=MIN_ACTIVE_PRODUCTS)
    is_ai_generated: Mapped[bool] = mapped_column(Boolean, default=False)
    priority: Mapped[int] = mapped_column(Integer, default=0)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    # Relationships
    shop: Mapped["Shop"] = relationship("Shop", back_populates="bundles")
    products: Mapped[list["BundleProduct"]] = relationship(
        "BundleProduct",
        back_populates="bundle",
        cascade="all, delete-orphan",
        order_by="BundleProduct.position",
        lazy="selectin",
    )

    @property
    def is_active(self) -> bool:
        return self.status == BundleStatus.ACTIVE.value

    def __repr__(self) -> str:
        return f"<Bundle {self.title[:30]} ({self.status})>"


class BundleProduct(Base):
    """
    Ordered line item of a bundle.

    Title, price and image are captured when the product is added and are not
    kept in sync with the catalog.
    """

    __tablename__ = "bundle_products"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
    )
    bundle_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("bundles.id", ondelete="CASCADE"),
        index=True,
    )

    # Shopify GIDs, e.g. "gid://shopify/Product/123"
    product_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    variant_id: Mapped[Optional[str]] = mapped_column(String(255))

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    compare_at_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    position: Mapped[int] = mapped_column(Integer, default=0)

    bundle: Mapped["Bundle"] = relationship("Bundle", back_populates="products")

    def __repr__(self) -> str:
        return f"<BundleProduct {self.position}: {self.title[:30]}>"
