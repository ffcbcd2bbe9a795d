"""
Shop model - represents a merchant store that installed the app.
"""
from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from smartbundle.core.database import Base
from smartbundle.models.base import utcnow

if TYPE_CHECKING:
    from smartbundle.models.bundle import Bundle


DEFAULT_AI_MODEL = "llama-3.1-8b-instant"


class Shop(Base):
    """Merchant tenant with encrypted offline token and feature flags."""

    __tablename__ = "shops"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
    )
    domain: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Registered by the auth-proxy after OAuth; absent on lazily created shops
    access_token_encrypted: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    scopes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # Feature flags
    bundles_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    analytics_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    ai_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    ai_model: Mapped[str] = mapped_column(String(100), default=DEFAULT_AI_MODEL)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    # Relationships
    bundles: Mapped[list["Bundle"]] = relationship(
        "Bundle",
        back_populates="shop",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @staticmethod
    def display_name_for(domain: str) -> str:
        """Default display name for a lazily created shop."""
        return domain.removesuffix(".myshopify.com")

    def __repr__(self) -> str:
        return f"<Shop {self.domain}>"
