"""
Shop Pydantic schemas for request/response validation.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ShopBase(BaseModel):
    """Base shop schema with common fields."""

    domain: str = Field(..., min_length=1, max_length=255)

    @field_validator("domain")
    @classmethod
    def normalize_domain(cls, value: str) -> str:
        """Lowercase and strip the scheme: https://Shop.myshopify.com/ becomes shop.myshopify.com."""
        domain = value.strip().lower().removeprefix("https://").removeprefix("http://").strip("/")
        if not domain:
            raise ValueError("Shop domain is required")
        return domain


class ShopCreate(ShopBase):
    """Schema for registering a shop's offline token after OAuth."""

    access_token: str = Field(..., alias="accessToken")
    scopes: str

    model_config = ConfigDict(populate_by_name=True)


class ShopResponse(ShopBase):
    """Schema for shop API responses."""

    id: UUID
    name: str
    scopes: Optional[str] = None
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class ShopSettings(BaseModel):
    """Merchant-editable feature flags."""

    bundles_enabled: bool = Field(alias="bundlesEnabled")
    analytics_enabled: bool = Field(alias="analyticsEnabled")
    ai_enabled: bool = Field(alias="aiEnabled")
    ai_model: str = Field(alias="aiModel")
    shop_domain: str = Field(alias="shopDomain")
    ai_configured: bool = Field(False, alias="aiConfigured")

    model_config = ConfigDict(populate_by_name=True)


class ShopSettingsUpdate(BaseModel):
    """Schema for updating shop settings."""

    bundles_enabled: Optional[bool] = Field(None, alias="bundlesEnabled")
    analytics_enabled: Optional[bool] = Field(None, alias="analyticsEnabled")
    ai_enabled: Optional[bool] = Field(None, alias="aiEnabled")
    ai_model: Optional[str] = Field(None, min_length=1, max_length=100, alias="aiModel")

    model_config = ConfigDict(populate_by_name=True)
