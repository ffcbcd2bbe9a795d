"""
AI bundle suggestion schemas.
"""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from smartbundle.schemas.catalog import CatalogProduct


class SuggestedProduct(CatalogProduct):
    """A catalog product resolved from a suggestion's title reference."""

    match_rank: Optional[str] = Field(None, alias="matchRank")


class Suggestion(BaseModel):
    """An unconfirmed bundle proposal; never persisted as-is."""

    name: str = Field(..., min_length=1, max_length=255)
    reason: str = ""
    discount: Decimal = Decimal("10")
    products: list[SuggestedProduct]

    model_config = ConfigDict(populate_by_name=True)


class SuggestionsResponse(BaseModel):
    suggestions: list[Suggestion]
    error: Optional[str] = None
    catalog_size: int = Field(0, alias="catalogSize")

    model_config = ConfigDict(populate_by_name=True)


class AcceptBatchRequest(BaseModel):
    suggestions: list[Suggestion] = Field(..., min_length=1)


class AcceptBatchResponse(BaseModel):
    created: int
    total: int
