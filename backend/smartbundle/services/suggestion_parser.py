"""
Suggestion parsing and catalog reconciliation.

Maps the product titles a model wrote back to catalog records with an
explicit match ranking:

    EXACT             case-insensitive equality
    CATALOG_CONTAINS  the catalog title contains the reference
    CONTAINED_BY      the reference contains the catalog title

The lowest rank wins; among equal ranks the earlier catalog entry wins.
"""
import json
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import IntEnum
from typing import Any, Optional, Sequence

from smartbundle.core.logging import get_logger
from smartbundle.models.bundle import MIN_ACTIVE_PRODUCTS
from smartbundle.schemas.catalog import CatalogProduct
from smartbundle.schemas.suggestion import SuggestedProduct, Suggestion

logger = get_logger(__name__)

PARSE_ERROR_MESSAGE = "Failed to parse AI suggestions. Please try again."
DEFAULT_DISCOUNT = Decimal("10")

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)


class SuggestionParseError(ValueError):
    """The completion text is not a JSON array."""


class MatchRank(IntEnum):
    EXACT = 0
    CATALOG_CONTAINS = 1
    CONTAINED_BY = 2


@dataclass
class SuggestionResult:
    suggestions: list[Suggestion] = field(default_factory=list)
    error: Optional[str] = None


def extract_json_array(raw: str) -> list[Any]:
    """Strip Markdown code fences and parse the completion as a JSON array."""
    cleaned = _FENCE_RE.sub("", raw or "").strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise SuggestionParseError(f"Invalid JSON: {e}") from e

    if not isinstance(parsed, list):
        raise SuggestionParseError("Expected a JSON array of suggestions")
    return parsed


def rank_match(catalog_title: str, reference: str) -> Optional[MatchRank]:
    """Rank how a catalog title matches a reference, None when it doesn't."""
    title = catalog_title.strip().lower()
    ref = reference.strip().lower()
    if not ref or not title:
        return None
    if title == ref:
        return MatchRank.EXACT
    if ref in title:
        return MatchRank.CATALOG_CONTAINS
    if title in ref:
        return MatchRank.CONTAINED_BY
    return None


def resolve_reference(
    reference: str,
    catalog: Sequence[CatalogProduct],
) -> Optional[tuple[CatalogProduct, MatchRank]]:
    """Pick the best-ranked catalog product for a title reference."""
    best: Optional[tuple[CatalogProduct, MatchRank]] = None
    for product in catalog:
        rank = rank_match(product.title, reference)
        if rank is None:
            continue
        if best is None or rank < best[1]:
            best = (product, rank)
            if rank == MatchRank.EXACT:
                break
    return best


def normalize_discount(value: Any) -> Decimal:
    """Coerce a suggested discount into (0, 100), falling back to 10."""
    if isinstance(value, bool):
        return DEFAULT_DISCOUNT
    try:
        discount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return DEFAULT_DISCOUNT
    if not discount.is_finite() or not (0 < discount < 100):
        return DEFAULT_DISCOUNT
    return discount


def reconcile(
    raw_items: Sequence[Any],
    catalog: Sequence[CatalogProduct],
) -> list[Suggestion]:
    """Resolve each suggestion's references and drop the unusable ones."""
    suggestions: list[Suggestion] = []

    for item in raw_items:
        if not isinstance(item, dict) or not isinstance(item.get("products"), list):
            logger.debug("Skipping malformed suggestion", item=item)
            continue

        resolved: list[SuggestedProduct] = []
        seen_ids: set[str] = set()
        for reference in item["products"]:
            if not isinstance(reference, str):
                continue
            match = resolve_reference(reference, catalog)
            if match is None:
                continue
            product, rank = match
            if product.id in seen_ids:
                continue
            seen_ids.add(product.id)
            resolved.append(
                SuggestedProduct(**product.model_dump(), match_rank=rank.name)
            )

        if len(resolved) < MIN_ACTIVE_PRODUCTS:
            continue

        name = str(item.get("name") or "").strip() or "AI Bundle"
        suggestions.append(
            Suggestion(
                name=name[:255],
                reason=str(item.get("reason") or ""),
                discount=normalize_discount(item.get("discount")),
                products=resolved,
            )
        )

    return suggestions


def parse_suggestions(raw: str, catalog: Sequence[CatalogProduct]) -> SuggestionResult:
    """Parse a completion into reconciled suggestions; never raises."""
    try:
        items = extract_json_array(raw)
    except SuggestionParseError as e:
        logger.warning("Failed to parse AI suggestions", error=str(e))
        return SuggestionResult(suggestions=[], error=PARSE_ERROR_MESSAGE)

    suggestions = reconcile(items, catalog)
    logger.info(
        "Suggestions reconciled",
        proposed=len(items),
        kept=len(suggestions),
    )
    return SuggestionResult(suggestions=suggestions)
