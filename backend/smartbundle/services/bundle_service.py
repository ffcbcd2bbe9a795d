"""
Bundle persistence with Shopify discount codes.

A bundle lives in two systems: local rows and a Shopify code discount. Creation
is an explicit two-phase write:

1. Insert the bundle as "pending" with its products and flush.
2. Create the remote discount. On failure the pending rows are deleted.
3. Store the discount node id and move the bundle to its target status. On
   failure the remote discount is deleted (best effort).
"""
import re
import threading
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Iterable, Optional, Protocol
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from smartbundle.core.errors import BundleValidationError, NotFoundError, SmartBundleError
from smartbundle.core.logging import get_logger
from smartbundle.models.bundle import (
    MIN_ACTIVE_PRODUCTS,
    Bundle,
    BundleProduct,
    BundleStatus,
    DiscountType,
)
from smartbundle.models.shop import Shop
from smartbundle.repositories.bundle import BundleRepository
from smartbundle.schemas.bundle import BundleDraft, BundleProductIn
from smartbundle.schemas.suggestion import Suggestion

logger = get_logger(__name__)

BASE36_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
CODE_PREFIX_LENGTH = 10
DEFAULT_CODE_PREFIX = "BUNDLE"


class DiscountGateway(Protocol):
    """The part of the Shopify client the persister needs."""

    async def create_discount(self, title: str, code: str, discount_type: str, value: Decimal) -> str: ...

    async def update_discount(self, node_id: str, title: str, discount_type: str, value: Decimal) -> None: ...

    async def delete_discount(self, node_id: str) -> None: ...


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


class DiscountCodeGenerator:
    """
    Title prefix plus base-36 millisecond timestamp, e.g. SUMMERKIT-LZ3K9Q1A.

    The timestamp never repeats within a process: a second code issued in the
    same millisecond uses the next millisecond.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        self._clock = clock or (lambda: int(time.time() * 1000))
        self._last = 0
        self._lock = threading.Lock()

    def _next_timestamp(self) -> int:
        with self._lock:
            self._last = max(self._clock(), self._last + 1)
            return self._last

    def generate(self, title: str) -> str:
        prefix = re.sub(r"[^a-zA-Z0-9]", "", title or "").upper()[:CODE_PREFIX_LENGTH]
        return f"{prefix or DEFAULT_CODE_PREFIX}-{to_base36(self._next_timestamp())}"


_code_generator = DiscountCodeGenerator()


def generate_discount_code(title: str) -> str:
    return _code_generator.generate(title)


@dataclass
class BulkActionResult:
    action: str
    affected: int = 0
    skipped: list[UUID] = field(default_factory=list)


class BundleService:
    """Creates, edits and deletes bundles together with their discounts."""

    def __init__(self, session: AsyncSession, discounts: DiscountGateway) -> None:
        self.session = session
        self.discounts = discounts
        self.bundles = BundleRepository(session)

    @staticmethod
    def validate(draft: BundleDraft) -> None:
        if not draft.title or not draft.title.strip():
            raise BundleValidationError("Title is required")
        if draft.status == BundleStatus.ACTIVE.value and len(draft.products) < MIN_ACTIVE_PRODUCTS:
            raise BundleValidationError("Please select at least 2 products for the bundle")
        if draft.discount_type == DiscountType.PERCENTAGE and draft.discount_value >= 100:
            raise BundleValidationError("Percentage discount must be below 100")

    @staticmethod
    def _build_products(products: Iterable[BundleProductIn]) -> list[BundleProduct]:
        return [
            BundleProduct(
                product_id=p.product_id,
                variant_id=p.variant_id,
                title=p.title,
                price=p.price,
                compare_at_price=p.compare_at_price,
                image_url=p.image_url,
                position=position,
            )
            for position, p in enumerate(products)
        ]

    async def get_bundle(self, shop: Shop, bundle_id: UUID) -> Bundle:
        bundle = await self.bundles.get_for_shop(shop.id, bundle_id)
        if not bundle:
            raise NotFoundError("Bundle not found")
        return bundle

    async def list_bundles(self, shop: Shop, status: Optional[str] = None) -> list[Bundle]:
        return await self.bundles.list_for_shop(shop.id, status=status)

    async def create_bundle(
        self,
        shop: Shop,
        draft: BundleDraft,
        *,
        is_ai_generated: bool = False,
    ) -> Bundle:
        """
        Persist a bundle and its Shopify discount.

        Raises:
            BundleValidationError: Missing title or too few products
            ShopifyAPIError / ConfigurationError: The discount could not be created
        """
        self.validate(draft)
        target_status = draft.status
        code = generate_discount_code(draft.title)

        bundle = Bundle(
            shop_id=shop.id,
            title=draft.title.strip(),
            description=draft.description,
            type="fixed",
            display_location="product_page",
            discount_type=draft.discount_type.value,
            discount_value=draft.discount_value,
            discount_code=code,
            status=BundleStatus.PENDING.value,
            min_products=draft.min_products,
            is_ai_generated=is_ai_generated,
            priority=draft.priority,
            products=self._build_products(draft.products),
        )
        self.session.add(bundle)
        await self.session.flush()

        try:
            node_id = await self.discounts.create_discount(
                bundle.title,
                code,
                bundle.discount_type,
                bundle.discount_value,
            )
        except Exception as e:
            logger.warning(
                "Discount creation failed, removing pending bundle",
                shop=shop.domain,
                bundle_id=str(bundle.id),
                error=str(e),
            )
            await self.bundles.delete_bundle(bundle)
            raise

        try:
            bundle.discount_node_id = node_id
            bundle.status = target_status
            await self.session.flush()
        except Exception as e:
            logger.error(
                "Bundle confirmation failed, removing remote discount",
                shop=shop.domain,
                bundle_id=str(bundle.id),
                error=str(e),
            )
            await self._delete_remote_discount(node_id)
            raise

        logger.info(
            "Bundle created",
            shop=shop.domain,
            bundle_id=str(bundle.id),
            code=code,
            products=len(bundle.products),
            ai=is_ai_generated,
        )
        return bundle

    async def create_from_suggestion(self, shop: Shop, suggestion: Suggestion) -> Bundle:
        """Confirm an AI suggestion into an active percentage bundle."""
        try:
            draft = self._draft_from_suggestion(suggestion)
        except ValidationError as e:
            problems = "; ".join(error["msg"] for error in e.errors())
            raise BundleValidationError(f"Invalid suggestion: {problems}") from e
        return await self.create_bundle(shop, draft, is_ai_generated=True)

    @staticmethod
    def _draft_from_suggestion(suggestion: Suggestion) -> BundleDraft:
        return BundleDraft(
            title=suggestion.name,
            description=suggestion.reason,
            discount_type=DiscountType.PERCENTAGE,
            discount_value=suggestion.discount,
            status=BundleStatus.ACTIVE.value,
            min_products=max(len(suggestion.products), 1),
            products=[
                BundleProductIn(
                    product_id=p.id,
                    variant_id=p.variant_id,
                    title=p.title,
                    price=p.price,
                    compare_at_price=p.compare_at_price,
                    image_url=p.image_url,
                )
                for p in suggestion.products
            ],
        )

    async def create_many(self, shop: Shop, suggestions: list[Suggestion]) -> tuple[int, int]:
        """
        Confirm several suggestions; failures are logged and skipped.
        Returns (created, total) tuple.
        """
        created = 0
        for suggestion in suggestions:
            try:
                await self.create_from_suggestion(shop, suggestion)
                created += 1
            except SmartBundleError as e:
                logger.warning(
                    "Skipping suggestion",
                    shop=shop.domain,
                    name=suggestion.name,
                    error=e.message,
                )
        return created, len(suggestions)

    async def update_bundle(self, shop: Shop, bundle_id: UUID, draft: BundleDraft) -> Bundle:
        """Apply a full edit; products are replaced wholesale."""
        bundle = await self.get_bundle(shop, bundle_id)
        self.validate(draft)

        title = draft.title.strip()
        discount_changed = (
            bundle.discount_type != draft.discount_type.value
            or Decimal(bundle.discount_value) != draft.discount_value
            or bundle.title != title
        )
        if discount_changed and bundle.discount_node_id:
            await self.discounts.update_discount(
                bundle.discount_node_id,
                title,
                draft.discount_type.value,
                draft.discount_value,
            )

        bundle.title = title
        bundle.description = draft.description
        bundle.discount_type = draft.discount_type.value
        bundle.discount_value = draft.discount_value
        bundle.status = draft.status
        bundle.priority = draft.priority
        bundle.min_products = draft.min_products
        await self.bundles.replace_products(bundle, self._build_products(draft.products))

        logger.info("Bundle updated", shop=shop.domain, bundle_id=str(bundle.id))
        return bundle

    async def delete_bundle(self, shop: Shop, bundle_id: UUID) -> None:
        bundle = await self.get_bundle(shop, bundle_id)
        await self._delete(shop, bundle)

    async def _delete(self, shop: Shop, bundle: Bundle) -> None:
        if bundle.discount_node_id:
            await self._delete_remote_discount(bundle.discount_node_id)
        await self.bundles.delete_bundle(bundle)
        logger.info("Bundle deleted", shop=shop.domain, bundle_id=str(bundle.id))

    async def _delete_remote_discount(self, node_id: str) -> None:
        try:
            await self.discounts.delete_discount(node_id)
        except Exception as e:
            logger.warning("Failed to delete remote discount", node_id=node_id, error=str(e))

    async def bulk_action(self, shop: Shop, action: str, bundle_ids: list[UUID]) -> BulkActionResult:
        """
        Apply delete, activate or pause to several bundles.

        Activation skips bundles with fewer than two products.
        """
        bundles = await self.bundles.list_by_ids(shop.id, bundle_ids)
        found = {b.id for b in bundles}
        result = BulkActionResult(
            action=action,
            skipped=[bundle_id for bundle_id in bundle_ids if bundle_id not in found],
        )

        for bundle in bundles:
            if action == "delete":
                await self._delete(shop, bundle)
            elif action == "activate":
                if len(bundle.products) < MIN_ACTIVE_PRODUCTS:
                    result.skipped.append(bundle.id)
                    continue
                bundle.status = BundleStatus.ACTIVE.value
            elif action == "pause":
                bundle.status = BundleStatus.DRAFT.value
            else:
                raise BundleValidationError(f"Unknown bulk action: {action}")
            result.affected += 1

        await self.session.flush()
        logger.info(
            "Bulk action applied",
            shop=shop.domain,
            action=action,
            affected=result.affected,
            skipped=len(result.skipped),
        )
        return result
