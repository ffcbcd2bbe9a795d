"""
Shared fixtures: in-memory database, fake Shopify / AI / email clients and
session-token auth for the embedded admin.
"""
import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-at-least-32-chars"
os.environ["ENCRYPTION_KEY"] = "test-encryption-key-at-least-32-characters"
os.environ["SHOPIFY_API_KEY"] = "test-api-key"
os.environ["SHOPIFY_API_SECRET"] = "test-api-secret"
os.environ["INTERNAL_API_KEY"] = "test-internal-key"
os.environ["ENVIRONMENT"] = "development"
os.environ["BILLING_MODE"] = "test"
os.environ.pop("GROQ_API_KEY", None)
os.environ.pop("SENDGRID_API_KEY", None)

import base64
import hashlib
import hmac
import time
from decimal import Decimal
from typing import Any, Optional

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

import smartbundle.models  # noqa: F401
from smartbundle.core.database import Base, create_session_factory
from smartbundle.main import create_app
from smartbundle.models.bundle import Bundle, BundleProduct
from smartbundle.models.shop import Shop
from smartbundle.routers.deps import (
    get_notification_service,
    get_shopify_client,
    get_suggestion_client,
)
from smartbundle.schemas.catalog import CatalogProduct
from smartbundle.services.shopify_client import ShopifyAPIError

SHOP_DOMAIN = "test-shop.myshopify.com"
API_KEY = os.environ["SHOPIFY_API_KEY"]
API_SECRET = os.environ["SHOPIFY_API_SECRET"]
INTERNAL_KEY = os.environ["INTERNAL_API_KEY"]


def make_session_token(shop_domain: str = SHOP_DOMAIN, **overrides: Any) -> str:
    """Mint an App Bridge style session token."""
    now = int(time.time())
    claims = {
        "iss": f"https://{shop_domain}/admin",
        "dest": f"https://{shop_domain}",
        "aud": API_KEY,
        "sub": "42",
        "exp": now + 60,
        "nbf": now - 5,
        "iat": now - 5,
        "jti": "test-jti",
    }
    claims.update(overrides)
    return jwt.encode(claims, API_SECRET, algorithm="HS256")


def sign_webhook(body: bytes, secret: str = API_SECRET) -> str:
    return base64.b64encode(hmac.new(secret.encode(), body, hashlib.sha256).digest()).decode()


def catalog_product(number: int, title: str, price: str, **extra: Any) -> CatalogProduct:
    return CatalogProduct(
        id=f"gid://shopify/Product/{number}",
        title=title,
        price=Decimal(price),
        variant_id=f"gid://shopify/ProductVariant/{number}0",
        **extra,
    )


class FakeShopifyClient:
    """In-memory stand-in for ShopifyGraphQLClient."""

    def __init__(self) -> None:
        self.catalog: list[CatalogProduct] = [
            catalog_product(1001, "Red Mug", "25.00", product_type="Kitchen", tags=["mug", "red"]),
            catalog_product(1002, "Red Mug Lid", "5.00", product_type="Kitchen"),
            catalog_product(1003, "Coffee Beans", "18.00", product_type="Coffee", tags=["coffee"]),
            catalog_product(1004, "Tea Towel", "12.00", product_type="Kitchen"),
        ]
        self.discounts: dict[str, dict[str, Any]] = {}
        self.updated: list[tuple[str, str, str, Decimal]] = []
        self.deleted: list[str] = []
        self.fail_create = False
        self.fail_titles: set[str] = set()
        self.fail_delete = False
        self.subscriptions: list[dict[str, Any]] = []
        self.fail_subscriptions = False
        self.subscription_requests: list[dict[str, Any]] = []
        self._next_id = 0

    async def get_catalog(self) -> list[CatalogProduct]:
        return list(self.catalog)

    async def create_discount(self, title: str, code: str, discount_type: str, value: Decimal) -> str:
        if self.fail_create or title in self.fail_titles:
            raise ShopifyAPIError([{"field": ["code"], "message": "Code has already been taken"}])
        self._next_id += 1
        node_id = f"gid://shopify/DiscountCodeNode/{self._next_id}"
        self.discounts[node_id] = {
            "title": title,
            "code": code,
            "discount_type": discount_type,
            "value": value,
        }
        return node_id

    async def update_discount(self, node_id: str, title: str, discount_type: str, value: Decimal) -> None:
        self.updated.append((node_id, title, discount_type, value))

    async def delete_discount(self, node_id: str) -> None:
        if self.fail_delete:
            raise ShopifyAPIError("Discount not found")
        self.deleted.append(node_id)
        self.discounts.pop(node_id, None)

    async def get_active_subscriptions(self) -> list[dict[str, Any]]:
        if self.fail_subscriptions:
            raise ShopifyAPIError("HTTP error: 401")
        return list(self.subscriptions)

    async def create_subscription(
        self,
        name: str,
        price: Decimal,
        trial_days: int,
        return_url: str,
        test: bool,
    ) -> str:
        self.subscription_requests.append({
            "name": name,
            "price": price,
            "trial_days": trial_days,
            "return_url": return_url,
            "test": test,
        })
        return "https://admin.shopify.com/charges/confirm/1"


class FakeSuggestionClient:
    def __init__(self) -> None:
        self.response = "[]"
        self.calls: list[dict[str, Any]] = []

    async def request_suggestions(self, catalog, model: Optional[str] = None) -> str:
        self.calls.append({"catalog": list(catalog), "model": model})
        return self.response


class FakeNotificationService:
    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []
        self.result: tuple[bool, Optional[str]] = (True, None)

    async def send_support_email(self, shop: str, email: str, subject: str, message: str):
        self.sent.append({"shop": shop, "email": email, "subject": subject, "message": message})
        return self.result


def subscription(amount: str) -> dict[str, Any]:
    return {
        "id": "gid://shopify/AppSubscription/1",
        "name": "Alintro Plan",
        "status": "ACTIVE",
        "lineItems": [{"plan": {"pricingDetails": {"price": {"amount": amount}}}}],
    }


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield create_session_factory(engine)
    finally:
        await engine.dispose()


@pytest.fixture
def fake_shopify() -> FakeShopifyClient:
    return FakeShopifyClient()


@pytest.fixture
def fake_suggestions() -> FakeSuggestionClient:
    return FakeSuggestionClient()


@pytest.fixture
def fake_notifications() -> FakeNotificationService:
    return FakeNotificationService()


@pytest.fixture
def app(session_factory, fake_shopify, fake_suggestions, fake_notifications):
    application = create_app()
    # ASGITransport does not run the lifespan
    application.state.session_factory = session_factory

    application.dependency_overrides[get_shopify_client] = lambda: fake_shopify
    application.dependency_overrides[get_suggestion_client] = lambda: fake_suggestions
    application.dependency_overrides[get_notification_service] = lambda: fake_notifications

    try:
        yield application
    finally:
        application.dependency_overrides.clear()


@pytest.fixture
def client() -> TestClient:
    """Synchronous client for routes that never touch the database."""
    return TestClient(create_app())


@pytest_asyncio.fixture
async def async_client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {make_session_token()}"}


@pytest.fixture
def internal_headers() -> dict[str, str]:
    return {"X-Internal-Key": INTERNAL_KEY}


@pytest.fixture
def sample_shop_data() -> dict:
    return {
        "domain": SHOP_DOMAIN,
        "accessToken": "shpat_test_token",
        "scopes": "read_products,write_discounts",
    }


@pytest.fixture
def bundle_payload(fake_shopify) -> dict:
    """Active two-product bundle at 10% off, priced from the fake catalog."""
    mug, beans = fake_shopify.catalog[0], fake_shopify.catalog[2]
    return {
        "title": "Morning Kit",
        "description": "Everything for the first cup",
        "discountType": "percentage",
        "discountValue": "10",
        "status": "active",
        "products": [
            {
                "productId": mug.id,
                "variantId": mug.variant_id,
                "title": mug.title,
                "price": "25.00",
            },
            {
                "productId": beans.id,
                "variantId": beans.variant_id,
                "title": beans.title,
                "price": "75.00",
            },
        ],
    }


@pytest_asyncio.fixture
async def seed_shop(session_factory):
    """Insert a shop directly and return it."""

    async def _seed(domain: str = SHOP_DOMAIN, **fields: Any) -> Shop:
        async with session_factory() as session:
            shop = Shop(domain=domain, name=Shop.display_name_for(domain), **fields)
            session.add(shop)
            await session.commit()
            return shop

    return _seed


@pytest_asyncio.fixture
async def seed_bundle(session_factory):
    """Insert a bundle with products directly, bypassing the discount API."""

    async def _seed(
        shop: Shop,
        product_ids: list[str],
        *,
        title: str = "Seeded Bundle",
        status: str = "active",
        discount_type: str = "percentage",
        discount_value: str = "10",
        code: Optional[str] = None,
        prices: Optional[list[str]] = None,
        priority: int = 0,
    ) -> Bundle:
        prices = prices or ["50.00"] * len(product_ids)
        async with session_factory() as session:
            bundle = Bundle(
                shop_id=shop.id,
                title=title,
                discount_type=discount_type,
                discount_value=Decimal(discount_value),
                discount_code=code or f"SEED-{title.upper().replace(' ', '')}",
                discount_node_id="gid://shopify/DiscountCodeNode/999",
                status=status,
                priority=priority,
                products=[
                    BundleProduct(
                        product_id=product_id,
                        variant_id=product_id.replace("Product", "ProductVariant") + "0",
                        title=f"Product {position}",
                        price=Decimal(price),
                        position=position,
                    )
                    for position, (product_id, price) in enumerate(zip(product_ids, prices))
                ],
            )
            session.add(bundle)
            await session.commit()
            return bundle

    return _seed
