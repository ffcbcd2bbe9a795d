"""
Tests for the public storefront API: bundle lookup, analytics ingest, cart
composition and open CORS.
"""
from fastapi.testclient import TestClient
from sqlalchemy import select

from smartbundle.models.analytics import AnalyticsEvent

SHOP = "test-shop.myshopify.com"
MUG = "gid://shopify/Product/1001"
BEANS = "gid://shopify/Product/1003"


async def stored_events(session_factory) -> list[AnalyticsEvent]:
    async with session_factory() as session:
        return list((await session.execute(select(AnalyticsEvent))).scalars().all())


class TestLookup:
    async def test_finds_bundle_by_numeric_id(self, async_client, seed_shop, seed_bundle):
        shop = await seed_shop()
        bundle = await seed_bundle(shop, [MUG, BEANS], title="Morning Kit", code="MORNINGKIT-1")

        response = await async_client.get("/api/bundles", params={"productId": "1001", "shop": SHOP})

        assert response.status_code == 200
        data = response.json()
        assert "error" not in data
        [found] = data["bundles"]
        assert found["id"] == str(bundle.id)
        assert found["discountCode"] == "MORNINGKIT-1"
        assert found["discountType"] == "percentage"
        assert [p["id"] for p in found["products"]] == [MUG, BEANS]

    async def test_finds_bundle_by_gid(self, async_client, seed_shop, seed_bundle):
        shop = await seed_shop()
        await seed_bundle(shop, [MUG, BEANS])

        response = await async_client.get("/api/bundles", params={"productId": BEANS, "shop": SHOP})

        assert len(response.json()["bundles"]) == 1

    async def test_numeric_id_does_not_match_longer_ids(self, async_client, seed_shop, seed_bundle):
        shop = await seed_shop()
        await seed_bundle(shop, ["gid://shopify/Product/11001", BEANS])

        response = await async_client.get("/api/bundles", params={"productId": "1001", "shop": SHOP})

        assert response.json() == {"bundles": []}

    async def test_product_without_bundles(self, async_client, seed_shop):
        await seed_shop()

        response = await async_client.get("/api/bundles", params={"productId": "999", "shop": SHOP})

        assert response.status_code == 200
        assert response.json() == {"bundles": []}

    async def test_only_active_bundles_ordered_by_priority(self, async_client, seed_shop, seed_bundle):
        shop = await seed_shop()
        await seed_bundle(shop, [MUG, BEANS], title="Low", priority=0)
        await seed_bundle(shop, [MUG, BEANS], title="High", priority=5)
        await seed_bundle(shop, [MUG, BEANS], title="Paused", status="draft")

        response = await async_client.get("/api/bundles", params={"productId": "1001", "shop": SHOP})

        assert [b["title"] for b in response.json()["bundles"]] == ["High", "Low"]

    async def test_missing_parameters(self, async_client):
        response = await async_client.get("/api/bundles", params={"shop": SHOP})

        assert response.status_code == 200
        assert response.json() == {"bundles": [], "error": "Missing productId or shop"}

    async def test_unknown_shop(self, async_client):
        response = await async_client.get(
            "/api/bundles",
            params={"productId": "1001", "shop": "nobody.myshopify.com"},
        )

        assert response.status_code == 200
        assert response.json()["error"] == "Shop not found"

    async def test_bundles_disabled(self, async_client, seed_shop, seed_bundle):
        shop = await seed_shop(bundles_enabled=False)
        await seed_bundle(shop, [MUG, BEANS])

        response = await async_client.get("/api/bundles", params={"productId": "1001", "shop": SHOP})

        assert response.json() == {"bundles": []}

    async def test_open_cors_headers(self, async_client, seed_shop):
        await seed_shop()

        response = await async_client.get(
            "/api/bundles",
            params={"productId": "1001", "shop": SHOP},
            headers={"Origin": "https://test-shop.com"},
        )

        assert response.headers["access-control-allow-origin"] == "*"


class TestCORS:
    def test_storefront_preflight(self, client: TestClient):
        response = client.options(
            "/api/cart/compose",
            headers={
                "Origin": "https://test-shop.com",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 204
        assert response.headers["access-control-allow-origin"] == "*"
        assert "POST" in response.headers["access-control-allow-methods"]
        assert response.headers["access-control-max-age"] == "86400"

    def test_admin_preflight_keeps_origin_allowlist(self, client: TestClient):
        response = client.options(
            "/api/admin/bundles",
            headers={
                "Origin": "https://admin.shopify.com",
                "Access-Control-Request-Method": "GET",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "https://admin.shopify.com"


class TestAnalytics:
    async def test_records_event(self, async_client, session_factory, seed_shop, seed_bundle):
        shop = await seed_shop()
        bundle = await seed_bundle(shop, [MUG, BEANS])

        response = await async_client.post("/api/analytics", json={
            "eventType": "view",
            "bundleId": str(bundle.id),
            "productId": "1001",
            "shopDomain": SHOP,
        })

        assert response.status_code == 200
        assert response.json() == {"success": True}
        [event] = await stored_events(session_factory)
        assert event.event_type == "view"
        assert event.bundle_id == bundle.id
        assert event.shop_id == shop.id
        assert event.event_source == "storefront"

    async def test_missing_fields(self, async_client):
        response = await async_client.post("/api/analytics", json={"eventType": "view"})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}

    async def test_custom_event_type_is_stored(self, async_client, session_factory, seed_shop):
        await seed_shop()

        response = await async_client.post(
            "/api/analytics",
            json={"eventType": "bundle_impression", "shopDomain": SHOP},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        [event] = await stored_events(session_factory)
        assert event.event_type == "bundle_impression"

    async def test_custom_event_type_for_unknown_shop(self, async_client, session_factory):
        response = await async_client.post(
            "/api/analytics",
            json={"eventType": "bundle_impression", "shopDomain": "nobody.myshopify.com"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert await stored_events(session_factory) == []

    async def test_unknown_shop_is_acknowledged(self, async_client, session_factory):
        response = await async_client.post(
            "/api/analytics",
            json={"eventType": "click", "shopDomain": "nobody.myshopify.com"},
        )

        assert response.json() == {"success": True}
        assert await stored_events(session_factory) == []

    async def test_analytics_disabled(self, async_client, session_factory, seed_shop):
        await seed_shop(analytics_enabled=False)

        response = await async_client.post("/api/analytics", json={"eventType": "view", "shopDomain": SHOP})

        assert response.json() == {"success": True}
        assert await stored_events(session_factory) == []

    async def test_foreign_bundle_is_not_referenced(self, async_client, session_factory, seed_shop, seed_bundle):
        await seed_shop()
        other = await seed_shop("other-shop.myshopify.com")
        foreign = await seed_bundle(other, [MUG, BEANS], title="Foreign")

        await async_client.post("/api/analytics", json={
            "eventType": "add_to_cart",
            "bundleId": str(foreign.id),
            "shopDomain": SHOP,
        })
        await async_client.post("/api/analytics", json={
            "eventType": "add_to_cart",
            "bundleId": "not-a-uuid",
            "shopDomain": SHOP,
        })

        events = await stored_events(session_factory)
        assert len(events) == 2
        assert all(e.bundle_id is None for e in events)


class TestCartCompose:
    async def test_bundle_option(self, async_client, seed_shop, seed_bundle):
        shop = await seed_shop()
        bundle = await seed_bundle(shop, [MUG, BEANS], code="MORNINGKIT-1", prices=["25.00", "75.00"])

        response = await async_client.post("/api/cart/compose", json={
            "shop": SHOP,
            "bundleId": str(bundle.id),
        })

        assert response.status_code == 200
        data = response.json()
        assert data["items"] == [{"id": 10010, "quantity": 1}, {"id": 10030, "quantity": 1}]
        assert data["redirectUrl"] == "/discount/MORNINGKIT-1?redirect=/cart"
        assert data["discountCode"] == "MORNINGKIT-1"
        assert data["pricing"]["total"] == "100.00"
        assert data["pricing"]["bundlePrice"] == "90.00"
        assert data["pricing"]["savings"] == "10.00"
        assert [line["discountedPrice"] for line in data["pricing"]["lines"]] == ["22.50", "67.50"]

    async def test_buy_now_goes_to_checkout(self, async_client, seed_shop, seed_bundle):
        shop = await seed_shop()
        bundle = await seed_bundle(shop, [MUG, BEANS], code="MORNINGKIT-1")

        response = await async_client.post("/api/cart/compose", json={
            "shop": SHOP,
            "bundleId": str(bundle.id),
            "option": "bundle",
            "buyNow": True,
        })

        assert response.json()["redirectUrl"] == "/discount/MORNINGKIT-1?redirect=/checkout"

    async def test_widget_variant_ids_take_precedence(self, async_client, seed_shop, seed_bundle):
        shop = await seed_shop()
        bundle = await seed_bundle(shop, [MUG, BEANS])

        response = await async_client.post("/api/cart/compose", json={
            "shop": SHOP,
            "bundleId": str(bundle.id),
            "variantIds": {MUG: "555"},
        })

        assert [item["id"] for item in response.json()["items"]] == [555, 10030]

    async def test_fixed_amount_leaves_lines_undiscounted(self, async_client, seed_shop, seed_bundle):
        shop = await seed_shop()
        bundle = await seed_bundle(
            shop,
            [MUG, BEANS],
            discount_type="fixed_amount",
            discount_value="15",
            prices=["25.00", "75.00"],
        )

        response = await async_client.post("/api/cart/compose", json={"shop": SHOP, "bundleId": str(bundle.id)})

        pricing = response.json()["pricing"]
        assert [line["discountedPrice"] for line in pricing["lines"]] == ["25.00", "75.00"]
        assert pricing["bundlePrice"] == "85.00"

    async def test_single_option(self, async_client, seed_shop, seed_bundle):
        shop = await seed_shop()
        bundle = await seed_bundle(shop, [MUG, BEANS])

        response = await async_client.post("/api/cart/compose", json={
            "shop": SHOP,
            "bundleId": str(bundle.id),
            "option": "single",
            "variantId": "gid://shopify/ProductVariant/777",
        })

        assert response.json() == {"items": [{"id": 777, "quantity": 1}], "redirectUrl": "/cart"}

    async def test_nothing_to_add(self, async_client, seed_shop, seed_bundle):
        shop = await seed_shop()
        bundle = await seed_bundle(shop, [MUG, BEANS])

        response = await async_client.post("/api/cart/compose", json={
            "shop": SHOP,
            "bundleId": str(bundle.id),
            "option": "single",
        })

        assert response.status_code == 422
        assert response.json() == {"detail": "No products available to add to cart"}

    async def test_inactive_bundle_not_found(self, async_client, seed_shop, seed_bundle):
        shop = await seed_shop()
        bundle = await seed_bundle(shop, [MUG, BEANS], status="draft")

        response = await async_client.post("/api/cart/compose", json={"shop": SHOP, "bundleId": str(bundle.id)})

        assert response.status_code == 404
        assert response.headers["access-control-allow-origin"] == "*"
