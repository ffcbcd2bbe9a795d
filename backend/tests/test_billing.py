"""
Tests for plan derivation, subscriptions and the dashboard's plan display.
"""
import pytest

from smartbundle.services.billing import (
    FREE_PLAN,
    PLANS,
    BillingService,
    derive_plan_tier,
    subscription_price,
)

from conftest import FakeShopifyClient, subscription


class TestPlanDerivation:
    @pytest.mark.parametrize(
        "price, plan",
        [
            ("0", "FREE"),
            ("0.00", "FREE"),
            ("19.00", "GROWTH"),
            ("25", "GROWTH"),
            ("49.0", "SCALE"),
            ("99.00", "PRO"),
            ("250", "PRO"),
            ("not a price", "FREE"),
        ],
    )
    def test_derive_plan_tier(self, price, plan):
        assert derive_plan_tier(price) == plan

    def test_subscription_price(self):
        assert subscription_price(subscription("49.00")) == "49.00"
        assert subscription_price({"lineItems": []}) == "0"

    def test_catalog(self):
        assert [p.id for p in PLANS] == ["FREE", "GROWTH", "SCALE", "PRO"]
        assert [p for p in PLANS if p.popular][0].id == "GROWTH"


class TestBillingService:
    async def test_current_plan_from_subscription(self):
        fake = FakeShopifyClient()
        fake.subscriptions = [subscription("49.00")]

        assert await BillingService(fake).get_current_plan() == "SCALE"

    async def test_lookup_failure_means_free(self):
        fake = FakeShopifyClient()
        fake.fail_subscriptions = True

        assert await BillingService(fake).get_current_plan() == FREE_PLAN

    async def test_subscribe_paid_plan(self):
        fake = FakeShopifyClient()

        response = await BillingService(fake).subscribe("test-shop.myshopify.com", "GROWTH")

        assert response.success is True
        assert response.confirmation_url == "https://admin.shopify.com/charges/confirm/1"
        [request] = fake.subscription_requests
        assert request["name"] == "Alintro Growth Plan"
        assert request["trial_days"] == 7
        assert request["test"] is True
        assert request["return_url"] == "https://test-shop.myshopify.com/admin/apps/alintro-bundles"

    async def test_subscribe_free_plan(self):
        fake = FakeShopifyClient()

        response = await BillingService(fake).subscribe("test-shop.myshopify.com", "FREE")

        assert response.success is True
        assert response.message == "You are on the Free plan"
        assert fake.subscription_requests == []

    async def test_subscribe_unknown_plan(self):
        response = await BillingService(FakeShopifyClient()).subscribe("test-shop.myshopify.com", "ENTERPRISE")

        assert response.success is False
        assert response.error == "Invalid plan"


async def test_list_plans(async_client, auth_headers, fake_shopify):
    fake_shopify.subscriptions = [subscription("19.00")]

    response = await async_client.get("/api/admin/plans", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["currentPlan"] == "GROWTH"
    assert data["isTestMode"] is True
    assert data["monthlyRevenue"] == "0"
    assert [p["id"] for p in data["plans"]] == ["FREE", "GROWTH", "SCALE", "PRO"]
    assert data["plans"][1]["trialDays"] == 7


async def test_subscribe_endpoint(async_client, auth_headers):
    response = await async_client.post(
        "/api/admin/plans/subscribe",
        json={"planId": "PRO"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["confirmationUrl"] == "https://admin.shopify.com/charges/confirm/1"


async def test_dashboard(async_client, auth_headers, bundle_payload, fake_shopify):
    await async_client.post("/api/admin/bundles", json=bundle_payload, headers=auth_headers)
    bundle_payload["status"] = "draft"
    bundle_payload["title"] = "Draft Kit"
    await async_client.post("/api/admin/bundles", json=bundle_payload, headers=auth_headers)
    for event_type in ("view", "view", "add_to_cart"):
        await async_client.post(
            "/api/analytics",
            json={"eventType": event_type, "shopDomain": "test-shop.myshopify.com"},
        )

    response = await async_client.get("/api/admin/dashboard", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["shopDomain"] == "test-shop.myshopify.com"
    assert data["currentPlan"] == "FREE"
    assert data["billingConfirmed"] is False
    assert data["stats"] == {"totalBundles": 2, "activeBundles": 1, "bundleViews": 2, "addToCarts": 1}


async def test_dashboard_confirms_billing(async_client, auth_headers, fake_shopify):
    fake_shopify.subscriptions = [subscription("99.00")]

    response = await async_client.get("/api/admin/dashboard?charge_id=123", headers=auth_headers)

    assert response.json()["currentPlan"] == "PRO"
    assert response.json()["billingConfirmed"] is True


async def test_dashboard_subscription_failure_falls_back_to_free(async_client, auth_headers, fake_shopify):
    fake_shopify.fail_subscriptions = True

    response = await async_client.get("/api/admin/dashboard?charge_id=123", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["currentPlan"] == "FREE"
    assert response.json()["billingConfirmed"] is False


async def test_analytics_summary(async_client, auth_headers, bundle_payload):
    created = await async_client.post("/api/admin/bundles", json=bundle_payload, headers=auth_headers)
    bundle_id = created.json()["id"]
    events = ["view"] * 4 + ["click", "add_to_cart"]
    for event_type in events:
        await async_client.post("/api/analytics", json={
            "eventType": event_type,
            "bundleId": bundle_id,
            "shopDomain": "test-shop.myshopify.com",
        })

    response = await async_client.get("/api/admin/analytics", headers=auth_headers)

    data = response.json()
    assert data["totals"] == {"views": 4, "clicks": 1, "addToCarts": 1, "purchases": 0}
    assert data["conversionRate"] == 25.0
    [stats] = data["bundleStats"]
    assert stats["bundleId"] == bundle_id
    assert stats["title"] == "Morning Kit"
    assert stats["views"] == 4
