"""API tests for /billing."""

from decimal import Decimal
from typing import Any

from httpx import AsyncClient

from tests.fakes import MANAGER_ID, FakePaymentGateway, InMemoryRecordStore

SUBSCRIBE_BODY = {
    "card_token": "tok_visa",
    "name": "Olive Owner",
    "email": "Billing@Example.com",
    "company_name": "Acme Inc",
    "address": {"line1": "1 Main St", "city": "Berlin", "postal_code": "10115", "country": "de"},
}


async def test_billing_is_admin_only(
    client: AsyncClient, company: dict, token_claims: dict[str, Any]
) -> None:
    token_claims["sub"] = MANAGER_ID
    for path in ("/api/v1/billing/subscription", "/api/v1/billing/price"):
        response = await client.get(path)
        assert response.status_code == 403, path


async def test_mirrors_empty_until_subscribed(client: AsyncClient, company: dict) -> None:
    for path in ("subscription", "payment-method", "stripe-company"):
        response = await client.get(f"/api/v1/billing/{path}")
        assert response.status_code == 200
        assert response.json() == {"id": None, "data": None, "loaded": True}


async def test_failed_refresh_after_load_is_502(
    client: AsyncClient, records: InMemoryRecordStore, company: dict
) -> None:
    assert (await client.get("/api/v1/billing/subscription")).status_code == 200

    records.fail_on["query"] = "subscriptions"
    response = await client.get("/api/v1/billing/subscription", params={"refresh": "true"})
    assert response.status_code == 502
    assert response.json()["message"] == "Record store query failed for subscriptions"


async def test_price_quote(client: AsyncClient, company: dict) -> None:
    response = await client.get("/api/v1/billing/price")
    assert response.status_code == 200
    body = response.json()
    assert body["connected_count"] == 2
    assert Decimal(str(body["monthly_price"])) == Decimal("78")


async def test_subscribe_then_mirrors_reload(
    client: AsyncClient,
    records: InMemoryRecordStore,
    gateway: FakePaymentGateway,
    company: dict,
) -> None:
    # Prime the cached slice so the subscribe call has to invalidate it
    await client.get("/api/v1/billing/subscription")

    response = await client.post("/api/v1/billing/subscribe", json=SUBSCRIBE_BODY)
    assert response.status_code == 200
    body = response.json()
    assert body["subscription_status"] == "active"
    assert body["connected_count"] == 2
    assert [i["id"] for i in body["invoices"]] == ["in_1"]
    assert gateway.names()[:3] == [
        "create_payment_method",
        "create_customer",
        "create_subscription",
    ]

    mirror = await client.get("/api/v1/billing/stripe-company")
    assert mirror.json()["data"]["Country"] == "Germany"
    assert mirror.json()["data"]["User"] == "users/admin-1"
    subscription = await client.get("/api/v1/billing/subscription")
    assert subscription.json()["data"]["Status"] == "Paying"


async def test_declined_card_is_402(
    client: AsyncClient, gateway: FakePaymentGateway, company: dict
) -> None:
    gateway.decline_card = True
    response = await client.post("/api/v1/billing/subscribe", json=SUBSCRIBE_BODY)
    assert response.status_code == 402
    body = response.json()
    assert body["error"] == "PAYMENT_FAILED"
    assert body["message"] == "Your card was declined."


async def test_invalid_form_is_422(client: AsyncClient, company: dict) -> None:
    response = await client.post(
        "/api/v1/billing/subscribe", json={**SUBSCRIBE_BODY, "email": "not-an-email"}
    )
    assert response.status_code == 422


async def test_invoices(
    client: AsyncClient, records: InMemoryRecordStore, company: dict
) -> None:
    response = await client.get("/api/v1/billing/invoices")
    assert response.status_code == 200
    assert response.json() == []

    records.seed("subscriptions", "s1", {"User": company["admin"], "Customer Id": "cus_1"})
    response = await client.get("/api/v1/billing/invoices")
    assert response.json()[0]["amount_paid"] == 5900
