"""Integration tests for checkout API endpoints."""

import pytest
from checkout.api import checkout_router, register_error_handlers
from checkout.catalogue import set_catalogue
from checkout.catalogue.memory_adapter import InMemoryCatalogue
from checkout.order.store import get_order, orders_for_owner
from fastapi import FastAPI
from fastapi.testclient import TestClient

BUYER = {"X-User-Id": "buyer-1"}
ITEMS = [
    {"product_ref": "prod-keyboard", "quantity": 3, "unit_price": 1999},
    {"product_ref": "prod-cable", "quantity": 1, "unit_price": 500},
]


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(checkout_router)
    register_error_handlers(app)
    return TestClient(app)


class TestStartCheckout:
    def test_success(self, client):
        response = client.post("/checkout", json={"items": ITEMS}, headers=BUYER)
        assert response.status_code == 200
        data = response.json()
        assert data["session_id"]
        assert data["redirect_url"]

        order = get_order(data["order_id"])
        assert order.status == "pending"
        assert order.total == 6497
        assert order.owner_id == "buyer-1"

    def test_missing_identity(self, client):
        response = client.post("/checkout", json={"items": ITEMS})
        assert response.status_code == 401

    def test_empty_items(self, client):
        response = client.post("/checkout", json={"items": []}, headers=BUYER)
        assert response.status_code == 400
        assert orders_for_owner("buyer-1") == []

    def test_zero_quantity_names_the_field(self, client):
        items = [ITEMS[0], {"product_ref": "prod-cable", "quantity": 0, "unit_price": 500}]
        response = client.post("/checkout", json={"items": items}, headers=BUYER)
        assert response.status_code == 400
        assert "items[1].quantity" in response.json()["error"]
        assert orders_for_owner("buyer-1") == []

    def test_fractional_price_rejected(self, client):
        items = [{"product_ref": "prod-cable", "quantity": 1, "unit_price": 4.99}]
        response = client.post("/checkout", json={"items": items}, headers=BUYER)
        assert response.status_code == 400

    def test_unknown_product(self, client):
        set_catalogue(InMemoryCatalogue({"prod-keyboard": "Mechanical Keyboard"}))
        response = client.post("/checkout", json={"items": ITEMS}, headers=BUYER)
        assert response.status_code == 400
        assert orders_for_owner("buyer-1") == []

    def test_gateway_failure(self, client, fake_gateway):
        fake_gateway.configure(should_succeed=False, failure_reason="Processor timeout")
        response = client.post("/checkout", json={"items": ITEMS}, headers=BUYER)
        assert response.status_code == 502
        order_id = response.json()["order_id"]
        assert get_order(order_id).status == "pending"

    def test_storage_failure_is_503(self, client, fake_gateway, failing_commit):
        with failing_commit():
            response = client.post("/checkout", json={"items": ITEMS}, headers=BUYER)
        assert response.status_code == 503
        assert "error" in response.json()
        assert fake_gateway.calls == []
        assert orders_for_owner("buyer-1") == []


class TestResumeCheckout:
    def test_resume_after_gateway_failure(self, client, fake_gateway):
        fake_gateway.configure(should_succeed=False)
        order_id = client.post("/checkout", json={"items": ITEMS}, headers=BUYER).json()["order_id"]

        fake_gateway.configure(should_succeed=True)
        response = client.post(f"/checkout/{order_id}/session", headers=BUYER)
        assert response.status_code == 200
        assert response.json()["order_id"] == order_id

    def test_resume_unknown_order(self, client):
        response = client.post("/checkout/no-such-order/session", headers=BUYER)
        assert response.status_code == 404

    def test_resume_cancelled_order(self, client, pending_order):
        from checkout.order.store import transition_status

        transition_status(pending_order.id, ["pending"], "cancelled")
        response = client.post(f"/checkout/{pending_order.id}/session", headers=BUYER)
        assert response.status_code == 409


class TestGatewayConfiguration:
    def test_configure_fake_gateway(self, client, fake_gateway):
        response = client.post(
            "/checkout/gateway/configure",
            json={"should_succeed": False, "failure_reason": "Down for maintenance"},
        )
        assert response.status_code == 200
        assert fake_gateway.should_succeed is False
        assert fake_gateway.failure_reason == "Down for maintenance"
