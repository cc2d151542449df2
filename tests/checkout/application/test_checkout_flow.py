"""Tests for the checkout flow: price, persist, open a session."""

import pytest
from checkout.catalogue import set_catalogue
from checkout.catalogue.memory_adapter import InMemoryCatalogue
from checkout.errors import GatewayError, InvalidTransitionError, NotFoundError
from checkout.flow import cancel_order, resume_checkout, start_checkout
from checkout.order.store import get_order, orders_for_owner, transition_status
from protean.exceptions import ValidationError

BASE_URL = "https://shop.example.com"
LINES = [("prod-keyboard", 3, 1999), ("prod-cable", 1, 500)]


class TestStartCheckout:
    def test_creates_pending_order_and_session(self, fake_gateway):
        started = start_checkout("buyer-1", LINES, BASE_URL)

        order = get_order(started.order_id)
        assert order.status == "pending"
        assert order.total == 6497
        assert order.session_id == started.session_id
        assert started.redirect_url.endswith(started.session_id)

    def test_session_request_mirrors_order(self, fake_gateway):
        started = start_checkout("buyer-1", LINES, BASE_URL + "/")

        request = fake_gateway.calls[-1]
        assert request.order_id == started.order_id
        assert request.metadata == {"order_id": started.order_id}
        assert request.idempotency_key == f"checkout-{started.order_id}"
        assert request.currency == "usd"
        assert [(item.product_ref, item.quantity, item.unit_amount) for item in request.line_items] == [
            ("prod-keyboard", 3, 1999),
            ("prod-cable", 1, 500),
        ]
        assert request.success_url == f"{BASE_URL}/order_success?session_id={{CHECKOUT_SESSION_ID}}"
        assert request.cancel_url == f"{BASE_URL}/cart"
        assert request.customer_ref == "buyer-1"

    def test_display_names_come_from_catalogue(self, fake_gateway):
        set_catalogue(InMemoryCatalogue({"prod-keyboard": "Mechanical Keyboard", "prod-cable": "USB-C Cable"}))
        start_checkout("buyer-1", LINES, BASE_URL)
        assert [item.name for item in fake_gateway.calls[-1].line_items] == ["Mechanical Keyboard", "USB-C Cable"]

    def test_unknown_product_persists_nothing(self, fake_gateway):
        set_catalogue(InMemoryCatalogue({"prod-keyboard": "Mechanical Keyboard"}))
        with pytest.raises(ValidationError) as exc:
            start_checkout("buyer-1", LINES, BASE_URL)
        assert "items[1].product_ref" in str(exc.value)
        assert orders_for_owner("buyer-1") == []
        assert fake_gateway.calls == []

    def test_invalid_quantity_persists_nothing(self, fake_gateway):
        with pytest.raises(ValidationError):
            start_checkout("buyer-1", [("prod-a", 0, 100)], BASE_URL)
        assert orders_for_owner("buyer-1") == []
        assert fake_gateway.calls == []

    def test_gateway_failure_leaves_order_pending(self, fake_gateway):
        fake_gateway.configure(should_succeed=False, failure_reason="Processor timeout")

        with pytest.raises(GatewayError) as exc:
            start_checkout("buyer-1", LINES, BASE_URL)

        assert "Processor timeout" in str(exc.value)
        order = get_order(exc.value.order_id)
        assert order.status == "pending"
        assert order.session_id is None


class TestResumeCheckout:
    def test_resume_after_gateway_failure(self, fake_gateway):
        fake_gateway.configure(should_succeed=False)
        with pytest.raises(GatewayError) as exc:
            start_checkout("buyer-1", LINES, BASE_URL)
        order_id = exc.value.order_id

        fake_gateway.configure(should_succeed=True)
        started = resume_checkout("buyer-1", order_id, BASE_URL)

        assert started.order_id == order_id
        assert get_order(order_id).session_id == started.session_id

    def test_resume_reuses_idempotency_key_and_session(self, fake_gateway):
        first = start_checkout("buyer-1", LINES, BASE_URL)
        again = resume_checkout("buyer-1", first.order_id, BASE_URL)

        keys = {request.idempotency_key for request in fake_gateway.calls}
        assert keys == {f"checkout-{first.order_id}"}
        assert again.session_id == first.session_id

    def test_resume_someone_elses_order(self, fake_gateway):
        started = start_checkout("buyer-1", LINES, BASE_URL)
        with pytest.raises(NotFoundError):
            resume_checkout("buyer-2", started.order_id, BASE_URL)

    def test_resume_settled_order(self, fake_gateway):
        started = start_checkout("buyer-1", LINES, BASE_URL)
        transition_status(started.order_id, ["pending"], "paid")
        with pytest.raises(InvalidTransitionError):
            resume_checkout("buyer-1", started.order_id, BASE_URL)


class TestCancelOrder:
    def test_buyer_cancels_pending_order(self, pending_order):
        order = cancel_order("buyer-1", pending_order.id)
        assert order.status == "cancelled"

    def test_cannot_cancel_paid_order(self, pending_order):
        transition_status(pending_order.id, ["pending"], "paid")
        with pytest.raises(InvalidTransitionError):
            cancel_order("buyer-1", pending_order.id)
        assert get_order(pending_order.id).status == "paid"

    def test_cannot_cancel_someone_elses_order(self, pending_order):
        with pytest.raises(NotFoundError):
            cancel_order("buyer-2", pending_order.id)
