"""Tests for the Order aggregate."""

import pytest
from checkout.errors import InvalidTransitionError
from checkout.order.events import CheckoutSessionAttached, OrderPlaced, OrderStatusChanged
from checkout.order.order import Order, OrderStatus
from checkout.order.pricing import price_lines


def _order(lines=None):
    priced = price_lines(lines or [("prod-a", 3, 1999), ("prod-b", 1, 500)])
    return Order.create(owner_id="buyer-1", priced=priced, currency="USD")


class TestOrderCreation:
    def test_new_order_is_pending(self):
        order = _order()
        assert order.status == OrderStatus.PENDING.value
        assert order.owner_id == "buyer-1"
        assert order.created_at is not None
        assert order.updated_at == order.created_at

    def test_total_matches_items(self):
        order = _order()
        assert order.total == 6497
        assert sum(item.unit_price * item.quantity for item in order.items) == order.total

    def test_currency_is_lowercased(self):
        assert _order().currency == "usd"

    def test_items_snapshot_prices(self):
        order = _order()
        assert len(order.items) == 2
        first = order.ordered_items[0]
        assert first.product_ref == "prod-a"
        assert first.quantity == 3
        assert first.unit_price == 1999

    def test_items_keep_listed_order(self):
        order = _order([("prod-z", 1, 1), ("prod-a", 1, 1), ("prod-m", 1, 1)])
        assert [item.product_ref for item in order.ordered_items] == ["prod-z", "prod-a", "prod-m"]

    def test_raises_order_placed(self):
        order = _order()
        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderPlaced)
        assert event.total == 6497
        assert event.order_id == str(order.id)


class TestOrderTransitions:
    @pytest.mark.parametrize("target", [OrderStatus.PAID, OrderStatus.FAILED, OrderStatus.CANCELLED])
    def test_pending_moves_to_any_outcome(self, target):
        order = _order()
        order.transition([OrderStatus.PENDING.value], target.value)
        assert order.status == target.value

    def test_transition_raises_status_changed(self):
        order = _order()
        order.transition(["pending"], "paid")
        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "pending"
        assert event.new_status == "paid"

    def test_transition_refreshes_updated_at(self):
        order = _order()
        created = order.created_at
        order.transition(["pending"], "paid")
        assert order.updated_at >= created

    def test_compare_and_swap_rejects_unexpected_status(self):
        order = _order()
        with pytest.raises(InvalidTransitionError):
            order.transition(["paid"], "cancelled")
        assert order.status == "pending"

    @pytest.mark.parametrize("terminal", ["paid", "failed", "cancelled"])
    def test_terminal_states_do_not_move(self, terminal):
        order = _order()
        order.transition(["pending"], terminal)
        with pytest.raises(InvalidTransitionError) as exc:
            order.transition([terminal], "pending")
        assert exc.value.current == terminal
        assert order.status == terminal
        assert order.is_terminal

    def test_second_payment_is_rejected(self):
        order = _order()
        order.transition(["pending"], "paid")
        with pytest.raises(InvalidTransitionError):
            order.transition(["pending"], "paid")
        assert order.status == "paid"

    def test_total_never_changes(self):
        order = _order()
        order.transition(["pending"], "paid")
        assert order.total == 6497


class TestCheckoutSession:
    def test_attach_session(self):
        order = _order()
        order.attach_session("cs_123")
        assert order.session_id == "cs_123"
        assert isinstance(order._events[-1], CheckoutSessionAttached)

    def test_reattaching_same_session_is_noop(self):
        order = _order()
        order.attach_session("cs_123")
        events_before = len(order._events)
        order.attach_session("cs_123")
        assert len(order._events) == events_before

    def test_cannot_attach_to_settled_order(self):
        order = _order()
        order.transition(["pending"], "cancelled")
        with pytest.raises(InvalidTransitionError):
            order.attach_session("cs_456")
