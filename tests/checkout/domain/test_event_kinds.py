"""Tests for mapping processor event types onto event kinds."""

import pytest
from checkout.webhook.ingress import EventKind, kind_for


class TestKindFor:
    @pytest.mark.parametrize(
        "event_type, kind",
        [
            ("checkout.session.completed", EventKind.CHECKOUT_COMPLETED),
            ("checkout.session.async_payment_succeeded", EventKind.CHECKOUT_COMPLETED),
            ("checkout.session.async_payment_failed", EventKind.PAYMENT_FAILED),
            ("payment_intent.payment_failed", EventKind.PAYMENT_FAILED),
            ("checkout.session.expired", EventKind.SESSION_EXPIRED),
        ],
    )
    def test_known_types(self, event_type, kind):
        assert kind_for(event_type) is kind

    def test_anything_else_is_unknown(self):
        assert kind_for("customer.created") is EventKind.UNKNOWN
        assert kind_for("") is EventKind.UNKNOWN
