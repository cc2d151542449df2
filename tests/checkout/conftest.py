import hashlib
import hmac
import json
import os
import time
from unittest.mock import patch

import pytest
from protean.integrations.pytest import DomainFixture
from sqlalchemy.exc import OperationalError

WEBHOOK_SECRET = "whsec_test_secret"


@pytest.fixture(scope="session")
def checkout_bed():
    from checkout.domain import checkout
    from checkout.utils.db import drop_db, setup_db

    bed = DomainFixture(checkout)
    bed.setup()
    setup_db(checkout)
    yield bed
    drop_db(checkout)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(checkout_bed):
    with checkout_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def _collaborators():
    """Every test starts with a fresh fake gateway and an open catalogue."""
    from checkout.catalogue import reset_catalogue
    from checkout.gateway import reset_gateway, set_gateway
    from checkout.gateway.fake_adapter import FakeGateway

    set_gateway(FakeGateway())
    reset_catalogue()
    yield
    reset_gateway()
    reset_catalogue()


@pytest.fixture()
def fake_gateway():
    from checkout.gateway import get_gateway

    return get_gateway()


def sign(body: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header for ``body``."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.{body}".encode()
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def stripe_event(event_type: str, order_id: str | None, event_id: str = "evt_test_0001", **fields) -> str:
    """Serialize a minimal Stripe event envelope."""
    data_object = {"id": "cs_test_0001", "object": "checkout.session", **fields}
    if order_id is not None:
        data_object["metadata"] = {"order_id": order_id}
    return json.dumps({"id": event_id, "type": event_type, "data": {"object": data_object}})


@pytest.fixture()
def ingress():
    from checkout.webhook.ingress import WebhookIngress

    return WebhookIngress(WEBHOOK_SECRET)


@pytest.fixture()
def pending_order():
    from checkout.order.store import create_order

    return create_order("buyer-1", [("prod-keyboard", 3, 1999), ("prod-cable", 1, 500)], "usd")


@pytest.fixture()
def signer():
    return sign


@pytest.fixture()
def make_event():
    return stripe_event


@pytest.fixture()
def failing_commit():
    """Return a context manager under which every unit-of-work commit fails
    the way an unreachable database does."""
    if os.environ.get("PROTEAN_ENV") == "production":
        pytest.skip("commit failures are simulated on the memory provider")

    def _failing():
        error = OperationalError("COMMIT", {}, Exception("database unavailable"))
        return patch("protean.adapters.repository.memory.MemorySession.commit", side_effect=error)

    return _failing
