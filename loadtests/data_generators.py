"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the checkout API's request
schemas (integer minor-unit prices, quantities of at least one) and
webhook bodies signed the way Stripe signs them.
"""

import hashlib
import hmac
import json
import os
import random
import time
import uuid

from faker import Faker

fake = Faker()

WEBHOOK_SECRET = os.environ.get("STRIPE_WEBHOOK_SECRET", "whsec_loadtest")

# ---------- Checkout ----------


def buyer_id() -> str:
    """Generate buyer identities like 'buyer-a1b2c3d4'."""
    return f"buyer-{uuid.uuid4().hex[:8]}"


def checkout_item() -> dict:
    """Generate a CheckoutItemSchema payload."""
    return {
        "product_ref": f"prod-{fake.word()}-{uuid.uuid4().hex[:6]}",
        "quantity": random.randint(1, 5),
        "unit_price": random.randint(99, 19999),
    }


def checkout_data(num_items: int | None = None) -> dict:
    """Generate a CheckoutRequest payload."""
    count = num_items or random.randint(1, 4)
    return {"items": [checkout_item() for _ in range(count)]}


# ---------- Webhooks ----------


def stripe_event(event_type: str, order_id: str | None, event_id: str | None = None) -> str:
    """Serialize a Stripe event envelope for ``order_id``."""
    data_object = {"id": f"cs_lt_{uuid.uuid4().hex[:16]}", "object": "checkout.session"}
    if order_id is not None:
        data_object["metadata"] = {"order_id": order_id}
    return json.dumps(
        {
            "id": event_id or f"evt_lt_{uuid.uuid4().hex[:16]}",
            "type": event_type,
            "data": {"object": data_object},
        }
    )


def signature_header(body: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header for ``body``."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    digest = hmac.new(secret.encode(), f"{timestamp}.{body}".encode(), hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"
