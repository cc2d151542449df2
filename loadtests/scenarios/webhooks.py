"""Webhook redelivery scenarios.

DuplicateDeliveryUser replays the same event several times, back to back,
the way a processor retries when it misses an acknowledgement. Exactly one
delivery per event may report ``applied``.
"""

import uuid

from locust import HttpUser, constant_pacing, task

from loadtests.data_generators import buyer_id, checkout_data, signature_header, stripe_event
from loadtests.helpers.response import extract_error_detail

REDELIVERIES = 5


class DuplicateDeliveryUser(HttpUser):
    """Stress test: the same event id delivered repeatedly."""

    wait_time = constant_pacing(0.5)

    def _checkout(self) -> str | None:
        with self.client.post(
            "/checkout",
            json=checkout_data(num_items=1),
            headers={"X-User-Id": buyer_id()},
            catch_response=True,
            name="[DUP] POST /checkout",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")
                return None
            return resp.json()["order_id"]

    @task
    def replay_completed_event(self):
        order_id = self._checkout()
        if order_id is None:
            return

        body = stripe_event("checkout.session.completed", order_id, event_id=f"evt_dup_{uuid.uuid4().hex[:16]}")
        applied = 0
        for _ in range(REDELIVERIES):
            with self.client.post(
                "/webhooks/stripe",
                data=body,
                headers={"Stripe-Signature": signature_header(body), "Content-Type": "application/json"},
                catch_response=True,
                name="[DUP] POST /webhooks/stripe",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Webhook failed: {resp.status_code} — {extract_error_detail(resp)}")
                    continue
                if resp.json()["outcome"] == "applied":
                    applied += 1
                    if applied > 1:
                        resp.failure(f"Event for order {order_id} applied {applied} times")

    @task
    def unknown_order_event(self):
        """Events for orders this service never created are acknowledged."""
        body = stripe_event("checkout.session.completed", f"missing-{uuid.uuid4().hex[:8]}")
        with self.client.post(
            "/webhooks/stripe",
            data=body,
            headers={"Stripe-Signature": signature_header(body), "Content-Type": "application/json"},
            catch_response=True,
            name="[DUP] POST /webhooks/stripe (unknown order)",
        ) as resp:
            if resp.status_code != 200 or resp.json()["outcome"] != "no_matching_order":
                resp.failure(f"Unexpected response: {resp.status_code} — {extract_error_detail(resp)}")
