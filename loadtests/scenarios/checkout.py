"""Checkout load test scenarios.

Stateful SequentialTaskSet journeys that check out a cart and then play
the processor's part, delivering the payment webhook for the new order.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import buyer_id, checkout_data, signature_header, stripe_event
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CheckoutState


class _CheckoutJourney(SequentialTaskSet):
    event_type = "checkout.session.completed"
    expected_status = "paid"

    def on_start(self):
        self.state = CheckoutState(buyer_id=buyer_id())

    @task
    def start_checkout(self):
        with self.client.post(
            "/checkout",
            json=checkout_data(),
            headers={"X-User-Id": self.state.buyer_id},
            catch_response=True,
            name="POST /checkout",
        ) as resp:
            if resp.status_code == 200:
                data = resp.json()
                self.state.order_id = data["order_id"]
                self.state.session_id = data["session_id"]
            else:
                resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def deliver_webhook(self):
        body = stripe_event(self.event_type, self.state.order_id)
        with self.client.post(
            "/webhooks/stripe",
            data=body,
            headers={"Stripe-Signature": signature_header(body), "Content-Type": "application/json"},
            catch_response=True,
            name=f"POST /webhooks/stripe ({self.event_type})",
        ) as resp:
            if resp.status_code == 200:
                self.state.outcomes.append(resp.json()["outcome"])
            else:
                resp.failure(f"Webhook failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def verify_order(self):
        with self.client.get(
            f"/orders/{self.state.order_id}",
            headers={"X-User-Id": self.state.buyer_id},
            catch_response=True,
            name="GET /orders/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Order read failed: {resp.status_code} — {extract_error_detail(resp)}")
            elif resp.json()["status"] != self.expected_status:
                resp.failure(f"Expected {self.expected_status}, got {resp.json()['status']}")
            else:
                self.state.current_status = self.expected_status

    @task
    def done(self):
        self.interrupt()


class PaidCheckoutJourney(_CheckoutJourney):
    """Checkout -> checkout.session.completed -> order paid."""


class FailedCheckoutJourney(_CheckoutJourney):
    """Checkout -> payment_intent.payment_failed -> order failed."""

    event_type = "payment_intent.payment_failed"
    expected_status = "failed"


class ExpiredCheckoutJourney(_CheckoutJourney):
    """Checkout -> checkout.session.expired -> order cancelled."""

    event_type = "checkout.session.expired"
    expected_status = "cancelled"


class CheckoutUser(HttpUser):
    """Buyers checking out, mostly successfully."""

    wait_time = between(1, 3)
    tasks = {
        PaidCheckoutJourney: 7,
        FailedCheckoutJourney: 2,
        ExpiredCheckoutJourney: 1,
    }
