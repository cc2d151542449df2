"""Checkout session gateway port (abstract interface).

Defines the contract that checkout session adapters implement, so the
checkout flow can run against FakeGateway (dev/test) or StripeGateway
(production) unchanged.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SessionLineItem:
    """One hosted-checkout line, priced from the order's snapshot."""

    name: str
    unit_amount: int  # Minor units
    quantity: int
    product_ref: str


@dataclass(frozen=True)
class SessionRequest:
    order_id: str
    currency: str
    line_items: tuple[SessionLineItem, ...]
    success_url: str
    cancel_url: str
    idempotency_key: str
    customer_ref: str | None = None

    @property
    def metadata(self) -> dict:
        return {"order_id": self.order_id}


@dataclass(frozen=True)
class SessionResult:
    """Result of a checkout session creation attempt."""

    success: bool
    session_id: str | None = None
    redirect_url: str | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None


def idempotency_key_for(order_id) -> str:
    """Session creation for one order is idempotent at the processor."""
    return f"checkout-{order_id}"


class CheckoutGateway(ABC):
    """Abstract checkout session gateway."""

    @abstractmethod
    def create_session(self, request: SessionRequest) -> SessionResult:
        """Open a hosted checkout session for the order in ``request``."""
        ...
