"""Error taxonomy for the checkout pipeline.

Caller input errors use Protean's ``ValidationError``; everything else the
pipeline can fail with is defined here.
"""


class CheckoutError(Exception):
    """Base class for checkout pipeline failures."""


class PersistenceError(CheckoutError):
    """The store could not complete the operation (unavailable or timed out).

    Safe to retry: order creation has no external side effect yet, and status
    transitions are compare-and-swap.
    """


class NotFoundError(CheckoutError):
    """The requested Order does not exist."""

    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class InvalidTransitionError(CheckoutError):
    """The Order was not in a state the requested transition may start from."""

    def __init__(self, order_id: str, current: str, target: str) -> None:
        super().__init__(f"Cannot transition order {order_id} from {current} to {target}")
        self.order_id = order_id
        self.current = current
        self.target = target


class GatewayError(CheckoutError):
    """The payment processor was unreachable or rejected the request."""

    def __init__(self, message: str, order_id: str | None = None, gateway_status: str | None = None) -> None:
        super().__init__(message)
        self.order_id = order_id
        self.gateway_status = gateway_status


class AuthenticationError(CheckoutError):
    """A webhook failed signature or freshness verification."""


class MalformedPayloadError(CheckoutError):
    """A verified webhook body is not a usable event envelope."""
