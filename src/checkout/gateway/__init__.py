"""Checkout gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing
- StripeGateway for production (``CHECKOUT_GATEWAY=stripe``)
"""

from checkout.gateway.fake_adapter import FakeGateway
from checkout.gateway.port import CheckoutGateway
from checkout.gateway.stripe_adapter import StripeGateway
from checkout.settings import get_settings

_current_gateway: CheckoutGateway | None = None


def _default_gateway() -> CheckoutGateway:
    settings = get_settings()
    if settings.gateway == "stripe":
        return StripeGateway(settings.stripe_secret_key, timeout=settings.gateway_timeout_seconds)
    return FakeGateway()


def get_gateway() -> CheckoutGateway:
    """Return the current checkout gateway, built from settings on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _default_gateway()
    return _current_gateway


def set_gateway(gateway: CheckoutGateway) -> None:
    """Override the active checkout gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
