"""Checkout API package."""

from checkout.api.errors import register_error_handlers
from checkout.api.routes import checkout_router, order_router, webhook_router

__all__ = ["checkout_router", "webhook_router", "order_router", "register_error_handlers"]
