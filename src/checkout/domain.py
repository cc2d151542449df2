"""Checkout bounded context — Checkout Sessions and Payment Fulfillment.

Turns a buyer's line items into a pending Order, opens a hosted checkout
session with the payment processor, and applies the processor's webhook
events to the Order exactly once.
"""

import structlog
from protean.domain import Domain

from checkout.utils.logging import configure_logging

configure_logging()

checkout = Domain(name="checkout")

logger = structlog.get_logger(__name__)
