"""Checkout flow — price the cart, persist the order, open a hosted session.

The order is persisted before the processor is contacted, so a gateway
failure leaves a ``pending`` order the buyer can resume. Resuming reuses the
order's idempotency key; the processor hands back the same session.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError

from checkout.catalogue import get_catalogue
from checkout.errors import GatewayError, InvalidTransitionError, NotFoundError
from checkout.gateway import get_gateway
from checkout.gateway.port import SessionLineItem, SessionRequest, idempotency_key_for
from checkout.order import store
from checkout.order.order import Order, OrderStatus
from checkout.order.pricing import price_lines

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutStarted:
    order_id: str
    session_id: str
    redirect_url: str


def _require_known_products(priced) -> dict[str, str]:
    catalogue = get_catalogue()
    names = {}
    for line in priced.lines:
        product = catalogue.lookup(line.product_ref)
        if product is None:
            raise ValidationError({f"items[{line.position}].product_ref": [f"Unknown product {line.product_ref}"]})
        names[line.product_ref] = product.name
    return names


def _display_name(product_ref, names) -> str:
    if product_ref in names:
        return names[product_ref]
    product = get_catalogue().lookup(product_ref)
    return product.name if product is not None else product_ref


def build_session_request(order: Order, base_url: str, names: dict[str, str] | None = None) -> SessionRequest:
    names = names or {}
    base_url = base_url.rstrip("/")
    return SessionRequest(
        order_id=str(order.id),
        currency=order.currency,
        line_items=tuple(
            SessionLineItem(
                name=_display_name(item.product_ref, names),
                unit_amount=item.unit_price,
                quantity=item.quantity,
                product_ref=item.product_ref,
            )
            for item in order.ordered_items
        ),
        success_url=f"{base_url}/order_success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{base_url}/cart",
        idempotency_key=idempotency_key_for(order.id),
        customer_ref=str(order.owner_id),
    )


def _open_session(order: Order, base_url: str, names: dict[str, str] | None = None) -> CheckoutStarted:
    order_id = str(order.id)
    result = get_gateway().create_session(build_session_request(order, base_url, names))
    if not result.success:
        logger.warning(
            "checkout_session_failed",
            order_id=order_id,
            gateway_status=result.gateway_status,
            reason=result.failure_reason,
        )
        raise GatewayError(
            result.failure_reason or "Checkout session could not be created",
            order_id=order_id,
            gateway_status=result.gateway_status,
        )

    store.attach_session(order_id, result.session_id)
    logger.info("checkout_session_opened", order_id=order_id, session_id=result.session_id)
    return CheckoutStarted(order_id=order_id, session_id=result.session_id, redirect_url=result.redirect_url)


def start_checkout(owner_id, lines, base_url: str, currency: str | None = None) -> CheckoutStarted:
    """Create a pending order for ``lines`` and open a checkout session for it.

    Raises ``ValidationError`` before anything is persisted if a line is
    invalid or names an unknown product, and ``GatewayError`` (carrying the
    order id) if the processor refuses the session.
    """
    priced = price_lines(lines)
    names = _require_known_products(priced)
    order = store.create_order(owner_id, lines, currency)
    return _open_session(order, base_url, names)


def resume_checkout(owner_id, order_id, base_url: str) -> CheckoutStarted:
    """Open (or re-fetch) the checkout session of the caller's pending order."""
    order = store.get_order(order_id)
    if str(order.owner_id) != str(owner_id):
        # Someone else's order is reported as missing.
        raise NotFoundError(str(order_id))
    if order.status != OrderStatus.PENDING.value:
        raise InvalidTransitionError(str(order.id), order.status, OrderStatus.PENDING.value)
    return _open_session(order, base_url)


def cancel_order(owner_id, order_id) -> Order:
    """Buyer abandons their pending order."""
    order = store.get_order(order_id)
    if str(order.owner_id) != str(owner_id):
        raise NotFoundError(str(order_id))
    return store.transition_status(order_id, [OrderStatus.PENDING], OrderStatus.CANCELLED)
