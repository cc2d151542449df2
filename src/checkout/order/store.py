"""Order store: the entry points collaborators use to create, read and move orders.

Every write goes through a Protean command so it commits in a single unit of
work. Status transitions are serialized per order id; combined with the
compare-and-swap check in ``Order.transition`` this guarantees that of two
concurrent transitions out of ``pending`` exactly one wins.
"""

import json

import structlog
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, TransactionError
from protean.utils.globals import current_domain
from sqlalchemy.exc import SQLAlchemyError

from checkout.errors import NotFoundError, PersistenceError
from checkout.order.creation import PlaceOrder
from checkout.order.order import Order, OrderStatus
from checkout.order.pricing import price_lines
from checkout.order.session import AttachCheckoutSession
from checkout.order.transition import TransitionOrderStatus
from checkout.settings import get_settings
from checkout.utils.locks import KeyedLock

logger = structlog.get_logger(__name__)

# A failed unit-of-work commit surfaces as TransactionError; direct reads raise
# the driver's SQLAlchemyError.
STORAGE_ERRORS = (SQLAlchemyError, TransactionError, ExpectedVersionError)

order_locks = KeyedLock("order", timeout=get_settings().store_timeout_seconds)


def _status_value(status) -> str:
    return status.value if isinstance(status, OrderStatus) else OrderStatus(status).value


def create_order(owner_id, lines, currency=None) -> Order:
    """Validate and total ``lines`` and persist a pending order with its items.

    Raises ``ValidationError`` for bad input (nothing is persisted) and
    ``PersistenceError`` when the store is unavailable.
    """
    priced = price_lines(lines)
    payload = [
        {"product_ref": line.product_ref, "quantity": line.quantity, "unit_price": line.unit_price}
        for line in priced.lines
    ]
    currency = (currency or get_settings().currency).lower()

    try:
        order_id = current_domain.process(
            PlaceOrder(owner_id=str(owner_id), items=json.dumps(payload), currency=currency),
            asynchronous=False,
        )
    except STORAGE_ERRORS as exc:
        logger.error("order_create_failed", owner_id=str(owner_id), error=str(exc))
        raise PersistenceError("Order could not be saved") from exc

    logger.info("order_created", order_id=order_id, owner_id=str(owner_id), total=priced.total, currency=currency)
    return get_order(order_id)


def transition_status(order_id, from_statuses, to_status) -> Order:
    """Move the order to ``to_status`` if it is currently in one of ``from_statuses``.

    Raises ``NotFoundError``, ``InvalidTransitionError`` (order unchanged) or
    ``PersistenceError`` (store unavailable or lock wait timed out).
    """
    order_id = str(order_id)
    expected = [_status_value(status) for status in from_statuses]
    target = _status_value(to_status)

    with order_locks.hold(order_id):
        try:
            current_domain.process(
                TransitionOrderStatus(
                    order_id=order_id,
                    from_statuses=json.dumps(expected),
                    to_status=target,
                ),
                asynchronous=False,
            )
        except STORAGE_ERRORS as exc:
            logger.error("order_transition_failed", order_id=order_id, to_status=target, error=str(exc))
            raise PersistenceError(f"Order {order_id} could not be updated") from exc

    logger.info("order_status_changed", order_id=order_id, to_status=target)
    return get_order(order_id)


def attach_session(order_id, session_id) -> Order:
    order_id = str(order_id)
    with order_locks.hold(order_id):
        try:
            current_domain.process(
                AttachCheckoutSession(order_id=order_id, session_id=session_id),
                asynchronous=False,
            )
        except STORAGE_ERRORS as exc:
            raise PersistenceError(f"Order {order_id} could not be updated") from exc

    logger.info("checkout_session_attached", order_id=order_id, session_id=session_id)
    return get_order(order_id)


def get_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(str(order_id))
    except ObjectNotFoundError:
        raise NotFoundError(str(order_id)) from None
    except STORAGE_ERRORS as exc:
        raise PersistenceError(f"Order {order_id} could not be read") from exc


def orders_for_owner(owner_id) -> list[Order]:
    try:
        return current_domain.repository_for(Order).find_by_owner(owner_id)
    except STORAGE_ERRORS as exc:
        raise PersistenceError("Orders could not be read") from exc
