"""Order aggregate (CQRS) — a buyer's pending purchase and its payment outcome.

The Order is a standard CQRS aggregate, not event sourced. Its items are
snapshotted at creation and never change; the total is fixed from those
snapshots and never recomputed.

State Machine:
    PENDING → PAID | FAILED | CANCELLED
    PAID, FAILED and CANCELLED are terminal.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, HasMany, Identifier, Integer, String

from checkout.domain import checkout
from checkout.errors import InvalidTransitionError
from checkout.order.events import CheckoutSessionAttached, OrderPlaced, OrderStatusChanged
from checkout.order.pricing import PricedOrder


class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.FAILED, OrderStatus.CANCELLED},
    OrderStatus.PAID: set(),  # Terminal
    OrderStatus.FAILED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


@checkout.entity(part_of="Order")
class OrderItem:
    product_ref = String(required=True, max_length=255)
    position = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)
    unit_price = Integer(required=True, min_value=0)  # Minor units, snapshot at order time


@checkout.aggregate
class Order:
    owner_id = Identifier(required=True)
    items = HasMany(OrderItem)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    total = Integer(required=True, min_value=0)
    currency = String(max_length=3, required=True)
    session_id = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, owner_id, priced: PricedOrder, currency):
        """Build a pending order from already-priced lines."""
        now = datetime.now(UTC)
        order = cls(
            owner_id=str(owner_id),
            status=OrderStatus.PENDING.value,
            total=priced.total,
            currency=currency.lower(),
            created_at=now,
            updated_at=now,
        )
        for line in priced.lines:
            order.add_items(
                OrderItem(
                    product_ref=line.product_ref,
                    position=line.position,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                owner_id=order.owner_id,
                items=json.dumps(
                    [
                        {"product_ref": line.product_ref, "quantity": line.quantity, "unit_price": line.unit_price}
                        for line in priced.lines
                    ]
                ),
                total=order.total,
                currency=order.currency,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def ordered_items(self):
        """Items in the order the buyer listed them."""
        return sorted(self.items, key=lambda item: item.position)

    @property
    def is_terminal(self):
        return not _VALID_TRANSITIONS[OrderStatus(self.status)]

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def transition(self, from_statuses, to_status):
        """Compare-and-swap: move to ``to_status`` only from one of ``from_statuses``.

        Raises ``InvalidTransitionError`` without touching the order when the
        current status is not among ``from_statuses`` or the state machine
        forbids the move.
        """
        current = OrderStatus(self.status)
        target = OrderStatus(to_status)
        allowed_from = {OrderStatus(status) for status in from_statuses}

        if current not in allowed_from or target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransitionError(str(self.id), current.value, target.value)

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                changed_at=now,
            )
        )

    def attach_session(self, session_id):
        """Record the external checkout session created for this order."""
        if self.session_id == session_id:
            return

        current = OrderStatus(self.status)
        if current != OrderStatus.PENDING:
            raise InvalidTransitionError(str(self.id), current.value, current.value)

        now = datetime.now(UTC)
        self.session_id = session_id
        self.updated_at = now
        self.raise_(
            CheckoutSessionAttached(
                order_id=str(self.id),
                session_id=session_id,
                attached_at=now,
            )
        )
