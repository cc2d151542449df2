"""Order status compare-and-swap — command and handler."""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.errors import NotFoundError
from checkout.order.order import Order, OrderStatus


@checkout.command(part_of="Order")
class TransitionOrderStatus:
    order_id = Identifier(required=True)
    from_statuses = Text(required=True)  # JSON array of status values
    to_status = String(required=True, choices=OrderStatus)


@checkout.command_handler(part_of=Order)
class TransitionOrderStatusHandler:
    @handle(TransitionOrderStatus)
    def transition_status(self, command):
        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError:
            raise NotFoundError(command.order_id) from None

        order.transition(json.loads(command.from_statuses), command.to_status)
        repo.add(order)
